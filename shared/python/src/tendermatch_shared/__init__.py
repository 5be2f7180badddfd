"""
tendermatch_shared — shared utilities, models, and configuration for the tendermatch platform.

Usage:
    from tendermatch_shared.config import Settings, settings
    from tendermatch_shared.db import create_supabase_client
    from tendermatch_shared.models import ProcurementRecord, MatchResult, FilterState
    from tendermatch_shared.time_utils import parse_iso_datetime, days_until
    from tendermatch_shared.constants import PROVINCES, PAGE_SIZE
"""

__version__ = "0.1.0"
