"""
tendermatch_engine.sources — network collaborators of the matching engine.

Each source wraps one external service:
  TenderSource    — paged procurement releases (the /v1/tenders proxy)
  ProfileClient   — bearer-authenticated profile service
  ReasoningClient — OpenAI chat completions for the AI overlay
"""

from tendermatch_engine.sources.profile import CredentialProvider, ProfileClient, StaticCredentials
from tendermatch_engine.sources.reasoning import ReasoningClient
from tendermatch_engine.sources.tenders import TenderPage, TenderSource

__all__ = [
    "TenderSource",
    "TenderPage",
    "ProfileClient",
    "CredentialProvider",
    "StaticCredentials",
    "ReasoningClient",
]
