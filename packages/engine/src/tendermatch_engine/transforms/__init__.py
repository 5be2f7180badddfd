"""
tendermatch_engine.transforms — pure, synchronous steps of the match pipeline.

    normalize  raw OCDS release -> ProcurementRecord
    profile    free-form profile JSON -> ResolvedProfile
    scoring    (record, profile) -> points and reasons
    filtering  FilterState -> filtered, sorted, paginated view
"""
