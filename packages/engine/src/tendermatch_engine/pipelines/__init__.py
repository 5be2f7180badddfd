"""
tendermatch_engine.pipelines — async orchestration around the pure transforms.

    progressive  ProgressiveLoader: first batch fast, background batches after
    ai_overlay   AIOverlay: best-effort AI verdicts for the top matches
    session      MatchSession: load -> score -> view, with cache and AI

    from tendermatch_engine.pipelines.session import build_session

    session = build_session(http, token, settings)
    matches = await session.refresh("2026-09-19", "2026-10-19")
"""
