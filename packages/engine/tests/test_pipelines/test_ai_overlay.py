"""
tests/test_pipelines/test_ai_overlay.py — Tests for the AI overlay.

The reasoning client is an AsyncMock; no network or OpenAI account needed.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from tendermatch_shared.models.matching import MatchResult

from tendermatch_engine.errors import AIServiceError
from tendermatch_engine.pipelines.ai_overlay import AIOverlay, match_prompt, parse_ai_match, summary_prompt

ANSWER = {
    "matchScore": 82,
    "confidenceLevel": "high",
    "topReasons": ["Core product fit", "Same province"],
    "concerns": ["Tight deadline"],
    "recommendation": "Bid.",
}


@pytest.fixture
def matches(make_record):
    return [
        MatchResult(record=make_record(f"Tender {i}", id=f"ocds-{i}"), score=100 - i, reasons=["r"])
        for i in range(12)
    ]


@pytest.fixture
def client():
    mock = MagicMock()
    mock.chat_json = AsyncMock(return_value=ANSWER)
    mock.chat = AsyncMock(return_value="Focus on provincial health tenders.")
    return mock


@pytest.mark.asyncio
async def test_enhance_analyzes_top_ten_in_order(client, matches, company_profile, no_sleep):
    overlay = AIOverlay(client, sleep=no_sleep)

    results = await overlay.enhance(matches, company_profile)

    assert list(results) == [f"ocds-{i}" for i in range(10)]
    assert results["ocds-0"].score == 82
    assert results["ocds-0"].reasons == ["Core product fit", "Same province"]
    assert client.chat_json.await_count == 10
    assert no_sleep.delays == [0.5] * 9


@pytest.mark.asyncio
async def test_single_failure_skips_only_that_record(client, matches, company_profile, no_sleep):
    client.chat_json.side_effect = [ANSWER, AIServiceError("bad json"), ANSWER]
    overlay = AIOverlay(client, max_records=3, sleep=no_sleep)

    results = await overlay.enhance(matches, company_profile)

    assert set(results) == {"ocds-0", "ocds-2"}


@pytest.mark.asyncio
async def test_on_result_called_per_success(client, matches, company_profile, no_sleep):
    seen: list[str] = []
    overlay = AIOverlay(client, max_records=2, sleep=no_sleep)

    await overlay.enhance(matches, company_profile, on_result=lambda rid, ai: seen.append(rid))

    assert seen == ["ocds-0", "ocds-1"]


@pytest.mark.asyncio
async def test_deterministic_matches_untouched(client, matches, company_profile, no_sleep):
    before = [m.model_copy() for m in matches]
    await AIOverlay(client, sleep=no_sleep).enhance(matches, company_profile)
    assert matches == before
    assert not any(m.has_ai for m in matches)


@pytest.mark.asyncio
async def test_unconfigured_overlay_returns_empty(matches, company_profile):
    overlay = AIOverlay(None)
    assert overlay.enabled is False
    assert await overlay.enhance(matches, company_profile) == {}
    assert await overlay.summarize(matches, company_profile) is None


@pytest.mark.asyncio
async def test_summarize(client, matches, company_profile):
    summary = await AIOverlay(client).summarize(matches, company_profile)

    assert summary == "Focus on provincial health tenders."
    prompt = client.chat.await_args.args[0][1]["content"]
    assert "Total Opportunities: 12" in prompt
    assert "6. " not in prompt  # only the top five are listed


@pytest.mark.asyncio
async def test_summarize_failure_is_none(client, matches, company_profile):
    client.chat.side_effect = AIServiceError("down")
    assert await AIOverlay(client).summarize(matches, company_profile) is None


@pytest.mark.asyncio
async def test_summarize_nothing_matched(client, company_profile):
    assert await AIOverlay(client).summarize([], company_profile) is None
    client.chat.assert_not_awaited()


class TestParsing:
    def test_defaults_for_missing_fields(self):
        ai = parse_ai_match({})
        assert ai.score == 0
        assert ai.confidence == "low"
        assert ai.reasons == []
        assert ai.recommendation == ""

    def test_negative_score_floored(self):
        assert parse_ai_match({"matchScore": -5}).score == 0

    def test_float_score_truncated(self):
        assert parse_ai_match({"matchScore": 71.9}).score == 71

    def test_nan_score_rejected(self):
        with pytest.raises(AIServiceError):
            parse_ai_match({"matchScore": float("nan")})


def test_match_prompt_uses_probed_profile(make_record, company_profile, startup_profile):
    record = make_record("Scanner", description="x" * 900, category="goods")

    prompt = match_prompt(record, company_profile)
    assert "- Industry: Medical devices" in prompt
    assert "- Location: Gauteng" in prompt
    assert "x" * 501 not in prompt

    prompt = match_prompt(record, startup_profile)
    assert "- Sectors: software, ICT" in prompt
    assert "- Stage: seed" in prompt


def test_summary_prompt_lists_points(matches, company_profile):
    assert "Tender 0 (100 points)" in summary_prompt(matches, company_profile)
