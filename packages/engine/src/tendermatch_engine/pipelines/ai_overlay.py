"""
pipelines/ai_overlay.py — Best-effort AI re-scoring of the top matches.

Runs after a deterministic ranking exists and never blocks it:

  enhance()    top ai_max_records matches, one reasoning call each, in rank
               order, with a fixed delay between calls. Results land in a
               side map keyed by record id; the deterministic MatchResults
               are not touched.
  summarize()  one portfolio-level call over the top five matches.

Every failure degrades quietly: a failed record simply has no AI entry, a
failed summary is None, and with no reasoning client configured enhance()
returns {} and summarize() returns None.

Usage:
    overlay = AIOverlay(ReasoningClient.from_settings(settings))
    ai_map = await overlay.enhance(matches, profile)
    summary = await overlay.summarize(matches, profile)
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

import structlog
from pydantic import ValidationError

from tendermatch_shared.constants import AI_CALL_DELAY_S, AI_MAX_RECORDS
from tendermatch_shared.models.matching import AIMatch, MatchResult
from tendermatch_shared.models.procurement import ProcurementRecord

from tendermatch_engine.errors import AIServiceError
from tendermatch_engine.sources.reasoning import ReasoningClient
from tendermatch_engine.transforms.normalize import dig
from tendermatch_engine.transforms.profile import as_list, resolve

log = structlog.get_logger(__name__)

ResultCallback = Callable[[str, AIMatch], None]
Sleep = Callable[[float], Awaitable[None]]

SUMMARY_TOP_N = 5
DESCRIPTION_LIMIT = 500
NOT_SPECIFIED = "Not specified"

MATCH_SYSTEM_PROMPT = (
    "You are a business opportunity matching expert. Respond only with valid JSON."
)
SUMMARY_SYSTEM_PROMPT = (
    "You are a concise business strategy advisor. Provide brief, actionable insights."
)


# ---------------------------------------------------------------------------
# Prompt building
# ---------------------------------------------------------------------------

def _or(value: Any, default: str = NOT_SPECIFIED) -> str:
    return value.strip() if isinstance(value, str) and value.strip() else default


def _joined(profile: Any, attribute: str) -> str:
    return ", ".join(as_list(resolve(profile, attribute)))


def match_prompt(record: ProcurementRecord, profile: Any) -> str:
    return f"""You are an expert at matching business opportunities with companies.

Analyze how well this tender matches the user's profile:

TENDER:
- Title: {record.title}
- Description: {record.description[:DESCRIPTION_LIMIT]}
- Category: {_or(record.category)}
- Location: {_or(record.province)}

USER PROFILE:
- Industry: {_or(resolve(profile, "industry"))}
- Sectors: {_joined(profile, "sectors")}
- Skills: {_joined(profile, "skills")}
- Interests: {_joined(profile, "interests")}
- Bio: {_or(resolve(profile, "bio"), "")}
- Location: {_or(resolve(profile, "location"))}
- Stage: {_or(resolve(profile, "stage"))}

Provide a JSON response with:
1. matchScore: 0-100 (how relevant is this tender)
2. confidenceLevel: "high", "medium", or "low"
3. topReasons: Array of 3-5 specific reasons why this matches (be concise, actionable)
4. concerns: Array of 1-2 potential challenges or mismatches (if any)
5. recommendation: Brief recommendation (1 sentence)

Focus on semantic understanding, not just keyword matching. Consider industry relevance, capability fit, and strategic alignment.

Respond ONLY with valid JSON, no other text."""


def summary_prompt(matches: Sequence[MatchResult], profile: Any) -> str:
    top = "\n".join(
        f"{i}. {m.record.title} ({m.score} points) - {_or(m.record.category)}"
        for i, m in enumerate(matches[:SUMMARY_TOP_N], start=1)
    )
    return f"""As a business advisor, provide a brief strategic summary (2-3 sentences) of tender opportunities for this profile:

USER: {_or(resolve(profile, "industry"))} company in {_or(resolve(profile, "location"))}
Skills: {_joined(profile, "skills")}
Interests: {_joined(profile, "interests")}

TOP MATCHES:
{top}

Total Opportunities: {len(matches)}

Provide actionable insights about the opportunity landscape and strategic recommendations."""


def parse_ai_match(answer: dict[str, Any]) -> AIMatch:
    """
    Map the service's camelCase answer onto AIMatch.

    Raises:
        AIServiceError: a field has an unusable type.
    """
    score = dig(answer, "matchScore")
    try:
        return AIMatch(
            score=max(0, int(score)) if isinstance(score, (int, float)) else 0,
            confidence=_or(dig(answer, "confidenceLevel"), "low"),
            reasons=as_list(dig(answer, "topReasons")),
            concerns=as_list(dig(answer, "concerns")),
            recommendation=_or(dig(answer, "recommendation"), ""),
        )
    except (ValidationError, ValueError, OverflowError) as exc:
        raise AIServiceError(f"unusable answer: {exc}") from exc


# ---------------------------------------------------------------------------
# Overlay
# ---------------------------------------------------------------------------

class AIOverlay:
    def __init__(
        self,
        client: ReasoningClient | None,
        *,
        max_records: int = AI_MAX_RECORDS,
        call_delay_s: float = AI_CALL_DELAY_S,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._client = client
        self.max_records = max_records
        self.call_delay_s = call_delay_s
        self._sleep = sleep

    @property
    def enabled(self) -> bool:
        return self._client is not None

    async def analyze(self, record: ProcurementRecord, profile: Any) -> AIMatch:
        """
        One reasoning call for one record.

        Raises:
            AIServiceError: the overlay is disabled or the call failed.
        """
        if self._client is None:
            raise AIServiceError("reasoning service not configured")
        answer = await self._client.chat_json(
            [
                {"role": "system", "content": MATCH_SYSTEM_PROMPT},
                {"role": "user", "content": match_prompt(record, profile)},
            ],
            temperature=0.3,
            max_tokens=500,
        )
        return parse_ai_match(answer)

    async def enhance(
        self,
        matches: Sequence[MatchResult],
        profile: Any,
        on_result: ResultCallback | None = None,
    ) -> dict[str, AIMatch]:
        """
        Analyze the top matches sequentially; return {record id: AIMatch}.

        *matches* is expected best-first. on_result fires as each record
        completes so a caller can merge partial results.
        """
        if self._client is None:
            log.info("ai_enhance_skipped", reason="not configured")
            return {}

        top = list(matches[: self.max_records])
        results: dict[str, AIMatch] = {}
        log.info("ai_enhance_start", records=len(top))

        for index, match in enumerate(top):
            if index:
                await self._sleep(self.call_delay_s)
            try:
                ai = await self.analyze(match.record, profile)
            except AIServiceError as exc:
                log.warning("ai_match_failed", record_id=match.id, error=str(exc))
                continue
            results[match.id] = ai
            if on_result is not None:
                on_result(match.id, ai)

        log.info("ai_enhance_complete", analyzed=len(results), attempted=len(top))
        return results

    async def summarize(self, matches: Sequence[MatchResult], profile: Any) -> str | None:
        """Portfolio summary over the top matches, or None."""
        if self._client is None or not matches:
            return None
        try:
            return await self._client.chat(
                [
                    {"role": "system", "content": SUMMARY_SYSTEM_PROMPT},
                    {"role": "user", "content": summary_prompt(matches, profile)},
                ],
                temperature=0.7,
                max_tokens=200,
            )
        except AIServiceError as exc:
            log.warning("ai_summary_failed", error=str(exc))
            return None
