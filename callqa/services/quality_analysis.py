"""AI quality scoring with bounded retries and a three-tier fallback.

``QualityAnalysisClient.analyze`` talks to the language model and raises a
classified error once its attempts are exhausted. ``analyze_with_fallback``
wraps it in the AI -> heuristic -> static cascade and never raises.
"""

import logging
import time
from typing import Tuple

from ..errors import InvalidInput, QualityAnalysisError
from .heuristics import analyze_heuristically
from .openai_wrap import chat_completion
from .quality_schema import QualityResult, parse_quality_payload

logger = logging.getLogger(__name__)

MIN_TRANSCRIPT_CHARS = 10
MAX_TRANSCRIPT_CHARS = 12000
TRUNCATION_MARKER = "\n\n[Transcript truncated for analysis]"

SOURCE_AI = "ai"
SOURCE_HEURISTIC = "heuristic"
SOURCE_STATIC = "static"

SYSTEM_PROMPT = (
    "You are an expert customer service quality analyst. "
    "Respond only with a single valid JSON object and no other text."
)

USER_PROMPT_TEMPLATE = """Analyze the following customer service call transcript.

Score each dimension as an integer from 1 (poor) to 5 (excellent) and respond with
a JSON object containing exactly these keys:
  "overall_satisfaction_score", "communication_score", "problem_resolution_score",
  "professionalism_score", "empathy_score", "follow_up_score": integers 1-5
  "sentiment": one of "positive", "neutral", "negative"
  "feedback": a short assessment of the agent's performance (max 500 characters)
  "improvement_areas": a list of short kebab-case tags (max 10), empty if none

Transcript:
{transcript}
"""


def prepare_transcript(text: str) -> str:
    if len(text) > MAX_TRANSCRIPT_CHARS:
        return text[:MAX_TRANSCRIPT_CHARS] + TRUNCATION_MARKER
    return text


def static_quality_result() -> QualityResult:
    return QualityResult(
        overall_satisfaction_score=3,
        communication_score=3,
        problem_resolution_score=3,
        professionalism_score=3,
        empathy_score=3,
        follow_up_score=3,
        sentiment="neutral",
        feedback=(
            "Automated analysis is temporarily unavailable. Neutral default scores were "
            "recorded; please review this call manually or retry the analysis later."
        ),
        improvement_areas=["automated-analysis-unavailable"],
    )


class QualityAnalysisClient:
    def __init__(self, settings):
        self.settings = settings

    def backoff_seconds(self, attempt: int) -> float:
        delay_ms = min(self.settings.analysis_backoff_base_ms * 2 ** (attempt - 1),
                       self.settings.analysis_backoff_cap_ms)
        return delay_ms / 1000.0

    def analyze(self, text: str) -> QualityResult:
        text = text or ""
        if len(text.strip()) < MIN_TRANSCRIPT_CHARS:
            raise InvalidInput(f"transcript too short for analysis ({len(text.strip())} chars)")

        user_prompt = USER_PROMPT_TEMPLATE.format(transcript=prepare_transcript(text))
        max_attempts = self.settings.analysis_max_attempts
        last_error = None

        for attempt in range(1, max_attempts + 1):
            try:
                raw = chat_completion(self.settings, SYSTEM_PROMPT, user_prompt)
                result = parse_quality_payload(raw)
            except QualityAnalysisError as exc:
                last_error = exc
                if not exc.retryable:
                    logger.error("Quality analysis failed with non-retryable %s: %s",
                                 type(exc).__name__, exc)
                    raise
                if attempt == max_attempts:
                    break
                delay = self.backoff_seconds(attempt)
                logger.warning("Quality analysis attempt %d/%d failed (%s: %s); retrying in %.1fs",
                               attempt, max_attempts, type(exc).__name__, exc, delay)
                time.sleep(delay)
                continue

            logger.info("Quality analysis succeeded on attempt %d (overall=%d, sentiment=%s)",
                        attempt, result.overall_satisfaction_score, result.sentiment)
            return result

        logger.error("Quality analysis exhausted %d attempts: %s", max_attempts, last_error)
        raise last_error


def analyze_with_fallback(client: QualityAnalysisClient, text: str) -> Tuple[QualityResult, str]:
    """Return ``(result, source)``; source is ``ai``, ``heuristic`` or ``static``."""
    try:
        return client.analyze(text), SOURCE_AI
    except QualityAnalysisError as exc:
        logger.warning("AI analysis unavailable (%s: %s); using heuristic analysis",
                       type(exc).__name__, exc)
    except Exception:
        logger.exception("Unexpected error during AI analysis; using heuristic analysis")

    try:
        return analyze_heuristically(text), SOURCE_HEURISTIC
    except Exception:
        logger.exception("Heuristic analysis failed; recording static neutral scores")

    return static_quality_result(), SOURCE_STATIC
