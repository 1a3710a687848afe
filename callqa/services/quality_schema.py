"""Pydantic contract for quality scoring results.

Every producer (language model, heuristic analyzer, static fallback) returns a
``QualityResult``, so downstream code always sees clamped 1-5 integer scores,
a known sentiment and bounded free text.
"""

from __future__ import annotations

import json
import math
from typing import Any, List

from pydantic import BaseModel, ValidationError, field_validator

from ..errors import AnalysisFailed

SCORE_FIELDS = (
    "overall_satisfaction_score",
    "communication_score",
    "problem_resolution_score",
    "professionalism_score",
    "empathy_score",
    "follow_up_score",
)
SENTIMENTS = ("positive", "neutral", "negative")

MIN_SCORE = 1
MAX_SCORE = 5
MAX_FEEDBACK_CHARS = 500
MAX_IMPROVEMENT_AREAS = 10


def clamp_score(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("score must be numeric")
    # pydantic only reports ValueError, so every conversion failure becomes one
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise ValueError("score must be numeric") from exc
    if not math.isfinite(number):
        raise ValueError("score must be numeric")
    return max(MIN_SCORE, min(MAX_SCORE, int(round(number))))


class QualityResult(BaseModel):
    overall_satisfaction_score: int
    communication_score: int
    problem_resolution_score: int
    professionalism_score: int
    empathy_score: int
    follow_up_score: int
    sentiment: str
    feedback: str
    improvement_areas: List[str]

    model_config = {"extra": "ignore"}

    @field_validator(*SCORE_FIELDS, mode="before")
    @classmethod
    def _clamp(cls, value: Any) -> int:
        return clamp_score(value)

    @field_validator("sentiment", mode="before")
    @classmethod
    def _known_sentiment(cls, value: Any) -> str:
        normalized = str(value).strip().lower() if value is not None else ""
        return normalized if normalized in SENTIMENTS else "neutral"

    @field_validator("feedback", mode="before")
    @classmethod
    def _cap_feedback(cls, value: Any) -> str:
        if value is None:
            raise ValueError("feedback is required")
        return str(value).strip()[:MAX_FEEDBACK_CHARS]

    @field_validator("improvement_areas", mode="before")
    @classmethod
    def _cap_areas(cls, value: Any) -> List[str]:
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple)):
            raise ValueError("improvement_areas must be a list")
        areas = [str(item).strip() for item in value if item is not None and str(item).strip()]
        return areas[:MAX_IMPROVEMENT_AREAS]

    @property
    def requires_review(self) -> bool:
        return self.overall_satisfaction_score < 3


def clean_json_payload(payload: str) -> str:
    """Strip Markdown code fences and surrounding prose, keeping the outermost object."""
    if not payload:
        return ""
    cleaned = payload.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    cleaned = cleaned.strip()

    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start != -1 and end > start:
        cleaned = cleaned[start:end + 1]
    return cleaned


def parse_quality_payload(payload: str) -> QualityResult:
    cleaned = clean_json_payload(payload)
    try:
        data = json.loads(cleaned)
    except (json.JSONDecodeError, TypeError) as exc:
        raise AnalysisFailed(f"model response is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise AnalysisFailed("model response is not a JSON object")
    try:
        return QualityResult.model_validate(data)
    except ValidationError as exc:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in exc.errors()})
        raise AnalysisFailed(f"model response failed validation: {', '.join(fields)}") from exc
