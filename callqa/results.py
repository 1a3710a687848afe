"""Outcome types returned across the trigger boundary.

A run yields either a ``ProcessResult`` or a ``ProcessError``; both know how
to render the wire JSON expected by callers of ``/api/process-call``.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Union

from .errors import PipelineError
from .services.quality_schema import QualityResult


@dataclass(frozen=True)
class ProcessResult:
    call_id: str
    analysis: QualityResult
    analysis_source: str
    transcription_source: str
    segments_created: int
    transcription_length: int
    duration: int
    quality_score_id: str
    success: bool = True
    message: str = "Call processed successfully"

    status_code = 200

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "message": self.message,
            "callId": self.call_id,
            "analysis": self.analysis.model_dump(),
            "analysisSource": self.analysis_source,
            "transcriptionSource": self.transcription_source,
            "segmentsCreated": self.segments_created,
            "transcriptionLength": self.transcription_length,
            "duration": self.duration,
            "qualityScoreId": self.quality_score_id,
        }


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class ProcessError:
    error: str
    details: str
    call_id: Optional[str]
    status_code: int = 500
    timestamp: str = field(default_factory=_utcnow_iso)

    @classmethod
    def from_exception(cls, exc: BaseException, call_id: Optional[str]) -> "ProcessError":
        if isinstance(exc, PipelineError):
            return cls(error=str(exc) or type(exc).__name__, details=type(exc).__name__,
                       call_id=call_id, status_code=exc.status_code)
        return cls(error=str(exc) or type(exc).__name__,
                   details="Unexpected error; check the service logs for more information",
                   call_id=call_id, status_code=500)

    def to_dict(self) -> dict:
        return {
            "error": self.error,
            "details": self.details,
            "timestamp": self.timestamp,
            "callId": self.call_id,
        }


ProcessOutcome = Union[ProcessResult, ProcessError]
