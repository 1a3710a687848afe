from .call import Call, CallStatus
from .transcription import Transcription, TranscriptionSegment
from .quality_score import QualityScore
from .review_assignment import ReviewAssignment
