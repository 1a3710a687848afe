import logging
from dataclasses import dataclass, field
from typing import List

from .openai_wrap import post_transcription
from .segments import ProviderSegment

logger = logging.getLogger(__name__)

# Whisper reports no whole-transcript confidence
TRANSCRIPT_CONFIDENCE = 0.95


@dataclass(frozen=True)
class TranscriptionResult:
    content: str
    confidence: float
    segments: List[ProviderSegment] = field(default_factory=list)


def _to_float(value):
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def parse_provider_segments(raw) -> List[ProviderSegment]:
    """Normalize the provider's segment array, skipping entries we cannot read."""
    out = []
    for item in raw or []:
        if not isinstance(item, dict):
            continue
        text = item.get('text')
        if not isinstance(text, str):
            continue
        out.append(ProviderSegment(
            start=_to_float(item.get('start')),
            end=_to_float(item.get('end')),
            text=text,
        ))
    return out


class TranscriptionClient:
    def __init__(self, settings):
        self.settings = settings

    def transcribe(self, audio_bytes: bytes, filename: str = None) -> TranscriptionResult:
        """Transcribe audio with segment timestamps. Raises ``ProviderError``."""
        logger.info('Submitting %d bytes for transcription (model=%s)', len(audio_bytes), self.settings.transcription_model)
        body = post_transcription(self.settings, audio_bytes, filename=filename)
        content = body.get('text') or ''
        segments = parse_provider_segments(body.get('segments'))
        logger.info('Transcription completed: %d chars, %d provider segments', len(content), len(segments))
        return TranscriptionResult(content=content, confidence=TRANSCRIPT_CONFIDENCE, segments=segments)
