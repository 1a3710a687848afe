"""Build time-bounded transcript segments.

Provider timestamps are used verbatim when the transcription service returned
them. Otherwise the transcript is cut at ``Customer:`` / ``Agent:`` labels and
each utterance gets a window proportional to its estimated speaking time, so
the windows exactly partition ``[0, total_duration]``.
"""
import math
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

PROVIDER_SEGMENT_CONFIDENCE = 0.9
SYNTHESIZED_SEGMENT_CONFIDENCE = 0.9
DEFAULT_PROVIDER_SEGMENT_SECONDS = 5.0

WORDS_PER_SECOND = 2.0
MIN_UTTERANCE_SECONDS = 3.0

MIN_ESTIMATED_DURATION = 30
SECONDS_PER_MEGABYTE = 60

_LABEL_BOUNDARY = re.compile(r'(?=Customer:|Agent:)')


@dataclass(frozen=True)
class ProviderSegment:
    start: Optional[float]
    end: Optional[float]
    text: str


@dataclass(frozen=True)
class Segment:
    start_time: float
    end_time: float
    text: str
    word_count: int
    confidence: float


def word_count(text: str) -> int:
    return len(text.split())


def estimate_duration_seconds(byte_size: int) -> int:
    """Coarse duration proxy from the file size (1 MB ~ 60 s), never below 30 s."""
    megabytes = byte_size / (1024 * 1024)
    return max(int(math.floor(megabytes * SECONDS_PER_MEGABYTE)), MIN_ESTIMATED_DURATION)


def split_utterances(text: str) -> List[str]:
    """Split on speaker labels, dropping empty fragments. Unlabelled text stays whole."""
    if not text:
        return []
    return [part.strip() for part in _LABEL_BOUNDARY.split(text) if part.strip()]


def _from_provider(provider_segments: Sequence[ProviderSegment]) -> List[Segment]:
    out = []
    for seg in provider_segments:
        start = float(seg.start or 0)
        end = float(seg.end) if seg.end else start + DEFAULT_PROVIDER_SEGMENT_SECONDS
        text = (seg.text or '').strip()
        out.append(Segment(
            start_time=start,
            end_time=end,
            text=text,
            word_count=word_count(text),
            confidence=PROVIDER_SEGMENT_CONFIDENCE,
        ))
    return out


def _from_labels(text: str, total_duration: float) -> List[Segment]:
    fragments = split_utterances(text)
    if not fragments:
        return []

    counts = [word_count(f) for f in fragments]
    estimates = [max(c / WORDS_PER_SECOND, MIN_UTTERANCE_SECONDS) for c in counts]
    scale = total_duration / sum(estimates)

    out = []
    current = 0.0
    last = len(fragments) - 1
    for i, (fragment, count, estimate) in enumerate(zip(fragments, counts, estimates)):
        # pin the final window to the total so rounding never leaves a gap
        end = float(total_duration) if i == last else min(current + estimate * scale, float(total_duration))
        out.append(Segment(
            start_time=current,
            end_time=end,
            text=fragment,
            word_count=count,
            confidence=SYNTHESIZED_SEGMENT_CONFIDENCE,
        ))
        current = end
    return out


def synthesize_segments(text: str,
                        provider_segments: Optional[Sequence[ProviderSegment]],
                        total_duration: float) -> List[Segment]:
    if provider_segments:
        return _from_provider(provider_segments)
    return _from_labels(text, total_duration)
