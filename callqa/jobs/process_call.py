"""Call processing job: audio -> transcript -> segments -> quality score.

Status flow: uploaded -> transcribing -> transcribed -> analyzing -> analyzed.
Every status write is a compare-and-set on ``calls.version``; a retry bumps
the version unconditionally, so a run that was superseded stops at its next
write instead of racing the new one.
"""

import time
from dataclasses import dataclass
from typing import Optional

from flask import current_app, has_app_context
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from ..errors import (
    ConcurrentRunError,
    MissingAudio,
    NotFound,
    PipelineError,
    ProviderError,
    QualityScoreInsertFailed,
    StorageError,
)
from ..extensions import db
from ..models import Call, CallStatus, QualityScore, Transcription, TranscriptionSegment
from ..results import ProcessError, ProcessOutcome, ProcessResult
from ..services.quality_analysis import QualityAnalysisClient, analyze_with_fallback
from ..services.segments import estimate_duration_seconds, synthesize_segments
from ..services.storage import StorageService, parse_public_url
from ..services.transcription import TranscriptionClient, TranscriptionResult

PLACEHOLDER_CONFIDENCE = 0.85
PLACEHOLDER_TRANSCRIPT = """Customer: Hi, I'm calling about my recent order. I'm having some issues with the delivery.

Agent: I'm sorry to hear about the delivery issues. Let me help you with that. Can you please provide me your order number?

Customer: Yes, it's ORDER-12345. I was supposed to receive it yesterday but it never arrived.

Agent: I understand your frustration. Let me check the tracking information for order 12345. I can see that there was a delay at our distribution center. The package is now out for delivery and should arrive today by 6 PM.

Customer: That's good to hear. Will I receive a tracking notification?

Agent: Absolutely! You'll receive an SMS and email notification once the package is delivered. Is there anything else I can help you with today?

Customer: No, that covers everything. Thank you for your help!

Agent: You're welcome! Have a great day and thank you for choosing our service."""

TRANSCRIPTION_SOURCE_PROVIDER = 'provider'
TRANSCRIPTION_SOURCE_PLACEHOLDER = 'placeholder'


@dataclass
class _Run:
    call_id: str
    version: int
    # last version this run committed; what the failure reset compares against
    committed: int = 0

    def commit(self):
        db.session.commit()
        self.committed = self.version


def _status_update(call_id, status, **values):
    return (
        update(Call)
        .where(Call.id == call_id)
        .values(status=status.value, version=Call.version + 1, updated_at=db.func.now(), **values)
        .execution_options(synchronize_session=False)
    )


def reset_call_status(call_id: str, expected_version: Optional[int] = None) -> Optional[str]:
    """Best-effort reset to ``uploaded``.

    Never raises: returns None on success or a warning describing why the
    reset did not happen. With ``expected_version`` the reset only applies if
    no other run has written the call since.
    """
    stmt = _status_update(call_id, CallStatus.UPLOADED)
    if expected_version is not None:
        stmt = stmt.where(Call.version == expected_version)
    try:
        res = db.session.execute(stmt)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        return f'failed to reset call {call_id} to uploaded: {exc}'
    if res.rowcount == 0:
        return f'call {call_id} was not reset: it is missing or owned by a newer run'
    current_app.logger.info('Call %s reset to uploaded', call_id)
    return None


class CallPipeline:
    def __init__(self, storage, transcriber, analyzer, settle_seconds: float = 1.0):
        self.storage = storage
        self.transcriber = transcriber
        self.analyzer = analyzer
        self.settle_seconds = settle_seconds

    @classmethod
    def from_settings(cls, settings) -> 'CallPipeline':
        return cls(
            storage=StorageService(settings),
            transcriber=TranscriptionClient(settings),
            analyzer=QualityAnalysisClient(settings),
            settle_seconds=settings.retry_settle_seconds,
        )

    # -- status writes -------------------------------------------------

    def _transition(self, run: _Run, status: CallStatus, commit: bool = True, **values):
        res = db.session.execute(_status_update(run.call_id, status, **values).where(Call.version == run.version))
        if res.rowcount != 1:
            db.session.rollback()
            raise ConcurrentRunError(f'call {run.call_id} was modified by another run; aborting at {status.value}')
        run.version += 1
        if commit:
            run.commit()
        current_app.logger.info('Call %s -> %s', run.call_id, status.value)

    # -- stages --------------------------------------------------------

    def _transcribe(self, call_id, audio: bytes, filename):
        try:
            return self.transcriber.transcribe(audio, filename=filename), TRANSCRIPTION_SOURCE_PROVIDER
        except ProviderError as exc:
            current_app.logger.warning(
                'Transcription failed for call %s (%s); substituting placeholder transcript, '
                'the stored transcript is NOT derived from the audio', call_id, exc)
            result = TranscriptionResult(content=PLACEHOLDER_TRANSCRIPT, confidence=PLACEHOLDER_CONFIDENCE)
            return result, TRANSCRIPTION_SOURCE_PLACEHOLDER

    def _store_transcription(self, run: _Run, result: TranscriptionResult, duration: int) -> int:
        """Replace the call's transcription and segments, moving the call to ``transcribed``."""
        self._transition(run, CallStatus.TRANSCRIBED, commit=False)
        for old in Transcription.query.filter_by(call_id=run.call_id).all():
            db.session.delete(old)

        transcription = Transcription(call_id=run.call_id, content=result.content,
                                      confidence_score=result.confidence)
        db.session.add(transcription)
        db.session.flush()

        segments = synthesize_segments(result.content, result.segments, duration)
        db.session.add_all([
            TranscriptionSegment(
                transcription_id=transcription.id,
                start_time=seg.start_time,
                end_time=seg.end_time,
                text=seg.text,
                word_count=seg.word_count,
                confidence_score=seg.confidence,
            )
            for seg in segments
        ])
        run.commit()
        current_app.logger.info('Stored transcription %s with %d segments for call %s',
                                transcription.id, len(segments), run.call_id)
        return len(segments)

    def _store_quality_score(self, run: _Run, analysis, source: str, duration: int) -> str:
        self._transition(run, CallStatus.ANALYZED, commit=False, duration_seconds=duration)
        try:
            for old in QualityScore.query.filter_by(call_id=run.call_id).all():
                db.session.delete(old)
            requires_review = analysis.requires_review
            score = QualityScore(
                call_id=run.call_id,
                overall_satisfaction_score=analysis.overall_satisfaction_score,
                communication_score=analysis.communication_score,
                problem_resolution_score=analysis.problem_resolution_score,
                professionalism_score=analysis.professionalism_score,
                empathy_score=analysis.empathy_score,
                follow_up_score=analysis.follow_up_score,
                ai_score=analysis.overall_satisfaction_score,
                sentiment=analysis.sentiment,
                ai_feedback=analysis.feedback,
                improvement_areas=list(analysis.improvement_areas),
                analysis_source=source,
                requires_review=requires_review,
                manual_review_required=requires_review,
                manual_review_status='pending' if requires_review else None,
            )
            db.session.add(score)
            db.session.flush()
            score_id = score.id
            run.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise QualityScoreInsertFailed(f'failed to store quality score for call {run.call_id}: {exc}') from exc
        return score_id

    # -- entry points --------------------------------------------------

    def process(self, call_id: str) -> ProcessResult:
        call = db.session.get(Call, call_id, populate_existing=True)
        if call is None:
            raise NotFound(f'Call not found: {call_id}')

        run = _Run(call_id=call_id, version=call.version, committed=call.version)
        try:
            return self._run(run, call.file_url, call.file_name)
        except Exception as exc:
            db.session.rollback()
            current_app.logger.error('Processing call %s failed: %s: %s', call_id, type(exc).__name__, exc)
            warning = reset_call_status(call_id, expected_version=run.committed)
            if warning:
                current_app.logger.warning(warning)
            raise

    def _run(self, run: _Run, file_url, file_name) -> ProcessResult:
        if not file_url:
            raise MissingAudio(f'No audio file URL found for call {run.call_id}')
        current_app.logger.info('Processing call %s (%s)', run.call_id, file_url)

        self._transition(run, CallStatus.TRANSCRIBING)

        bucket, path = parse_public_url(file_url)
        audio = self.storage.download(bucket, path)
        if not audio:
            raise StorageError(f'audio object {bucket}/{path} is empty')
        duration = estimate_duration_seconds(len(audio))
        current_app.logger.info('Downloaded %d bytes for call %s; estimated duration %ds',
                                len(audio), run.call_id, duration)

        transcript, transcription_source = self._transcribe(run.call_id, audio, file_name)
        segments_created = self._store_transcription(run, transcript, duration)

        self._transition(run, CallStatus.ANALYZING)
        analysis, analysis_source = analyze_with_fallback(self.analyzer, transcript.content)
        if analysis_source != 'ai':
            current_app.logger.warning('Call %s scored by %s fallback', run.call_id, analysis_source)

        score_id = self._store_quality_score(run, analysis, analysis_source, duration)
        current_app.logger.info('Call %s processed successfully (overall=%d, review=%s)',
                                run.call_id, analysis.overall_satisfaction_score, analysis.requires_review)

        return ProcessResult(
            call_id=run.call_id,
            analysis=analysis,
            analysis_source=analysis_source,
            transcription_source=transcription_source,
            segments_created=segments_created,
            transcription_length=len(transcript.content),
            duration=duration,
            quality_score_id=score_id,
        )


def retry_call(pipeline: CallPipeline, call_id: str) -> ProcessResult:
    """User-triggered re-run from any status.

    Deletes the previous quality score, forces the call back to ``uploaded``
    (invalidating any run still in flight), waits for writers to settle and
    processes again.
    """
    if db.session.get(Call, call_id) is None:
        raise NotFound(f'Call not found: {call_id}')

    try:
        for old in QualityScore.query.filter_by(call_id=call_id).all():
            db.session.delete(old)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception('Failed to delete previous quality scores for call %s', call_id)

    warning = reset_call_status(call_id)
    if warning:
        current_app.logger.warning(warning)

    if pipeline.settle_seconds > 0:
        time.sleep(pipeline.settle_seconds)
    return pipeline.process(call_id)


def build_pipeline() -> CallPipeline:
    return CallPipeline.from_settings(current_app.extensions['pipeline_settings'])


def _outcome(method, call_id) -> ProcessOutcome:
    try:
        return method(call_id)
    except PipelineError as exc:
        return ProcessError.from_exception(exc, call_id)
    except Exception as exc:
        current_app.logger.exception('Unexpected error while processing call %s', call_id)
        return ProcessError.from_exception(exc, call_id)


def run_process(call_id: str) -> ProcessOutcome:
    return _outcome(build_pipeline().process, call_id)


def run_retry(call_id: str) -> ProcessOutcome:
    pipeline = build_pipeline()
    return _outcome(lambda cid: retry_call(pipeline, cid), call_id)


def _in_app_context(func, call_id):
    if has_app_context():
        return func(call_id)
    # lazy import to avoid a circular import at module import time
    from .. import create_app
    app = create_app()
    with app.app_context():
        return func(call_id)


def process_call_job(call_id: str) -> ProcessOutcome:
    """Worker entrypoint: ensures an app context so RQ can call it directly."""
    return _in_app_context(run_process, call_id)


def retry_call_job(call_id: str) -> ProcessOutcome:
    """Worker entrypoint for the retry action."""
    return _in_app_context(run_retry, call_id)
