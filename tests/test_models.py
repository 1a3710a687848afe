from callqa.extensions import db
from callqa.models import Call, CallStatus, QualityScore, ReviewAssignment, Transcription, TranscriptionSegment


def test_new_call_defaults(app):
    call = Call(user_id='u1', title='Inbound')
    db.session.add(call)
    db.session.commit()
    assert len(call.id) == 36
    assert call.status == CallStatus.UPLOADED.value
    assert call.version == 0
    assert call.created_at is not None


def test_deleting_call_removes_children(app):
    call = Call(user_id='u1', title='Inbound', file_url='http://x/a.wav')
    transcription = Transcription(content='Customer: hi', confidence_score=0.95)
    transcription.segments.append(
        TranscriptionSegment(start_time=0, end_time=30, text='Customer: hi', word_count=2, confidence_score=0.9))
    call.transcriptions.append(transcription)
    call.quality_scores.append(QualityScore(overall_satisfaction_score=4, analysis_source='ai'))
    call.review_assignments.append(ReviewAssignment(reviewer_id='reviewer-1', assigned_by='manager-1'))
    db.session.add(call)
    db.session.commit()
    assert ReviewAssignment.query.one().status == 'pending'

    db.session.delete(call)
    db.session.commit()

    for model in (Transcription, TranscriptionSegment, QualityScore, ReviewAssignment):
        assert model.query.count() == 0
