from ..extensions import db
from .base import CreatedAtMixin, new_id


class Transcription(db.Model, CreatedAtMixin):
    __tablename__ = "transcriptions"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    call_id = db.Column(db.String(36), db.ForeignKey("calls.id", ondelete="CASCADE"), nullable=False, index=True)
    content = db.Column(db.Text, nullable=False)
    confidence_score = db.Column(db.Float)  # 0-1

    call = db.relationship("Call", back_populates="transcriptions")
    segments = db.relationship(
        "TranscriptionSegment",
        back_populates="transcription",
        cascade="all, delete-orphan",
        order_by="TranscriptionSegment.start_time",
    )


class TranscriptionSegment(db.Model, CreatedAtMixin):
    __tablename__ = "transcription_segments"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    transcription_id = db.Column(
        db.String(36), db.ForeignKey("transcriptions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    start_time = db.Column(db.Float, nullable=False)  # seconds
    end_time = db.Column(db.Float, nullable=False)
    text = db.Column(db.Text, nullable=False)
    word_count = db.Column(db.Integer)
    confidence_score = db.Column(db.Float)

    transcription = db.relationship("Transcription", back_populates="segments")
