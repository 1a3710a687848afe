import enum

from ..extensions import db
from .base import TimestampMixin, new_id


class CallStatus(str, enum.Enum):
    UPLOADED = "uploaded"
    TRANSCRIBING = "transcribing"
    TRANSCRIBED = "transcribed"
    ANALYZING = "analyzing"
    ANALYZED = "analyzed"
    # only reachable through the human review workflow
    REVIEWED = "reviewed"


class Call(db.Model, TimestampMixin):
    __tablename__ = "calls"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(db.String(36), nullable=False, index=True)
    title = db.Column(db.String(255), nullable=False)
    file_url = db.Column(db.String(1024))
    file_name = db.Column(db.String(255))
    status = db.Column(db.String(20), nullable=False, default=CallStatus.UPLOADED.value, index=True)
    duration_seconds = db.Column(db.Integer)

    # free-text metadata captured at upload
    agent_name = db.Column(db.String(120))
    department = db.Column(db.String(120))
    call_type = db.Column(db.String(60))
    call_source = db.Column(db.String(60))
    customer_phone = db.Column(db.String(40))

    # bumped on every status write; a run only writes while it holds the latest value
    version = db.Column(db.Integer, nullable=False, default=0, server_default="0")

    transcriptions = db.relationship(
        "Transcription", back_populates="call", cascade="all, delete-orphan"
    )
    quality_scores = db.relationship(
        "QualityScore", back_populates="call", cascade="all, delete-orphan"
    )
    review_assignments = db.relationship(
        "ReviewAssignment", back_populates="call", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Call id={self.id} status={self.status!r} version={self.version}>"
