from ..extensions import db
from .base import new_id


class ReviewAssignment(db.Model):
    __tablename__ = "review_assignments"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    call_id = db.Column(db.String(36), db.ForeignKey("calls.id", ondelete="CASCADE"), nullable=False, index=True)
    reviewer_id = db.Column(db.String(36), nullable=False)
    assigned_by = db.Column(db.String(36))
    status = db.Column(db.String(20), default="pending")  # pending/in_progress/completed
    assigned_at = db.Column(db.DateTime, server_default=db.func.now())
    completed_at = db.Column(db.DateTime)

    call = db.relationship("Call", back_populates="review_assignments")
