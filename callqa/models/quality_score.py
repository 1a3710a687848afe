from ..extensions import db
from .base import TimestampMixin, new_id


class QualityScore(db.Model, TimestampMixin):
    __tablename__ = "quality_scores"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    call_id = db.Column(db.String(36), db.ForeignKey("calls.id", ondelete="CASCADE"), nullable=False, index=True)

    # 1-5 scale
    overall_satisfaction_score = db.Column(db.Integer)
    communication_score = db.Column(db.Integer)
    problem_resolution_score = db.Column(db.Integer)
    professionalism_score = db.Column(db.Integer)
    empathy_score = db.Column(db.Integer)
    follow_up_score = db.Column(db.Integer)
    ai_score = db.Column(db.Integer)  # mirrors overall_satisfaction_score for older readers

    sentiment = db.Column(db.String(10))  # positive/neutral/negative
    ai_feedback = db.Column(db.Text)
    improvement_areas = db.Column(db.JSON)  # ["issue-resolution", ...]
    analysis_source = db.Column(db.String(10))  # ai/heuristic/static

    requires_review = db.Column(db.Boolean, default=False)
    manual_review_required = db.Column(db.Boolean, default=False)

    # human review workflow, written outside the pipeline
    manual_review_status = db.Column(db.String(20))  # pending/in_review/completed
    manual_review_notes = db.Column(db.Text)
    reviewed_by = db.Column(db.String(36))
    reviewed_at = db.Column(db.DateTime)
    human_score = db.Column(db.Integer)
    human_feedback = db.Column(db.Text)
    flags = db.Column(db.JSON)
    quality_checklist = db.Column(db.JSON)

    call = db.relationship("Call", back_populates="quality_scores")

    def __repr__(self) -> str:
        return f"<QualityScore id={self.id} call_id={self.call_id} overall={self.overall_satisfaction_score}>"
