"""create calls, transcriptions, segments, quality scores, review assignments

Revision ID: 0001_initial
Revises: None
Create Date: 2026-10-18 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def _created_at():
    return sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=True)


def _updated_at():
    return sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=True)


def upgrade():
    op.create_table(
        'calls',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('file_url', sa.String(1024)),
        sa.Column('file_name', sa.String(255)),
        sa.Column('status', sa.String(20), nullable=False, server_default='uploaded'),
        sa.Column('duration_seconds', sa.Integer()),
        sa.Column('agent_name', sa.String(120)),
        sa.Column('department', sa.String(120)),
        sa.Column('call_type', sa.String(60)),
        sa.Column('call_source', sa.String(60)),
        sa.Column('customer_phone', sa.String(40)),
        sa.Column('version', sa.Integer(), nullable=False, server_default='0'),
        _created_at(),
        _updated_at(),
    )
    op.create_index('ix_calls_user_id', 'calls', ['user_id'])
    op.create_index('ix_calls_status', 'calls', ['status'])

    op.create_table(
        'transcriptions',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('call_id', sa.String(36), sa.ForeignKey('calls.id', ondelete='CASCADE'), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('confidence_score', sa.Float()),
        _created_at(),
    )
    op.create_index('ix_transcriptions_call_id', 'transcriptions', ['call_id'])

    op.create_table(
        'transcription_segments',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('transcription_id', sa.String(36),
                  sa.ForeignKey('transcriptions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('start_time', sa.Float(), nullable=False),
        sa.Column('end_time', sa.Float(), nullable=False),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('word_count', sa.Integer()),
        sa.Column('confidence_score', sa.Float()),
        _created_at(),
    )
    op.create_index('ix_transcription_segments_transcription_id', 'transcription_segments', ['transcription_id'])

    op.create_table(
        'quality_scores',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('call_id', sa.String(36), sa.ForeignKey('calls.id', ondelete='CASCADE'), nullable=False),
        sa.Column('overall_satisfaction_score', sa.Integer()),
        sa.Column('communication_score', sa.Integer()),
        sa.Column('problem_resolution_score', sa.Integer()),
        sa.Column('professionalism_score', sa.Integer()),
        sa.Column('empathy_score', sa.Integer()),
        sa.Column('follow_up_score', sa.Integer()),
        sa.Column('ai_score', sa.Integer()),
        sa.Column('sentiment', sa.String(10)),
        sa.Column('ai_feedback', sa.Text()),
        sa.Column('improvement_areas', sa.JSON()),
        sa.Column('analysis_source', sa.String(10)),
        sa.Column('requires_review', sa.Boolean()),
        sa.Column('manual_review_required', sa.Boolean()),
        sa.Column('manual_review_status', sa.String(20)),
        sa.Column('manual_review_notes', sa.Text()),
        sa.Column('reviewed_by', sa.String(36)),
        sa.Column('reviewed_at', sa.DateTime()),
        sa.Column('human_score', sa.Integer()),
        sa.Column('human_feedback', sa.Text()),
        sa.Column('flags', sa.JSON()),
        sa.Column('quality_checklist', sa.JSON()),
        _created_at(),
        _updated_at(),
    )
    op.create_index('ix_quality_scores_call_id', 'quality_scores', ['call_id'])

    op.create_table(
        'review_assignments',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('call_id', sa.String(36), sa.ForeignKey('calls.id', ondelete='CASCADE'), nullable=False),
        sa.Column('reviewer_id', sa.String(36), nullable=False),
        sa.Column('assigned_by', sa.String(36)),
        sa.Column('status', sa.String(20)),
        sa.Column('assigned_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('completed_at', sa.DateTime()),
    )
    op.create_index('ix_review_assignments_call_id', 'review_assignments', ['call_id'])


def downgrade():
    for table in ('review_assignments', 'quality_scores', 'transcription_segments', 'transcriptions', 'calls'):
        op.drop_table(table)
