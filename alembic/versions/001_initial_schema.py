"""initial schema: tools, submissions, ratings

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create submissions table
    op.create_table(
        'submissions',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('url', sa.String(2000), nullable=False),
        sa.Column('category', sa.String(50), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('creator_name', sa.String(255), nullable=False),
        sa.Column('creator_link', sa.String(2000), nullable=True),
        sa.Column('creator_background', sa.Text(), nullable=True),
        sa.Column('thumbnail_url', sa.String(2000), nullable=True),
        sa.Column('submitter_ip', sa.String(255), nullable=False, server_default='unknown'),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("status IN ('pending', 'approved', 'rejected')", name='ck_submission_status'),
    )
    op.create_index('ix_submissions_status', 'submissions', ['status'])
    op.create_index('ix_submissions_created_at', 'submissions', ['created_at'])

    # Create tools table
    op.create_table(
        'tools',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('url', sa.String(2000), nullable=False),
        sa.Column('category', sa.String(50), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('creator_name', sa.String(255), nullable=False),
        sa.Column('creator_link', sa.String(2000), nullable=True),
        sa.Column('creator_background', sa.Text(), nullable=True),
        sa.Column('thumbnail_url', sa.String(2000), nullable=True),
        sa.Column('avg_rating', sa.Float(), nullable=False, server_default='0'),
        sa.Column('total_ratings', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('view_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('click_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('approved', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('source_submission_id', sa.Uuid(as_uuid=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['source_submission_id'], ['submissions.id'], ondelete='SET NULL'),
        sa.UniqueConstraint('source_submission_id', name='uq_tools_source_submission_id'),
        sa.CheckConstraint('avg_rating >= 0 AND avg_rating <= 5', name='ck_tool_avg_rating_range'),
        sa.CheckConstraint('total_ratings >= 0', name='ck_tool_total_ratings'),
        sa.CheckConstraint('view_count >= 0 AND click_count >= 0', name='ck_tool_counters'),
    )
    op.create_index('ix_tools_category', 'tools', ['category'])
    op.create_index('ix_tools_approved', 'tools', ['approved'])
    op.create_index('ix_tools_created_at', 'tools', ['created_at'])

    # Create ratings table
    op.create_table(
        'ratings',
        sa.Column('id', sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column('tool_id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('rater_id', sa.String(255), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('review_text', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['tool_id'], ['tools.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('tool_id', 'rater_id', name='uq_rating_tool_rater'),
        sa.CheckConstraint('rating >= 1 AND rating <= 5', name='ck_rating_range'),
    )
    op.create_index('ix_ratings_tool_id', 'ratings', ['tool_id'])


def downgrade() -> None:
    op.drop_index('ix_ratings_tool_id', table_name='ratings')
    op.drop_table('ratings')
    op.drop_index('ix_tools_created_at', table_name='tools')
    op.drop_index('ix_tools_approved', table_name='tools')
    op.drop_index('ix_tools_category', table_name='tools')
    op.drop_table('tools')
    op.drop_index('ix_submissions_created_at', table_name='submissions')
    op.drop_index('ix_submissions_status', table_name='submissions')
    op.drop_table('submissions')
