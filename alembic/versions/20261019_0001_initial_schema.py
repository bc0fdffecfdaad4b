"""Initial schema - lesson content and learner progress

Revision ID: 0001
Revises: 
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Lessons
    op.create_table(
        'lessons',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('level', sa.String(50), nullable=True),
        sa.Column('language', sa.String(20), nullable=True),
        sa.Column('icon', sa.String(50), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('owner_id', sa.Integer(), nullable=True, index=True),
    )

    op.create_table(
        'topics',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('lesson_id', sa.Integer(), sa.ForeignKey('lessons.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('order', sa.Integer(), nullable=False, server_default='0'),
    )

    op.create_table(
        'subtopics',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('topic_id', sa.Integer(), sa.ForeignKey('topics.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('objective', sa.Text(), nullable=True),
        sa.Column('key_concepts', sa.JSON(), nullable=False),
        sa.Column('order', sa.Integer(), nullable=False, server_default='0'),
    )

    op.create_table(
        'resources',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('subtopic_id', sa.Integer(), sa.ForeignKey('subtopics.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('type', sa.String(20), nullable=False, server_default='text'),
        sa.Column('url', sa.Text(), nullable=True),
        sa.Column('title', sa.String(255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('purpose', sa.Text(), nullable=True),
        sa.Column('content_tags', sa.JSON(), nullable=False),
        sa.Column('recommended_when', sa.Text(), nullable=True),
        sa.Column('is_optional', sa.Boolean(), nullable=False, server_default=sa.true()),
    )

    # Questions
    op.create_table(
        'quiz_questions',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('subtopic_id', sa.Integer(), sa.ForeignKey('subtopics.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('question', sa.Text(), nullable=False),
        sa.Column('options', sa.JSON(), nullable=False),
        sa.Column('answer', sa.Integer(), nullable=False),
        sa.Column('explanation', sa.Text(), nullable=True),
    )

    op.create_table(
        'final_test_questions',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('lesson_id', sa.Integer(), sa.ForeignKey('lessons.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('question', sa.Text(), nullable=False),
        sa.Column('options', sa.JSON(), nullable=False),
        sa.Column('answer', sa.Integer(), nullable=False),
        sa.Column('explanation', sa.Text(), nullable=True),
    )

    # Learner progress
    op.create_table(
        'user_progress',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(), nullable=False, index=True),
        sa.Column('subtopic_id', sa.Integer(), nullable=False, index=True),
        sa.Column('completed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('db_quiz_score', sa.Integer(), nullable=True),
        sa.Column('ai_quiz_score', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('user_id', 'subtopic_id', name='uq_user_progress_user_subtopic'),
    )

    op.create_table(
        'quiz_results',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('subtopic_id', sa.Integer(), nullable=False),
        sa.Column('quiz_type', sa.String(10), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False),
        sa.Column('answers', sa.JSON(), nullable=False),
        sa.Column('questions', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index(
        'ix_quiz_results_user_subtopic_type',
        'quiz_results',
        ['user_id', 'subtopic_id', 'quiz_type'],
    )

    op.create_table(
        'user_final_test_results',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(), nullable=False, index=True),
        sa.Column('lesson_id', sa.Integer(), nullable=False, index=True),
        sa.Column('score', sa.Integer(), nullable=False),
        sa.Column('feedback', sa.Text(), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table('user_final_test_results')
    op.drop_index('ix_quiz_results_user_subtopic_type', table_name='quiz_results')
    op.drop_table('quiz_results')
    op.drop_table('user_progress')
    op.drop_table('final_test_questions')
    op.drop_table('quiz_questions')
    op.drop_table('resources')
    op.drop_table('subtopics')
    op.drop_table('topics')
    op.drop_table('lessons')
