"""Initial migration: create all tables

Revision ID: initial
Revises: 
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create user table
    op.create_table(
        'user',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_user_email'), 'user', ['email'], unique=True)

    # Create generation_session table
    op.create_table(
        'generation_session',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('source_text', sa.String(), nullable=False),
        sa.Column('model_name', sa.String(), nullable=False),
        sa.Column('llm_response', sa.JSON(), nullable=False),
        sa.Column('model_params', sa.JSON(), nullable=True),
        sa.Column('generated_count', sa.Integer(), nullable=False),
        sa.Column('accepted_count', sa.Integer(), nullable=False),
        sa.Column('rejected_count', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_generation_session_user_id'), 'generation_session', ['user_id'], unique=False)

    # Create flashcard table
    op.create_table(
        'flashcard',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('front', sa.String(), nullable=False),
        sa.Column('back', sa.String(), nullable=False),
        sa.Column('source', sa.String(), nullable=False, server_default='manual'),
        sa.Column('generation_session_id', sa.Uuid(), nullable=True),
        sa.Column('interval', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('ease_factor', sa.Float(), nullable=False, server_default='2.5'),
        sa.Column('repetition_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('next_review_date', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("source IN ('ai', 'manual')", name='ck_flashcard_source'),
        sa.CheckConstraint('ease_factor >= 1.3', name='ck_flashcard_ease_factor_min'),
        sa.CheckConstraint('interval >= 0', name='ck_flashcard_interval_non_negative'),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ),
        sa.ForeignKeyConstraint(['generation_session_id'], ['generation_session.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_flashcard_user_id'), 'flashcard', ['user_id'], unique=False)
    op.create_index(op.f('ix_flashcard_next_review_date'), 'flashcard', ['next_review_date'], unique=False)

    # Create learning_session table
    op.create_table(
        'learning_session',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('ended_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('flashcards_reviewed', sa.Integer(), nullable=False, server_default='0'),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_learning_session_user_id'), 'learning_session', ['user_id'], unique=False)

    # Create flashcard_review table
    op.create_table(
        'flashcard_review',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('flashcard_id', sa.Uuid(), nullable=False),
        sa.Column('learning_session_id', sa.Uuid(), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('previous_interval', sa.Integer(), nullable=False),
        sa.Column('new_interval', sa.Integer(), nullable=False),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('rating BETWEEN 1 AND 4', name='ck_flashcard_review_rating'),
        sa.ForeignKeyConstraint(['flashcard_id'], ['flashcard.id'], ),
        sa.ForeignKeyConstraint(['learning_session_id'], ['learning_session.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_flashcard_review_flashcard_id'), 'flashcard_review', ['flashcard_id'], unique=False)
    op.create_index(
        op.f('ix_flashcard_review_learning_session_id'), 'flashcard_review', ['learning_session_id'], unique=False
    )


def downgrade() -> None:
    op.drop_index(op.f('ix_flashcard_review_learning_session_id'), table_name='flashcard_review')
    op.drop_index(op.f('ix_flashcard_review_flashcard_id'), table_name='flashcard_review')
    op.drop_table('flashcard_review')
    op.drop_index(op.f('ix_learning_session_user_id'), table_name='learning_session')
    op.drop_table('learning_session')
    op.drop_index(op.f('ix_flashcard_next_review_date'), table_name='flashcard')
    op.drop_index(op.f('ix_flashcard_user_id'), table_name='flashcard')
    op.drop_table('flashcard')
    op.drop_index(op.f('ix_generation_session_user_id'), table_name='generation_session')
    op.drop_table('generation_session')
    op.drop_index(op.f('ix_user_email'), table_name='user')
    op.drop_table('user')
