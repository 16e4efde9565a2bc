"""initial schema

Revision ID: 3f9c1a7e2b40
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9c1a7e2b40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Enum values are stored by member name, as SQLAlchemy does for Python enums
user_role = sa.Enum('ADMIN', 'USER', name='userrole')
tag_category = sa.Enum('CLIENT', 'BRAND', 'TOPIC', 'TIME_PERIOD', 'OTHER', name='tagcategory')
generation_status = sa.Enum('PENDING', 'GENERATING', 'COMPLETED', 'FAILED', name='generationstatus')
audio_status = sa.Enum('GENERATING', 'COMPLETED', 'FAILED', name='audiostatus')
source_type = sa.Enum('PDF', 'TEXT', 'WEBSITE', 'YOUTUBE', 'AUDIO', name='sourcetype')
processing_status = sa.Enum('PENDING', 'PROCESSING', 'COMPLETED', 'FAILED', name='processingstatus')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def upgrade() -> None:
    op.create_table('users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=True),
        sa.Column('avatar_url', sa.String(length=1024), nullable=True),
        sa.Column('role', user_role, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table('tags',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('category', tag_category, nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('color', sa.String(length=32), nullable=False),
        sa.Column('created_by', sa.Uuid(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_tags_name', 'tags', ['name'], unique=True)

    op.create_table('notebooks',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('icon', sa.String(length=16), nullable=True),
        sa.Column('color', sa.String(length=32), nullable=True),
        sa.Column('example_questions', sa.JSON(), nullable=True),
        sa.Column('is_public', sa.Boolean(), nullable=False),
        sa.Column('generation_status', generation_status, nullable=False),
        sa.Column('audio_overview_generation_status', audio_status, nullable=True),
        sa.Column('audio_overview_url', sa.Text(), nullable=True),
        sa.Column('audio_object_name', sa.String(length=1024), nullable=True),
        sa.Column('audio_url_expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('owner_user_id', sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['owner_user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_notebooks_title', 'notebooks', ['title'])
    op.create_index('ix_notebooks_owner_user_id', 'notebooks', ['owner_user_id'])

    op.create_table('notebook_tags',
        sa.Column('notebook_id', sa.Uuid(), nullable=False),
        sa.Column('tag_id', sa.Uuid(), nullable=False),
        sa.Column('created_by', sa.Uuid(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['notebook_id'], ['notebooks.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['tag_id'], ['tags.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('notebook_id', 'tag_id'),
    )
    op.create_index('ix_notebook_tags_tag_id', 'notebook_tags', ['tag_id'])

    op.create_table('user_permissions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('tag_id', sa.Uuid(), nullable=False),
        sa.Column('granted_by', sa.Uuid(), nullable=True),
        sa.Column('granted_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['tag_id'], ['tags.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['granted_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'tag_id', name='uq_user_permission'),
    )
    op.create_index('ix_user_permissions_user_id', 'user_permissions', ['user_id'])
    op.create_index('ix_user_permissions_tag_id', 'user_permissions', ['tag_id'])

    op.create_table('sources',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('notebook_id', sa.Uuid(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('display_name', sa.String(length=255), nullable=True),
        sa.Column('type', source_type, nullable=False),
        sa.Column('url', sa.Text(), nullable=True),
        sa.Column('file_path', sa.String(length=1024), nullable=True),
        sa.Column('file_size', sa.BigInteger(), nullable=True),
        sa.Column('content', sa.Text(), nullable=True),
        sa.Column('summary', sa.Text(), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('processing_status', processing_status, nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['notebook_id'], ['notebooks.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_sources_notebook_id', 'sources', ['notebook_id'])

    op.create_table('source_tags',
        sa.Column('source_id', sa.Uuid(), nullable=False),
        sa.Column('tag_id', sa.Uuid(), nullable=False),
        sa.Column('created_by', sa.Uuid(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['source_id'], ['sources.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['tag_id'], ['tags.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('source_id', 'tag_id'),
    )
    op.create_index('ix_source_tags_tag_id', 'source_tags', ['tag_id'])

    op.create_table('notes',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('notebook_id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('source_type', sa.String(length=50), nullable=True),
        sa.Column('extracted_text', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['notebook_id'], ['notebooks.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_notes_notebook_id', 'notes', ['notebook_id'])
    op.create_index('ix_notes_user_id', 'notes', ['user_id'])

    op.create_table('chat_histories',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('session_id', sa.String(length=64), nullable=False),
        sa.Column('message', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_chat_histories_session_id', 'chat_histories', ['session_id'])


def downgrade() -> None:
    op.drop_index('ix_chat_histories_session_id', table_name='chat_histories')
    op.drop_table('chat_histories')
    op.drop_index('ix_notes_user_id', table_name='notes')
    op.drop_index('ix_notes_notebook_id', table_name='notes')
    op.drop_table('notes')
    op.drop_index('ix_source_tags_tag_id', table_name='source_tags')
    op.drop_table('source_tags')
    op.drop_index('ix_sources_notebook_id', table_name='sources')
    op.drop_table('sources')
    op.drop_index('ix_user_permissions_tag_id', table_name='user_permissions')
    op.drop_index('ix_user_permissions_user_id', table_name='user_permissions')
    op.drop_table('user_permissions')
    op.drop_index('ix_notebook_tags_tag_id', table_name='notebook_tags')
    op.drop_table('notebook_tags')
    op.drop_index('ix_notebooks_owner_user_id', table_name='notebooks')
    op.drop_index('ix_notebooks_title', table_name='notebooks')
    op.drop_table('notebooks')
    op.drop_index('ix_tags_name', table_name='tags')
    op.drop_table('tags')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')

    bind = op.get_bind()
    for enum in (processing_status, source_type, audio_status, generation_status, tag_category, user_role):
        enum.drop(bind, checkfirst=True)
