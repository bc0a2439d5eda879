"""initial schema

Revision ID: 3c1e7a9d2b40
Revises:
Create Date: 2026-10-18 09:12:41.208113

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3c1e7a9d2b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

media_type = postgresql.ENUM('image', 'video', name='media_type', create_type=False)
reaction_type = postgresql.ENUM('like', 'love', 'insightful', 'celebrate', name='reaction_type', create_type=False)
notification_type = postgresql.ENUM(
    'jot_reaction', 'jot_comment', 'entry_reaction', 'entry_comment', 'follow', 'mention', 'system',
    name='notification_type', create_type=False,
)
device_type = postgresql.ENUM('web', 'android', 'ios', name='device_type', create_type=False)


def _timestamps(updated: bool = True):
    cols = [sa.Column('created_at', sa.DateTime(), nullable=False)]
    if updated:
        cols.append(sa.Column('updated_at', sa.DateTime(), nullable=False))
    return cols


def upgrade() -> None:
    """Upgrade schema."""
    bind = op.get_bind()
    for enum in (media_type, reaction_type, notification_type, device_type):
        enum.create(bind, checkfirst=True)

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password', sa.String(255), nullable=False),
        sa.Column('profile_picture', sa.Text(), nullable=True),
        sa.Column('profile_picture_public_id', sa.Text(), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=True),
        sa.Column('followers_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('following_count', sa.Integer(), nullable=False, server_default='0'),
        *_timestamps(),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'follows',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('follower_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('following_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        *_timestamps(updated=False),
        sa.UniqueConstraint('follower_id', 'following_id', name='uq_follows_pair'),
        sa.CheckConstraint('follower_id <> following_id', name='ck_follows_not_self'),
    )
    op.create_index('ix_follows_follower_id', 'follows', ['follower_id'])
    op.create_index('ix_follows_following_id', 'follows', ['following_id'])

    op.create_table(
        'jots',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('media_url', sa.Text(), nullable=True),
        sa.Column('media_public_id', sa.Text(), nullable=True),
        sa.Column('media_type', media_type, nullable=True),
        sa.Column('reactions_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('comments_count', sa.Integer(), nullable=False, server_default='0'),
        *_timestamps(),
    )
    op.create_index('ix_jots_user_id', 'jots', ['user_id'])
    op.create_index('idx_jots_created', 'jots', [sa.text('created_at DESC')])

    op.create_table(
        'jot_comments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('jot_id', sa.Integer(), sa.ForeignKey('jots.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_jot_comments_jot_id', 'jot_comments', ['jot_id'])
    op.create_index('ix_jot_comments_user_id', 'jot_comments', ['user_id'])

    op.create_table(
        'jot_reactions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('jot_id', sa.Integer(), sa.ForeignKey('jots.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('reaction_type', reaction_type, nullable=False, server_default='like'),
        *_timestamps(updated=False),
        sa.UniqueConstraint('jot_id', 'user_id', name='uq_jot_reactions_jot_user'),
    )
    op.create_index('ix_jot_reactions_user_id', 'jot_reactions', ['user_id'])

    op.create_table(
        'stories',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('media_url', sa.Text(), nullable=False),
        sa.Column('media_public_id', sa.Text(), nullable=True),
        sa.Column('media_type', media_type, nullable=False, server_default='image'),
        sa.Column('caption', sa.Text(), nullable=True),
        sa.Column('views_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        *_timestamps(updated=False),
    )
    op.create_index('ix_stories_user_id', 'stories', ['user_id'])
    op.create_index('ix_stories_expires_at', 'stories', ['expires_at'])

    op.create_table(
        'story_views',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('story_id', sa.Integer(), sa.ForeignKey('stories.id', ondelete='CASCADE'), nullable=False),
        sa.Column('viewer_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        *_timestamps(updated=False),
        sa.UniqueConstraint('story_id', 'viewer_id', name='uq_story_views_story_viewer'),
    )
    op.create_index('ix_story_views_story_id', 'story_views', ['story_id'])
    op.create_index('ix_story_views_viewer_id', 'story_views', ['viewer_id'])

    op.create_table(
        'diaries',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_public', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index('ix_diaries_user_id', 'diaries', ['user_id'])

    op.create_table(
        'diary_entries',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('diary_id', sa.Integer(), sa.ForeignKey('diaries.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(300), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('cover_image', sa.Text(), nullable=True),
        sa.Column('cover_image_public_id', sa.Text(), nullable=True),
        sa.Column('favorite', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index('ix_diary_entries_diary_id', 'diary_entries', ['diary_id'])
    op.create_index('ix_diary_entries_user_id', 'diary_entries', ['user_id'])

    op.create_table(
        'tags',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        *_timestamps(updated=False),
        sa.UniqueConstraint('name', 'user_id', name='uq_tags_name_user'),
    )
    op.create_index('ix_tags_user_id', 'tags', ['user_id'])

    op.create_table(
        'diary_entry_tags',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('diary_entry_id', sa.Integer(), sa.ForeignKey('diary_entries.id', ondelete='CASCADE'),
                  nullable=False),
        sa.Column('tag_id', sa.Integer(), sa.ForeignKey('tags.id', ondelete='CASCADE'), nullable=False),
        *_timestamps(updated=False),
        sa.UniqueConstraint('diary_entry_id', 'tag_id', name='uq_diary_entry_tags_entry_tag'),
    )
    op.create_index('ix_diary_entry_tags_tag_id', 'diary_entry_tags', ['tag_id'])

    op.create_table(
        'emotions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('emotion_slug', sa.String(64), nullable=False),
        sa.Column('emotion_name', sa.String(100), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_emotions_emotion_slug', 'emotions', ['emotion_slug'], unique=True)

    op.create_table(
        'emotion_trackers',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('emotion_id', sa.Integer(), sa.ForeignKey('emotions.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'date', name='uq_emotion_trackers_user_day'),
    )
    op.create_index('ix_emotion_trackers_user_id', 'emotion_trackers', ['user_id'])
    op.create_index('ix_emotion_trackers_emotion_id', 'emotion_trackers', ['emotion_id'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('sender_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('type', notification_type, nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('data', sa.JSON(), nullable=True),
        sa.Column('image_url', sa.Text(), nullable=True),
        sa.Column('link', sa.Text(), nullable=True),
        *_timestamps(updated=False),
    )
    op.create_index('idx_notifications_user_read', 'notifications', ['user_id', 'is_read'])
    op.create_index('idx_notifications_user_created', 'notifications', ['user_id', 'created_at'])

    op.create_table(
        'fcm_tokens',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('token', sa.String(500), nullable=False, unique=True),
        sa.Column('device_type', device_type, nullable=False, server_default='web'),
        sa.Column('device_id', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('last_used', sa.DateTime(), nullable=False),
        *_timestamps(updated=False),
    )
    op.create_index('idx_fcm_tokens_user_active', 'fcm_tokens', ['user_id', 'is_active'])


def downgrade() -> None:
    """Downgrade schema."""
    for table in (
        'fcm_tokens', 'notifications', 'emotion_trackers', 'emotions', 'diary_entry_tags', 'tags',
        'diary_entries', 'diaries', 'story_views', 'stories', 'jot_reactions', 'jot_comments', 'jots',
        'follows', 'users',
    ):
        op.drop_table(table)

    bind = op.get_bind()
    for enum in (device_type, notification_type, reaction_type, media_type):
        enum.drop(bind, checkfirst=True)
