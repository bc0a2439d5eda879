from datetime import datetime, timedelta, timezone
from enum import Enum as PyEnum

from sqlalchemy import (
    JSON, Boolean, CheckConstraint, Column, Date, DateTime, Enum, ForeignKey, Index, Integer, String, Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()

STORY_LIFETIME = timedelta(hours=24)


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class MediaType(str, PyEnum):
    image = "image"
    video = "video"


class ReactionType(str, PyEnum):
    like = "like"
    love = "love"
    insightful = "insightful"
    celebrate = "celebrate"


class NotificationType(str, PyEnum):
    jot_reaction = "jot_reaction"
    jot_comment = "jot_comment"
    entry_reaction = "entry_reaction"
    entry_comment = "entry_comment"
    follow = "follow"
    mention = "mention"
    system = "system"


class DeviceType(str, PyEnum):
    web = "web"
    android = "android"
    ios = "ios"


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)
    profile_picture = Column(Text, nullable=True)
    profile_picture_public_id = Column(Text, nullable=True)
    bio = Column(Text, nullable=True)
    tags = Column(JSON, nullable=True)
    followers_count = Column(Integer, nullable=False, default=0)
    following_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    jots = relationship("Jot", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    diaries = relationship("Diary", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    stories = relationship("Story", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)


class Follow(Base):
    __tablename__ = "follows"
    id = Column(Integer, primary_key=True)
    follower_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    following_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    follower = relationship("User", foreign_keys=[follower_id])
    following = relationship("User", foreign_keys=[following_id])

    __table_args__ = (
        UniqueConstraint("follower_id", "following_id", name="uq_follows_pair"),
        CheckConstraint("follower_id <> following_id", name="ck_follows_not_self"),
    )


class Jot(Base):
    __tablename__ = "jots"
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    media_url = Column(Text, nullable=True)
    media_public_id = Column(Text, nullable=True)
    media_type = Column(Enum(MediaType, name="media_type"), nullable=True)
    reactions_count = Column(Integer, nullable=False, default=0)
    comments_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="jots")
    comments = relationship("JotComment", back_populates="jot", cascade="all, delete-orphan", passive_deletes=True)
    reactions = relationship("JotReaction", back_populates="jot", cascade="all, delete-orphan", passive_deletes=True)

Index("idx_jots_created", Jot.created_at.desc())


class JotComment(Base):
    __tablename__ = "jot_comments"
    id = Column(Integer, primary_key=True)
    jot_id = Column(Integer, ForeignKey("jots.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    jot = relationship("Jot", back_populates="comments")
    user = relationship("User")


class JotReaction(Base):
    __tablename__ = "jot_reactions"
    id = Column(Integer, primary_key=True)
    jot_id = Column(Integer, ForeignKey("jots.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    reaction_type = Column(Enum(ReactionType, name="reaction_type"), nullable=False, default=ReactionType.like)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    jot = relationship("Jot", back_populates="reactions")

    __table_args__ = (UniqueConstraint("jot_id", "user_id", name="uq_jot_reactions_jot_user"),)


class Story(Base):
    __tablename__ = "stories"
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    media_url = Column(Text, nullable=False)
    media_public_id = Column(Text, nullable=True)
    media_type = Column(Enum(MediaType, name="media_type"), nullable=False, default=MediaType.image)
    caption = Column(Text, nullable=True)
    views_count = Column(Integer, nullable=False, default=0)
    expires_at = Column(DateTime, nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", back_populates="stories")
    views = relationship("StoryView", back_populates="story", cascade="all, delete-orphan", passive_deletes=True)


class StoryView(Base):
    __tablename__ = "story_views"
    id = Column(Integer, primary_key=True)
    story_id = Column(Integer, ForeignKey("stories.id", ondelete="CASCADE"), nullable=False, index=True)
    viewer_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    story = relationship("Story", back_populates="views")
    viewer = relationship("User")

    __table_args__ = (UniqueConstraint("story_id", "viewer_id", name="uq_story_views_story_viewer"),)


class Diary(Base):
    __tablename__ = "diaries"
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    is_public = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="diaries")
    entries = relationship("DiaryEntry", back_populates="diary", cascade="all, delete-orphan", passive_deletes=True)


class DiaryEntry(Base):
    __tablename__ = "diary_entries"
    id = Column(Integer, primary_key=True)
    diary_id = Column(Integer, ForeignKey("diaries.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(300), nullable=False)
    content = Column(Text, nullable=False)
    cover_image = Column(Text, nullable=True)
    cover_image_public_id = Column(Text, nullable=True)
    favorite = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    diary = relationship("Diary", back_populates="entries")
    tag_links = relationship(
        "DiaryEntryTag", back_populates="entry", cascade="all, delete-orphan", passive_deletes=True,
        order_by="DiaryEntryTag.id",
    )

    @property
    def tags(self):
        return [link.tag for link in self.tag_links]


class Tag(Base):
    __tablename__ = "tags"
    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (UniqueConstraint("name", "user_id", name="uq_tags_name_user"),)


class DiaryEntryTag(Base):
    __tablename__ = "diary_entry_tags"
    id = Column(Integer, primary_key=True)
    diary_entry_id = Column(Integer, ForeignKey("diary_entries.id", ondelete="CASCADE"), nullable=False)
    tag_id = Column(Integer, ForeignKey("tags.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    entry = relationship("DiaryEntry", back_populates="tag_links")
    tag = relationship("Tag")

    __table_args__ = (UniqueConstraint("diary_entry_id", "tag_id", name="uq_diary_entry_tags_entry_tag"),)


class Emotion(Base):
    __tablename__ = "emotions"
    id = Column(Integer, primary_key=True)
    emotion_slug = Column(String(64), unique=True, nullable=False, index=True)
    emotion_name = Column(String(100), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class EmotionTracker(Base):
    __tablename__ = "emotion_trackers"
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    emotion_id = Column(Integer, ForeignKey("emotions.id", ondelete="RESTRICT"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    emotion = relationship("Emotion")

    __table_args__ = (UniqueConstraint("user_id", "date", name="uq_emotion_trackers_user_day"),)


class Notification(Base):
    __tablename__ = "notifications"
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    sender_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    type = Column(Enum(NotificationType, name="notification_type"), nullable=False)
    title = Column(String(200), nullable=False)
    body = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    data = Column(JSON, nullable=True)
    image_url = Column(Text, nullable=True)
    link = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    sender = relationship("User", foreign_keys=[sender_id])

Index("idx_notifications_user_read", Notification.user_id, Notification.is_read)
Index("idx_notifications_user_created", Notification.user_id, Notification.created_at)


class FCMToken(Base):
    __tablename__ = "fcm_tokens"
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    token = Column(String(500), unique=True, nullable=False)
    device_type = Column(Enum(DeviceType, name="device_type"), nullable=False, default=DeviceType.web)
    device_id = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    last_used = Column(DateTime, default=utcnow, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

Index("idx_fcm_tokens_user_active", FCMToken.user_id, FCMToken.is_active)
