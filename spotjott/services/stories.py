import logging
from datetime import datetime
from typing import List, Optional, Set, Tuple

from sqlalchemy import update

from spotjott.errors import ConflictError, ValidationError
from spotjott.media import MediaUpload
from spotjott.models import STORY_LIFETIME, Follow, Story, StoryView, utcnow
from spotjott.services.access import ensure_owner, get_or_404
from spotjott.services.base import BaseService

logger = logging.getLogger(__name__)

STORY_FOLDER = "stories"


def is_active(story: Story, now: Optional[datetime] = None) -> bool:
    """A story is visible until its expiry instant; nothing sweeps expired rows."""
    return (now or utcnow()) < story.expires_at


class StoryService(BaseService):
    """Ephemeral media posts visible to followers for 24 hours."""

    def create(self, caller_id: int, media: Optional[MediaUpload], caption: Optional[str] = None) -> Story:
        if media is None:
            raise ValidationError("Media file is required for story")

        uploaded = self.media.upload(media, STORY_FOLDER)
        story = Story(
            user_id=caller_id,
            media_url=uploaded.url,
            media_public_id=uploaded.public_id,
            media_type=media.media_type,
            caption=(caption or "").strip() or None,
            expires_at=utcnow() + STORY_LIFETIME,
            views_count=0,
        )
        self.session.add(story)
        try:
            self._commit()
        except Exception:
            self._discard_media(uploaded.public_id)
            raise

        logger.info("Story created: %s by user: %s", story.id, caller_id)
        return story

    def active(self, caller_id: int) -> Tuple[List[Story], Set[int]]:
        """
        Unexpired stories from followed users, newest first.

        Returns:
            (stories, ids of the stories the caller has already viewed)
        """
        followed = self.session.query(Follow.following_id).filter(Follow.follower_id == caller_id)
        stories = (
            self.session.query(Story)
            .filter(Story.user_id.in_(followed), Story.expires_at > utcnow())
            .order_by(Story.created_at.desc(), Story.id.desc())
            .all()
        )
        if not stories:
            return [], set()

        viewed = (
            self.session.query(StoryView.story_id)
            .filter(StoryView.viewer_id == caller_id, StoryView.story_id.in_([s.id for s in stories]))
            .all()
        )
        return stories, {story_id for (story_id,) in viewed}

    def view(self, caller_id: int, story_id: int) -> bool:
        """Record the caller's first view. Returns False when it was already recorded."""
        story = get_or_404(self.session, Story, story_id, "Story not found")
        if not is_active(story):
            raise ValidationError("This story has expired")

        existing = (
            self.session.query(StoryView.id)
            .filter(StoryView.story_id == story_id, StoryView.viewer_id == caller_id)
            .first()
        )
        if existing:
            return False

        self.session.add(StoryView(story_id=story_id, viewer_id=caller_id))
        try:
            self._flush()
        except ConflictError:
            return False
        self.session.execute(
            update(Story).where(Story.id == story_id).values(views_count=Story.views_count + 1)
        )
        self._commit()

        logger.info("Story viewed: %s by user: %s", story_id, caller_id)
        return True

    def views(self, caller_id: int, story_id: int) -> List[StoryView]:
        story = get_or_404(self.session, Story, story_id, "Story not found")
        ensure_owner(story.user_id, caller_id, "You can only view your own story's viewers")
        return (
            self.session.query(StoryView)
            .filter(StoryView.story_id == story_id)
            .order_by(StoryView.created_at.desc(), StoryView.id.desc())
            .all()
        )

    def delete(self, caller_id: int, story_id: int) -> None:
        story = get_or_404(self.session, Story, story_id, "Story not found")
        ensure_owner(story.user_id, caller_id, "You can only delete your own stories")
        public_id = story.media_public_id

        self.session.delete(story)
        self._commit()
        self._discard_media(public_id)
        logger.info("Story deleted: %s", story_id)
