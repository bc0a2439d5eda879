import logging
from typing import Dict, Iterable, Optional, Tuple

from sqlalchemy import update

from spotjott.errors import ValidationError
from spotjott.media import JOT_MEDIA, MediaUpload
from spotjott.models import Jot, JotComment, JotReaction, ReactionType, User
from spotjott.pagination import Page, Pagination, paginate
from spotjott.services.access import ensure_owner, get_or_404
from spotjott.services.base import BaseService

logger = logging.getLogger(__name__)

JOT_FOLDER = "jots"
MAX_JOT_LENGTH = 1000
MAX_COMMENT_LENGTH = 500


class JotService(BaseService):
    """Short posts with media, one reaction per user, and flat comments."""

    def create(self, caller_id: int, content: Optional[str], media: Optional[MediaUpload] = None) -> Jot:
        if not content or not content.strip():
            raise ValidationError("Content is required")
        if len(content) > MAX_JOT_LENGTH:
            raise ValidationError(f"Content must be less than {MAX_JOT_LENGTH} characters")

        jot = Jot(user_id=caller_id, content=content.strip(), reactions_count=0, comments_count=0)
        uploaded = None
        if media is not None:
            uploaded = self.media.upload(media, JOT_FOLDER, JOT_MEDIA)
            jot.media_url = uploaded.url
            jot.media_public_id = uploaded.public_id
            jot.media_type = media.media_type

        self.session.add(jot)
        try:
            self._commit()
        except Exception:
            if uploaded:
                self._discard_media(uploaded.public_id)
            raise
        return jot

    def feed(self, caller_id: int, pagination: Pagination) -> Tuple[Page, Dict[int, JotReaction]]:
        """Global feed, newest first, with the caller's own reaction per jot."""
        query = self.session.query(Jot).order_by(Jot.created_at.desc(), Jot.id.desc())
        page = paginate(query, pagination)
        return page, self.user_reactions(caller_id, page.items)

    def by_user(self, caller_id: int, user_id: int, pagination: Pagination) -> Tuple[Page, Dict[int, JotReaction]]:
        query = (
            self.session.query(Jot)
            .filter(Jot.user_id == user_id)
            .order_by(Jot.created_at.desc(), Jot.id.desc())
        )
        page = paginate(query, pagination)
        return page, self.user_reactions(caller_id, page.items)

    def user_reactions(self, caller_id: int, jots: Iterable[Jot]) -> Dict[int, JotReaction]:
        jot_ids = [j.id for j in jots]
        if not jot_ids:
            return {}
        reactions = (
            self.session.query(JotReaction)
            .filter(JotReaction.user_id == caller_id, JotReaction.jot_id.in_(jot_ids))
            .all()
        )
        return {r.jot_id: r for r in reactions}

    def get(self, caller_id: int, jot_id: int) -> Tuple[Jot, Optional[JotReaction]]:
        jot = get_or_404(self.session, Jot, jot_id, "Jot not found")
        return jot, self.user_reactions(caller_id, [jot]).get(jot.id)

    def delete(self, caller_id: int, jot_id: int) -> None:
        jot = get_or_404(self.session, Jot, jot_id, "Jot not found")
        ensure_owner(jot.user_id, caller_id, "You can only delete your own jots")
        public_id = jot.media_public_id

        self.session.delete(jot)
        self._commit()
        self._discard_media(public_id)

    def toggle_reaction(self, caller_id: int, jot_id: int, reaction_type: Optional[str] = None) -> Dict:
        """
        Add the caller's reaction, or remove it if one already exists.

        Returns:
            {"reacted": False} after a removal,
            {"reacted": True, "reaction_type": ...} after an insert
        """
        try:
            kind = ReactionType(reaction_type or ReactionType.like.value)
        except ValueError:
            raise ValidationError("Invalid reaction type")

        jot = get_or_404(self.session, Jot, jot_id, "Jot not found")
        existing = (
            self.session.query(JotReaction)
            .filter(JotReaction.jot_id == jot_id, JotReaction.user_id == caller_id)
            .first()
        )

        if existing is not None:
            self.session.delete(existing)
            self.session.execute(
                update(Jot).where(Jot.id == jot_id).values(reactions_count=Jot.reactions_count - 1)
            )
            self._commit()
            return {"reacted": False}

        self.session.add(JotReaction(jot_id=jot_id, user_id=caller_id, reaction_type=kind))
        self._flush("You have already reacted to this jot")
        self.session.execute(
            update(Jot).where(Jot.id == jot_id).values(reactions_count=Jot.reactions_count + 1)
        )
        self._commit("You have already reacted to this jot")

        if self.notifier is not None and jot.user_id != caller_id:
            self.notifier.jot_reaction(self.session.get(User, caller_id), jot)
        return {"reacted": True, "reaction_type": kind}

    def comments(self, jot_id: int, pagination: Pagination) -> Page:
        get_or_404(self.session, Jot, jot_id, "Jot not found")
        query = (
            self.session.query(JotComment)
            .filter(JotComment.jot_id == jot_id)
            .order_by(JotComment.created_at.asc(), JotComment.id.asc())
        )
        return paginate(query, pagination)

    def add_comment(self, caller_id: int, jot_id: int, content: Optional[str]) -> JotComment:
        if not content or not content.strip():
            raise ValidationError("Comment content is required")
        if len(content) > MAX_COMMENT_LENGTH:
            raise ValidationError(f"Comment must be less than {MAX_COMMENT_LENGTH} characters")

        jot = get_or_404(self.session, Jot, jot_id, "Jot not found")
        comment = JotComment(jot_id=jot_id, user_id=caller_id, content=content.strip())
        self.session.add(comment)
        self._flush()
        self.session.execute(
            update(Jot).where(Jot.id == jot_id).values(comments_count=Jot.comments_count + 1)
        )
        self._commit()

        if self.notifier is not None and jot.user_id != caller_id:
            self.notifier.jot_comment(self.session.get(User, caller_id), jot, comment)
        return comment

    def delete_comment(self, caller_id: int, comment_id: int) -> None:
        comment = get_or_404(self.session, JotComment, comment_id, "Comment not found")
        ensure_owner(comment.user_id, caller_id, "You can only delete your own comments")
        jot_id = comment.jot_id

        self.session.delete(comment)
        self.session.execute(
            update(Jot).where(Jot.id == jot_id).values(comments_count=Jot.comments_count - 1)
        )
        self._commit()
