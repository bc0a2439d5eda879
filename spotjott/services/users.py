import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import func, or_, update

from spotjott.errors import ConflictError, ValidationError
from spotjott.media import PROFILE_PICTURE, MediaUpload
from spotjott.models import Diary, DiaryEntry, Follow, Jot, JotComment, JotReaction, Story, StoryView, User
from spotjott.schemas import UserUpdate
from spotjott.services.access import ensure_not_self, get_or_404
from spotjott.services.auth import PROFILE_FOLDER, normalize_email
from spotjott.services.base import BaseService
from spotjott.validators import split_csv, validate_email

logger = logging.getLogger(__name__)

SEARCH_MIN_LENGTH = 2
SEARCH_LIMIT = 20


@dataclass
class PublicProfile:
    user: User
    is_following: bool
    jots_count: int
    open_diaries_count: int


class UserService(BaseService):
    """Profiles, account lifecycle and the follow graph."""

    def get_me(self, caller_id: int) -> User:
        return get_or_404(self.session, User, caller_id, "User not found")

    def list_all(self) -> List[User]:
        return self.session.query(User).order_by(User.created_at.desc(), User.id.desc()).all()

    def public_profile(self, user_id: int, viewer_id: Optional[int] = None) -> PublicProfile:
        user = get_or_404(self.session, User, user_id, "User not found")

        is_following = False
        if viewer_id is not None and viewer_id != user_id:
            is_following = (
                self.session.query(Follow.id)
                .filter(Follow.follower_id == viewer_id, Follow.following_id == user_id)
                .first()
                is not None
            )

        jots_count = self.session.query(func.count(Jot.id)).filter(Jot.user_id == user_id).scalar()
        open_diaries_count = (
            self.session.query(func.count(Diary.id))
            .filter(Diary.user_id == user_id, Diary.is_public.is_(True))
            .scalar()
        )
        return PublicProfile(user, is_following, jots_count, open_diaries_count)

    def update_me(self, caller_id: int, changes: UserUpdate) -> User:
        """Apply only the fields the client sent."""
        user = self.get_me(caller_id)
        sent = changes.model_fields_set

        for field in ("first_name", "last_name"):
            if field in sent:
                value = (getattr(changes, field) or "").strip()
                if not value:
                    raise ValidationError("First name and last name cannot be empty")
                setattr(user, field, value)

        if "email" in sent:
            email = normalize_email(changes.email)
            ok, msg = validate_email(email)
            if not ok:
                raise ValidationError(msg)
            taken = self.session.query(User.id).filter(User.email == email, User.id != caller_id).first()
            if taken:
                raise ConflictError("Email already exists, use a different email address")
            user.email = email

        if "bio" in sent:
            user.bio = (changes.bio or "").strip() or None

        if "user_tags" in sent:
            user.tags = [t for t in split_csv(changes.user_tags) if t]

        self._commit("Email already exists, use a different email address")
        return user

    def update_profile_picture(self, caller_id: int, picture: Optional[MediaUpload]) -> User:
        if picture is None:
            raise ValidationError("No profile picture provided")
        user = self.get_me(caller_id)
        previous = user.profile_picture_public_id

        uploaded = self.media.upload(picture, PROFILE_FOLDER, PROFILE_PICTURE)
        user.profile_picture = uploaded.url
        user.profile_picture_public_id = uploaded.public_id
        try:
            self._commit()
        except Exception:
            self._discard_media(uploaded.public_id)
            raise

        self._discard_media(previous)
        return user

    def delete_me(self, caller_id: int) -> None:
        """
        Delete the caller's account.

        Rows on other users' content are removed by the cascade, so the
        counters they fed are decremented first in the same unit.
        """
        user = self.get_me(caller_id)
        picture = user.profile_picture_public_id
        media_ids = [j.media_public_id for j in user.jots] + [s.media_public_id for s in user.stories]
        media_ids += [
            row.cover_image_public_id
            for row in self.session.query(DiaryEntry.cover_image_public_id).filter(DiaryEntry.user_id == caller_id)
        ]

        self._decrement_grouped(
            User, User.followers_count, Follow.following_id, Follow.follower_id == caller_id
        )
        self._decrement_grouped(
            User, User.following_count, Follow.follower_id, Follow.following_id == caller_id
        )
        self._decrement_grouped(Jot, Jot.reactions_count, JotReaction.jot_id, JotReaction.user_id == caller_id)
        self._decrement_grouped(Jot, Jot.comments_count, JotComment.jot_id, JotComment.user_id == caller_id)
        self._decrement_grouped(Story, Story.views_count, StoryView.story_id, StoryView.viewer_id == caller_id)

        self.session.delete(user)
        self._commit()
        logger.info("Deleted user %s", caller_id)

        self._discard_media(picture)
        for public_id in media_ids:
            self._discard_media(public_id)

    def _decrement_grouped(self, model, counter, key_column, condition) -> None:
        rows = self.session.query(key_column, func.count()).filter(condition).group_by(key_column).all()
        for target_id, n in rows:
            self.session.execute(
                update(model).where(model.id == target_id).values({counter.key: counter - n})
            )

    def search(self, query: Optional[str]) -> List[User]:
        term = (query or "").strip()
        if len(term) < SEARCH_MIN_LENGTH:
            raise ValidationError(f"Search query must be at least {SEARCH_MIN_LENGTH} characters")
        pattern = f"%{term}%"
        return (
            self.session.query(User)
            .filter(or_(User.first_name.ilike(pattern), User.last_name.ilike(pattern)))
            .order_by(User.first_name, User.last_name)
            .limit(SEARCH_LIMIT)
            .all()
        )

    def follow(self, caller_id: int, target_id: int) -> Follow:
        ensure_not_self(target_id, caller_id, "You cannot follow yourself")
        get_or_404(self.session, User, target_id, "User not found")

        existing = (
            self.session.query(Follow.id)
            .filter(Follow.follower_id == caller_id, Follow.following_id == target_id)
            .first()
        )
        if existing:
            raise ValidationError("Already following this user")

        follow = Follow(follower_id=caller_id, following_id=target_id)
        self.session.add(follow)
        self._flush("Already following this user")
        self.session.execute(
            update(User).where(User.id == caller_id).values(following_count=User.following_count + 1)
        )
        self.session.execute(
            update(User).where(User.id == target_id).values(followers_count=User.followers_count + 1)
        )
        self._commit("Already following this user")

        if self.notifier is not None:
            self.notifier.follow(self.get_me(caller_id), target_id)
        return follow

    def unfollow(self, caller_id: int, target_id: int) -> None:
        ensure_not_self(target_id, caller_id, "You cannot unfollow yourself")

        follow = (
            self.session.query(Follow)
            .filter(Follow.follower_id == caller_id, Follow.following_id == target_id)
            .first()
        )
        if follow is None:
            raise ValidationError("You are not following this user")

        self.session.delete(follow)
        self.session.execute(
            update(User).where(User.id == caller_id).values(following_count=User.following_count - 1)
        )
        self.session.execute(
            update(User).where(User.id == target_id).values(followers_count=User.followers_count - 1)
        )
        self._commit()

    def followers(self, user_id: int) -> List[User]:
        get_or_404(self.session, User, user_id, "User not found")
        return (
            self.session.query(User)
            .join(Follow, Follow.follower_id == User.id)
            .filter(Follow.following_id == user_id)
            .order_by(Follow.created_at.desc(), Follow.id.desc())
            .all()
        )

    def following(self, user_id: int) -> List[User]:
        get_or_404(self.session, User, user_id, "User not found")
        return (
            self.session.query(User)
            .join(Follow, Follow.following_id == User.id)
            .filter(Follow.follower_id == user_id)
            .order_by(Follow.created_at.desc(), Follow.id.desc())
            .all()
        )
