"""
Notification side effects and the recipient-facing notification inbox.

``Notifier`` writes a notification after the triggering action has already
committed, in its own commit. A failure there is logged and dropped so it
never changes the outcome of the action that caused it.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy import func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from spotjott.errors import ValidationError
from spotjott.models import FCMToken, Jot, JotComment, Notification, NotificationType, User, utcnow
from spotjott.pagination import Page, Pagination, paginate
from spotjott.services.access import ensure_owner, get_or_404
from spotjott.services.base import BaseService

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 50


def preview(text: str, length: int = PREVIEW_LENGTH) -> str:
    """Truncate text to ``length`` characters, marking the cut with '...'."""
    if len(text) <= length:
        return text
    return text[:length] + "..."


def full_name(user: User) -> str:
    return f"{user.first_name} {user.last_name}"


class Notifier:
    """Creates notifications for follow, reaction and comment events."""

    def __init__(self, session: Session):
        self.session = session

    def _create(
        self,
        recipient_id: int,
        sender: User,
        kind: NotificationType,
        title: str,
        body: str,
        data: Dict[str, Any],
        link: str,
    ) -> Optional[Notification]:
        if recipient_id == sender.id:
            return None
        notification = Notification(
            user_id=recipient_id,
            sender_id=sender.id,
            type=kind,
            title=title,
            body=body,
            data=data,
            image_url=sender.profile_picture,
            link=link,
        )
        try:
            self.session.add(notification)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("Failed to create %s notification for user %s: %s", kind.value, recipient_id, e)
            return None
        return notification

    def follow(self, sender: User, recipient_id: int) -> Optional[Notification]:
        return self._create(
            recipient_id,
            sender,
            NotificationType.follow,
            "New Follower",
            f"{full_name(sender)} started following you",
            {"followerId": sender.id},
            f"/profile/{sender.id}",
        )

    def jot_reaction(self, sender: User, jot: Jot) -> Optional[Notification]:
        return self._create(
            jot.user_id,
            sender,
            NotificationType.jot_reaction,
            "New reaction on your jot",
            f"{full_name(sender)} reacted to your jot",
            {"jotId": jot.id},
            f"/jot/{jot.id}",
        )

    def jot_comment(self, sender: User, jot: Jot, comment: JotComment) -> Optional[Notification]:
        return self._create(
            jot.user_id,
            sender,
            NotificationType.jot_comment,
            "New comment on your jot",
            f"{full_name(sender)} commented: {preview(comment.content)}",
            {"jotId": jot.id, "commentId": comment.id},
            f"/jot/{jot.id}",
        )


class NotificationService(BaseService):
    """Inbox operations for the notification recipient."""

    def list(self, caller_id: int, pagination: Pagination, unread_only: bool = False) -> Page:
        query = self.session.query(Notification).filter(Notification.user_id == caller_id)
        if unread_only:
            query = query.filter(Notification.is_read.is_(False))
        query = query.order_by(Notification.created_at.desc(), Notification.id.desc())
        return paginate(query, pagination)

    def unread_count(self, caller_id: int) -> int:
        return (
            self.session.query(func.count(Notification.id))
            .filter(Notification.user_id == caller_id, Notification.is_read.is_(False))
            .scalar()
        )

    def mark_read(self, caller_id: int, notification_id: int) -> Notification:
        notification = get_or_404(self.session, Notification, notification_id, "Notification not found")
        ensure_owner(notification.user_id, caller_id, "You can only update your own notifications")
        notification.is_read = True
        self._commit()
        return notification

    def mark_all_read(self, caller_id: int) -> int:
        result = self.session.execute(
            update(Notification)
            .where(Notification.user_id == caller_id, Notification.is_read.is_(False))
            .values(is_read=True)
        )
        self._commit()
        return result.rowcount

    def register_token(self, caller_id: int, token: str, device_type, device_id: Optional[str] = None) -> FCMToken:
        """Register a device token, moving it to the caller if another account held it."""
        token = (token or "").strip()
        if not token:
            raise ValidationError("FCM token is required")
        if len(token) > 500:
            raise ValidationError("FCM token is too long")

        record = self.session.query(FCMToken).filter(FCMToken.token == token).first()
        if record is None:
            record = FCMToken(token=token, user_id=caller_id)
            self.session.add(record)
        record.user_id = caller_id
        record.device_type = device_type
        record.device_id = device_id
        record.is_active = True
        record.last_used = utcnow()
        self._commit("FCM token already registered")
        logger.info("FCM token registered for user: %s", caller_id)
        return record

    def unregister_token(self, caller_id: int, token: str) -> bool:
        record = (
            self.session.query(FCMToken)
            .filter(FCMToken.token == (token or "").strip(), FCMToken.user_id == caller_id)
            .first()
        )
        if record is None:
            return False
        record.is_active = False
        self._commit()
        return True
