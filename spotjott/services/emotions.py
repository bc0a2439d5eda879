import logging
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from spotjott.errors import ConflictError, ValidationError
from spotjott.models import Emotion, EmotionTracker, utcnow
from spotjott.schemas import EmotionUpdate
from spotjott.services.access import get_or_404
from spotjott.services.base import BaseService

logger = logging.getLogger(__name__)

DEFAULT_EMOTIONS = [
    ("happy", "Happy"),
    ("sad", "Sad"),
    ("angry", "Angry"),
    ("anxious", "Anxious"),
    ("calm", "Calm"),
    ("excited", "Excited"),
    ("grateful", "Grateful"),
    ("tired", "Tired"),
]


def parse_day(value) -> Optional[date]:
    """Parse an ISO date or datetime string to its calendar day. Returns None when unparsable."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


class EmotionService(BaseService):
    """The shared emotion catalog and each user's one-per-day tracker."""

    def catalog(self) -> List[Emotion]:
        return self.session.query(Emotion).order_by(Emotion.emotion_name.asc(), Emotion.id.asc()).all()

    def create(self, slug: Optional[str], name: Optional[str]) -> Emotion:
        slug = (slug or "").strip().lower()
        name = (name or "").strip()
        if not slug:
            raise ValidationError("Emotion slug is required")
        if not name:
            raise ValidationError("Emotion name is required")
        if self.session.query(Emotion.id).filter(Emotion.emotion_slug == slug).first():
            raise ConflictError("Emotion with this slug already exists")

        emotion = Emotion(emotion_slug=slug, emotion_name=name)
        self.session.add(emotion)
        self._commit("Emotion with this slug already exists")
        logger.info("Emotion created: %s - %s", emotion.id, slug)
        return emotion

    def update(self, emotion_id: int, changes: EmotionUpdate) -> Emotion:
        emotion = get_or_404(self.session, Emotion, emotion_id, "Emotion not found")

        slug = (changes.emotion_slug or "").strip().lower()
        if slug and slug != emotion.emotion_slug:
            conflict = self.session.query(Emotion.id).filter(Emotion.emotion_slug == slug).first()
            if conflict:
                raise ConflictError("Emotion with this slug already exists")
            emotion.emotion_slug = slug

        name = (changes.emotion_name or "").strip()
        if name:
            emotion.emotion_name = name

        self._commit("Emotion with this slug already exists")
        logger.info("Emotion updated: %s - %s", emotion_id, emotion.emotion_slug)
        return emotion

    def delete(self, emotion_id: int) -> None:
        emotion = get_or_404(self.session, Emotion, emotion_id, "Emotion not found")
        usage = (
            self.session.query(func.count(EmotionTracker.id))
            .filter(EmotionTracker.emotion_id == emotion_id)
            .scalar()
        )
        if usage > 0:
            raise ConflictError(f"Cannot delete emotion. It is being used in {usage} tracking record(s)")

        self.session.delete(emotion)
        self._commit()
        logger.info("Emotion deleted: %s", emotion_id)

    def track(self, caller_id: int, emotion_id, day=None) -> EmotionTracker:
        """
        Record the caller's emotion for a calendar day.

        A second call for the same day replaces the emotion on the existing
        tracker instead of adding a row.

        Args:
            caller_id: the tracking user
            emotion_id: catalog id, as int or numeric string
            day: ISO date/datetime; defaults to today (UTC)
        """
        if emotion_id in (None, ""):
            raise ValidationError("Emotion ID is required")
        try:
            emotion_id = int(emotion_id)
        except (TypeError, ValueError):
            raise ValidationError("Invalid emotion ID")
        get_or_404(self.session, Emotion, emotion_id, "Emotion not found")

        if day:
            tracking_day = parse_day(day)
            if tracking_day is None:
                raise ValidationError("Invalid date format")
        else:
            tracking_day = utcnow().date()

        tracker = (
            self.session.query(EmotionTracker)
            .filter(EmotionTracker.user_id == caller_id, EmotionTracker.date == tracking_day)
            .first()
        )
        if tracker is not None:
            tracker.emotion_id = emotion_id
            self._commit()
            logger.info("Emotion updated: %s for user: %s", tracker.id, caller_id)
        else:
            tracker = EmotionTracker(user_id=caller_id, emotion_id=emotion_id, date=tracking_day)
            self.session.add(tracker)
            self._commit("Emotion already tracked for this date")
            logger.info("Emotion tracked: %s for user: %s", tracker.id, caller_id)
        return tracker

    def history(self, caller_id: int, start=None, end=None) -> List[EmotionTracker]:
        """Trackers in the inclusive day range, newest first. Unparsable bounds are ignored."""
        query = self.session.query(EmotionTracker).filter(EmotionTracker.user_id == caller_id)
        start_day = parse_day(start) if start else None
        end_day = parse_day(end) if end else None
        if start_day:
            query = query.filter(EmotionTracker.date >= start_day)
        if end_day:
            query = query.filter(EmotionTracker.date <= end_day)
        return query.order_by(EmotionTracker.date.desc(), EmotionTracker.id.desc()).all()


def seed_default_emotions(session: Session) -> int:
    """Insert any missing default emotions. Returns how many were added."""
    existing = {slug for (slug,) in session.query(Emotion.emotion_slug).all()}
    added = 0
    for slug, name in DEFAULT_EMOTIONS:
        if slug not in existing:
            session.add(Emotion(emotion_slug=slug, emotion_name=name))
            added += 1
    session.commit()
    return added
