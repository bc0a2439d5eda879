import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from spotjott.errors import ConflictError
from spotjott.media import MediaStore

logger = logging.getLogger(__name__)


class BaseService:
    """
    Holds the collaborators a domain service works with.

    Each mutating service method is one unit of work: it stages its writes,
    then calls ``_commit``. Any exception before that leaves the session to be
    rolled back by the caller, so child rows and counters land together or
    not at all.
    """

    def __init__(self, session: Session, media: Optional[MediaStore] = None, notifier=None):
        self.session = session
        self.media = media
        self.notifier = notifier

    def _flush(self, conflict_message: str = None) -> None:
        """Flush pending writes, turning unique-constraint violations into ConflictError."""
        try:
            self.session.flush()
        except IntegrityError as e:
            self.session.rollback()
            logger.info("Constraint violation: %s", e.orig)
            raise ConflictError(conflict_message)

    def _commit(self, conflict_message: str = None) -> None:
        self._flush(conflict_message)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            logger.info("Constraint violation on commit: %s", e.orig)
            raise ConflictError(conflict_message)

    def _discard_media(self, public_id: Optional[str]) -> None:
        """Best-effort removal of stored media; failures are only logged."""
        if not public_id or self.media is None:
            return
        if not self.media.delete(public_id):
            logger.warning("Could not delete media %s", public_id)
