import logging
from dataclasses import dataclass
from typing import List, Optional, Union

from spotjott.errors import ValidationError
from spotjott.media import MediaUpload
from spotjott.models import Diary, DiaryEntry
from spotjott.pagination import Page, Pagination, paginate
from spotjott.schemas import EntryUpdate
from spotjott.services.access import ensure_owner, ensure_visible, get_or_404
from spotjott.services.base import BaseService
from spotjott.services.tags import TagResolver, parse_tag_names

logger = logging.getLogger(__name__)

ENTRY_FOLDER = "diary-entries"


@dataclass
class EntryCreate:
    title: Optional[str] = None
    content: Optional[str] = None
    diary_id: Optional[Union[int, str]] = None
    tags: Optional[Union[List[str], str]] = None


def parse_id(value, message: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(message)


class DiaryEntryService(BaseService):
    """Entries inside a diary, with per-user tags."""

    def __init__(self, session, media=None, notifier=None):
        super().__init__(session, media, notifier)
        self.tags = TagResolver(session)

    def create(self, caller_id: int, data: EntryCreate, cover: Optional[MediaUpload] = None) -> DiaryEntry:
        """
        Create an entry with its tags and optional cover image as one unit.

        Tag input is parsed before anything is written, so a rejected tag list
        leaves no entry, tag or media behind.
        """
        title = (data.title or "").strip()
        content = (data.content or "").strip()
        if not title:
            raise ValidationError("Entry title is required")
        if not content:
            raise ValidationError("Entry content is required")
        if data.diary_id in (None, ""):
            raise ValidationError("Diary ID is required")
        diary_id = parse_id(data.diary_id, "Invalid diary ID")

        diary = get_or_404(self.session, Diary, diary_id, "Diary not found")
        ensure_owner(diary.user_id, caller_id, "You don't have permission to add entries to this diary")
        tag_names = parse_tag_names(data.tags)

        entry = DiaryEntry(diary_id=diary.id, user_id=caller_id, title=title, content=content, favorite=False)
        uploaded = None
        if cover is not None:
            uploaded = self.media.upload(cover, ENTRY_FOLDER)
            entry.cover_image = uploaded.url
            entry.cover_image_public_id = uploaded.public_id

        try:
            self.session.add(entry)
            self.tags.attach(entry, tag_names, caller_id)
            self._commit()
        except Exception:
            self.session.rollback()
            if uploaded:
                self._discard_media(uploaded.public_id)
            raise

        logger.info("Created diary entry %s in diary %s", entry.id, diary.id)
        return entry

    def list_for_diary(self, caller_id: int, diary_id: int, pagination: Pagination) -> Page:
        diary = get_or_404(self.session, Diary, diary_id, "Diary not found")
        ensure_visible(diary, caller_id, "You don't have permission to view these entries")
        query = (
            self.session.query(DiaryEntry)
            .filter(DiaryEntry.diary_id == diary_id)
            .order_by(DiaryEntry.created_at.desc(), DiaryEntry.id.desc())
        )
        return paginate(query, pagination)

    def update(self, caller_id: int, entry_id: int, changes: EntryUpdate) -> DiaryEntry:
        entry = get_or_404(self.session, DiaryEntry, entry_id, "Diary entry not found")
        ensure_owner(entry.user_id, caller_id, "You don't have permission to update this entry")
        sent = changes.model_fields_set

        if "title" in sent:
            title = (changes.title or "").strip()
            if not title:
                raise ValidationError("Entry title cannot be empty")
            entry.title = title
        if "content" in sent:
            content = (changes.content or "").strip()
            if not content:
                raise ValidationError("Entry content cannot be empty")
            entry.content = content
        if "favorite" in sent and changes.favorite is not None:
            entry.favorite = changes.favorite

        if "tags" in sent:
            tag_names = parse_tag_names(changes.tags)
            try:
                self.tags.replace(entry, tag_names, caller_id)
            except Exception:
                self.session.rollback()
                raise

        self._commit()
        return entry

    def delete(self, caller_id: int, entry_id: int) -> None:
        entry = get_or_404(self.session, DiaryEntry, entry_id, "Diary entry not found")
        ensure_owner(entry.user_id, caller_id, "You don't have permission to delete this entry")
        public_id = entry.cover_image_public_id

        self.session.delete(entry)
        self._commit()
        self._discard_media(public_id)
