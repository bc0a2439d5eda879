from typing import List, Optional

from spotjott.errors import ValidationError
from spotjott.models import Diary
from spotjott.schemas import DiaryUpdate
from spotjott.services.access import ensure_owner, ensure_visible, get_or_404
from spotjott.services.base import BaseService


class DiaryService(BaseService):

    def create(self, caller_id: int, name: Optional[str], description: Optional[str] = None,
               is_public: bool = False) -> Diary:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Diary name is required")
        diary = Diary(
            user_id=caller_id,
            name=name,
            description=(description or "").strip() or None,
            is_public=bool(is_public),
        )
        self.session.add(diary)
        self._commit()
        return diary

    def mine(self, caller_id: int) -> List[Diary]:
        return (
            self.session.query(Diary)
            .filter(Diary.user_id == caller_id)
            .order_by(Diary.updated_at.desc(), Diary.id.desc())
            .all()
        )

    def public(self) -> List[Diary]:
        return (
            self.session.query(Diary)
            .filter(Diary.is_public.is_(True))
            .order_by(Diary.updated_at.desc(), Diary.id.desc())
            .all()
        )

    def get(self, caller_id: int, diary_id: int) -> Diary:
        diary = get_or_404(self.session, Diary, diary_id, "Diary not found")
        ensure_visible(diary, caller_id, "You don't have permission to view this diary")
        return diary

    def update(self, caller_id: int, diary_id: int, changes: DiaryUpdate) -> Diary:
        diary = get_or_404(self.session, Diary, diary_id, "Diary not found")
        ensure_owner(diary.user_id, caller_id, "You don't have permission to update this diary")
        sent = changes.model_fields_set

        if "name" in sent:
            name = (changes.name or "").strip()
            if not name:
                raise ValidationError("Diary name cannot be empty")
            diary.name = name
        if "description" in sent:
            diary.description = (changes.description or "").strip() or None
        if "is_public" in sent and changes.is_public is not None:
            diary.is_public = changes.is_public

        self._commit()
        return diary

    def delete(self, caller_id: int, diary_id: int) -> None:
        """Delete a diary; its entries and their tag links go with it."""
        diary = get_or_404(self.session, Diary, diary_id, "Diary not found")
        ensure_owner(diary.user_id, caller_id, "You don't have permission to delete this diary")
        covers = [e.cover_image_public_id for e in diary.entries if e.cover_image_public_id]
        self.session.delete(diary)
        self._commit()
        for public_id in covers:
            self._discard_media(public_id)
