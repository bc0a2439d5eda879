from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from spotjott.deps import (
    CurrentUser, get_current_user, get_db, get_json_body, get_media_store, get_pagination, parse_json_body,
    to_media_upload,
)
from spotjott.media import MediaStore
from spotjott.pagination import Pagination
from spotjott.schemas import EntryCreateRequest, EntryOut, EntryUpdate, dump, envelope
from spotjott.services.entries import DiaryEntryService, EntryCreate

router = APIRouter(prefix="/api/diary-entries", tags=["diary-entries"])


@router.post("", status_code=201)
def create_entry(
    title: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    diary_id: Optional[str] = Form(None, alias="diaryId"),
    tags: Optional[List[str]] = Form(None),
    cover_image: Optional[UploadFile] = File(None, alias="coverImage"),
    json_body: Dict[str, Any] = Depends(get_json_body),
    caller: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    media: MediaStore = Depends(get_media_store),
):
    """
    Create an entry from a multipart form or a JSON body.

    ``tags`` is a comma-separated string or a list (repeated form fields) of
    at most 5 names.
    """
    if json_body:
        data = EntryCreate(**parse_json_body(EntryCreateRequest, json_body).model_dump())
    else:
        data = EntryCreate(title=title, content=content, diary_id=diary_id, tags=tags)
    entry = DiaryEntryService(db, media).create(caller.id, data, to_media_upload(cover_image))
    return envelope(dump(EntryOut.model_validate(entry)), "Diary entry created successfully")


@router.get("/diary/{diary_id}")
def list_entries(
    diary_id: int,
    pagination: Pagination = Depends(get_pagination),
    caller: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    page = DiaryEntryService(db).list_for_diary(caller.id, diary_id, pagination)
    return envelope({
        "entries": [dump(EntryOut.model_validate(e)) for e in page.items],
        "hasMore": page.has_more,
        "total": page.total,
        "page": page.pagination.page,
        "limit": page.pagination.limit,
    })


@router.put("/{entry_id}")
def update_entry(
    entry_id: int,
    body: EntryUpdate,
    caller: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    entry = DiaryEntryService(db).update(caller.id, entry_id, body)
    return envelope(dump(EntryOut.model_validate(entry)), "Diary entry updated successfully")


@router.delete("/{entry_id}")
def delete_entry(
    entry_id: int,
    caller: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    media: MediaStore = Depends(get_media_store),
):
    DiaryEntryService(db, media).delete(caller.id, entry_id)
    return envelope(message="Diary entry deleted successfully")
