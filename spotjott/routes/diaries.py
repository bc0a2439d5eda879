from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from spotjott.deps import CurrentUser, get_current_user, get_db, get_media_store
from spotjott.media import MediaStore
from spotjott.schemas import DiaryCreate, DiaryOut, DiaryUpdate, DiaryWithOwnerOut, dump, envelope
from spotjott.services.diaries import DiaryService

router = APIRouter(prefix="/api/diaries", tags=["diaries"])


@router.post("", status_code=201)
def create_diary(body: DiaryCreate, caller: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    diary = DiaryService(db).create(caller.id, body.name, body.description, body.is_public)
    return envelope(dump(DiaryOut.model_validate(diary)), "Diary created successfully")


@router.get("")
def my_diaries(caller: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope({"diaries": [dump(DiaryOut.model_validate(d)) for d in DiaryService(db).mine(caller.id)]})


@router.get("/public")
def public_diaries(caller: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope({"diaries": [dump(DiaryWithOwnerOut.model_validate(d)) for d in DiaryService(db).public()]})


@router.get("/{diary_id}")
def get_diary(diary_id: int, caller: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope(dump(DiaryOut.model_validate(DiaryService(db).get(caller.id, diary_id))))


@router.put("/{diary_id}")
def update_diary(
    diary_id: int,
    body: DiaryUpdate,
    caller: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    diary = DiaryService(db).update(caller.id, diary_id, body)
    return envelope(dump(DiaryOut.model_validate(diary)), "Diary updated successfully")


@router.delete("/{diary_id}")
def delete_diary(
    diary_id: int,
    caller: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    media: MediaStore = Depends(get_media_store),
):
    DiaryService(db, media).delete(caller.id, diary_id)
    return envelope(message="Diary deleted successfully")
