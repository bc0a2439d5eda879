from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from spotjott.deps import CurrentUser, get_current_user, get_db, get_media_store, to_media_upload
from spotjott.media import MediaStore
from spotjott.schemas import StoryOut, StoryViewOut, dump, envelope
from spotjott.services.stories import StoryService

router = APIRouter(prefix="/api/stories", tags=["stories"])


@router.post("", status_code=201)
def create_story(
    media: Optional[UploadFile] = File(None),
    caption: Optional[str] = Form(None),
    caller: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    store: MediaStore = Depends(get_media_store),
):
    story = StoryService(db, store).create(caller.id, to_media_upload(media), caption)
    return envelope(dump(StoryOut.model_validate(story)), "Story created successfully")


@router.get("")
def active_stories(caller: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    """Unexpired stories from followed users, each flagged with whether the caller viewed it."""
    stories, viewed = StoryService(db).active(caller.id)
    items = []
    for story in stories:
        out = StoryOut.model_validate(story)
        out.has_viewed = story.id in viewed
        items.append(dump(out))
    return envelope({"stories": items})


@router.post("/{story_id}/view")
def view_story(story_id: int, caller: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    StoryService(db).view(caller.id, story_id)
    return envelope(message="Story viewed")


@router.get("/{story_id}/views")
def story_views(story_id: int, caller: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    views = StoryService(db).views(caller.id, story_id)
    return envelope({"views": [dump(StoryViewOut.model_validate(v)) for v in views], "totalViews": len(views)})


@router.delete("/{story_id}")
def delete_story(
    story_id: int,
    caller: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    store: MediaStore = Depends(get_media_store),
):
    StoryService(db, store).delete(caller.id, story_id)
    return envelope(message="Story deleted successfully")
