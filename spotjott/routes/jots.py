"""
Jot (short post) endpoints: feed, reactions and comments.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from spotjott.deps import (
    CurrentUser, get_current_user, get_db, get_json_body, get_media_store, get_pagination, parse_json_body,
    to_media_upload,
)
from spotjott.media import MediaStore
from spotjott.models import Jot, JotReaction
from spotjott.pagination import Page, Pagination
from spotjott.schemas import CommentOut, CommentRequest, JotCreate, JotOut, ReactionOut, ReactionRequest, dump, envelope
from spotjott.services.jots import JotService
from spotjott.services.notifications import Notifier

router = APIRouter(prefix="/api/jots", tags=["jots"])


def _jot_out(jot: Jot, reaction: Optional[JotReaction] = None) -> dict:
    out = JotOut.model_validate(jot)
    out.user_reaction = ReactionOut.model_validate(reaction) if reaction else None
    return dump(out)


def _jot_page(page: Page, reactions: Dict[int, JotReaction]) -> dict:
    return {
        "jots": [_jot_out(j, reactions.get(j.id)) for j in page.items],
        "hasMore": page.has_more,
        "page": page.pagination.page,
        "limit": page.pagination.limit,
    }


@router.post("", status_code=201)
def create_jot(
    content: Optional[str] = Form(None),
    media: Optional[UploadFile] = File(None),
    json_body: Dict[str, Any] = Depends(get_json_body),
    caller: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    store: MediaStore = Depends(get_media_store),
):
    if json_body:
        content = parse_json_body(JotCreate, json_body).content
    jot = JotService(db, store).create(caller.id, content, to_media_upload(media))
    return envelope(_jot_out(jot))


@router.get("/feed")
def feed(
    pagination: Pagination = Depends(get_pagination),
    caller: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Everyone's jots, newest first."""
    page, reactions = JotService(db).feed(caller.id, pagination)
    return envelope(_jot_page(page, reactions))


@router.get("/user/{user_id}")
def user_jots(
    user_id: int,
    pagination: Pagination = Depends(get_pagination),
    caller: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    page, reactions = JotService(db).by_user(caller.id, user_id, pagination)
    return envelope(_jot_page(page, reactions))


@router.delete("/comments/{comment_id}")
def delete_comment(comment_id: int, caller: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    JotService(db).delete_comment(caller.id, comment_id)
    return envelope(message="Comment deleted successfully")


@router.get("/{jot_id}")
def get_jot(jot_id: int, caller: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    jot, reaction = JotService(db).get(caller.id, jot_id)
    return envelope(_jot_out(jot, reaction))


@router.delete("/{jot_id}")
def delete_jot(
    jot_id: int,
    caller: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    store: MediaStore = Depends(get_media_store),
):
    JotService(db, store).delete(caller.id, jot_id)
    return envelope(message="Jot deleted successfully")


@router.post("/{jot_id}/reactions")
def toggle_reaction(
    jot_id: int,
    body: Optional[ReactionRequest] = None,
    caller: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Add the caller's reaction, or remove it when one exists."""
    reaction_type = body.reaction_type if body else None
    result = JotService(db, notifier=Notifier(db)).toggle_reaction(caller.id, jot_id, reaction_type)
    if not result["reacted"]:
        return envelope({"reacted": False}, "Reaction removed")
    return envelope({"reacted": True, "reactionType": result["reaction_type"].value}, "Reaction added")


@router.get("/{jot_id}/comments")
def list_comments(
    jot_id: int,
    pagination: Pagination = Depends(get_pagination),
    caller: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    page = JotService(db).comments(jot_id, pagination)
    return envelope({
        "comments": [dump(CommentOut.model_validate(c)) for c in page.items],
        "hasMore": page.has_more,
        "page": page.pagination.page,
        "limit": page.pagination.limit,
    })


@router.post("/{jot_id}/comments", status_code=201)
def add_comment(
    jot_id: int,
    body: CommentRequest,
    caller: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    comment = JotService(db, notifier=Notifier(db)).add_comment(caller.id, jot_id, body.content)
    return envelope(dump(CommentOut.model_validate(comment)), "Comment added successfully")
