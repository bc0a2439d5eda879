"""
Emotion catalog and daily emotion tracking endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from spotjott.deps import CurrentUser, get_current_user, get_db
from spotjott.schemas import (
    EmotionCreate, EmotionOut, EmotionUpdate, TrackEmotionRequest, TrackerOut, dump, envelope,
)
from spotjott.services.emotions import EmotionService

router = APIRouter(prefix="/api/emotions", tags=["emotions"])


@router.get("")
def list_emotions(caller: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope({"emotions": [dump(EmotionOut.model_validate(e)) for e in EmotionService(db).catalog()]})


@router.post("", status_code=201)
def create_emotion(body: EmotionCreate, caller: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    emotion = EmotionService(db).create(body.emotion_slug, body.emotion_name)
    return envelope(dump(EmotionOut.model_validate(emotion)), "Emotion created successfully")


@router.post("/track", status_code=201)
def track_emotion(
    body: TrackEmotionRequest,
    caller: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Record today's (or ``date``'s) emotion; repeating it for the same day replaces it."""
    tracker = EmotionService(db).track(caller.id, body.emotion_id, body.date)
    return envelope(dump(TrackerOut.model_validate(tracker)), "Emotion tracked successfully")


@router.get("/history")
def emotion_history(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    caller: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    history = EmotionService(db).history(caller.id, start_date, end_date)
    return envelope({"history": [dump(TrackerOut.model_validate(t)) for t in history]})


@router.put("/{emotion_id}")
def update_emotion(
    emotion_id: int,
    body: EmotionUpdate,
    caller: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    emotion = EmotionService(db).update(emotion_id, body)
    return envelope(dump(EmotionOut.model_validate(emotion)), "Emotion updated successfully")


@router.delete("/{emotion_id}")
def delete_emotion(emotion_id: int, caller: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    EmotionService(db).delete(emotion_id)
    return envelope(message="Emotion deleted successfully")
