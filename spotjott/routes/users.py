"""
Profile, account and follow-graph endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.orm import Session

from spotjott.deps import (
    CurrentUser, get_current_user, get_db, get_media_store, get_optional_user, to_media_upload,
)
from spotjott.media import MediaStore
from spotjott.schemas import PublicProfileOut, UserOut, UserSummary, UserUpdate, dump, envelope
from spotjott.services.notifications import Notifier
from spotjott.services.users import UserService

router = APIRouter(prefix="/api/users", tags=["users"])


def _summaries(users) -> list:
    return [dump(UserSummary.model_validate(u)) for u in users]


@router.get("/me")
def get_me(caller: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope(dump(UserOut.model_validate(UserService(db).get_me(caller.id))))


@router.put("/me")
def update_me(
    body: UserUpdate,
    caller: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user = UserService(db).update_me(caller.id, body)
    return envelope(dump(UserOut.model_validate(user)), "Profile updated successfully")


@router.delete("/me")
def delete_me(
    caller: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    media: MediaStore = Depends(get_media_store),
):
    UserService(db, media).delete_me(caller.id)
    return envelope(message="Account deleted successfully")


@router.put("/me/profile-picture")
def update_profile_picture(
    profile_picture: Optional[UploadFile] = File(None, alias="profilePicture"),
    caller: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    media: MediaStore = Depends(get_media_store),
):
    user = UserService(db, media).update_profile_picture(caller.id, to_media_upload(profile_picture))
    return envelope(dump(UserOut.model_validate(user)), "Profile picture updated successfully")


@router.get("/all")
def list_users(caller: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope(_summaries(UserService(db).list_all()))


@router.get("/search")
def search_users(
    query: Optional[str] = Query(None, description="Name fragment, at least 2 characters"),
    caller: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return envelope({"users": _summaries(UserService(db).search(query))})


@router.get("/{user_id}")
def get_profile(
    user_id: int,
    viewer: Optional[CurrentUser] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    """Public profile; an authenticated viewer also learns whether they follow this user."""
    profile = UserService(db).public_profile(user_id, viewer.id if viewer else None)
    data = PublicProfileOut.model_validate(profile.user)
    data.is_following = profile.is_following
    data.jots_count = profile.jots_count
    data.open_diaries_count = profile.open_diaries_count
    return envelope(dump(data))


@router.post("/{user_id}/follow")
def follow(user_id: int, caller: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    UserService(db, notifier=Notifier(db)).follow(caller.id, user_id)
    return envelope({"isFollowing": True}, "Successfully followed user")


@router.delete("/{user_id}/follow")
def unfollow(user_id: int, caller: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    UserService(db).unfollow(caller.id, user_id)
    return envelope({"isFollowing": False}, "Successfully unfollowed user")


@router.get("/{user_id}/followers")
def followers(user_id: int, caller: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope({"followers": _summaries(UserService(db).followers(user_id))})


@router.get("/{user_id}/following")
def following(user_id: int, caller: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)):
    return envelope({"following": _summaries(UserService(db).following(user_id))})
