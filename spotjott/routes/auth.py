"""
Registration and login endpoints.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from spotjott.deps import get_db, get_json_body, get_media_store, parse_json_body, to_media_upload
from spotjott.media import MediaStore
from spotjott.schemas import LoginRequest, RegisterRequest, UserOut, dump, envelope
from spotjott.services.auth import AuthService, RegisterData

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _auth_payload(user, token: str) -> dict:
    return {"user": dump(UserOut.model_validate(user)), "token": token}


@router.post("/register", status_code=201)
def register(
    first_name: Optional[str] = Form(None, alias="firstName"),
    last_name: Optional[str] = Form(None, alias="lastName"),
    email: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    bio: Optional[str] = Form(None),
    tags: Optional[List[str]] = Form(None),
    profile_picture: Optional[UploadFile] = File(None, alias="profilePicture"),
    json_body: Dict[str, Any] = Depends(get_json_body),
    db: Session = Depends(get_db),
    media: MediaStore = Depends(get_media_store),
):
    """Create an account and return a token. Multipart (optional profile picture) or JSON."""
    if json_body:
        data = RegisterData(**parse_json_body(RegisterRequest, json_body).model_dump())
    else:
        data = RegisterData(
            first_name=first_name, last_name=last_name, email=email, password=password, bio=bio, tags=tags,
        )
    user, token = AuthService(db, media).register(data, to_media_upload(profile_picture))
    return envelope(_auth_payload(user, token), "User registered successfully")


@router.post("/login")
def login(body: LoginRequest, db: Session = Depends(get_db)):
    user, token = AuthService(db).login(body.email, body.password)
    return envelope(_auth_payload(user, token), "Login successful")
