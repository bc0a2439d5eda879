"""
FastAPI dependencies: database session, media store, caller identity,
pagination.

Process-wide collaborators are created once here and handed to services
explicitly; tests swap them through ``app.dependency_overrides``.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional, Type, TypeVar

from fastapi import Header, Query, Request, UploadFile
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from spotjott.config import MAX_UPLOAD_BYTES, MEDIA_BASE_URL, MEDIA_ROOT
from spotjott.db import SessionLocal
from spotjott.errors import AuthenticationError, ValidationError
from spotjott.media import LocalMediaStore, MediaStore, MediaUpload
from spotjott.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, Pagination, parse_pagination
from spotjott.security import parse_bearer, verify_token

media_store = LocalMediaStore(MEDIA_ROOT, base_url=MEDIA_BASE_URL, max_bytes=MAX_UPLOAD_BYTES)


@dataclass
class CurrentUser:
    id: int
    email: str


def get_db() -> Iterator[Session]:
    session = SessionLocal()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_media_store() -> MediaStore:
    return media_store


def get_current_user(authorization: Optional[str] = Header(None)) -> CurrentUser:
    claims = verify_token(parse_bearer(authorization))
    return CurrentUser(id=claims.id, email=claims.email)


def get_optional_user(authorization: Optional[str] = Header(None)) -> Optional[CurrentUser]:
    """Like get_current_user, but anonymous callers get None instead of a 401."""
    if not authorization:
        return None
    try:
        return get_current_user(authorization)
    except AuthenticationError:
        return None


def get_pagination(
    page: Optional[int] = Query(DEFAULT_PAGE, description="Page number, starting at 1"),
    limit: Optional[int] = Query(DEFAULT_LIMIT, description="Items per page (1-100)"),
) -> Pagination:
    return parse_pagination(page, limit)


def to_media_upload(upload: Optional[UploadFile]) -> Optional[MediaUpload]:
    """Read a multipart file into a MediaUpload; an absent or empty part is None."""
    if upload is None or not upload.filename:
        return None
    return MediaUpload(
        data=upload.file.read(),
        mime_type=upload.content_type or "application/octet-stream",
        filename=upload.filename,
    )


ModelT = TypeVar("ModelT", bound=BaseModel)


async def get_json_body(request: Request) -> Dict[str, Any]:
    """
    The request body as a JSON object, or {} for form and multipart posts.

    Create endpoints take multipart forms (for file parts) or plain JSON.
    """
    if "application/json" not in request.headers.get("content-type", ""):
        return {}
    try:
        body = await request.json()
    except ValueError:
        raise ValidationError("Request body is not valid JSON")
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def parse_json_body(model: Type[ModelT], body: Dict[str, Any]) -> ModelT:
    try:
        return model.model_validate(body)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(p) for p in first.get("loc", ()))
        raise ValidationError(f"{field}: {first.get('msg')}" if field else first.get("msg"))
