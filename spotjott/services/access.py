"""Ownership and visibility checks shared by the domain services."""

from typing import Type, TypeVar

from sqlalchemy.orm import Session

from spotjott.errors import AuthorizationError, NotFoundError, ValidationError
from spotjott.models import Diary

M = TypeVar("M")


def get_or_404(session: Session, model: Type[M], obj_id: int, message: str = None) -> M:
    obj = session.get(model, obj_id)
    if obj is None:
        raise NotFoundError(message or f"{model.__name__} not found")
    return obj


def ensure_owner(owner_id: int, caller_id: int, message: str = None) -> None:
    if owner_id != caller_id:
        raise AuthorizationError(message)


def ensure_visible(diary: Diary, caller_id: int, message: str = None) -> None:
    """Private diaries (and their entries) are readable by their owner only."""
    if not diary.is_public and diary.user_id != caller_id:
        raise AuthorizationError(message or "You don't have permission to view this diary")


def ensure_not_self(target_id: int, caller_id: int, message: str) -> None:
    if target_id == caller_id:
        raise ValidationError(message)
