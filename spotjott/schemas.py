"""
Pydantic models for request bodies and response payloads.

Attributes are snake_case; JSON uses camelCase through the alias generator.
Update models are partial: only the fields a client actually sent end up in
``model_fields_set`` and get applied.
"""

from datetime import date as DateType, datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from spotjott.models import DeviceType, MediaType, NotificationType, ReactionType


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def envelope(data: Any = None, message: Optional[str] = None) -> Dict[str, Any]:
    """Standard success body: ``{"success": true, "message"?, "data"?}``."""
    body: Dict[str, Any] = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return body


def dump(model: BaseModel) -> Dict[str, Any]:
    return model.model_dump(by_alias=True, mode="json")


# Requests

class LoginRequest(CamelModel):
    email: str = ""
    password: str = ""


class RegisterRequest(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    bio: Optional[str] = None
    tags: Optional[Union[List[str], str]] = None


class JotCreate(CamelModel):
    content: Optional[str] = None


class EntryCreateRequest(CamelModel):
    title: Optional[str] = None
    content: Optional[str] = None
    diary_id: Optional[Union[int, str]] = None
    tags: Optional[Union[List[str], str]] = None


class UserUpdate(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    bio: Optional[str] = None
    user_tags: Optional[Union[List[str], str]] = None


class ReactionRequest(CamelModel):
    reaction_type: str = ReactionType.like.value


class CommentRequest(CamelModel):
    content: str = ""


class DiaryCreate(CamelModel):
    name: str = ""
    description: Optional[str] = None
    is_public: bool = False


class DiaryUpdate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    is_public: Optional[bool] = None


class EntryUpdate(CamelModel):
    title: Optional[str] = None
    content: Optional[str] = None
    favorite: Optional[bool] = None
    tags: Optional[Union[List[str], str]] = None


class EmotionCreate(CamelModel):
    emotion_slug: str = ""
    emotion_name: str = ""


class EmotionUpdate(CamelModel):
    emotion_slug: Optional[str] = None
    emotion_name: Optional[str] = None


class TrackEmotionRequest(CamelModel):
    emotion_id: Optional[Union[int, str]] = None
    date: Optional[str] = None


class FCMTokenRequest(CamelModel):
    token: str = ""
    device_type: DeviceType = DeviceType.web
    device_id: Optional[str] = None


# Responses

class UserSummary(CamelModel):
    id: int
    first_name: str
    last_name: str
    profile_picture: Optional[str] = None
    bio: Optional[str] = None


class UserOut(CamelModel):
    id: int
    first_name: str
    last_name: str
    email: str
    profile_picture: Optional[str] = None
    bio: Optional[str] = None
    tags: Optional[List[str]] = None
    followers_count: int
    following_count: int
    created_at: datetime
    updated_at: datetime


class PublicProfileOut(CamelModel):
    id: int
    first_name: str
    last_name: str
    email: str
    profile_picture: Optional[str] = None
    bio: Optional[str] = None
    followers_count: int
    following_count: int
    created_at: datetime
    is_following: bool = False
    jots_count: int = 0
    open_diaries_count: int = 0


class ReactionOut(CamelModel):
    id: int
    user_id: int
    reaction_type: ReactionType


class JotOut(CamelModel):
    id: int
    user_id: int
    content: str
    media_url: Optional[str] = None
    media_type: Optional[MediaType] = None
    reactions_count: int
    comments_count: int
    created_at: datetime
    updated_at: datetime
    user: UserSummary
    user_reaction: Optional[ReactionOut] = None


class CommentOut(CamelModel):
    id: int
    jot_id: int
    user_id: int
    content: str
    created_at: datetime
    user: UserSummary


class StoryOut(CamelModel):
    id: int
    user_id: int
    media_url: str
    media_type: MediaType
    caption: Optional[str] = None
    views_count: int
    expires_at: datetime
    created_at: datetime
    user: Optional[UserSummary] = None
    has_viewed: Optional[bool] = None


class StoryViewOut(CamelModel):
    id: int
    story_id: int
    viewer_id: int
    created_at: datetime
    viewer: UserSummary


class DiaryOut(CamelModel):
    id: int
    user_id: int
    name: str
    description: Optional[str] = None
    is_public: bool
    created_at: datetime
    updated_at: datetime


class DiaryWithOwnerOut(DiaryOut):
    user: UserSummary


class TagOut(CamelModel):
    id: int
    name: str


class EntryOut(CamelModel):
    id: int
    diary_id: int
    user_id: int
    title: str
    content: str
    cover_image: Optional[str] = None
    favorite: bool
    created_at: datetime
    updated_at: datetime
    tags: List[TagOut] = Field(default_factory=list)


class EmotionOut(CamelModel):
    id: int
    emotion_slug: str
    emotion_name: Optional[str] = None


class TrackerOut(CamelModel):
    id: int
    user_id: int
    emotion_id: int
    date: DateType
    created_at: datetime
    updated_at: datetime
    emotion: Optional[EmotionOut] = None


class NotificationOut(CamelModel):
    id: int
    user_id: int
    sender_id: Optional[int] = None
    type: NotificationType
    title: str
    body: str
    is_read: bool
    data: Optional[Dict[str, Any]] = None
    image_url: Optional[str] = None
    link: Optional[str] = None
    created_at: datetime


class FCMTokenOut(CamelModel):
    id: int
    token: str
    device_type: DeviceType
    device_id: Optional[str] = None
    is_active: bool
    last_used: datetime
