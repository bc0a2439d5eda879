import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from spotjott.errors import ConflictError, ValidationError
from spotjott.media import PROFILE_PICTURE, MediaUpload
from spotjott.models import User
from spotjott.security import hash_password, issue_token, verify_password
from spotjott.services.base import BaseService
from spotjott.validators import split_csv, validate_email, validate_password

logger = logging.getLogger(__name__)

PROFILE_FOLDER = "user_profiles"


@dataclass
class RegisterData:
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    bio: Optional[str] = None
    tags: Optional[Union[List[str], str]] = None


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


class AuthService(BaseService):
    """Account registration and credential login."""

    def register(self, data: RegisterData, picture: Optional[MediaUpload] = None) -> Tuple[User, str]:
        """
        Create an account and issue its first token.

        Args:
            data: registration fields as submitted
            picture: optional profile picture, uploaded before the user row is written

        Returns:
            (user, token)
        """
        first_name = (data.first_name or "").strip()
        last_name = (data.last_name or "").strip()
        email = normalize_email(data.email)
        password = data.password or ""

        if not first_name or not last_name or not email or not password:
            raise ValidationError("First name, last name, email, and password are required")

        ok, msg = validate_email(email)
        if not ok:
            raise ValidationError(msg)
        ok, msg = validate_password(password)
        if not ok:
            raise ValidationError(msg)

        if self.session.query(User.id).filter(User.email == email).first():
            raise ConflictError("User with this email already exists")

        uploaded = None
        if picture is not None:
            uploaded = self.media.upload(picture, PROFILE_FOLDER, PROFILE_PICTURE)

        tags = [t for t in split_csv(data.tags) if t]
        user = User(
            first_name=first_name,
            last_name=last_name,
            email=email,
            password=hash_password(password),
            bio=(data.bio or "").strip() or None,
            tags=tags or None,
            profile_picture=uploaded.url if uploaded else None,
            profile_picture_public_id=uploaded.public_id if uploaded else None,
            followers_count=0,
            following_count=0,
        )
        self.session.add(user)
        try:
            self._commit("User with this email already exists")
        except Exception:
            if uploaded:
                self._discard_media(uploaded.public_id)
            raise

        logger.info("Registered user %s", user.id)
        return user, issue_token(user.id, user.email)

    def login(self, email: Optional[str], password: Optional[str]) -> Tuple[User, str]:
        email = normalize_email(email)
        if not email or not password:
            raise ValidationError("Email and password are required")

        user = self.session.query(User).filter(User.email == email).first()
        if user is None or not verify_password(user.password, password):
            raise ValidationError("Invalid credentials")

        return user, issue_token(user.id, user.email)
