"""
Password hashing and bearer-token issuance/verification.

Tokens are HS256 JWTs signed with ``JWT_SECRET``. Verification always checks
the signature and the ``exp`` claim before any claim is trusted.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt
from werkzeug.security import check_password_hash, generate_password_hash

from spotjott.config import JWT_ALGORITHM, JWT_EXPIRE_DAYS, JWT_SECRET
from spotjott.errors import AuthenticationError

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer"


@dataclass
class TokenClaims:
    """Verified claims carried by a bearer token."""
    id: int
    email: str
    issued_at: datetime
    expires_at: datetime


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    if not password_hash or not password:
        return False
    return check_password_hash(password_hash, password)


def issue_token(user_id: int, email: str, now: Optional[datetime] = None, secret: str = None) -> str:
    """
    Sign a token for the user.

    Args:
        user_id: Owner of the token
        email: Email at issuance, informational only
        now: Issue time (defaults to the current UTC time)
        secret: Signing key (defaults to JWT_SECRET)

    Returns:
        Encoded JWT valid for JWT_EXPIRE_DAYS
    """
    issued = now or datetime.now(timezone.utc)
    claims = {
        "id": user_id,
        "email": email,
        "iat": int(issued.timestamp()),
        "exp": int((issued + timedelta(days=JWT_EXPIRE_DAYS)).timestamp()),
    }
    return jwt.encode(claims, secret or JWT_SECRET, algorithm=JWT_ALGORITHM)


def verify_token(token: str, secret: str = None) -> TokenClaims:
    """Check signature and expiry, then return the claims."""
    try:
        payload = jwt.decode(token, secret or JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except JWTError as e:
        logger.debug("Rejected bearer token: %s", e)
        raise AuthenticationError("Invalid token")

    user_id = payload.get("id")
    if not isinstance(user_id, int) or "exp" not in payload:
        raise AuthenticationError("Invalid token")

    return TokenClaims(
        id=user_id,
        email=payload.get("email", ""),
        issued_at=datetime.fromtimestamp(payload.get("iat", 0), tz=timezone.utc),
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    )


def parse_bearer(header: Optional[str]) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not header:
        raise AuthenticationError("Access denied. No token provided.")
    parts = header.split(" ")
    if len(parts) != 2 or parts[0] != BEARER_PREFIX or not parts[1]:
        raise AuthenticationError("Invalid token format. Expected: Bearer <token>")
    return parts[1]
