import re
from typing import Optional, Tuple

EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6


def validate_email(email: str) -> Tuple[bool, Optional[str]]:
    """Simple email validation.

    Returns (is_valid, error_message)."""
    if not email:
        return False, "Email is required"
    if not EMAIL_REGEX.match(email):
        return False, "Invalid email format"
    return True, None


def validate_password(password: str) -> Tuple[bool, Optional[str]]:
    """Passwords only need a minimum length."""
    if not password:
        return False, "Password is required"
    if len(password) < MIN_PASSWORD_LENGTH:
        return False, f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
    return True, None


def split_csv(value) -> list:
    """
    Accept either a comma-separated string or a list and return trimmed items.

    List items may themselves be comma-joined (repeated form fields).
    """
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = [part for item in value for part in str(item).split(",")]
    return [item.strip() for item in items]
