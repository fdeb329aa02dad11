"""Invite code generation and validation."""

import re
import secrets
import string

from yolcu.exceptions import ValidationError

INVITE_CODE_ALPHABET = string.ascii_lowercase + string.digits
MIN_INVITE_CODE_LENGTH = 4
MAX_INVITE_CODE_LENGTH = 32

_INVITE_CODE_RE = re.compile(
    rf"^[a-z0-9]{{{MIN_INVITE_CODE_LENGTH},{MAX_INVITE_CODE_LENGTH}}}$"
)


def generate_invite_code(length: int = 8) -> str:
    """Return a random lowercase alphanumeric code such as ``ab12cd34``."""
    if not MIN_INVITE_CODE_LENGTH <= length <= MAX_INVITE_CODE_LENGTH:
        raise ValueError(
            f"Invite code length must be between {MIN_INVITE_CODE_LENGTH} "
            f"and {MAX_INVITE_CODE_LENGTH}"
        )
    return "".join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(length))


def normalize_invite_code(code: str) -> str:
    """Strip a user-entered code and reject empty input."""
    normalized = (code or "").strip()
    if not normalized:
        raise ValidationError("Invite code cannot be empty")
    return normalized


def validate_custom_invite_code(code: str) -> str:
    """Validate a caller-supplied code for a new room."""
    normalized = normalize_invite_code(code)
    if not _INVITE_CODE_RE.match(normalized):
        raise ValidationError(
            "Invite code must be "
            f"{MIN_INVITE_CODE_LENGTH}-{MAX_INVITE_CODE_LENGTH} lowercase letters or digits",
            invite_code=normalized,
        )
    return normalized
