"""Security infrastructure - identity tokens and credential hashing."""

from align.infrastructure.security.jwt import (
    create_access_token,
    extract_token,
    resolve_subject_id,
    verify_token,
)
from align.infrastructure.security.password import get_password_hash, verify_password

__all__ = [
    "create_access_token",
    "extract_token",
    "resolve_subject_id",
    "verify_token",
    "get_password_hash",
    "verify_password",
]
