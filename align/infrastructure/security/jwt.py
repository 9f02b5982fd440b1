"""
Identity token handling.

Token issuance belongs to the sign-in flow; this service only needs to
verify a token and read the subject it names. create_access_token is kept
for provisioning scripts and tests.
"""

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt
from starlette.requests import HTTPConnection

from align.infrastructure.config.settings import get_settings

settings = get_settings()


def create_access_token(
    data: dict[str, Any], expires_delta: timedelta | None = None
) -> str:
    """Create a signed identity token; data must carry 'sub' (subject ID)"""
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(UTC) + expires_delta
    else:
        expire = datetime.now(UTC) + timedelta(
            minutes=settings.access_token_expire_minutes
        )

    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(
        to_encode, settings.secret_key, algorithm=settings.algorithm
    )
    assert isinstance(encoded_jwt, str)
    return encoded_jwt


def verify_token(token: str) -> dict[str, Any]:
    """Verify and decode JWT token, returns payload"""
    try:
        payload = jwt.decode(
            token, settings.secret_key, algorithms=[settings.algorithm]
        )
        if not isinstance(payload, dict):
            raise TypeError("Token payload must be a dictionary")
        return payload
    except JWTError as e:
        raise ValueError(f"Invalid token: {str(e)}") from e


def extract_token(connection: HTTPConnection) -> str | None:
    """Bearer token from the Authorization header, else the session cookie"""
    authorization = connection.headers.get("authorization")
    if authorization:
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()
    return connection.cookies.get(settings.session_cookie_name) or None


def resolve_subject_id(token: str) -> int:
    """
    Verify the token and return the integer subject ID from its 'sub' claim.

    Raises:
        ValueError: If the token is invalid, expired, or names no integer subject
    """
    payload = verify_token(token)
    sub = payload.get("sub")
    try:
        subject_id = int(sub)
    except (TypeError, ValueError) as e:
        raise ValueError("Token subject must be an integer identifier") from e
    if subject_id <= 0:
        raise ValueError("Token subject must be a positive identifier")
    return subject_id
