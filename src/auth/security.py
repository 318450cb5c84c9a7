"""Security utilities for authentication.

Provides:
- JWT access token creation and validation
- Conversion of token claims into an interaction ``Identity``

Tokens are issued by the platform's identity provider; this service only
verifies them. ``create_access_token`` exists for service-to-service calls
and tests.
"""

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from src.config.settings import get_settings
from src.interactions.models import Identity


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT access token.

    Args:
        data: Payload data (typically {"sub": user_id, "name": name, "role": role})
        expires_delta: Token lifetime (default from settings)

    Returns:
        Encoded JWT string

    Token payload includes:
        - All provided data
        - exp: Expiration timestamp
        - iat: Issued at timestamp
        - type: "access" (for validation)
    """
    settings = get_settings()

    to_encode = data.copy()
    expire = datetime.now(UTC) + (
        expires_delta or timedelta(minutes=settings.auth_access_token_expire_minutes)
    )

    to_encode.update(
        {
            "exp": expire,
            "iat": datetime.now(UTC),
            "type": "access",
        }
    )

    return jwt.encode(
        to_encode,
        settings.auth_secret_key,
        algorithm=settings.auth_algorithm,
    )


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and validate an access token.

    Validates:
    - JWT signature
    - Expiration time
    - Token type == "access"
    - Presence of a non-empty subject

    Raises:
        JWTError: If token is invalid, expired, or wrong type
    """
    settings = get_settings()

    payload = jwt.decode(
        token,
        settings.auth_secret_key,
        algorithms=[settings.auth_algorithm],
    )

    if payload.get("type") != "access":
        msg = "Invalid token type: expected 'access'"
        raise JWTError(msg)

    if not str(payload.get("sub") or "").strip():
        msg = "Access token missing sub claim"
        raise JWTError(msg)

    return payload


def identity_from_claims(payload: dict[str, Any]) -> Identity:
    """Build the acting identity from decoded token claims."""
    return Identity(
        user_id=str(payload["sub"]),
        display_name=payload.get("name") or None,
        role=payload.get("role") or None,
    )
