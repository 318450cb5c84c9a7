"""FastAPI dependencies for authentication.

Provides dependency injection for:
- Bearer token extraction
- Optional identity resolution (reads are public, writes need a user)

Authorization decisions (author or privileged role) are made by the
interaction service, not here, so anonymous requests reach the service and
are rejected there with ``UnauthorizedError``.
"""

from typing import Annotated

import structlog
from fastapi import Depends, Request
from jose import JWTError

from src.auth.security import decode_access_token, identity_from_claims
from src.core.context import set_user_id
from src.interactions.models import Identity


logger = structlog.get_logger(__name__)


def get_token_from_header(request: Request) -> str | None:
    """Extract Bearer token from Authorization header.

    Returns:
        Token string or None if not present
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None

    expected_parts = 2
    parts = auth_header.split()
    if len(parts) != expected_parts or parts[0].lower() != "bearer":
        return None

    return parts[1]


async def get_current_identity_optional(
    token: Annotated[str | None, Depends(get_token_from_header)],
) -> Identity | None:
    """Get the caller's identity if authenticated, None otherwise.

    An invalid or expired token is treated as anonymous.
    """
    if not token:
        return None

    try:
        payload = decode_access_token(token)
    except JWTError as e:
        logger.info("invalid_access_token", error=str(e))
        return None

    identity = identity_from_claims(payload)

    # Set user_id in context for logging
    set_user_id(identity.user_id)

    return identity


# Optional identity (every interaction endpoint accepts anonymous callers)
OptionalIdentity = Annotated[Identity | None, Depends(get_current_identity_optional)]
