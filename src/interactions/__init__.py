"""Content interaction engine.

Provides, for any published content item:
- Threaded comments (flat storage, tree on read, orphan promotion)
- Like/dislike reactions (one per user, toggle semantics)
- Moderation (author-or-privileged deletion, content purge, analytics)

Note: Router is not exported here to avoid circular imports.
Import directly from src.interactions.router when needed.
"""

from .exceptions import (
    ForbiddenError,
    InteractionError,
    InvalidInputError,
    InvalidReplyError,
    NotFoundError,
    StoreUnavailableError,
    UnauthorizedError,
)
from .models import (
    Comment,
    Identity,
    Reaction,
    ReactionSummary,
    ReactionType,
    ThreadNode,
)
from .service import InteractionService, PurgeResult


__all__ = [
    "Comment",
    "ForbiddenError",
    "Identity",
    "InteractionError",
    "InteractionService",
    "InvalidInputError",
    "InvalidReplyError",
    "NotFoundError",
    "PurgeResult",
    "Reaction",
    "ReactionSummary",
    "ReactionType",
    "StoreUnavailableError",
    "ThreadNode",
    "UnauthorizedError",
]
