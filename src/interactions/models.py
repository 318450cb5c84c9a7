"""Domain models for content interactions.

Comments and reactions attach to an external content item identified by an
opaque ``parent_id`` (blog post, paper, event). Both are persisted as flat
JSON-compatible records in the document store:

- ``comments``: one record per comment, keyed by ``comment_id``.
  ``reply_to_id`` points at another comment of the same ``parent_id``
  (adjacency list); ``None`` marks a root comment.
- ``reactions``: one record per (content item, user) pair, keyed by a digest
  of the pair so a second record for the same pair cannot exist.
"""

import hashlib
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import uuid4


COMMENTS_COLLECTION = "comments"
REACTIONS_COLLECTION = "reactions"

DEFAULT_AUTHOR_NAME = "Anonymous"
DEFAULT_AUTHOR_ROLE = "Member"


class ReactionType(str, Enum):
    """Available reaction types."""

    LIKE = "like"
    DISLIKE = "dislike"


def _parse_timestamp(value: str | datetime) -> datetime:
    parsed = value if isinstance(value, datetime) else datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed


@dataclass(frozen=True)
class Identity:
    """Already-authenticated caller, as supplied by the identity provider."""

    user_id: str
    display_name: str | None = None
    role: str | None = None


@dataclass(frozen=True)
class Comment:
    """A comment on a content item.

    ``author_name`` and ``author_role`` are snapshots taken at post time and
    do not follow later changes to the user's profile.
    """

    comment_id: str
    parent_id: str
    reply_to_id: str | None
    author_id: str
    author_name: str
    author_role: str
    content: str
    created_at: datetime

    @property
    def is_root(self) -> bool:
        return self.reply_to_id is None

    @property
    def sort_key(self) -> tuple[datetime, str]:
        """Chronological order with the id as a deterministic tie-breaker."""
        return (self.created_at, self.comment_id)

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Comment":
        """Create Comment from a store record."""
        return cls(
            comment_id=record["comment_id"],
            parent_id=record["parent_id"],
            reply_to_id=record.get("reply_to_id"),
            author_id=record["author_id"],
            author_name=record.get("author_name") or DEFAULT_AUTHOR_NAME,
            author_role=record.get("author_role") or DEFAULT_AUTHOR_ROLE,
            content=record["content"],
            created_at=_parse_timestamp(record["created_at"]),
        )

    def to_record(self) -> dict[str, Any]:
        """Convert to a JSON-compatible store record."""
        return {
            "comment_id": self.comment_id,
            "parent_id": self.parent_id,
            "reply_to_id": self.reply_to_id,
            "author_id": self.author_id,
            "author_name": self.author_name,
            "author_role": self.author_role,
            "content": self.content,
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class Reaction:
    """A user's reaction to a content item."""

    parent_id: str
    user_id: str
    reaction_type: ReactionType
    created_at: datetime
    updated_at: datetime

    @property
    def record_id(self) -> str:
        return reaction_record_id(self.parent_id, self.user_id)

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Reaction":
        """Create Reaction from a store record."""
        created_at = _parse_timestamp(record["created_at"])
        return cls(
            parent_id=record["parent_id"],
            user_id=record["user_id"],
            reaction_type=ReactionType(record["type"]),
            created_at=created_at,
            updated_at=_parse_timestamp(record.get("updated_at") or created_at),
        )

    def to_record(self) -> dict[str, Any]:
        """Convert to a JSON-compatible store record."""
        return {
            "parent_id": self.parent_id,
            "user_id": self.user_id,
            "type": self.reaction_type.value,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


@dataclass(frozen=True)
class ReactionSummary:
    """Aggregated reactions for a content item, seen by one (optional) user."""

    like_count: int = 0
    dislike_count: int = 0
    current_user_reaction: ReactionType | None = None


@dataclass(frozen=True)
class ThreadNode:
    """A comment with its direct replies, in display order.

    ``is_orphan`` marks a reply whose target no longer exists; such nodes are
    shown at root level instead of being dropped.
    """

    comment: Comment
    replies: tuple["ThreadNode", ...] = field(default_factory=tuple)
    is_orphan: bool = False


def reaction_record_id(parent_id: str, user_id: str) -> str:
    """Deterministic store id for the (content item, user) pair.

    Hashing keeps separators inside either id from producing collisions.
    """
    raw = f"{len(parent_id)}:{parent_id}|{user_id}"
    return hashlib.sha256(raw.encode()).hexdigest()


# ==============================================================================
# Factory Functions
# ==============================================================================


def create_comment(
    parent_id: str,
    author: Identity,
    content: str,
    reply_to_id: str | None = None,
    created_at: datetime | None = None,
) -> Comment:
    """Create a new comment with a fresh id and author snapshot."""
    return Comment(
        comment_id=uuid4().hex,
        parent_id=parent_id,
        reply_to_id=reply_to_id,
        author_id=author.user_id,
        author_name=author.display_name or DEFAULT_AUTHOR_NAME,
        author_role=author.role or DEFAULT_AUTHOR_ROLE,
        content=content,
        created_at=created_at or datetime.now(UTC),
    )


def create_reaction(
    parent_id: str,
    user_id: str,
    reaction_type: ReactionType,
    previous: Reaction | None = None,
) -> Reaction:
    """Create a reaction record, keeping the original timestamp on a switch."""
    now = datetime.now(UTC)
    return Reaction(
        parent_id=parent_id,
        user_id=user_id,
        reaction_type=reaction_type,
        created_at=previous.created_at if previous else now,
        updated_at=now,
    )
