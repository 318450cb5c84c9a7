"""Interaction service: the single entry point for content detail pages.

Composes the thread builder, comment lifecycle and reaction aggregator over
one document store. Every mutating call takes the acting identity explicitly
and rejects anonymous callers before touching the store. Mutations return the
authoritative post-write result; callers reload the thread or summary to
reconcile any optimistic client state.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

import structlog

from src.auth.permissions import DEFAULT_PRIVILEGED_ROLES, is_privileged
from src.store.base import DocumentStore

from .analytics import EngagementReport, build_engagement_report
from .exceptions import ForbiddenError, InvalidInputError, UnauthorizedError
from .lifecycle import DEFAULT_MAX_CONTENT_LENGTH, CommentLifecycle
from .locks import KeyedLock
from .models import (
    COMMENTS_COLLECTION,
    REACTIONS_COLLECTION,
    Comment,
    Identity,
    Reaction,
    ReactionSummary,
    ReactionType,
    ThreadNode,
)
from .reactions import ReactionAggregator
from .threads import build_thread


logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PurgeResult:
    """Number of records removed for a content item."""

    comments: int
    reactions: int


def _require_identity(identity: Identity | None) -> Identity:
    if identity is None or not identity.user_id or not identity.user_id.strip():
        raise UnauthorizedError
    return identity


def _require_content_id(parent_id: str) -> str:
    if not parent_id or not parent_id.strip():
        raise InvalidInputError("Content id is required")
    return parent_id


class InteractionService:
    """Facade over comments and reactions for one document store."""

    def __init__(
        self,
        store: DocumentStore,
        locks: KeyedLock | None = None,
        privileged_roles: Iterable[str] = DEFAULT_PRIVILEGED_ROLES,
        max_content_length: int = DEFAULT_MAX_CONTENT_LENGTH,
        max_display_depth: int = 2,
    ):
        """Initialize the service.

        Args:
            store: Document store holding comments and reactions.
            locks: Per-key lock for reaction toggles (in-process by default).
            privileged_roles: Roles allowed to moderate.
            max_content_length: Longest accepted comment, in characters.
            max_display_depth: Deepest indentation clients should render.
        """
        self.store = store
        self.privileged_roles = frozenset(privileged_roles)
        self.max_display_depth = max_display_depth
        self.lifecycle = CommentLifecycle(
            store,
            privileged_roles=self.privileged_roles,
            max_content_length=max_content_length,
        )
        self.reactions = ReactionAggregator(store, locks)

    def _require_privileged(self, identity: Identity | None) -> Identity:
        identity = _require_identity(identity)
        if not is_privileged(identity.role, self.privileged_roles):
            raise ForbiddenError("Moderator role required")
        return identity

    # ==========================================================================
    # Comments
    # ==========================================================================

    async def load_thread(self, parent_id: str) -> list[ThreadNode]:
        """Fetch every comment of a content item and build the reply tree.

        Public: no identity is needed to read comments.
        """
        _require_content_id(parent_id)
        comments = await self.lifecycle.list_for(parent_id)
        return build_thread(comments)

    async def post_comment(
        self,
        parent_id: str,
        content: str,
        identity: Identity | None,
        reply_to_id: str | None = None,
    ) -> Comment:
        """Post a root comment, or a reply when ``reply_to_id`` is given."""
        author = _require_identity(identity)
        return await self.lifecycle.create(parent_id, content, author, reply_to_id)

    async def remove_comment(self, comment_id: str, identity: Identity | None) -> None:
        """Delete a comment as its author or as a moderator."""
        requester = _require_identity(identity)
        await self.lifecycle.delete(comment_id, requester.user_id, requester.role)

    # ==========================================================================
    # Reactions
    # ==========================================================================

    async def load_reaction_summary(
        self, parent_id: str, requesting_user_id: str | None = None
    ) -> ReactionSummary:
        """Like/dislike counts plus the requesting user's own reaction."""
        _require_content_id(parent_id)
        return await self.reactions.get_summary(parent_id, requesting_user_id)

    async def toggle_reaction(
        self,
        parent_id: str,
        identity: Identity | None,
        reaction_type: ReactionType | str,
    ) -> ReactionType | None:
        """Toggle the caller's reaction; returns the resulting reaction."""
        user = _require_identity(identity)
        return await self.reactions.toggle(parent_id, user.user_id, reaction_type)

    # ==========================================================================
    # Moderation
    # ==========================================================================

    async def purge_content(
        self, parent_id: str, identity: Identity | None
    ) -> PurgeResult:
        """Remove every comment and reaction attached to a content item.

        Called when the content item itself is deleted. Each record is removed
        with its own store write; a cancelled purge leaves the remaining
        records in place and can simply be repeated.
        """
        moderator = self._require_privileged(identity)
        _require_content_id(parent_id)

        comments = await self.store.query(
            COMMENTS_COLLECTION, {"parent_id": parent_id}
        )
        for record in comments:
            await self.store.delete(COMMENTS_COLLECTION, record["comment_id"])

        reactions = await self.store.query(
            REACTIONS_COLLECTION, {"parent_id": parent_id}
        )
        for record in reactions:
            reaction = Reaction.from_record(record)
            await self.store.delete(REACTIONS_COLLECTION, reaction.record_id)

        result = PurgeResult(comments=len(comments), reactions=len(reactions))
        logger.info(
            "content_purged",
            parent_id=parent_id,
            moderator_id=moderator.user_id,
            comments=result.comments,
            reactions=result.reactions,
        )
        return result

    async def engagement_report(
        self,
        identity: Identity | None,
        days: int = 7,
        top: int = 5,
        now: datetime | None = None,
    ) -> EngagementReport:
        """Dashboard figures across all content items (moderators only)."""
        self._require_privileged(identity)
        if days < 1 or top < 1:
            raise InvalidInputError("days and top must be positive")

        comment_records = await self.store.query(COMMENTS_COLLECTION, {})
        reaction_records = await self.store.query(REACTIONS_COLLECTION, {})

        return build_engagement_report(
            comments=[Comment.from_record(r) for r in comment_records],
            reactions=[Reaction.from_record(r) for r in reaction_records],
            days=days,
            top=top,
            now=now,
        )
