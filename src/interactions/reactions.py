"""Like/dislike tallies with at most one reaction per user per content item.

Each (content item, user) pair is a three-state machine:

    none    --like-->    like      none    --dislike--> dislike
    like    --like-->    none      like    --dislike--> dislike
    dislike --dislike--> none      dislike --like-->    like

Counts are derived from the stored records on every read, so there is no
separate counter to drift out of sync with the per-user records.
"""

import structlog

from src.store.base import DocumentStore

from .exceptions import InvalidInputError, UnauthorizedError
from .locks import KeyedLock, LocalKeyedLock
from .models import (
    REACTIONS_COLLECTION,
    Reaction,
    ReactionSummary,
    ReactionType,
    create_reaction,
    reaction_record_id,
)


logger = structlog.get_logger(__name__)


def next_reaction(
    current: ReactionType | None, requested: ReactionType
) -> ReactionType | None:
    """Apply one toggle: same type clears the reaction, anything else sets it."""
    return None if current == requested else requested


def coerce_reaction_type(value: ReactionType | str) -> ReactionType:
    """Parse a reaction type, rejecting anything but like/dislike."""
    try:
        return ReactionType(value)
    except ValueError as e:
        msg = f"Unknown reaction type: {value!r}"
        raise InvalidInputError(msg) from e


class ReactionAggregator:
    """Reads summaries and applies toggles against the document store."""

    def __init__(self, store: DocumentStore, locks: KeyedLock | None = None):
        self.store = store
        self.locks = locks or LocalKeyedLock()

    async def get_summary(
        self, parent_id: str, requesting_user_id: str | None = None
    ) -> ReactionSummary:
        """Count reactions for a content item.

        ``current_user_reaction`` is filled only when a requesting user is
        given and has a record.
        """
        records = await self.store.query(
            REACTIONS_COLLECTION, {"parent_id": parent_id}
        )

        likes = dislikes = 0
        current: ReactionType | None = None
        for record in records:
            reaction = Reaction.from_record(record)
            if reaction.reaction_type is ReactionType.LIKE:
                likes += 1
            else:
                dislikes += 1
            if requesting_user_id and reaction.user_id == requesting_user_id:
                current = reaction.reaction_type

        return ReactionSummary(
            like_count=likes,
            dislike_count=dislikes,
            current_user_reaction=current,
        )

    async def get_user_reaction(self, parent_id: str, user_id: str) -> Reaction | None:
        """Get the user's reaction record for a content item, if any."""
        record = await self.store.get(
            REACTIONS_COLLECTION, reaction_record_id(parent_id, user_id)
        )
        return Reaction.from_record(record) if record else None

    async def toggle(
        self,
        parent_id: str,
        user_id: str,
        reaction_type: ReactionType | str,
    ) -> ReactionType | None:
        """Toggle the user's reaction and return the resulting state.

        Performs exactly one store write (``put`` or ``delete``) while holding
        the lock for the (content item, user) pair.

        Raises:
            UnauthorizedError: ``user_id`` is empty.
            InvalidInputError: unknown reaction type or empty ``parent_id``.
            StoreUnavailableError: the store or the lock service failed; the
                resulting state is unknown and should be reloaded.
        """
        if not user_id or not user_id.strip():
            raise UnauthorizedError
        if not parent_id or not parent_id.strip():
            raise InvalidInputError("Content id is required")
        requested = coerce_reaction_type(reaction_type)

        record_id = reaction_record_id(parent_id, user_id)
        async with self.locks.hold(f"reaction:{record_id}"):
            existing = await self.get_user_reaction(parent_id, user_id)
            current = existing.reaction_type if existing else None
            result = next_reaction(current, requested)

            if result is None:
                await self.store.delete(REACTIONS_COLLECTION, record_id)
            else:
                reaction = create_reaction(parent_id, user_id, result, existing)
                await self.store.put(
                    REACTIONS_COLLECTION, record_id, reaction.to_record()
                )

        logger.info(
            "reaction_toggled",
            parent_id=parent_id,
            previous=current.value if current else None,
            requested=requested.value,
            result=result.value if result else None,
        )
        return result
