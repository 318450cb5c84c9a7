"""Comment creation and deletion rules.

Creation:
- a signed-in author is required (no anonymous posting)
- content is trimmed and must be non-empty and within the length limit
- a reply must target an existing comment of the same content item

Deletion:
- allowed for the comment's author or a privileged role
- removes only the comment itself; replies keep their ``reply_to_id`` and
  are shown as orphans by the thread builder
"""

from collections.abc import Iterable

import structlog

from src.auth.permissions import DEFAULT_PRIVILEGED_ROLES, can_delete_comment
from src.store.base import DocumentStore

from .exceptions import (
    ForbiddenError,
    InvalidInputError,
    InvalidReplyError,
    NotFoundError,
    UnauthorizedError,
)
from .models import COMMENTS_COLLECTION, Comment, Identity, create_comment


logger = structlog.get_logger(__name__)

DEFAULT_MAX_CONTENT_LENGTH = 10000


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


class CommentLifecycle:
    """Validates and persists comment creation and deletion."""

    def __init__(
        self,
        store: DocumentStore,
        privileged_roles: Iterable[str] = DEFAULT_PRIVILEGED_ROLES,
        max_content_length: int = DEFAULT_MAX_CONTENT_LENGTH,
    ):
        self.store = store
        self.privileged_roles = frozenset(privileged_roles)
        self.max_content_length = max_content_length

    def validate_content(self, content: str | None) -> str:
        """Return trimmed content or raise ``InvalidInputError``."""
        if content is None or not isinstance(content, str):
            raise InvalidInputError("Comment content is required")
        trimmed = content.strip()
        if not trimmed:
            raise InvalidInputError("Comment content cannot be empty")
        if len(trimmed) > self.max_content_length:
            msg = f"Comment exceeds {self.max_content_length} characters"
            raise InvalidInputError(msg)
        return trimmed

    async def get(self, comment_id: str) -> Comment | None:
        record = await self.store.get(COMMENTS_COLLECTION, comment_id)
        return Comment.from_record(record) if record else None

    async def list_for(self, parent_id: str) -> list[Comment]:
        """Every comment attached to a content item, unordered."""
        records = await self.store.query(
            COMMENTS_COLLECTION, {"parent_id": parent_id}
        )
        return [Comment.from_record(record) for record in records]

    async def create(
        self,
        parent_id: str,
        content: str,
        author: Identity | None,
        reply_to_id: str | None = None,
    ) -> Comment:
        """Create a root comment or a reply.

        Raises:
            UnauthorizedError: no author or an author without a user id.
            InvalidInputError: blank content/content id, or content too long.
            InvalidReplyError: reply target missing or on another content item.
        """
        if author is None or _is_blank(author.user_id):
            raise UnauthorizedError
        if _is_blank(parent_id):
            raise InvalidInputError("Content id is required")
        text = self.validate_content(content)
        if reply_to_id is not None and _is_blank(reply_to_id):
            raise InvalidInputError("Reply target id cannot be blank")

        if reply_to_id is not None:
            target = await self.get(reply_to_id)
            if target is None or target.parent_id != parent_id:
                raise InvalidReplyError

        comment = create_comment(
            parent_id=parent_id,
            author=author,
            content=text,
            reply_to_id=reply_to_id,
        )
        await self.store.put(
            COMMENTS_COLLECTION, comment.comment_id, comment.to_record()
        )

        logger.info(
            "comment_created",
            comment_id=comment.comment_id,
            parent_id=parent_id,
            reply_to_id=reply_to_id,
            author_id=comment.author_id,
        )
        return comment

    async def delete(
        self,
        comment_id: str,
        requester_id: str | None,
        requester_role: str | None,
    ) -> None:
        """Delete a comment on behalf of its author or a moderator.

        Raises:
            UnauthorizedError: no requester id.
            NotFoundError: the comment does not exist (already deleted).
            ForbiddenError: requester is neither author nor privileged.
        """
        if _is_blank(requester_id):
            raise UnauthorizedError
        if _is_blank(comment_id):
            raise InvalidInputError("Comment id is required")

        comment = await self.get(comment_id)
        if comment is None:
            raise NotFoundError("Comment not found")

        if not can_delete_comment(
            comment.author_id, requester_id, requester_role, self.privileged_roles
        ):
            logger.warning(
                "comment_delete_forbidden",
                comment_id=comment_id,
                requester_role=requester_role,
            )
            raise ForbiddenError("You can only delete your own comments")

        await self.store.delete(COMMENTS_COLLECTION, comment_id)

        logger.info(
            "comment_deleted",
            comment_id=comment_id,
            parent_id=comment.parent_id,
            by_author=comment.author_id == requester_id,
        )
