"""Pydantic schemas for the interactions API.

Request/Response models with validation for:
- Comment posting and thread reads
- Reaction toggles and summaries
- Moderation (purge, engagement analytics)
"""

from datetime import date, datetime

from pydantic import BaseModel, Field

from .analytics import EngagementReport
from .models import Comment, ReactionSummary, ReactionType, ThreadNode
from .threads import display_indent, flatten_thread


# ==============================================================================
# Request Schemas
# ==============================================================================


class CreateCommentRequest(BaseModel):
    """Request to post a comment or a reply."""

    content: str = Field(..., description="Comment text; trimmed before storing")
    reply_to_id: str | None = Field(
        None, description="Comment being replied to (same content item)"
    )


class ToggleReactionRequest(BaseModel):
    """Request to toggle the caller's reaction on a content item."""

    type: ReactionType


# ==============================================================================
# Response Schemas
# ==============================================================================


class CommentResponse(BaseModel):
    """Single comment."""

    comment_id: str
    parent_id: str
    reply_to_id: str | None = None
    author_id: str
    author_name: str
    author_role: str
    content: str
    created_at: datetime

    @classmethod
    def from_comment(cls, comment: Comment) -> "CommentResponse":
        return cls(
            comment_id=comment.comment_id,
            parent_id=comment.parent_id,
            reply_to_id=comment.reply_to_id,
            author_id=comment.author_id,
            author_name=comment.author_name,
            author_role=comment.author_role,
            content=comment.content,
            created_at=comment.created_at,
        )


class ThreadItemResponse(CommentResponse):
    """Comment positioned in the reply tree.

    ``depth`` is the true nesting level; ``indent`` is capped at the
    configured display depth so deep threads stay readable.
    """

    depth: int
    indent: int
    is_orphan: bool = False
    reply_count: int = 0


class ThreadResponse(BaseModel):
    """All comments of a content item in display order.

    Items are the reply tree flattened depth-first: each root is followed by
    its replies, oldest first.
    """

    parent_id: str
    total: int
    max_display_depth: int
    items: list[ThreadItemResponse]

    @classmethod
    def from_nodes(
        cls, parent_id: str, nodes: list[ThreadNode], max_display_depth: int
    ) -> "ThreadResponse":
        items = [
            ThreadItemResponse(
                **CommentResponse.from_comment(node.comment).model_dump(),
                depth=depth,
                indent=display_indent(depth, max_display_depth),
                is_orphan=node.is_orphan,
                reply_count=len(node.replies),
            )
            for node, depth in flatten_thread(nodes)
        ]
        return cls(
            parent_id=parent_id,
            total=len(items),
            max_display_depth=max_display_depth,
            items=items,
        )


class ReactionSummaryResponse(BaseModel):
    """Reaction counts for a content item."""

    parent_id: str
    like_count: int = 0
    dislike_count: int = 0
    current_user_reaction: ReactionType | None = None

    @classmethod
    def from_summary(
        cls, parent_id: str, summary: ReactionSummary
    ) -> "ReactionSummaryResponse":
        return cls(
            parent_id=parent_id,
            like_count=summary.like_count,
            dislike_count=summary.dislike_count,
            current_user_reaction=summary.current_user_reaction,
        )


class PurgeResponse(BaseModel):
    """Records removed by a purge."""

    parent_id: str
    comments_deleted: int
    reactions_deleted: int


class EngagementTotalsResponse(BaseModel):
    comments: int
    reactions: int
    content_items: int


class DailyEngagementResponse(BaseModel):
    day: date
    comments: int
    reactions: int
    total: int


class ContentEngagementResponse(BaseModel):
    parent_id: str
    comments: int
    reactions: int
    engagement: int


class EngagementResponse(BaseModel):
    """Admin dashboard data."""

    days: int
    totals: EngagementTotalsResponse
    daily: list[DailyEngagementResponse]
    top_content: list[ContentEngagementResponse]

    @classmethod
    def from_report(cls, report: EngagementReport) -> "EngagementResponse":
        return cls(
            days=len(report.daily),
            totals=EngagementTotalsResponse(
                comments=report.totals.comments,
                reactions=report.totals.reactions,
                content_items=report.totals.content_items,
            ),
            daily=[
                DailyEngagementResponse(
                    day=d.day, comments=d.comments, reactions=d.reactions, total=d.total
                )
                for d in report.daily
            ],
            top_content=[
                ContentEngagementResponse(
                    parent_id=c.parent_id,
                    comments=c.comments,
                    reactions=c.reactions,
                    engagement=c.engagement,
                )
                for c in report.top_content
            ],
        )


class MessageResponse(BaseModel):
    """Simple message response."""

    message: str
