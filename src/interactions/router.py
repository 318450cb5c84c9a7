"""Interactions API endpoints.

Provides routes for:
- Comment threads (read, post, reply, delete)
- Reactions (summary, toggle)
- Moderation (purge a content item, engagement analytics)

Reads are public. Writes resolve the caller from the Bearer token and are
rejected by the service when no valid identity is present.
"""

from fastapi import APIRouter, Query, status

from src.auth.dependencies import OptionalIdentity
from src.config import get_settings

from .dependencies import InteractionServiceDep, handle_interaction_error
from .exceptions import InteractionError
from .schemas import (
    CommentResponse,
    CreateCommentRequest,
    EngagementResponse,
    MessageResponse,
    PurgeResponse,
    ReactionSummaryResponse,
    ThreadResponse,
    ToggleReactionRequest,
)


router = APIRouter(prefix="/v1/interactions", tags=["interactions"])


# ==============================================================================
# Analytics
# ==============================================================================


@router.get(
    "/analytics/engagement",
    response_model=EngagementResponse,
    summary="Engagement analytics",
)
async def get_engagement(
    service: InteractionServiceDep,
    identity: OptionalIdentity,
    days: int | None = Query(None, ge=1, le=365),
    top: int | None = Query(None, ge=1, le=100),
) -> EngagementResponse:
    """Totals, a daily series and the most engaged content items.

    Restricted to privileged roles.
    """
    settings = get_settings()
    try:
        report = await service.engagement_report(
            identity,
            days=days or settings.interactions_analytics_days,
            top=top or settings.interactions_analytics_top,
        )
    except InteractionError as e:
        raise handle_interaction_error(e) from e
    return EngagementResponse.from_report(report)


# ==============================================================================
# Comments
# ==============================================================================


@router.get(
    "/{parent_id}/comments",
    response_model=ThreadResponse,
    summary="Get comment thread",
)
async def get_thread(
    parent_id: str,
    service: InteractionServiceDep,
) -> ThreadResponse:
    """Get every comment of a content item as a flattened reply tree."""
    try:
        nodes = await service.load_thread(parent_id)
    except InteractionError as e:
        raise handle_interaction_error(e) from e
    return ThreadResponse.from_nodes(parent_id, nodes, service.max_display_depth)


@router.post(
    "/{parent_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Post comment",
)
async def post_comment(
    parent_id: str,
    data: CreateCommentRequest,
    service: InteractionServiceDep,
    identity: OptionalIdentity,
) -> CommentResponse:
    """Post a root comment, or a reply when ``reply_to_id`` is set."""
    try:
        comment = await service.post_comment(
            parent_id,
            data.content,
            identity,
            reply_to_id=data.reply_to_id,
        )
    except InteractionError as e:
        raise handle_interaction_error(e) from e
    return CommentResponse.from_comment(comment)


@router.delete(
    "/comments/{comment_id}",
    response_model=MessageResponse,
    summary="Delete comment",
)
async def delete_comment(
    comment_id: str,
    service: InteractionServiceDep,
    identity: OptionalIdentity,
) -> MessageResponse:
    """Delete a comment (author or privileged role).

    Replies to the deleted comment are kept and shown as orphans.
    """
    try:
        await service.remove_comment(comment_id, identity)
    except InteractionError as e:
        raise handle_interaction_error(e) from e
    return MessageResponse(message="Comment deleted")


# ==============================================================================
# Reactions
# ==============================================================================


@router.get(
    "/{parent_id}/reactions",
    response_model=ReactionSummaryResponse,
    summary="Get reaction summary",
)
async def get_reactions(
    parent_id: str,
    service: InteractionServiceDep,
    identity: OptionalIdentity,
) -> ReactionSummaryResponse:
    """Like/dislike counts, plus the caller's reaction when signed in."""
    try:
        summary = await service.load_reaction_summary(
            parent_id, identity.user_id if identity else None
        )
    except InteractionError as e:
        raise handle_interaction_error(e) from e
    return ReactionSummaryResponse.from_summary(parent_id, summary)


@router.post(
    "/{parent_id}/reactions",
    response_model=ReactionSummaryResponse,
    summary="Toggle reaction",
)
async def toggle_reaction(
    parent_id: str,
    data: ToggleReactionRequest,
    service: InteractionServiceDep,
    identity: OptionalIdentity,
) -> ReactionSummaryResponse:
    """Toggle the caller's reaction.

    Same type removes it, a different type replaces it. Returns the summary
    as stored after the change.
    """
    try:
        await service.toggle_reaction(parent_id, identity, data.type)
        summary = await service.load_reaction_summary(parent_id, identity.user_id)
    except InteractionError as e:
        raise handle_interaction_error(e) from e
    return ReactionSummaryResponse.from_summary(parent_id, summary)


# ==============================================================================
# Moderation
# ==============================================================================


@router.delete(
    "/{parent_id}",
    response_model=PurgeResponse,
    summary="Purge content interactions",
)
async def purge_content(
    parent_id: str,
    service: InteractionServiceDep,
    identity: OptionalIdentity,
) -> PurgeResponse:
    """Remove all comments and reactions of a deleted content item."""
    try:
        result = await service.purge_content(parent_id, identity)
    except InteractionError as e:
        raise handle_interaction_error(e) from e
    return PurgeResponse(
        parent_id=parent_id,
        comments_deleted=result.comments,
        reactions_deleted=result.reactions,
    )
