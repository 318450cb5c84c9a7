"""Engagement statistics for the admin dashboard.

Pure aggregation over comment and reaction records: overall totals, a
per-day series for the trailing window, and the most engaged content items
(comments + reactions).
"""

from collections import Counter
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta

from .models import Comment, Reaction


@dataclass(frozen=True)
class EngagementTotals:
    comments: int
    reactions: int
    content_items: int


@dataclass(frozen=True)
class DailyEngagement:
    day: date
    comments: int
    reactions: int

    @property
    def total(self) -> int:
        return self.comments + self.reactions


@dataclass(frozen=True)
class ContentEngagement:
    parent_id: str
    comments: int
    reactions: int

    @property
    def engagement(self) -> int:
        return self.comments + self.reactions


@dataclass(frozen=True)
class EngagementReport:
    totals: EngagementTotals
    daily: list[DailyEngagement]
    top_content: list[ContentEngagement]


def build_engagement_report(
    comments: list[Comment],
    reactions: list[Reaction],
    days: int = 7,
    top: int = 5,
    now: datetime | None = None,
) -> EngagementReport:
    """Aggregate interactions into dashboard figures.

    Args:
        comments: All comments to consider.
        reactions: All reactions to consider.
        days: Length of the daily series, ending today (UTC).
        top: Number of content items in the ranking.
        now: Reference time; defaults to the current UTC time.

    Returns:
        EngagementReport with totals, ``days`` daily buckets (oldest first)
        and the ``top`` content items by engagement (ties by id).
    """
    today = (now or datetime.now(UTC)).astimezone(UTC).date()
    window = [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]

    comments_per_day = Counter(c.created_at.astimezone(UTC).date() for c in comments)
    reactions_per_day = Counter(r.created_at.astimezone(UTC).date() for r in reactions)
    daily = [
        DailyEngagement(
            day=day,
            comments=comments_per_day.get(day, 0),
            reactions=reactions_per_day.get(day, 0),
        )
        for day in window
    ]

    comments_per_item = Counter(c.parent_id for c in comments)
    reactions_per_item = Counter(r.parent_id for r in reactions)
    items = set(comments_per_item) | set(reactions_per_item)
    ranking = sorted(
        (
            ContentEngagement(
                parent_id=item,
                comments=comments_per_item.get(item, 0),
                reactions=reactions_per_item.get(item, 0),
            )
            for item in items
        ),
        key=lambda c: (-c.engagement, c.parent_id),
    )

    return EngagementReport(
        totals=EngagementTotals(
            comments=len(comments),
            reactions=len(reactions),
            content_items=len(items),
        ),
        daily=daily,
        top_content=ranking[:top],
    )
