"""Tests for engagement report aggregation."""

from datetime import UTC, date, datetime, timedelta

from src.interactions.analytics import build_engagement_report
from src.interactions.models import Comment, Reaction, ReactionType


NOW = datetime(2024, 5, 10, 15, 30, tzinfo=UTC)


def comment(parent_id: str, days_ago: int = 0, comment_id: str = "") -> Comment:
    created = NOW - timedelta(days=days_ago)
    return Comment(
        comment_id=comment_id or f"{parent_id}-{days_ago}-{created.timestamp()}",
        parent_id=parent_id,
        reply_to_id=None,
        author_id="alice",
        author_name="Alice",
        author_role="Member",
        content="hi",
        created_at=created,
    )


def reaction(parent_id: str, user_id: str, days_ago: int = 0) -> Reaction:
    created = NOW - timedelta(days=days_ago)
    return Reaction(
        parent_id=parent_id,
        user_id=user_id,
        reaction_type=ReactionType.LIKE,
        created_at=created,
        updated_at=created,
    )


class TestBuildEngagementReport:
    """Tests for build_engagement_report."""

    def test_empty(self) -> None:
        report = build_engagement_report([], [], days=3, now=NOW)

        assert report.totals.comments == 0
        assert report.totals.content_items == 0
        assert [d.day for d in report.daily] == [
            date(2024, 5, 8),
            date(2024, 5, 9),
            date(2024, 5, 10),
        ]
        assert all(d.total == 0 for d in report.daily)
        assert report.top_content == []

    def test_daily_buckets_oldest_first(self) -> None:
        comments = [comment("a", 0, "c1"), comment("a", 1, "c2"), comment("b", 1, "c3")]
        reactions = [reaction("a", "u1", 2), reaction("b", "u2", 0)]

        report = build_engagement_report(comments, reactions, days=3, now=NOW)

        assert [(d.comments, d.reactions) for d in report.daily] == [
            (0, 1),
            (2, 0),
            (1, 1),
        ]

    def test_activity_outside_window_counts_in_totals_only(self) -> None:
        report = build_engagement_report(
            [comment("a", 30, "old")], [], days=7, now=NOW
        )

        assert report.totals.comments == 1
        assert sum(d.total for d in report.daily) == 0

    def test_top_content_ranked_with_id_tie_break(self) -> None:
        comments = [
            comment("busy", 0, "c1"),
            comment("busy", 0, "c2"),
            comment("quiet-b", 0, "c3"),
            comment("quiet-a", 0, "c4"),
        ]
        reactions = [reaction("busy", "u1")]

        report = build_engagement_report(comments, reactions, top=2, now=NOW)

        assert [(c.parent_id, c.engagement) for c in report.top_content] == [
            ("busy", 3),
            ("quiet-a", 1),
        ]
        assert report.totals.content_items == 3
