"""
Tests for dashboard figures.
"""

from datetime import date, datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from api.services.dashboard import (
    bucket_by_week,
    compute_metric,
    get_top_performers,
    rank_top,
    week_label,
)
from core.middleware.authorization import UserContext
from database.models.organizations import StaffRole

REFERENCE = datetime(2024, 5, 15, 12, 0, tzinfo=timezone.utc)  # ISO week 2024-W20


class TestComputeMetric:

    @pytest.mark.parametrize("recent,previous,change,trend", [
        (15, 10, 50.0, "up"),
        (5, 10, -50.0, "down"),
        (10, 10, 0.0, "stable"),
        (3, 0, 100.0, "up"),
        (0, 0, 0.0, "stable"),
        (1, 3, -66.7, "down"),
    ])
    def test_change_and_trend(self, recent, previous, change, trend):
        metric = compute_metric(42, recent, previous)
        assert metric == {"value": 42, "change": change, "trend": trend}


class TestWeeklyBuckets:

    def test_week_label(self):
        assert week_label(date(2024, 5, 13)) == "2024-W20"
        assert week_label(date(2024, 12, 30)) == "2025-W01"

    def test_buckets_oldest_first_with_empty_weeks(self):
        rows = [
            (REFERENCE, "Acme", "Backend Engineer"),
            (REFERENCE - timedelta(days=1), "Acme", "Data Analyst"),
            (REFERENCE - timedelta(days=1), "Globex", "Data Analyst"),
            (REFERENCE - timedelta(weeks=2), "Globex", "QA"),
        ]
        weeks = bucket_by_week(rows, weeks_back=4, reference=REFERENCE)

        assert [w["week"] for w in weeks] == ["2024-W17", "2024-W18", "2024-W19", "2024-W20"]
        assert weeks[-1] == {
            "week": "2024-W20",
            "week_start": date(2024, 5, 13),
            "applications": 3,
            "companies": 2,
            "roles": 2,
        }
        assert weeks[1]["applications"] == 1
        assert weeks[0]["applications"] == 0
        assert weeks[2]["applications"] == 0

    def test_rows_outside_window_ignored(self):
        rows = [(REFERENCE - timedelta(weeks=10), "Acme", "QA")]
        weeks = bucket_by_week(rows, weeks_back=2, reference=REFERENCE)
        assert sum(w["applications"] for w in weeks) == 0

    def test_naive_dates_treated_as_utc(self):
        weeks = bucket_by_week([(datetime(2024, 5, 13, 0, 30), "Acme", "QA")], 1, REFERENCE)
        assert weeks[0]["applications"] == 1

    def test_invalid_weeks_back(self):
        with pytest.raises(ValueError):
            bucket_by_week([], weeks_back=0, reference=REFERENCE)


class TestRankTop:

    def test_sorted_with_share_of_total(self):
        ranked = rank_top([("QA", 1), ("Backend", 6), ("Data", 3)], limit=2)
        assert ranked == [
            {"name": "Backend", "value": 6, "percentage": 60.0},
            {"name": "Data", "value": 3, "percentage": 30.0},
        ]

    def test_empty(self):
        assert rank_top([]) == []


class TestTopPerformers:

    async def test_invalid_metric(self):
        ctx = UserContext(user_id=1, organization_id=1, roles=[StaffRole.HR])
        with pytest.raises(ValueError, match="Invalid metric type"):
            await get_top_performers(AsyncMock(), ctx, "salaries")

    async def test_ranks_query_rows(self):
        session = AsyncMock()
        result = MagicMock()
        result.all.return_value = [("Acme", 2), ("Globex", 8)]
        session.execute.return_value = result
        ctx = UserContext(user_id=1, organization_id=1, roles=[StaffRole.ADMIN])

        top = await get_top_performers(session, ctx, "companies", limit=5)

        assert [row["name"] for row in top] == ["Globex", "Acme"]
        assert top[0]["percentage"] == 80.0
        session.execute.assert_awaited_once()
