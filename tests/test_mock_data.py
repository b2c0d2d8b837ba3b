"""
Tests for the sample data generator.
"""

import pytest
from datetime import datetime, timedelta, timezone

from backlog_insights.analyzer import aggregate
from backlog_insights.mock_data import LABEL_POOL, generate_mock_items
from backlog_insights.normalizer import IssueStatus


NOW = datetime(2024, 6, 30, tzinfo=timezone.utc)


class TestGenerateMockItems:
    """Tests for generate_mock_items."""

    def test_same_seed_same_items(self):
        first = generate_mock_items("acme/app", count=50, now=NOW, seed=7)
        second = generate_mock_items("acme/app", count=50, now=NOW, seed=7)

        assert first == second

    def test_different_seed(self):
        first = generate_mock_items("acme/app", count=50, now=NOW, seed=1)
        second = generate_mock_items("acme/app", count=50, now=NOW, seed=2)

        assert first != second

    def test_items_are_valid(self):
        items = generate_mock_items("acme/app", count=200, now=NOW, seed=3)
        pool = {p.name for p in LABEL_POOL}

        assert len(items) == 200
        for item in items:
            assert NOW - timedelta(days=365) <= item.created_at <= NOW
            assert 1 <= len(item.labels) <= 3
            assert set(item.labels) <= pool
            if item.status == IssueStatus.CLOSED:
                assert item.created_at <= item.closed_at <= NOW
            else:
                assert item.closed_at is None
            assert item.url == f"https://github.com/acme/app/issues/{item.id}"

    def test_sorted_newest_first(self):
        items = generate_mock_items("acme/app", count=30, now=NOW, seed=4)
        created = [i.created_at for i in items]

        assert created == sorted(created, reverse=True)

    def test_feeds_analyzer(self):
        items = generate_mock_items("acme/app", count=150, now=NOW, seed=5)
        stats = aggregate(items)

        assert stats.total == 150
        assert stats.open + stats.closed == 150
        assert stats.closed > 0
        assert sum(m.created for m in stats.monthly_trends) == 150
        assert sum(m.resolved for m in stats.monthly_trends) == stats.closed

    def test_zero_and_negative_count(self):
        assert generate_mock_items("acme/app", count=0, now=NOW) == []
        with pytest.raises(ValueError):
            generate_mock_items("acme/app", count=-1, now=NOW)
