"""
Tests for the item normalizer.
"""

import pytest
from datetime import datetime, timezone

from backlog_insights.normalizer import (
    Item,
    IssueStatus,
    IssuePriority,
    InvalidItemError,
    classify_priority,
    classify_category,
    normalize_github_issue,
    normalize_github_issues,
    normalize_record,
    parse_timestamp
)


def _utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


class TestClassification:
    """Tests for label-based priority and category inference."""

    def test_priority_critical_wins(self):
        """Critical keywords outrank lower priorities."""
        assert classify_priority(["p1", "URGENT"]) == IssuePriority.CRITICAL
        assert classify_priority(["severity: critical"]) == IssuePriority.CRITICAL

    def test_priority_high_and_medium(self):
        assert classify_priority(["priority-high"]) == IssuePriority.HIGH
        assert classify_priority(["P2"]) == IssuePriority.MEDIUM

    def test_priority_fallback(self):
        """Unmatched labels fall back to Low."""
        assert classify_priority(["question"]) == IssuePriority.LOW
        assert classify_priority([]) == IssuePriority.LOW

    def test_priority_accepts_label_objects(self):
        assert classify_priority([{"name": "P0"}]) == IssuePriority.CRITICAL

    def test_category_rules(self):
        assert classify_category(["type: bug"]) == "Bug"
        assert classify_category(["enhancement"]) == "Feature"
        assert classify_category(["docs"]) == "Documentation"
        assert classify_category(["perf"]) == "Performance"
        assert classify_category(["refactoring"]) == "Refactor"

    def test_category_order(self):
        """Bug rules are checked before feature rules."""
        assert classify_category(["feature", "bugfix"]) == "Bug"

    def test_category_fallback(self):
        assert classify_category(["question"]) == "Other"


class TestItem:
    """Tests for Item invariants."""

    def test_closed_item_requires_closed_at(self):
        with pytest.raises(InvalidItemError):
            Item(
                id=1, status=IssueStatus.CLOSED, priority=IssuePriority.LOW,
                category="Bug", created_at=_utc(2024, 1, 1)
            )

    def test_open_item_rejects_closed_at(self):
        with pytest.raises(InvalidItemError):
            Item(
                id=1, status=IssueStatus.OPEN, priority=IssuePriority.LOW,
                category="Bug", created_at=_utc(2024, 1, 1), closed_at=_utc(2024, 1, 2)
            )

    def test_mixed_timezones(self):
        with pytest.raises(InvalidItemError):
            Item(
                id=1, status=IssueStatus.CLOSED, priority=IssuePriority.LOW,
                category="Bug", created_at=_utc(2024, 1, 1), closed_at=datetime(2024, 1, 3)
            )

    def test_closed_before_created(self):
        with pytest.raises(InvalidItemError):
            Item(
                id=1, status=IssueStatus.CLOSED, priority=IssuePriority.LOW,
                category="Bug", created_at=_utc(2024, 1, 5), closed_at=_utc(2024, 1, 2)
            )

    def test_missing_created_at(self):
        with pytest.raises(InvalidItemError):
            Item(id=1, status=IssueStatus.OPEN, priority=IssuePriority.LOW,
                 category="Bug", created_at=None)

    def test_duplicate_labels_collapse(self):
        item = Item(
            id=1, status=IssueStatus.OPEN, priority=IssuePriority.LOW,
            category="Bug", created_at=_utc(2024, 1, 1), labels=("UI", "API", "UI")
        )
        assert item.labels == ("UI", "API")

    def test_resolution_days(self):
        item = Item(
            id=1, status=IssueStatus.CLOSED, priority=IssuePriority.LOW,
            category="Bug", created_at=_utc(2024, 1, 1), closed_at=_utc(2024, 1, 3, 12)
        )
        assert item.resolution_days == 2.5
        assert item.is_closed
        assert not item.is_open


class TestGitHubNormalization:
    """Tests for GitHub REST payload normalization."""

    def _raw(self, **overrides):
        raw = {
            "number": 42,
            "title": "Login page crashes",
            "state": "closed",
            "labels": [{"name": "bug"}, {"name": "P1"}],
            "created_at": "2024-03-01T10:00:00Z",
            "closed_at": "2024-03-04T10:00:00Z",
            "assignee": {"login": "alice"},
            "html_url": "https://github.com/acme/app/issues/42",
        }
        raw.update(overrides)
        return raw

    def test_closed_issue(self):
        item = normalize_github_issue(self._raw())

        assert item.id == 42
        assert item.status == IssueStatus.CLOSED
        assert item.priority == IssuePriority.HIGH
        assert item.category == "Bug"
        assert item.labels == ("bug", "P1")
        assert item.assignee == "alice"
        assert item.resolution_days == 3.0

    def test_open_issue_drops_closed_at(self):
        item = normalize_github_issue(self._raw(state="open", closed_at=None, assignee=None))

        assert item.status == IssueStatus.OPEN
        assert item.closed_at is None
        assert item.assignee is None

    def test_pull_request_rejected(self):
        with pytest.raises(InvalidItemError):
            normalize_github_issue(self._raw(pull_request={"url": "..."}))

    def test_batch_skips_pull_requests(self):
        raws = [
            self._raw(number=1),
            self._raw(number=2, pull_request={"url": "..."}),
            self._raw(number=3),
        ]
        items = normalize_github_issues(raws)
        assert [i.id for i in items] == [1, 3]

    def test_closed_issue_without_timestamp(self):
        with pytest.raises(InvalidItemError):
            normalize_github_issue(self._raw(closed_at=None))


class TestRecordNormalization:
    """Tests for canonical-shape records."""

    def test_camel_case_keys(self):
        item = normalize_record({
            "id": 7,
            "status": "In Progress",
            "priority": "High",
            "category": "Feature",
            "labels": ["API"],
            "createdAt": "2024-05-01T00:00:00Z",
        })

        assert item.status == IssueStatus.IN_PROGRESS
        assert item.priority == IssuePriority.HIGH
        assert item.created_at == _utc(2024, 5, 1)

    def test_inferred_priority_and_category(self):
        item = normalize_record({
            "id": "X-1",
            "status": "open",
            "labels": ["critical", "docs"],
            "created_at": "2024-05-01T00:00:00+00:00",
        })

        assert item.priority == IssuePriority.CRITICAL
        assert item.category == "Documentation"

    def test_status_spellings(self):
        """Status matching ignores case, spaces, underscores and hyphens."""
        for spelling in ("InProgress", "in_progress", "IN-PROGRESS", "In Progress"):
            item = normalize_record({"id": 1, "status": spelling, "createdAt": "2024-01-01T00:00:00Z"})
            assert item.status == IssueStatus.IN_PROGRESS

    def test_unknown_status(self):
        with pytest.raises(InvalidItemError):
            normalize_record({"id": 1, "status": "Blocked", "created_at": "2024-05-01"})

    def test_invalid_timestamp(self):
        with pytest.raises(InvalidItemError):
            parse_timestamp("yesterday")
