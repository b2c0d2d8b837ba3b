"""
Item Normalizer

Maps raw issue records (GitHub REST payloads, mock data, plain dicts)
into the canonical Item shape used by the analyzer and predictor.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Optional, Union
from enum import Enum

logger = logging.getLogger(__name__)


class InvalidItemError(ValueError):
    """Raised when a record cannot be turned into a valid Item."""


class IssueStatus(Enum):
    """Lifecycle status of an item."""
    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    CLOSED = "Closed"


class IssuePriority(Enum):
    """Item priority."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


# Ordered: first matching rule wins
PRIORITY_RULES: tuple[tuple[IssuePriority, tuple[str, ...]], ...] = (
    (IssuePriority.CRITICAL, ("critical", "p0", "urgent")),
    (IssuePriority.HIGH, ("high", "p1")),
    (IssuePriority.MEDIUM, ("medium", "p2")),
)
DEFAULT_PRIORITY = IssuePriority.LOW

CATEGORY_RULES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Bug", ("bug", "fix", "error")),
    ("Feature", ("feat", "enhancement")),
    ("Documentation", ("doc",)),
    ("Performance", ("perf",)),
    ("Refactor", ("refactor",)),
)
DEFAULT_CATEGORY = "Other"


@dataclass(frozen=True)
class Item:
    """A normalized tracked work item."""
    id: Union[int, str]
    status: IssueStatus
    priority: IssuePriority
    category: str
    created_at: datetime
    closed_at: Optional[datetime] = None
    labels: tuple[str, ...] = field(default_factory=tuple)
    assignee: Optional[str] = None
    title: str = ""
    url: Optional[str] = None

    def __post_init__(self):
        if self.created_at is None:
            raise InvalidItemError(f"Item {self.id!r} has no creation timestamp")

        if self.closed_at is not None and (
            (self.created_at.tzinfo is None) != (self.closed_at.tzinfo is None)
        ):
            raise InvalidItemError(
                f"Item {self.id!r} mixes timezone-aware and naive timestamps"
            )

        if self.status == IssueStatus.CLOSED:
            if self.closed_at is None:
                raise InvalidItemError(f"Closed item {self.id!r} has no closing timestamp")
            if self.closed_at < self.created_at:
                raise InvalidItemError(f"Item {self.id!r} was closed before it was created")
        elif self.closed_at is not None:
            raise InvalidItemError(
                f"Item {self.id!r} is {self.status.value} but carries a closing timestamp"
            )

        # Labels behave as a set: drop duplicates, keep first-seen order
        object.__setattr__(self, "labels", tuple(dict.fromkeys(self.labels)))

    @property
    def is_open(self) -> bool:
        return self.status in (IssueStatus.OPEN, IssueStatus.IN_PROGRESS)

    @property
    def is_closed(self) -> bool:
        return self.status == IssueStatus.CLOSED

    @property
    def resolution_days(self) -> Optional[float]:
        """Fractional days from creation to closure, None while unresolved."""
        if self.closed_at is None:
            return None
        return (self.closed_at - self.created_at).total_seconds() / 86400

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "status": self.status.value,
            "priority": self.priority.value,
            "category": self.category,
            "labels": list(self.labels),
            "created_at": self.created_at.isoformat(),
            "closed_at": self.closed_at.isoformat() if self.closed_at else None,
            "assignee": self.assignee,
            "url": self.url,
        }


def _label_names(labels: Iterable[Any]) -> list[str]:
    """GitHub sends label objects, everything else sends plain strings."""
    names = []
    for label in labels or []:
        if isinstance(label, dict):
            name = label.get("name")
        else:
            name = label
        if name:
            names.append(str(name))
    return names


def classify_priority(labels: Iterable[Any]) -> IssuePriority:
    """
    Infer priority from label names.

    Matching is a case-insensitive substring test against each rule in
    order; falls back to DEFAULT_PRIORITY.
    """
    names = [n.lower() for n in _label_names(labels)]
    for priority, keywords in PRIORITY_RULES:
        if any(k in n for n in names for k in keywords):
            return priority
    return DEFAULT_PRIORITY


def classify_category(labels: Iterable[Any]) -> str:
    """Infer category from label names, falling back to DEFAULT_CATEGORY."""
    names = [n.lower() for n in _label_names(labels)]
    for category, keywords in CATEGORY_RULES:
        if any(k in n for n in names for k in keywords):
            return category
    return DEFAULT_CATEGORY


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp; datetimes pass through untouched."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError as e:
        raise InvalidItemError(f"Invalid timestamp: {value!r}") from e


def _enum_key(text: str) -> str:
    """Comparison key ignoring case, spaces, underscores and hyphens."""
    return re.sub(r"[\s_-]", "", text).lower()


def _parse_enum(enum_cls, value, default=None):
    if isinstance(value, enum_cls):
        return value
    if value is None:
        if default is None:
            raise InvalidItemError(f"Missing {enum_cls.__name__}")
        return default
    text = _enum_key(str(value))
    for member in enum_cls:
        if _enum_key(member.value) == text:
            return member
    raise InvalidItemError(f"Unknown {enum_cls.__name__}: {value!r}")


def normalize_github_issue(raw: dict) -> Item:
    """
    Convert a GitHub REST API issue payload into an Item.

    Args:
        raw: Issue dict as returned by GET /repos/{owner}/{repo}/issues

    Returns:
        Normalized Item with priority and category inferred from labels

    Raises:
        InvalidItemError: for pull requests or malformed payloads
    """
    if raw.get("pull_request"):
        raise InvalidItemError(f"#{raw.get('number')} is a pull request, not an issue")

    labels = raw.get("labels") or []
    assignee = raw.get("assignee")
    status = IssueStatus.OPEN if raw.get("state") == "open" else IssueStatus.CLOSED

    return Item(
        id=raw.get("number"),
        title=raw.get("title") or "",
        status=status,
        priority=classify_priority(labels),
        category=classify_category(labels),
        labels=tuple(_label_names(labels)),
        created_at=parse_timestamp(raw.get("created_at")),
        closed_at=parse_timestamp(raw.get("closed_at")) if status == IssueStatus.CLOSED else None,
        assignee=assignee.get("login") if isinstance(assignee, dict) else assignee,
        url=raw.get("html_url"),
    )


def normalize_github_issues(raws: Iterable[dict]) -> list[Item]:
    """Normalize a batch of GitHub payloads, skipping pull requests."""
    items = []
    skipped = 0
    for raw in raws:
        if raw.get("pull_request"):
            skipped += 1
            continue
        items.append(normalize_github_issue(raw))

    logger.debug("Normalized %d GitHub issues (skipped %d pull requests)", len(items), skipped)
    return items


def normalize_record(raw: dict) -> Item:
    """
    Convert a canonical-shape record into an Item.

    Accepts both camelCase (createdAt) and snake_case (created_at) keys.
    Missing priority or category are inferred from the labels.
    """
    def pick(*keys):
        for key in keys:
            if key in raw and raw[key] is not None:
                return raw[key]
        return None

    labels = _label_names(pick("labels") or [])
    priority = pick("priority")
    category = pick("category")

    return Item(
        id=pick("id", "number"),
        title=pick("title") or "",
        status=_parse_enum(IssueStatus, pick("status")),
        priority=_parse_enum(IssuePriority, priority) if priority else classify_priority(labels),
        category=category or classify_category(labels),
        labels=tuple(labels),
        created_at=parse_timestamp(pick("created_at", "createdAt")),
        closed_at=parse_timestamp(pick("closed_at", "closedAt")),
        assignee=pick("assignee"),
        url=pick("url", "html_url"),
    )


def normalize_records(raws: Iterable[dict]) -> list[Item]:
    """Normalize a batch of canonical-shape records."""
    return [normalize_record(raw) for raw in raws]
