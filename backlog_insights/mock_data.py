"""
Sample Data Generator

Produces a realistic, reproducible item collection for demos and tests.
Randomness comes from a seeded random.Random and the reference time is
passed in, so the same arguments always yield the same items.
"""

import logging
import random
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from .normalizer import Item, IssuePriority, IssueStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LabelProfile:
    """A label and how much harder its items are to resolve (1.0 = normal)."""
    name: str
    weight: float


CATEGORIES = ("Bug", "Feature", "Documentation", "Performance", "Refactor")

LABEL_POOL = (
    LabelProfile("UI", 0.5),
    LabelProfile("Backend", 1.5),
    LabelProfile("Database", 2.0),
    LabelProfile("API", 1.2),
    LabelProfile("Auth", 1.8),
    LabelProfile("Accessibility", 0.8),
    LabelProfile("Tests", 1.0),
    LabelProfile("DevOps", 1.6),
    LabelProfile("Legacy-Code", 2.5),
)

CLOSED_RATIO = 0.6
IN_PROGRESS_RATIO = 0.3  # share of unresolved items already picked up
ASSIGNED_RATIO = 0.5
DEVELOPER_POOL = 10


def generate_mock_items(
    repo_name: str,
    count: int = 150,
    now: Optional[datetime] = None,
    seed: Optional[int] = None,
    rng: Optional[random.Random] = None
) -> list[Item]:
    """
    Generate sample items created over the year before `now`.

    Args:
        repo_name: owner/repo used for item URLs
        count: Number of items
        now: Reference time (defaults to midnight UTC, 2024-12-31)
        seed: Seed for a private random.Random
        rng: Explicit random source, overrides seed

    Returns:
        Items sorted newest first
    """
    if count < 0:
        raise ValueError("count cannot be negative")

    rng = rng or random.Random(seed)
    now = now or datetime(2024, 12, 31, tzinfo=timezone.utc)
    start = now - timedelta(days=365)
    span = (now - start).total_seconds()

    items = []
    for number in range(1, count + 1):
        created = start + timedelta(seconds=rng.random() * span)

        if rng.random() < CLOSED_RATIO:
            status = IssueStatus.CLOSED
        elif rng.random() < IN_PROGRESS_RATIO:
            status = IssueStatus.IN_PROGRESS
        else:
            status = IssueStatus.OPEN

        labels: list[str] = []
        max_weight = 1.0
        for _ in range(rng.randint(1, 3)):
            profile = rng.choice(LABEL_POOL)
            if profile.name not in labels:
                labels.append(profile.name)
                max_weight = max(max_weight, profile.weight)

        closed_at = None
        if status == IssueStatus.CLOSED:
            # Harder labels stretch the resolution time
            days = max(0.5, rng.random() * 20 * max_weight + (rng.random() * 5 - 2.5))
            closed_at = min(now, created + timedelta(days=days))

        assignee = None
        if rng.random() < ASSIGNED_RATIO:
            assignee = f"dev_{rng.randrange(DEVELOPER_POOL)}"

        title_category = rng.choice(CATEGORIES)
        items.append(Item(
            id=number,
            title=f"{title_category}: Issue description sample #{number}",
            status=status,
            priority=rng.choice(list(IssuePriority)),
            category=rng.choice(CATEGORIES),
            labels=tuple(labels),
            created_at=created,
            closed_at=closed_at,
            assignee=assignee,
            url=f"https://github.com/{repo_name}/issues/{number}",
        ))

    items.sort(key=lambda i: i.created_at, reverse=True)
    logger.debug("Generated %d sample items for %s", len(items), repo_name)
    return items
