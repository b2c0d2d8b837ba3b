"""
Issue Analyzer

Aggregates normalized items into project statistics: status counts,
resolution latency, monthly creation/resolution buckets, category
distribution, label cost and contributor health.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .normalizer import Item

logger = logging.getLogger(__name__)


MONTH_NAMES = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
               "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def round_half_up(value: float) -> int:
    """Round to the nearest integer, .5 going up."""
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class MonthlyStat:
    """Items created and resolved in one calendar month (all years merged)."""
    name: str
    created: int = 0
    resolved: int = 0

    def to_dict(self) -> dict:
        return {"name": self.name, "created": self.created, "resolved": self.resolved}


@dataclass(frozen=True)
class CategoryStat:
    name: str
    value: int

    def to_dict(self) -> dict:
        return {"name": self.name, "value": self.value}


@dataclass(frozen=True)
class LabelStat:
    """How often a label appears and how long its items take to close."""
    name: str
    count: int
    avg_resolution_days: float

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "count": self.count,
            "avg_resolution_days": self.avg_resolution_days,
        }


@dataclass(frozen=True)
class ContributorStat:
    """Per-assignee load and burnout risk."""
    name: str
    active_load: int
    total_resolved: int
    avg_days: float
    risk_score: int  # 0-100

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "active_load": self.active_load,
            "total_resolved": self.total_resolved,
            "avg_days": self.avg_days,
            "risk_score": self.risk_score,
        }


@dataclass(frozen=True)
class ProjectStats:
    """Aggregated statistics for an item collection."""
    total: int = 0
    open: int = 0
    closed: int = 0
    avg_resolution_days: int = 0
    monthly_trends: tuple[MonthlyStat, ...] = field(
        default_factory=lambda: tuple(MonthlyStat(name=m) for m in MONTH_NAMES)
    )
    category_distribution: tuple[CategoryStat, ...] = ()
    label_stats: tuple[LabelStat, ...] = ()
    contributor_stats: tuple[ContributorStat, ...] = ()

    def get_top_labels(self, n: int = 5) -> list[LabelStat]:
        """Get the N most frequent labels."""
        return list(self.label_stats[:n])

    def get_slowest_labels(self, n: int = 5) -> list[LabelStat]:
        """Get the N labels with the longest average resolution time."""
        ranked = sorted(self.label_stats, key=lambda s: s.avg_resolution_days, reverse=True)
        return ranked[:n]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "total": self.total,
            "open": self.open,
            "closed": self.closed,
            "avg_resolution_days": self.avg_resolution_days,
            "monthly_trends": [m.to_dict() for m in self.monthly_trends],
            "category_distribution": [c.to_dict() for c in self.category_distribution],
            "label_stats": [s.to_dict() for s in self.label_stats],
            "contributor_stats": [c.to_dict() for c in self.contributor_stats],
        }


@dataclass
class _Tally:
    """Running sums for one label or contributor."""
    count: int = 0
    open: int = 0
    closed: int = 0
    total_days: float = 0.0

    def average_days(self) -> float:
        if self.closed == 0:
            return 0.0
        # One decimal, ties round up
        return math.floor(self.total_days / self.closed * 10 + 0.5) / 10


@dataclass
class RiskWeights:
    """Contributor risk heuristic: load dominates, throughput adds the rest."""
    load_cap: int = 10
    load_weight: float = 60.0
    resolved_cap: int = 20
    resolved_weight: float = 40.0


class IssueAnalyzer:
    """
    Builds ProjectStats from a collection of normalized items.

    Usage:
        analyzer = IssueAnalyzer()
        stats = analyzer.analyze(items)
    """

    def __init__(self, risk_weights: Optional[RiskWeights] = None):
        self.risk_weights = risk_weights or RiskWeights()

    def contributor_risk(self, active_load: int, total_resolved: int) -> int:
        """Burnout risk score in 0-100 for one contributor."""
        w = self.risk_weights
        load_risk = min(w.load_cap, active_load) / w.load_cap * w.load_weight
        velocity_risk = min(w.resolved_cap, total_resolved) / w.resolved_cap * w.resolved_weight
        return round_half_up(min(100, load_risk + velocity_risk))

    def analyze(self, items: Iterable[Item]) -> ProjectStats:
        """
        Aggregate items in a single pass.

        Args:
            items: Normalized items, any order

        Returns:
            ProjectStats; an empty input yields all-zero stats
        """
        total = 0
        open_count = 0
        closed_count = 0
        total_days = 0.0

        created = [0] * 12
        resolved = [0] * 12
        categories: dict[str, int] = {}
        labels: dict[str, _Tally] = {}
        contributors: dict[str, _Tally] = {}

        for item in items:
            total += 1
            days = item.resolution_days

            created[item.created_at.month - 1] += 1
            categories[item.category] = categories.get(item.category, 0) + 1

            if item.is_open:
                open_count += 1
            elif days is not None:
                closed_count += 1
                total_days += days
                resolved[item.closed_at.month - 1] += 1

            for label in item.labels:
                tally = labels.setdefault(label, _Tally())
                tally.count += 1
                if days is not None:
                    tally.closed += 1
                    tally.total_days += days

            if item.assignee:
                tally = contributors.setdefault(item.assignee, _Tally())
                if item.is_open:
                    tally.open += 1
                elif days is not None:
                    tally.closed += 1
                    tally.total_days += days

        avg_resolution_days = round_half_up(total_days / closed_count) if closed_count else 0

        label_stats = [
            LabelStat(name=name, count=t.count, avg_resolution_days=t.average_days())
            for name, t in labels.items()
        ]
        # sort() is stable, ties keep encounter order
        label_stats.sort(key=lambda s: s.count, reverse=True)

        contributor_stats = [
            ContributorStat(
                name=name,
                active_load=t.open,
                total_resolved=t.closed,
                avg_days=t.average_days(),
                risk_score=self.contributor_risk(t.open, t.closed),
            )
            for name, t in contributors.items()
        ]
        contributor_stats.sort(key=lambda c: c.risk_score, reverse=True)

        logger.debug(
            "Aggregated %d items (%d open, %d closed, %d labels)",
            total, open_count, closed_count, len(label_stats)
        )

        return ProjectStats(
            total=total,
            open=open_count,
            closed=closed_count,
            avg_resolution_days=avg_resolution_days,
            monthly_trends=tuple(
                MonthlyStat(name=MONTH_NAMES[i], created=created[i], resolved=resolved[i])
                for i in range(12)
            ),
            category_distribution=tuple(
                CategoryStat(name=name, value=value) for name, value in categories.items()
            ),
            label_stats=tuple(label_stats),
            contributor_stats=tuple(contributor_stats),
        )


# Convenience function
def aggregate(items: Iterable[Item]) -> ProjectStats:
    """
    Quick function to aggregate an item collection.

    Example:
        stats = aggregate(items)

        print(f"Open: {stats.open} / {stats.total}")
        for label in stats.get_top_labels(3):
            print(f"  {label.name}: {label.count} ({label.avg_resolution_days}d)")
    """
    return IssueAnalyzer().analyze(items)
