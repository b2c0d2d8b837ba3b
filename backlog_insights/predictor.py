"""
Backlog Forecaster

Fits linear trends to the monthly creation/resolution series and projects
the open backlog forward under a what-if capacity scenario.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from .analyzer import MonthlyStat, round_half_up

logger = logging.getLogger(__name__)


HISTORY_LENGTH = 12
PROJECTION_LABELS = ("Next M1", "Next M2", "Next M3")


class ForecastInputError(ValueError):
    """Raised when the monthly history does not satisfy the forecast contract."""


@dataclass(frozen=True)
class TrendLine:
    """Least-squares line y = slope * x + intercept."""
    slope: float = 0.0
    intercept: float = 0.0

    def at(self, index: float) -> float:
        """Evaluate the line at an index (may be negative)."""
        return self.slope * index + self.intercept


def fit_trend(values: Sequence[float]) -> TrendLine:
    """
    Ordinary least squares over (index, value) pairs.

    An empty series gives a zero line; a single point gives a flat line
    through that point instead of dividing by zero.
    """
    n = len(values)
    if n == 0:
        return TrendLine()
    if n == 1:
        return TrendLine(slope=0.0, intercept=float(values[0]))

    x_sum = sum(range(n))
    y_sum = sum(values)
    xx_sum = sum(i * i for i in range(n))
    xy_sum = sum(i * v for i, v in enumerate(values))

    slope = (n * xy_sum - x_sum * y_sum) / (n * xx_sum - x_sum * x_sum)
    intercept = (y_sum - slope * x_sum) / n
    return TrendLine(slope=slope, intercept=intercept)


@dataclass(frozen=True)
class SimulationConfig:
    """What-if scenario parameters. Defaults describe the historical baseline."""
    developer_count_change: int = 0
    incoming_issue_rate: float = 1.0
    weekly_meeting_hours: float = 6.0
    code_review_avg_hours: float = 24.0

    def __post_init__(self):
        if self.incoming_issue_rate <= 0:
            raise ValueError("incoming_issue_rate must be positive")
        if self.weekly_meeting_hours < 0:
            raise ValueError("weekly_meeting_hours cannot be negative")
        if self.code_review_avg_hours <= 0:
            raise ValueError("code_review_avg_hours must be positive")

    def to_dict(self) -> dict:
        return {
            "developer_count_change": self.developer_count_change,
            "incoming_issue_rate": self.incoming_issue_rate,
            "weekly_meeting_hours": self.weekly_meeting_hours,
            "code_review_avg_hours": self.code_review_avg_hours,
        }


@dataclass
class CapacityAssumptions:
    """Baseline constants behind the efficiency model."""
    work_week_hours: float = 40.0
    baseline_meeting_hours: float = 6.0
    min_work_hours: float = 10.0
    baseline_review_hours: float = 24.0
    review_sensitivity: float = 0.005   # velocity change per hour of review latency
    dev_added_gain: float = 0.15
    dev_removed_loss: float = 0.18
    min_headcount_factor: float = 0.1


class EfficiencyModel:
    """
    Turns a SimulationConfig into a single throughput multiplier.

    Usage:
        model = EfficiencyModel()
        multiplier = model.multiplier(SimulationConfig(weekly_meeting_hours=15))
    """

    def __init__(self, assumptions: Optional[CapacityAssumptions] = None):
        self.assumptions = assumptions or CapacityAssumptions()

    def meeting_factor(self, config: SimulationConfig) -> float:
        """Remaining work hours relative to the baseline week."""
        a = self.assumptions
        available = max(a.min_work_hours, a.work_week_hours - config.weekly_meeting_hours)
        return available / (a.work_week_hours - a.baseline_meeting_hours)

    def review_factor(self, config: SimulationConfig) -> float:
        a = self.assumptions
        return 1 + (a.baseline_review_hours - config.code_review_avg_hours) * a.review_sensitivity

    def headcount_factor(self, config: SimulationConfig) -> float:
        a = self.assumptions
        change = config.developer_count_change
        if change >= 0:
            return 1 + change * a.dev_added_gain
        return max(a.min_headcount_factor, 1 + change * a.dev_removed_loss)

    def multiplier(self, config: SimulationConfig) -> float:
        """Combined efficiency multiplier applied to the resolution trend."""
        return (
            self.meeting_factor(config) *
            self.review_factor(config) *
            self.headcount_factor(config)
        )


@dataclass(frozen=True)
class HistoricalPoint:
    """Observed backlog level at the end of a calendar month."""
    name: str
    value: int

    @property
    def historical_open(self) -> Optional[int]:
        return self.value

    @property
    def projected_open(self) -> Optional[int]:
        return None

    def to_dict(self) -> dict:
        return {"name": self.name, "historical_open": self.value}


@dataclass(frozen=True)
class ProjectedPoint:
    """Projected backlog level for a future period."""
    name: str
    value: int

    @property
    def historical_open(self) -> Optional[int]:
        return None

    @property
    def projected_open(self) -> Optional[int]:
        return self.value

    def to_dict(self) -> dict:
        return {"name": self.name, "projected_open": self.value}


ForecastPoint = Union[HistoricalPoint, ProjectedPoint]


@dataclass(frozen=True)
class BacklogForecast:
    """Forecast output: 12 historical points followed by the projections."""
    config: SimulationConfig
    efficiency_multiplier: float
    created_trend: TrendLine
    resolved_trend: TrendLine
    points: tuple[ForecastPoint, ...] = ()

    @property
    def historical(self) -> list[HistoricalPoint]:
        return [p for p in self.points if isinstance(p, HistoricalPoint)]

    @property
    def projected(self) -> list[ProjectedPoint]:
        return [p for p in self.points if isinstance(p, ProjectedPoint)]

    @property
    def current_backlog(self) -> int:
        history = self.historical
        return history[-1].value if history else 0

    @property
    def final_backlog(self) -> int:
        projected = self.projected
        return projected[-1].value if projected else self.current_backlog

    def to_dict(self) -> dict:
        return {
            "config": self.config.to_dict(),
            "efficiency_multiplier": round(self.efficiency_multiplier, 4),
            "trends": {
                "created": {"slope": self.created_trend.slope, "intercept": self.created_trend.intercept},
                "resolved": {"slope": self.resolved_trend.slope, "intercept": self.resolved_trend.intercept},
            },
            "points": [p.to_dict() for p in self.points],
        }


@dataclass(frozen=True)
class WhatIfScenario:
    """A scenario forecast compared against the baseline configuration."""
    scenario_name: str
    baseline: BacklogForecast
    modified: BacklogForecast
    impact_description: str

    @property
    def backlog_change(self) -> int:
        return self.modified.final_backlog - self.baseline.final_backlog

    def to_dict(self) -> dict:
        return {
            "scenario": self.scenario_name,
            "impact": self.impact_description,
            "backlog_change": self.backlog_change,
            "baseline": self.baseline.to_dict(),
            "modified": self.modified.to_dict(),
        }


def backlog_history(history: Sequence[MonthlyStat]) -> list[int]:
    """Running backlog (created - resolved), floored at zero every month."""
    backlog = 0
    levels = []
    for month in history:
        backlog = max(0, backlog + month.created - month.resolved)
        levels.append(backlog)
    return levels


class BacklogForecaster:
    """
    Projects the open backlog from a 12-month creation/resolution history.

    Usage:
        forecaster = BacklogForecaster()
        result = forecaster.forecast(stats.monthly_trends, SimulationConfig(developer_count_change=2))
    """

    def __init__(
        self,
        efficiency_model: Optional[EfficiencyModel] = None,
        projection_labels: Sequence[str] = PROJECTION_LABELS
    ):
        self.efficiency_model = efficiency_model or EfficiencyModel()
        self.projection_labels = tuple(projection_labels)

    def _validate(self, history: Sequence[MonthlyStat]):
        if len(history) != HISTORY_LENGTH:
            raise ForecastInputError(
                f"Expected {HISTORY_LENGTH} monthly buckets, got {len(history)}"
            )
        for month in history:
            if month.created < 0 or month.resolved < 0:
                raise ForecastInputError(f"Negative counts in bucket {month.name!r}")

    def forecast(
        self,
        history: Sequence[MonthlyStat],
        config: Optional[SimulationConfig] = None
    ) -> BacklogForecast:
        """
        Build the historical backlog curve and project it forward.

        Args:
            history: Exactly 12 monthly buckets, Jan to Dec
            config: Scenario to apply (baseline if omitted)

        Returns:
            BacklogForecast with 12 historical and len(projection_labels) projected points

        Raises:
            ForecastInputError: if the history is not 12 non-negative buckets
        """
        self._validate(history)
        config = config or SimulationConfig()

        levels = backlog_history(history)
        points: list[ForecastPoint] = [
            HistoricalPoint(name=month.name, value=level)
            for month, level in zip(history, levels)
        ]

        created_trend = fit_trend([m.created for m in history])
        resolved_trend = fit_trend([m.resolved for m in history])
        multiplier = self.efficiency_model.multiplier(config)

        projected_backlog = float(levels[-1])
        for offset, label in enumerate(self.projection_labels):
            index = len(history) + offset
            predicted_created = max(0.0, created_trend.at(index) * config.incoming_issue_rate)
            predicted_resolved = max(0.0, resolved_trend.at(index) * multiplier)

            projected_backlog = max(0.0, projected_backlog + predicted_created - predicted_resolved)
            points.append(ProjectedPoint(name=label, value=round_half_up(projected_backlog)))

        logger.debug(
            "Forecast with multiplier %.3f: backlog %d -> %d",
            multiplier, levels[-1], points[-1].value
        )

        return BacklogForecast(
            config=config,
            efficiency_multiplier=multiplier,
            created_trend=created_trend,
            resolved_trend=resolved_trend,
            points=tuple(points),
        )

    def what_if(
        self,
        history: Sequence[MonthlyStat],
        config: SimulationConfig,
        scenario_name: Optional[str] = None
    ) -> WhatIfScenario:
        """
        Compare a scenario against the baseline configuration.
        """
        baseline = self.forecast(history, SimulationConfig())
        modified = self.forecast(history, config)

        change = modified.final_backlog - baseline.final_backlog
        if change > 0:
            direction = f"grows by {change}"
        elif change < 0:
            direction = f"shrinks by {-change}"
        else:
            direction = "is unchanged"

        impact_description = (
            f"Team efficiency is {modified.efficiency_multiplier:.2f}x baseline. "
            f"Projected backlog after {len(self.projection_labels)} periods {direction} "
            f"({baseline.final_backlog} -> {modified.final_backlog})."
        )

        return WhatIfScenario(
            scenario_name=scenario_name or describe_scenario(config),
            baseline=baseline,
            modified=modified,
            impact_description=impact_description,
        )


def describe_scenario(config: SimulationConfig) -> str:
    """Short label listing the parameters that differ from the baseline."""
    baseline = SimulationConfig()
    parts = []
    if config.developer_count_change != baseline.developer_count_change:
        parts.append(f"{config.developer_count_change:+d} developers")
    if config.incoming_issue_rate != baseline.incoming_issue_rate:
        parts.append(f"{config.incoming_issue_rate:g}x incoming issues")
    if config.weekly_meeting_hours != baseline.weekly_meeting_hours:
        parts.append(f"{config.weekly_meeting_hours:g}h meetings/week")
    if config.code_review_avg_hours != baseline.code_review_avg_hours:
        parts.append(f"{config.code_review_avg_hours:g}h code review")
    return ", ".join(parts) if parts else "Baseline"


# Convenience functions
def forecast(
    monthly_trends: Sequence[MonthlyStat],
    config: Optional[SimulationConfig] = None
) -> list[ForecastPoint]:
    """
    Quick function to forecast the backlog.

    Example:
        points = forecast(stats.monthly_trends, SimulationConfig(incoming_issue_rate=1.2))

        for point in points:
            print(point.name, point.historical_open, point.projected_open)
    """
    return list(BacklogForecaster().forecast(monthly_trends, config).points)


def compare_scenario(
    monthly_trends: Sequence[MonthlyStat],
    config: SimulationConfig
) -> WhatIfScenario:
    """Quick function to compare a scenario against the baseline."""
    return BacklogForecaster().what_if(monthly_trends, config)


def efficiency_multiplier(config: SimulationConfig) -> float:
    """Quick function for the combined efficiency multiplier."""
    return EfficiencyModel().multiplier(config)
