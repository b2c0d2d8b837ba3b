"""
Backlog Insights

Aggregates issue history into statistics and forecasts the open backlog
under what-if capacity scenarios.
"""

__version__ = "1.0.0"

from .normalizer import (
    Item,
    IssueStatus,
    IssuePriority,
    InvalidItemError,
    classify_priority,
    classify_category,
    normalize_github_issue,
    normalize_github_issues,
    normalize_record,
    normalize_records
)

from .analyzer import (
    IssueAnalyzer,
    ProjectStats,
    MonthlyStat,
    CategoryStat,
    LabelStat,
    ContributorStat,
    aggregate
)

from .predictor import (
    BacklogForecaster,
    BacklogForecast,
    EfficiencyModel,
    CapacityAssumptions,
    SimulationConfig,
    TrendLine,
    HistoricalPoint,
    ProjectedPoint,
    ForecastPoint,
    WhatIfScenario,
    ForecastInputError,
    fit_trend,
    forecast,
    compare_scenario,
    efficiency_multiplier
)

from .mock_data import generate_mock_items

__all__ = [
    # Version
    "__version__",

    # Normalizer
    "Item",
    "IssueStatus",
    "IssuePriority",
    "InvalidItemError",
    "classify_priority",
    "classify_category",
    "normalize_github_issue",
    "normalize_github_issues",
    "normalize_record",
    "normalize_records",

    # Analyzer
    "IssueAnalyzer",
    "ProjectStats",
    "MonthlyStat",
    "CategoryStat",
    "LabelStat",
    "ContributorStat",
    "aggregate",

    # Predictor
    "BacklogForecaster",
    "BacklogForecast",
    "EfficiencyModel",
    "CapacityAssumptions",
    "SimulationConfig",
    "TrendLine",
    "HistoricalPoint",
    "ProjectedPoint",
    "ForecastPoint",
    "WhatIfScenario",
    "ForecastInputError",
    "fit_trend",
    "forecast",
    "compare_scenario",
    "efficiency_multiplier",

    # Sample data
    "generate_mock_items",
]
