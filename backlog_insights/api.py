"""
FastAPI Backend for Backlog Insights

Exposes project statistics, backlog forecasts and what-if scenarios over REST.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Union
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field

from .analyzer import IssueAnalyzer, MonthlyStat
from .config import Settings
from .mock_data import generate_mock_items
from .normalizer import normalize_records
from .predictor import BacklogForecaster, SimulationConfig

logger = logging.getLogger(__name__)


# Pydantic models for API
class ItemPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Union[int, str]
    title: str = ""
    status: str
    priority: Optional[str] = None
    category: Optional[str] = None
    labels: list[str] = Field(default_factory=list)
    created_at: datetime = Field(alias="createdAt")
    closed_at: Optional[datetime] = Field(default=None, alias="closedAt")
    assignee: Optional[str] = None
    url: Optional[str] = None


class StatsRequest(BaseModel):
    items: list[ItemPayload]


class MonthlyStatPayload(BaseModel):
    name: str
    created: int = Field(ge=0)
    resolved: int = Field(ge=0)


class SimulationPayload(BaseModel):
    developer_count_change: int = 0
    incoming_issue_rate: float = Field(default=1.0, gt=0)
    weekly_meeting_hours: float = Field(default=6.0, ge=0)
    code_review_avg_hours: float = Field(default=24.0, gt=0)


class ForecastRequest(BaseModel):
    monthly_trends: list[MonthlyStatPayload]
    config: Optional[SimulationPayload] = None


def _to_history(payload: list[MonthlyStatPayload]) -> list[MonthlyStat]:
    return [MonthlyStat(name=m.name, created=m.created, resolved=m.resolved) for m in payload]


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the API around an explicit settings object."""
    settings = settings or Settings()
    analyzer = IssueAnalyzer()
    forecaster = BacklogForecaster()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    def scenario_for(payload: Optional[SimulationPayload]) -> SimulationConfig:
        if payload is None:
            return settings.simulation
        return SimulationConfig(**payload.model_dump())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown events."""
        logger.info("Backlog Insights API starting up (config: %s)", settings.config_path)
        yield
        logger.info("Backlog Insights API shutting down")

    app = FastAPI(
        title="Backlog Insights",
        description="API for issue statistics and backlog forecasting",
        version="1.0.0",
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "default_scenario": settings.simulation.to_dict(),
        }

    @app.post("/api/stats")
    def get_stats(request: StatsRequest):
        """Aggregate a normalized item collection."""
        try:
            items = normalize_records(item.model_dump() for item in request.items)
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))

        return analyzer.analyze(items).to_dict()

    @app.post("/api/forecast")
    def get_forecast(request: ForecastRequest):
        """Project the backlog three periods ahead."""
        try:
            result = forecaster.forecast(
                _to_history(request.monthly_trends),
                scenario_for(request.config)
            )
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))

        return result.to_dict()

    @app.post("/api/what-if")
    def run_what_if_scenario(request: ForecastRequest):
        """Compare a scenario with the baseline forecast."""
        try:
            scenario = forecaster.what_if(
                _to_history(request.monthly_trends),
                scenario_for(request.config)
            )
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))

        return scenario.to_dict()

    # Sample data endpoint (for testing)
    @app.get("/api/sample-data")
    def get_sample_data(
        repo: Optional[str] = None,
        count: Optional[int] = None,
        seed: Optional[int] = None
    ):
        """Get generated items with their statistics and baseline forecast."""
        repo = repo or settings.sample_repo
        count = settings.sample_count if count is None else count
        seed = settings.sample_seed if seed is None else seed

        if count < 0:
            raise HTTPException(status_code=422, detail="count cannot be negative")

        items = generate_mock_items(repo, count=count, now=datetime.now(timezone.utc), seed=seed)
        stats = analyzer.analyze(items)
        result = forecaster.forecast(stats.monthly_trends, settings.simulation)

        return {
            "repo": repo,
            "items": [item.to_dict() for item in items],
            "stats": stats.to_dict(),
            "forecast": result.to_dict(),
        }

    return app


app = create_app()


# Run with: uvicorn backlog_insights.api:app --reload
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
