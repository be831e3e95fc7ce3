"""
API Response Models

Standardized response structures for ranking and job endpoints.
"""

from datetime import datetime, timezone
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict

from .release import ReleaseSummary


class RecommendationResponse(BaseModel):
    """Genre-overlap recommendations for one seed release."""
    base: Optional[ReleaseSummary] = None
    items: List[ReleaseSummary] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class BatchResult(BaseModel):
    """Outcome of one ingestion query batch."""
    query_type: str = Field(alias="queryType")
    fetched: int = 0
    kept: int = 0
    persisted: int = 0
    error: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class IngestionSummary(BaseModel):
    """Outcome of a full catalog refresh."""
    generation: str
    genres: int = 0
    batches: List[BatchResult] = Field(default_factory=list)
    pruned: int = 0
    pruning_skipped: bool = Field(default=False, alias="pruningSkipped")
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), alias="startedAt")
    duration_seconds: float = Field(default=0.0, alias="durationSeconds")

    @property
    def failed_batches(self) -> List[str]:
        return [b.query_type for b in self.batches if b.error]

    model_config = ConfigDict(populate_by_name=True)


class ErrorResponse(BaseModel):
    """Body written by the ReleaseCalendarException handler."""
    error: bool = True
    message: str
    status_code: int

