"""
Analysis models - request and response schemas for the profiling API
"""
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field

from services.profiler import ColumnType


class AnalyzeRequest(BaseModel):
    """Rows to profile, as parsed from the source file"""
    # Checked by the profiler: absent or malformed rows are a 400
    rows: Optional[Any] = None
    column: Optional[str] = None  # Histogram column; default = first numeric
    buckets: Optional[int] = None


class HistogramRequest(BaseModel):
    """Histogram for a single chosen column"""
    rows: Optional[Any] = None
    column: Optional[str] = None  # Required, checked by the router
    buckets: Optional[int] = None


class ColumnProfile(BaseModel):
    """Statistics computed for one column"""
    count: int
    missing: int
    unique: int
    type: Optional[ColumnType] = None
    is_numeric: bool = False

    # Numeric-only fields
    mean: Optional[float] = None
    std: Optional[float] = None
    min: Optional[float] = None
    max: Optional[float] = None
    median: Optional[float] = None
    q1: Optional[float] = None
    q3: Optional[float] = None
    iqr: Optional[float] = None
    outliers_iqr: Optional[list[float]] = None
    outliers_z: Optional[list[float]] = None


class HistogramData(BaseModel):
    """Bucket labels with aligned counts, ready for a bar chart"""
    column: str
    labels: list[str]
    counts: list[int]


class ColumnOutliers(BaseModel):
    """Outliers of one numeric column, by method"""
    iqr: list[float]
    z: list[float]


class AnalysisResponse(BaseModel):
    """Full analysis of a dataset"""
    model_config = ConfigDict(populate_by_name=True)

    summary: str
    types: dict[str, ColumnType]
    statistics: dict[str, ColumnProfile]
    insights: list[str]
    recommendations: str
    chart_data: Optional[HistogramData] = Field(default=None, alias="chartData")
    outliers: dict[str, ColumnOutliers] = Field(default_factory=dict)
