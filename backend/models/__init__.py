"""
API models package
"""
from models.analysis import (
    AnalyzeRequest,
    HistogramRequest,
    ColumnProfile,
    HistogramData,
    ColumnOutliers,
    AnalysisResponse,
)

__all__ = [
    "AnalyzeRequest", "HistogramRequest",
    "ColumnProfile", "HistogramData", "ColumnOutliers", "AnalysisResponse",
]
