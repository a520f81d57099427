"""
Column profiling engine for CSV Analyzer.

Takes rows already parsed into records (column name -> raw value) and
produces:
- a semantic type per column (numeric / date / categorical)
- descriptive statistics per column, with IQR and z-score outliers
- a bucketed histogram for one numeric column
- human-readable insights

Everything here is a pure function of its input rows. No state is kept
between calls, so the same rows always produce the same analysis.
"""
import math
from decimal import Decimal
from collections.abc import Mapping, Sequence
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from dateutil import parser as dateparser
from loguru import logger

from exceptions import InvalidInputError


class ColumnType(str, Enum):
    """Semantic column types."""
    NUMERIC = "numeric"
    DATE = "date"
    CATEGORICAL = "categorical"


# Share of numeric values above which a mixed column still counts as numeric
NUMERIC_NOISE_TOLERANCE = 0.8

IQR_MULTIPLIER = 1.5
ZSCORE_THRESHOLD = 3.0

RECOMMENDATIONS = (
    "Review missing values, validate data types, inspect outliers "
    "and visualize distributions."
)


# =============================================================================
# Value coercion
# =============================================================================

def is_missing(raw: Any) -> bool:
    """A value is missing when it is absent, null or an empty string."""
    return raw is None or raw == ""


def parse_number(raw: Any) -> Optional[float]:
    """
    Coerce a raw cell value to a finite float.

    Returns None when the value is not a number. Booleans count as 1/0,
    numeric strings are parsed after stripping whitespace. Decimals are
    converted to float. NaN, infinities and integers too large for a float
    are never numbers.
    """
    if raw is None or isinstance(raw, (bytes, bytearray)):
        return None
    if isinstance(raw, bool):
        return 1.0 if raw else 0.0
    if isinstance(raw, (int, float, Decimal)):
        try:
            value = float(raw)
        except (OverflowError, ValueError):
            return None
    elif isinstance(raw, str):
        text = raw.strip()
        if not text or "_" in text:
            return None
        try:
            value = float(text)
        except ValueError:
            return None
    else:
        return None
    return value if math.isfinite(value) else None


def parse_date(raw: Any) -> bool:
    """Return True when the value reads as a calendar date or date-time."""
    if isinstance(raw, date):
        return True
    if not isinstance(raw, str) or not raw.strip():
        return False
    try:
        dateparser.parse(raw)
    except (ValueError, OverflowError):
        return False
    return True


def _identity(raw: Any) -> Tuple[str, Any]:
    """Key used to count distinct raw values ("1" and 1 stay distinct)."""
    if isinstance(raw, bool):
        return ("bool", raw)
    if isinstance(raw, (int, float, Decimal)):
        if isinstance(raw, float) and math.isnan(raw):
            return ("number", "nan")
        if isinstance(raw, Decimal) and raw.is_nan():
            return ("number", "nan")
        return ("number", raw)
    if isinstance(raw, str):
        return ("text", raw)
    return (type(raw).__name__, raw)


# =============================================================================
# Input validation
# =============================================================================

def validate_rows(rows: Any) -> None:
    """Reject a row sequence that is absent, not a sequence, or empty."""
    if rows is None:
        raise InvalidInputError("Invalid rows", "rows are required")
    if isinstance(rows, (str, bytes, bytearray, Mapping)) or not isinstance(rows, Sequence):
        raise InvalidInputError("Invalid rows", "rows must be a list of records")
    if len(rows) == 0:
        raise InvalidInputError("Invalid rows", "rows must not be empty")


def get_columns(rows: Sequence[Mapping[str, Any]]) -> List[str]:
    """Column names, in order, taken from the first record."""
    return list(rows[0].keys())


def _column_values(rows: Sequence[Mapping[str, Any]], column: str) -> List[Any]:
    return [row.get(column) for row in rows]


def _numeric_values(values: List[Any]) -> List[float]:
    numbers = []
    for value in values:
        if is_missing(value):
            continue
        number = parse_number(value)
        if number is not None:
            numbers.append(number)
    return numbers


# =============================================================================
# Type inference
# =============================================================================

def classify_values(values: List[Any]) -> ColumnType:
    """
    Classify the non-missing values of one column.

    An empty column is numeric: with no values, "every value is numeric"
    holds trivially and that rule is checked first.
    """
    present = [v for v in values if not is_missing(v)]
    total = len(present)
    num_count = sum(1 for v in present if parse_number(v) is not None)
    date_count = sum(1 for v in present if parse_date(v))

    if num_count == total:
        return ColumnType.NUMERIC
    if date_count == total:
        return ColumnType.DATE
    if num_count > total * NUMERIC_NOISE_TOLERANCE:
        return ColumnType.NUMERIC
    return ColumnType.CATEGORICAL


def infer_column_types(rows: Sequence[Mapping[str, Any]]) -> Dict[str, ColumnType]:
    """Map each column to its inferred semantic type."""
    validate_rows(rows)
    return {
        column: classify_values(_column_values(rows, column))
        for column in get_columns(rows)
    }


# =============================================================================
# Outliers & statistics
# =============================================================================

def detect_outliers(
    values: List[float],
    mean: float,
    q1: float,
    q3: float,
) -> Tuple[List[float], List[float], float]:
    """
    Flag outliers with the IQR fences and the z-score rule.

    Returns (outliers_iqr, outliers_z, std). Both lists keep input order.
    The z-score pass is skipped when the standard deviation is zero.
    """
    iqr = q3 - q1
    lower = q1 - IQR_MULTIPLIER * iqr
    upper = q3 + IQR_MULTIPLIER * iqr
    outliers_iqr = [v for v in values if v < lower or v > upper]

    # Population standard deviation
    std = math.sqrt(sum((v - mean) ** 2 for v in values) / len(values))
    if std > 0:
        outliers_z = [v for v in values if abs((v - mean) / std) > ZSCORE_THRESHOLD]
    else:
        outliers_z = []

    return outliers_iqr, outliers_z, std


def _quantile(sorted_values: List[float], position: int) -> float:
    index = min(max(position, 0), len(sorted_values) - 1)
    return sorted_values[index]


def profile_column(values: List[Any]) -> Dict[str, Any]:
    """Compute the statistics of one column from its raw values."""
    present = [v for v in values if not is_missing(v)]
    profile: Dict[str, Any] = {
        "count": len(values),
        "missing": len(values) - len(present),
        "unique": len({_identity(v) for v in present}),
        "is_numeric": False,
    }

    numeric = _numeric_values(present)
    if not numeric:
        return profile

    n = len(numeric)
    ordered = sorted(numeric)
    mean = sum(numeric) / n
    q1 = _quantile(ordered, n // 4)
    q3 = _quantile(ordered, (3 * n) // 4)
    outliers_iqr, outliers_z, std = detect_outliers(numeric, mean, q1, q3)

    profile.update(
        is_numeric=True,
        mean=mean,
        std=std,
        min=ordered[0],
        max=ordered[-1],
        median=_quantile(ordered, n // 2),
        q1=q1,
        q3=q3,
        iqr=q3 - q1,
        outliers_iqr=outliers_iqr,
        outliers_z=outliers_z,
    )
    return profile


def compute_statistics(rows: Sequence[Mapping[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """Profile every column of the dataset."""
    validate_rows(rows)
    return {
        column: profile_column(_column_values(rows, column))
        for column in get_columns(rows)
    }


# =============================================================================
# Histogram
# =============================================================================

def build_histogram(values: List[float], buckets: int = 10) -> Optional[Dict[str, list]]:
    """
    Bucket values into equal-width bins.

    Returns {"labels": [...], "counts": [...]}, or None when there are no
    values. All-identical values get a range of 1. The last label ends
    exactly at the maximum.
    """
    if buckets < 1:
        raise InvalidInputError("Invalid bucket count", f"buckets must be >= 1, got {buckets}")
    if not values:
        return None

    low, high = min(values), max(values)
    span = (high - low) or 1
    size = span / buckets

    labels = []
    for i in range(buckets):
        start = low + i * size
        end = high if i == buckets - 1 else low + (i + 1) * size
        labels.append(f"{start:.2f}-{end:.2f}")

    counts = [0] * buckets
    for value in values:
        index = math.floor((value - low) / size)
        counts[min(max(index, 0), buckets - 1)] += 1

    return {"labels": labels, "counts": counts}


def column_histogram(
    rows: Sequence[Mapping[str, Any]],
    column: Optional[str] = None,
    buckets: int = 12,
) -> Optional[Dict[str, Any]]:
    """
    Histogram for the chosen column, or the first numeric column.

    Returns None when there is no numeric data to plot.
    """
    validate_rows(rows)
    columns = get_columns(rows)

    if column is not None:
        if column not in columns:
            raise InvalidInputError("Unknown column", f"Column '{column}' not found")
        candidates = [column]
    else:
        candidates = columns

    for name in candidates:
        numeric = _numeric_values(_column_values(rows, name))
        if numeric:
            histogram = build_histogram(numeric, buckets)
            return {"column": name, **histogram}
    return None


# =============================================================================
# Insights & full analysis
# =============================================================================

def generate_insights(statistics: Mapping[str, Mapping[str, Any]]) -> List[str]:
    """Readable observations on missing values and IQR outliers."""
    insights = []
    for column, stats in statistics.items():
        if stats["missing"] > 0:
            insights.append(f"{stats['missing']} missing values in {column}")
        outliers = stats.get("outliers_iqr") or []
        if outliers:
            insights.append(f"{column} has {len(outliers)} outliers (IQR)")
    return insights


def analyze_rows(
    rows: Sequence[Mapping[str, Any]],
    column: Optional[str] = None,
    buckets: int = 12,
) -> Dict[str, Any]:
    """
    Run the full analysis over a dataset.

    Raises InvalidInputError before computing anything if the rows are
    unusable. Any other exception propagates to the caller untouched.
    """
    validate_rows(rows)
    columns = get_columns(rows)
    logger.debug(f"Profiling {len(rows)} rows x {len(columns)} columns")

    types = infer_column_types(rows)
    statistics = compute_statistics(rows)
    for name, stats in statistics.items():
        stats["type"] = types[name]

    if column is None:
        column = next((name for name, s in statistics.items() if s["is_numeric"]), None)
    chart_data = column_histogram(rows, column, buckets) if column is not None else None

    outliers = {
        name: {"iqr": s["outliers_iqr"], "z": s["outliers_z"]}
        for name, s in statistics.items()
        if s["is_numeric"]
    }

    return {
        "summary": f"Dataset: {len(rows)} rows, {len(columns)} columns",
        "types": types,
        "statistics": statistics,
        "insights": generate_insights(statistics),
        "recommendations": RECOMMENDATIONS,
        "chart_data": chart_data,
        "outliers": outliers,
    }
