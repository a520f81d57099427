"""
Analyze routes - profile rows or an uploaded file, histogram for one column
"""
from fastapi import APIRouter, UploadFile, File, Form
from pathlib import Path
from typing import Any, Optional
import asyncio
from concurrent.futures import ThreadPoolExecutor
from loguru import logger

from config import settings
from exceptions import (
    AnalysisFailedError,
    InvalidInputError,
    bad_request,
    server_error,
    file_too_large,
    invalid_file_type,
)
from models.analysis import AnalyzeRequest, AnalysisResponse, HistogramRequest, HistogramData
from services.analysis_client import LocalAnalyzer
from services.data_formats import read_records
from services.profiler import column_histogram

router = APIRouter(prefix="/analyze", tags=["analyze"])

# Thread pool for CPU-bound operations
_executor = ThreadPoolExecutor(max_workers=4)

_analyzer = LocalAnalyzer()


def _validate_file(filename: str, file_size: int) -> None:
    """Validate file type and size"""
    ext = Path(filename or "").suffix.lower()
    if ext not in settings.ALLOWED_EXTENSIONS:
        raise invalid_file_type(settings.ALLOWED_EXTENSIONS)
    if file_size > settings.max_upload_bytes:
        raise file_too_large(settings.MAX_UPLOAD_SIZE_MB)


def _resolve_buckets(buckets: Optional[int]) -> int:
    """Default and upper-bound the histogram bucket count"""
    if buckets is None:
        return settings.DEFAULT_BUCKETS
    if buckets < 1 or buckets > settings.MAX_BUCKETS:
        raise bad_request(f"buckets must be between 1 and {settings.MAX_BUCKETS}")
    return buckets


def _check_row_limit(rows: Any) -> None:
    if settings.MAX_ROWS and isinstance(rows, list) and len(rows) > settings.MAX_ROWS:
        raise bad_request(f"Too many rows. Maximum is {settings.MAX_ROWS}")


async def _run_analysis(rows: Any, column: Optional[str], buckets: Optional[int]) -> AnalysisResponse:
    """Profile rows in the thread pool and map failures to HTTP errors"""
    buckets = _resolve_buckets(buckets)
    _check_row_limit(rows)

    loop = asyncio.get_event_loop()
    try:
        result = await loop.run_in_executor(_executor, _analyzer.analyze, rows, column, buckets)
    except InvalidInputError as e:
        logger.warning(f"Rejected analysis request: {e.message} ({e.details})")
        raise bad_request(e.message, e.details)
    except AnalysisFailedError:
        raise server_error("Analysis failed")

    logger.info(f"Analyzed dataset - {result.summary}")
    return result


@router.post("", response_model=AnalysisResponse, response_model_exclude_none=True)
async def analyze(request: AnalyzeRequest):
    """
    Profile parsed rows.
    Returns column types, statistics, outliers, insights and a histogram
    of the chosen (or first numeric) column.
    """
    return await _run_analysis(request.rows, request.column, request.buckets)


@router.post("/upload", response_model=AnalysisResponse, response_model_exclude_none=True)
async def analyze_upload(
    file: UploadFile = File(...),
    column: Optional[str] = Form(None),
    buckets: Optional[int] = Form(None),
):
    """
    Parse an uploaded CSV/TSV/JSON/Parquet file and profile it.
    Validates file type and size before parsing.
    """
    content = await file.read()
    _validate_file(file.filename, len(content))

    loop = asyncio.get_event_loop()
    try:
        rows = await loop.run_in_executor(_executor, read_records, content, file.filename)
    except Exception as e:
        logger.error(f"Failed to parse file: {e}")
        raise bad_request(f"Failed to parse file: {str(e)}")

    logger.info(f"Parsed {file.filename}: {len(rows)} rows")
    return await _run_analysis(rows, column, buckets)


@router.post("/histogram", response_model=HistogramData)
async def analyze_histogram(request: HistogramRequest):
    """Histogram for a specific column"""
    if request.column is None:
        raise bad_request("column is required")
    buckets = _resolve_buckets(request.buckets)
    _check_row_limit(request.rows)

    loop = asyncio.get_event_loop()
    try:
        histogram = await loop.run_in_executor(
            _executor, column_histogram, request.rows, request.column, buckets
        )
    except InvalidInputError as e:
        raise bad_request(e.message, e.details)
    except Exception:
        logger.exception(f"Histogram failed for column {request.column}")
        raise server_error("Analysis failed")

    if histogram is None:
        return HistogramData(column=request.column, labels=[], counts=[])
    return HistogramData(**histogram)
