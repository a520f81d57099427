"""
Analysis strategies - where a dataset gets profiled

Callers pick a strategy explicitly (settings.ANALYSIS_MODE or an argument):
- local: run the profiler in this process
- remote: POST the rows to another CSV Analyzer instance

A failing remote call is reported as a failure. It is never retried
locally behind the caller's back.
"""
from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx
from loguru import logger

from config import settings
from exceptions import AnalysisFailedError, InvalidInputError
from models.analysis import AnalysisResponse
from services.profiler import analyze_rows


class Analyzer(ABC):
    """Profiles a dataset and returns the full analysis"""

    name: str = "base"

    @abstractmethod
    def analyze(
        self,
        rows: Any,
        column: Optional[str] = None,
        buckets: Optional[int] = None,
    ) -> AnalysisResponse:
        ...


class LocalAnalyzer(Analyzer):
    """In-process profiling"""

    name = "local"

    def analyze(
        self,
        rows: Any,
        column: Optional[str] = None,
        buckets: Optional[int] = None,
    ) -> AnalysisResponse:
        if buckets is None:
            buckets = settings.DEFAULT_BUCKETS
        try:
            result = analyze_rows(rows, column=column, buckets=buckets)
        except InvalidInputError:
            raise
        except Exception as e:
            logger.exception("Local analysis failed")
            raise AnalysisFailedError("Analysis failed", str(e)) from e
        return AnalysisResponse(**result)


class RemoteAnalyzer(Analyzer):
    """Profiling delegated to a CSV Analyzer HTTP service"""

    name = "remote"

    def __init__(
        self,
        base_url: str = None,
        timeout: float = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = (base_url or settings.ANALYSIS_URL).rstrip("/")
        self.timeout = timeout or settings.REQUEST_TIMEOUT
        self._transport = transport

    def analyze(
        self,
        rows: Any,
        column: Optional[str] = None,
        buckets: Optional[int] = None,
    ) -> AnalysisResponse:
        payload = {"rows": rows, "column": column, "buckets": buckets}
        url = f"{self.base_url}/api/analyze"

        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.post(url, json=payload)
        except httpx.TimeoutException as e:
            logger.error(f"Analysis request timed out after {self.timeout}s")
            raise AnalysisFailedError("Analysis service timed out", url) from e
        except httpx.HTTPError as e:
            logger.error(f"Analysis service unreachable: {e}")
            raise AnalysisFailedError("Analysis service unavailable", str(e)) from e

        if response.status_code == 400:
            raise InvalidInputError("Invalid rows", _detail(response))
        if response.status_code != 200:
            logger.error(f"Analysis service returned {response.status_code}")
            raise AnalysisFailedError("Analysis failed", _detail(response))

        return AnalysisResponse.model_validate(response.json())


def _detail(response: httpx.Response) -> Any:
    try:
        data = response.json()
    except ValueError:
        return response.text
    return data.get("detail") if isinstance(data, dict) else data


def get_analyzer(mode: Optional[str] = None, **kwargs) -> Analyzer:
    """Analyzer for the given mode, defaulting to settings.ANALYSIS_MODE"""
    mode = mode or settings.ANALYSIS_MODE
    if mode == "local":
        return LocalAnalyzer()
    if mode == "remote":
        return RemoteAnalyzer(**kwargs)
    raise ValueError(f"Unknown analysis mode: {mode}")
