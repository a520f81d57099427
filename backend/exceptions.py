"""
CSV Analyzer Custom Exceptions - Centralized error handling
"""
from fastapi import HTTPException, status
from typing import Any


class AnalyzerException(Exception):
    """Base exception for CSV Analyzer"""
    def __init__(self, message: str, details: Any = None):
        self.message = message
        self.details = details
        super().__init__(self.message)


class InvalidInputError(AnalyzerException):
    """Client input is missing, malformed or empty - nothing was computed"""
    pass


class AnalysisFailedError(AnalyzerException):
    """Unexpected failure while profiling - no partial result is returned"""
    pass


# HTTP Exception helpers for consistent responses
def bad_request(message: str, details: Any = None) -> HTTPException:
    """Return 400 Bad Request"""
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"message": message, "details": details} if details else message
    )


def server_error(message: str = "Internal server error") -> HTTPException:
    """Return 500 Internal Server Error"""
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=message
    )


def file_too_large(max_size_mb: int) -> HTTPException:
    """Return 413 Payload Too Large"""
    return HTTPException(
        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        detail=f"File too large. Maximum size is {max_size_mb}MB"
    )


def invalid_file_type(allowed: set[str]) -> HTTPException:
    """Return 415 Unsupported Media Type"""
    return HTTPException(
        status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
        detail=f"Invalid file type. Allowed: {', '.join(sorted(allowed))}"
    )
