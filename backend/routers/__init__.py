"""
API Routers package
"""
from routers.analyze import router as analyze_router

__all__ = [
    "analyze_router",
]
