"""
Core module for the outfit planner backend.
Contains the error taxonomy and FastAPI exception handlers.
"""
from .exceptions import (
    PlannerException,
    NotFoundError,
    ValidationError,
    RecommenderError,
    StoreError,
    ResolutionError,
    DailyOutfitError,
    ErrorResponse,
    planner_exception_handler,
    request_validation_handler,
    http_exception_handler,
    generic_exception_handler,
)

__all__ = [
    "PlannerException",
    "NotFoundError",
    "ValidationError",
    "RecommenderError",
    "StoreError",
    "ResolutionError",
    "DailyOutfitError",
    "ErrorResponse",
    "planner_exception_handler",
    "request_validation_handler",
    "http_exception_handler",
    "generic_exception_handler",
]
