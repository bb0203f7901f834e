"""Helpers shared by the API routes.

Every response body is JSON and carries the same headers, and the stores
created at startup are handed to routes through FastAPI dependencies.
"""

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from app.services.response_store import ResponseStore
from app.services.survey_store import SurveyStore


def response_headers(request: Request) -> dict[str, str]:
    """Headers set on every API response."""
    return {
        "Content-Type": "application/json",
        "Access-Control-Allow-Origin": request.app.state.settings.allow_origin,
    }


def json_response(request: Request, status_code: int, content: Any) -> JSONResponse:
    """Build a JSON response with the standard headers."""
    return JSONResponse(
        status_code=status_code,
        content=content,
        headers=response_headers(request),
    )


def error_response(
    request: Request,
    status_code: int,
    message: str,
    **extra: Any
) -> JSONResponse:
    """Build a ``{"message": ...}`` error response.

    Args:
        request: Request being answered
        status_code: HTTP status
        message: Caller-visible message
        **extra: Additional body keys (e.g. missingQuestions)
    """
    return json_response(request, status_code, {"message": message, **extra})


def get_survey_store(request: Request) -> SurveyStore:
    """FastAPI dependency: the process-wide survey store."""
    return request.app.state.survey_store


def get_response_store(request: Request) -> ResponseStore:
    """FastAPI dependency: the process-wide response store."""
    return request.app.state.response_store
