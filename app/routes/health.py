"""Health check endpoint for monitoring and deployment verification.

Reports whether the survey tables can be reached and which identity
mode the process was started with.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.routes.common import error_response, get_survey_store, json_response
from app.services.survey_store import SurveyStore
from app.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/health")
def health_check(
    request: Request,
    store: SurveyStore = Depends(get_survey_store)
) -> JSONResponse:
    """Health check endpoint.

    Returns:
        JSONResponse: 200 when the surveys table answers a query,
        503 otherwise

    Example response:
        {
            "status": "healthy",
            "database": "connected",
            "identityMode": "local_header"
        }
    """
    try:
        store.count()
    except SQLAlchemyError as e:
        logger.error(f"Health check failed: {e}")
        return error_response(request, 503, "Service unavailable - database connection failed")

    logger.debug("Health check passed")
    return json_response(request, 200, {
        "status": "healthy",
        "database": "connected",
        "identityMode": request.app.state.settings.identity_mode.value,
    })
