"""Survey endpoints: create, update, list and fetch surveys.

Creating and updating a survey requires a caller identity; the creator
becomes the survey's owner and is the only caller allowed to update it.
Listing and fetching are open to anonymous callers but only return surveys
that are public or owned by the caller.
"""

import uuid
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import TypeAdapter

from app.middleware.identity import get_optional_caller_id, require_caller_id
from app.routes.common import error_response, get_survey_store, json_response
from app.schemas.survey import Question, Survey, SurveyUpsertRequest
from app.services.access_control import (
    authorize_survey_read,
    authorize_survey_update,
    filter_accessible_surveys,
)
from app.services.survey_store import SurveyStore, now_iso
from app.services.validation import Outcome, validate_survey_upsert
from app.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter()

_questions_adapter = TypeAdapter(list[Question])


def upsert_survey(
    request: Request,
    payload: Optional[SurveyUpsertRequest],
    caller_id: str,
    store: SurveyStore,
    survey_id: Optional[str] = None
) -> JSONResponse:
    """Create a survey, or update one when ``survey_id`` is given.

    Flow:
    1. Check title and questions are present
    2. Parse the question definitions
    3. On update, load the survey and check the caller owns it
    4. Write the survey

    Both create and update replace description, flags and settings with
    the body's values, falling back to the defaults for absent fields.

    Args:
        request: Inbound request
        payload: Parsed body (None if the request had no body)
        caller_id: Identifier of the authenticated caller
        store: Survey store
        survey_id: Survey to update, or None to create a new one

    Returns:
        JSONResponse: 201 with the new survey, 200 with the updated survey,
        or an error response
    """
    is_update = survey_id is not None
    data: dict[str, Any] = payload.model_dump() if payload is not None else {}

    if not validate_survey_upsert(data).ok:
        logger.warning(
            "Validation failed",
            extra={
                "title_provided": bool(data.get("title")),
                "questions_provided": data.get("questions") is not None,
            }
        )
        return error_response(request, 400, "Missing required fields")

    # Question documents are kept as submitted
    questions = _questions_adapter.validate_python(data["questions"])

    if is_update:
        existing = store.get(survey_id)
        decision = authorize_survey_update(existing, caller_id)
        if decision.outcome == Outcome.NOT_FOUND:
            logger.warning(f"Survey not found: {survey_id}", extra={"survey_id": survey_id})
            return error_response(request, 404, "Survey not found")
        if decision.outcome == Outcome.FORBIDDEN:
            logger.warning(
                "Permission denied",
                extra={
                    "survey_id": survey_id,
                    "survey_owner_id": existing.owner_id,
                    "caller_id": caller_id,
                }
            )
            return error_response(
                request, 403, "You do not have permission to update this survey"
            )

    timestamp = now_iso()
    fields = {
        "title": str(data["title"]),
        "description": data.get("description") or "",
        "questions": questions,
        "owner_id": caller_id,
        "updated_at": timestamp,
        "is_active": data["is_active"] if data.get("is_active") is not None else True,
        "is_public": data["is_public"] if data.get("is_public") is not None else False,
        "settings": data.get("settings") or {},
    }

    if is_update:
        logger.info(f"Updating survey {survey_id}", extra={"survey_id": survey_id})
        result = store.update(survey_id, fields)
    else:
        survey_id = str(uuid.uuid4())
        logger.info(f"Creating new survey {survey_id}", extra={"survey_id": survey_id})
        result = store.create(Survey(
            survey_id=survey_id,
            created_at=timestamp,
            response_count=0,
            **fields,
        ))

    action = "update" if is_update else "create"
    if result is None:
        logger.error(f"{action.capitalize()} operation returned no result", extra={"survey_id": survey_id})
        return error_response(request, 500, f"Failed to {action} survey")

    logger.info(
        f"Survey {action}d successfully",
        extra={"survey_id": result.survey_id, "caller_id": caller_id}
    )
    return json_response(request, 200 if is_update else 201, result.to_wire())


@router.post("/surveys")
def create_survey(
    request: Request,
    payload: Optional[SurveyUpsertRequest] = Body(None),
    caller_id: str = Depends(require_caller_id),
    store: SurveyStore = Depends(get_survey_store)
) -> JSONResponse:
    """Create a survey owned by the caller.

    Example response (201):
        {
            "surveyId": "6f0c...",
            "title": "Team lunch",
            "ownerId": "user-1",
            "responseCount": 0,
            ...
        }
    """
    return upsert_survey(request, payload, caller_id, store)


@router.put("/surveys/{survey_id}")
def update_survey(
    survey_id: str,
    request: Request,
    payload: Optional[SurveyUpsertRequest] = Body(None),
    caller_id: str = Depends(require_caller_id),
    store: SurveyStore = Depends(get_survey_store)
) -> JSONResponse:
    """Update a survey owned by the caller."""
    return upsert_survey(request, payload, caller_id, store, survey_id=survey_id)


@router.get("/surveys")
def list_surveys(
    request: Request,
    caller_id: Optional[str] = Depends(get_optional_caller_id),
    store: SurveyStore = Depends(get_survey_store)
) -> JSONResponse:
    """List the surveys that are public or owned by the caller."""
    surveys = filter_accessible_surveys(store.scan(), caller_id)
    logger.debug(f"Listing {len(surveys)} accessible survey(s)")
    return json_response(request, 200, [survey.to_wire() for survey in surveys])


@router.get("/surveys/{survey_id}")
def get_survey(
    survey_id: str,
    request: Request,
    caller_id: Optional[str] = Depends(get_optional_caller_id),
    store: SurveyStore = Depends(get_survey_store)
) -> JSONResponse:
    """Fetch one survey if it is public or owned by the caller."""
    survey = store.get(survey_id)
    if survey is None:
        return error_response(request, 404, "Survey not found")

    if not authorize_survey_read(survey, caller_id).ok:
        logger.warning(
            "Survey access denied",
            extra={"survey_id": survey_id, "caller_id": caller_id}
        )
        return error_response(request, 403, "Access denied")

    return json_response(request, 200, survey.to_wire())
