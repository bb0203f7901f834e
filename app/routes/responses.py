"""Response endpoints: submit a response and read aggregated results.

Anyone may submit a response to an active survey; authenticated callers
are recorded as the respondent. Results are visible to the survey owner
and, for public surveys, to every authenticated caller.
"""

import json
import uuid
from typing import Optional

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import TypeAdapter, ValidationError

from app.middleware.identity import get_optional_caller_id, require_caller_id
from app.routes.common import (
    error_response,
    get_response_store,
    get_survey_store,
    json_response,
)
from app.schemas.survey import Answer, ResponseSubmissionRequest, SurveyResponse
from app.services.access_control import authorize_results_read
from app.services.response_store import ResponseStore
from app.services.results import aggregate_results
from app.services.survey_store import SurveyStore, now_iso
from app.services.validation import Outcome, has_answers, validate_response_submission
from app.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter()

_answers_adapter = TypeAdapter(list[Answer])


def increment_response_count(store: SurveyStore, survey_id: str) -> None:
    """Bump a survey's response counter after a response was written.

    The response is already stored, so a failed increment is logged and
    otherwise ignored: it never fails the submission and is never retried.
    """
    try:
        updated = store.atomic_increment(survey_id, "response_count", 1)
    except Exception as e:
        logger.error(
            f"Error updating survey response count: {e}",
            extra={"survey_id": survey_id},
            exc_info=True
        )
        return

    if updated is None:
        logger.warning(
            "Failed to update survey response count",
            extra={"survey_id": survey_id}
        )


@router.post("/surveys/{survey_id}/responses")
def submit_response(
    survey_id: str,
    request: Request,
    payload: Optional[ResponseSubmissionRequest] = Body(None),
    caller_id: Optional[str] = Depends(get_optional_caller_id),
    surveys: SurveyStore = Depends(get_survey_store),
    responses: ResponseStore = Depends(get_response_store)
) -> JSONResponse:
    """Submit a response to a survey.

    Flow:
    1. Check the survey id and the answers are present
    2. Load the survey (404 if missing)
    3. Reject inactive surveys and responses missing required answers
    4. Write the response
    5. Increment the survey's response counter (failures are only logged)

    Returns:
        JSONResponse: 201 with the new response id, or an error response

    Example response (201):
        {
            "message": "Survey response submitted successfully",
            "responseId": "0b7e..."
        }
    """
    if not survey_id.strip():
        return error_response(request, 400, "Survey ID is required")

    raw_answers = payload.answers if payload is not None else None
    if not has_answers(raw_answers):
        logger.warning("Submission without answers", extra={"survey_id": survey_id})
        return error_response(request, 400, "Survey answers are required")

    try:
        answers = _answers_adapter.validate_python(raw_answers)
    except ValidationError as e:
        logger.warning(f"Invalid answers: {e.error_count()} error(s)", extra={"survey_id": survey_id})
        return error_response(
            request, 400, "Invalid answers",
            errors=json.loads(e.json(include_url=False)),
        )

    survey = surveys.get(survey_id)
    if survey is None:
        logger.warning(f"Survey not found: {survey_id}", extra={"survey_id": survey_id})
        return error_response(request, 404, "Survey not found")

    decision = validate_response_submission(survey, answers)
    if decision.outcome == Outcome.SURVEY_INACTIVE:
        logger.warning("Submission to inactive survey", extra={"survey_id": survey_id})
        return error_response(request, 400, "This survey is no longer active")
    if decision.outcome == Outcome.MISSING_ANSWERS:
        logger.warning(
            "Required questions not answered",
            extra={"survey_id": survey_id, "missing_questions": decision.missing_question_ids}
        )
        return error_response(
            request, 400, "Some required questions are not answered",
            missingQuestions=decision.missing_question_ids,
        )

    response = responses.create(SurveyResponse(
        response_id=str(uuid.uuid4()),
        survey_id=survey_id,
        answers=answers,
        respondent_id=caller_id,
        submitted_at=now_iso(),
        metadata=payload.metadata or {},
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    ))

    if response is None:
        return error_response(request, 500, "Failed to save response")

    increment_response_count(surveys, survey_id)

    logger.info(
        "Survey response submitted",
        extra={"survey_id": survey_id, "response_id": response.response_id}
    )
    return json_response(request, 201, {
        "message": "Survey response submitted successfully",
        "responseId": response.response_id,
    })


@router.get("/surveys/{survey_id}/results")
def get_survey_results(
    survey_id: str,
    request: Request,
    caller_id: str = Depends(require_caller_id),
    surveys: SurveyStore = Depends(get_survey_store),
    responses: ResponseStore = Depends(get_response_store)
) -> JSONResponse:
    """Return the per-question results of a survey.

    The reported ``responseCount`` is the number of responses fetched,
    which can briefly differ from the survey's own counter.
    """
    if not survey_id.strip():
        logger.warning("Missing survey ID")
        return error_response(request, 400, "Missing survey ID")

    survey = surveys.get(survey_id)
    if survey is None:
        logger.warning(f"Survey not found: {survey_id}", extra={"survey_id": survey_id})
        return error_response(request, 404, "Survey not found")

    if not authorize_results_read(survey, caller_id).ok:
        logger.warning(
            "Permission denied",
            extra={
                "survey_id": survey_id,
                "survey_owner_id": survey.owner_id,
                "caller_id": caller_id,
            }
        )
        return error_response(request, 403, "You do not have permission to view these results")

    fetched = responses.query_by_survey(survey_id)
    logger.info(f"Responses retrieved: {len(fetched)}", extra={"survey_id": survey_id})

    summary = aggregate_results(survey, fetched)

    logger.info(
        "Survey results compiled successfully",
        extra={"survey_id": survey_id, "response_count": summary.response_count}
    )
    return json_response(request, 200, summary.to_wire())
