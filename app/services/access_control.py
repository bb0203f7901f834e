"""Access-control rules for surveys and their results.

The owner of a survey is the only caller allowed to change it. Reading a
survey, or its results, is allowed for its owner and, when the survey is
public, for anyone, including anonymous callers.
"""

from typing import Iterable, Optional

from app.schemas.survey import Survey
from app.services.validation import OK, Decision, Outcome


def can_read(survey: Survey, caller_id: Optional[str]) -> bool:
    """Whether a caller may read a survey."""
    return survey.is_public or (caller_id is not None and survey.owner_id == caller_id)


def authorize_survey_update(
    existing: Optional[Survey],
    caller_id: Optional[str]
) -> Decision:
    """Decide whether a caller may update a survey.

    Args:
        existing: Stored survey, or None if it was not found
        caller_id: Identifier of the caller

    Returns:
        Decision: NOT_FOUND, FORBIDDEN for anyone but the owner, or OK
    """
    if existing is None:
        return Decision(Outcome.NOT_FOUND)
    if caller_id is None or existing.owner_id != caller_id:
        return Decision(Outcome.FORBIDDEN)
    return OK


def authorize_survey_read(survey: Survey, caller_id: Optional[str]) -> Decision:
    """Decide whether a caller may read a survey."""
    return OK if can_read(survey, caller_id) else Decision(Outcome.FORBIDDEN)


def authorize_results_read(survey: Survey, caller_id: Optional[str]) -> Decision:
    """Decide whether a caller may read a survey's results.

    Results follow the same rule as the survey itself.
    """
    return OK if can_read(survey, caller_id) else Decision(Outcome.FORBIDDEN)


def filter_accessible_surveys(
    surveys: Iterable[Survey],
    caller_id: Optional[str]
) -> list[Survey]:
    """Keep the surveys a caller may read, in their original order."""
    return [survey for survey in surveys if can_read(survey, caller_id)]
