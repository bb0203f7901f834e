"""Validation rules for survey definitions and response submissions.

The functions here are pure: they look at already-loaded data and return a
Decision describing whether the operation may proceed. They never touch the
store and never raise for a rule violation.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Optional

from app.schemas.survey import Answer, Survey


class Outcome(str, Enum):
    """Result kinds produced by validation and access-control rules."""
    OK = "ok"
    MISSING_FIELDS = "missing_fields"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    SURVEY_INACTIVE = "survey_inactive"
    MISSING_ANSWERS = "missing_answers"


@dataclass(frozen=True)
class Decision:
    """Result of a validation or access-control rule.

    Attributes:
        outcome: What the rule decided
        missing_question_ids: Required question ids left unanswered
            (only set for MISSING_ANSWERS), in survey question order
    """
    outcome: Outcome
    missing_question_ids: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """Whether the operation may proceed."""
        return self.outcome == Outcome.OK


OK = Decision(Outcome.OK)


def is_non_empty_sequence(value: Any) -> bool:
    """Check for a list-like value with at least one element.

    Strings and mappings are not accepted as sequences.
    """
    if isinstance(value, (str, bytes, Mapping)):
        return False
    return isinstance(value, Sequence) and len(value) > 0


def validate_survey_upsert(data: Mapping[str, Any]) -> Decision:
    """Check that a survey create/update body has a title and questions.

    Only presence is checked: the shape of individual questions is left to
    the schema layer, and duplicate question ids are accepted.

    Args:
        data: Request body as a mapping

    Returns:
        Decision: OK, or MISSING_FIELDS when ``title`` is falsy or
        ``questions`` is not a non-empty sequence
    """
    if not data.get("title") or not is_non_empty_sequence(data.get("questions")):
        return Decision(Outcome.MISSING_FIELDS)
    return OK


def has_answers(answers: Any) -> bool:
    """Check that a submission carries a non-empty list of answers."""
    return is_non_empty_sequence(answers)


def validate_response_submission(
    survey: Survey,
    answers: Iterable[Answer]
) -> Decision:
    """Check that a survey accepts a response with the given answers.

    An inactive survey is rejected before completeness is considered.
    Otherwise every required question must be referenced by at least one
    answer; the value of the answer is not inspected.

    Args:
        survey: Survey being answered
        answers: Submitted answers

    Returns:
        Decision: OK, SURVEY_INACTIVE, or MISSING_ANSWERS carrying the
        unanswered required question ids in survey question order

    Example:
        >>> decision = validate_response_submission(survey, [Answer(question_id="q2", value="x")])
        >>> decision.missing_question_ids
        ['q1']
    """
    if not survey.is_active:
        return Decision(Outcome.SURVEY_INACTIVE)

    answered_ids = {answer.question_id for answer in answers}
    missing = [
        question.id
        for question in survey.questions
        if question.required and question.id not in answered_ids
    ]

    if missing:
        return Decision(Outcome.MISSING_ANSWERS, missing_question_ids=missing)
    return OK


def first_answer(answers: Iterable[Answer], question_id: str) -> Optional[Answer]:
    """Return the first answer referencing a question, if any."""
    for answer in answers:
        if answer.question_id == question_id:
            return answer
    return None
