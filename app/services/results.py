"""Results aggregation for surveys.

Joins a survey's questions with the responses submitted to it and produces
the per-question list of submitted values reported by the results endpoint.
"""

from typing import Any, Sequence

from app.schemas.survey import QuestionResult, ResultsSummary, Survey, SurveyResponse
from app.services.validation import first_answer


def is_blank(value: Any) -> bool:
    """Whether an answer value counts as skipped (None, "" or an empty list)."""
    return value is None or value == "" or value == []


def aggregate_results(
    survey: Survey,
    responses: Sequence[SurveyResponse]
) -> ResultsSummary:
    """Build the results summary of a survey.

    For every question, in survey order, the value of the first matching
    answer of each response is collected, in the order the responses were
    given. Responses that skipped a question, or answered it with a blank
    value, contribute nothing for it.

    Args:
        survey: Survey whose results are reported
        responses: All responses fetched for the survey

    Returns:
        ResultsSummary: ``response_count`` is ``len(responses)``, not the
        survey's stored counter
    """
    questions = []
    for question in survey.questions:
        values = []
        for response in responses:
            answer = first_answer(response.answers, question.id)
            if answer is not None and not is_blank(answer.value):
                values.append(answer.value)

        questions.append(QuestionResult(
            id=question.id,
            text=question.text,
            type=question.type,
            responses=values,
        ))

    return ResultsSummary(
        survey_id=survey.survey_id,
        title=survey.title,
        response_count=len(responses),
        questions=questions,
    )
