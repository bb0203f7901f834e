"""Pydantic schemas for data validation.

This package contains all Pydantic models for surveys, responses and results.
"""

from app.schemas.survey import (
    QuestionType,
    Question,
    Survey,
    Answer,
    SurveyResponse,
    QuestionResult,
    ResultsSummary,
    SurveyUpsertRequest,
    ResponseSubmissionRequest,
)

__all__ = [
    "QuestionType",
    "Question",
    "Survey",
    "Answer",
    "SurveyResponse",
    "QuestionResult",
    "ResultsSummary",
    "SurveyUpsertRequest",
    "ResponseSubmissionRequest",
]
