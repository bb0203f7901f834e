"""Pydantic schemas for surveys, responses and results.

This module defines the wire format of the API. Field names are snake_case
in Python and camelCase on the wire (``surveyId``, ``isPublic``, ...).
"""

from collections.abc import Mapping
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase field names."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self) -> dict[str, Any]:
        """Dump to a JSON-compatible dict using camelCase keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class QuestionType(str, Enum):
    """Valid question types."""
    TEXT = "text"
    MULTIPLE_CHOICE = "multiple_choice"
    CHECKBOX = "checkbox"
    RATING = "rating"
    DATE = "date"
    EMAIL = "email"
    NUMBER = "number"


_QUESTION_TYPES = {kind.value: kind for kind in QuestionType}


class Question(CamelModel):
    """A single prompt within a survey.

    Questions are stored as submitted: beyond the presence of a non-empty
    question list, nothing about their shape is enforced. Unknown keys are
    kept, and a question without an ``id`` can never be answered.

    Attributes:
        id: Identifier, expected to be unique within the survey
        text: Prompt text
        type: Question type; a QuestionType when recognised
        required: Whether a response must answer this question
        choices: Options for choice-style questions, passed through
        settings: Per-question display settings, passed through
    """
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    text: Optional[str] = None
    type: Union[QuestionType, str, None] = None
    required: bool = False
    choices: Any = None
    settings: Any = None

    @model_validator(mode="before")
    @classmethod
    def normalize_document(cls, data: Any) -> Any:
        """Coerce a submitted question document into the fields above.

        Scalar ``id``/``text``/``type`` values are kept as strings and
        ``required`` follows truthiness. An entry that is not an object
        becomes the text of a question with no id.
        """
        if isinstance(data, cls):
            return data
        if not isinstance(data, Mapping):
            return {"text": None if data is None else str(data)}

        document = dict(data)
        for key in ("id", "text", "type"):
            value = document.get(key)
            if value is not None and not isinstance(value, str):
                document[key] = str(value)
        if isinstance(document.get("type"), str):
            document["type"] = _QUESTION_TYPES.get(document["type"], document["type"])
        if "required" in document:
            document["required"] = bool(document["required"])
        return document


class Survey(CamelModel):
    """A stored survey.

    Attributes:
        survey_id: Identifier assigned at creation
        title: Survey title
        description: Survey description
        questions: Ordered questions (display and report order)
        owner_id: Identifier of the creating caller
        created_at: ISO-8601 creation timestamp
        updated_at: ISO-8601 timestamp of the last mutation
        is_active: Whether new responses are accepted
        is_public: Whether any caller may read the survey and its results
        response_count: Value of the atomic response counter
        settings: Opaque configuration, passed through untouched
    """
    survey_id: str
    title: str
    description: Optional[str] = ""
    questions: list[Question] = Field(default_factory=list)
    owner_id: str
    created_at: str
    updated_at: str
    is_active: bool = True
    is_public: bool = False
    response_count: int = Field(default=0, ge=0)
    settings: dict[str, Any] = Field(default_factory=dict)


class Answer(CamelModel):
    """One respondent's value for one question.

    ``value`` is any JSON value; in practice a string, or a list of
    strings for checkbox questions.
    """
    question_id: str
    value: Any = None


class SurveyResponse(CamelModel):
    """A stored response to a survey."""
    response_id: str
    survey_id: str
    answers: list[Answer] = Field(default_factory=list)
    respondent_id: Optional[str] = None
    submitted_at: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


class QuestionResult(CamelModel):
    """Submitted values for one question, in store order."""
    id: Optional[str] = None
    text: Optional[str] = None
    type: Union[QuestionType, str, None] = None
    responses: list[Any] = Field(default_factory=list)


class ResultsSummary(CamelModel):
    """Per-question aggregation of all responses to a survey.

    ``response_count`` is the number of responses actually fetched, which
    may differ from the survey's stored counter.
    """
    survey_id: str
    title: str
    response_count: int
    questions: list[QuestionResult] = Field(default_factory=list)


class SurveyUpsertRequest(CamelModel):
    """Body of survey create and update requests.

    ``title`` and ``questions`` are loosely typed on purpose: their
    presence is checked by the validation service so that
    missing fields produce a single "Missing required fields" error.
    """
    model_config = ConfigDict(extra="ignore")

    title: Any = None
    description: Optional[str] = None
    questions: Any = None
    is_active: Optional[bool] = None
    is_public: Optional[bool] = None
    settings: Optional[dict[str, Any]] = None


class ResponseSubmissionRequest(CamelModel):
    """Body of a response submission request."""
    model_config = ConfigDict(extra="ignore")

    answers: Any = None
    metadata: Optional[dict[str, Any]] = None
