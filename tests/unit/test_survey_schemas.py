"""Unit tests for survey schemas.

Tests wire-format aliases and question/answer parsing.
"""

import pytest
from pydantic import TypeAdapter, ValidationError

from app.schemas.survey import (
    Answer,
    Question,
    QuestionType,
    ResponseSubmissionRequest,
    Survey,
    SurveyUpsertRequest,
)


class TestQuestion:
    """Tests for Question schema."""

    def test_all_question_types(self):
        """Test that every supported question type is accepted."""
        for value in ["text", "multiple_choice", "checkbox", "rating", "date", "email", "number"]:
            question = Question.model_validate({"id": "q", "text": "?", "type": value})
            assert question.type == QuestionType(value)

    def test_required_defaults_false(self):
        question = Question.model_validate({"id": "q", "text": "?", "type": "text"})
        assert question.required is False
        assert question.choices is None

    def test_unknown_type_kept(self):
        question = Question.model_validate({"id": "q", "text": "?", "type": "essay"})
        assert question.type == "essay"
        assert not isinstance(question.type, QuestionType)

    def test_missing_fields_accepted(self):
        """Test that a question with only a type is stored as given."""
        question = Question.model_validate({"type": "text", "required": True})
        assert question.id is None
        assert question.text is None
        assert question.to_wire() == {"type": "text", "required": True}

    def test_scalar_fields_coerced(self):
        question = Question.model_validate({"id": 7, "text": "?", "required": "yes"})
        assert question.id == "7"
        assert question.required is True

    def test_non_object_entry_becomes_text(self):
        question = Question.model_validate("What is your name?")
        assert question.id is None
        assert question.text == "What is your name?"
        assert question.required is False

    def test_unknown_keys_kept(self):
        question = Question.model_validate(
            {"id": "q", "type": "text", "placeholder": "Your name", "maxLength": 40}
        )
        assert question.to_wire() == {
            "id": "q", "type": "text", "required": False,
            "placeholder": "Your name", "maxLength": 40,
        }

    def test_choices_passed_through(self):
        choices = [{"id": "a", "text": "A"}, {"id": "b", "text": "B", "value": "bee"}, "c"]
        question = Question.model_validate({"id": "q", "text": "Pick", "type": "checkbox", "choices": choices})
        assert question.choices == choices

    def test_choice_type_without_choices_accepted(self):
        """Test that choice questions are not required to list choices."""
        question = Question.model_validate({"id": "q", "text": "?", "type": "multiple_choice"})
        assert question.choices is None

    def test_wire_omits_unset_optional_fields(self):
        question = Question(id="q", text="?", type=QuestionType.TEXT, required=True)
        assert question.to_wire() == {"id": "q", "text": "?", "type": "text", "required": True}

    def test_duplicate_ids_accepted_in_list(self):
        adapter = TypeAdapter(list[Question])
        questions = adapter.validate_python([
            {"id": "q", "text": "a", "type": "text"},
            {"id": "q", "text": "b", "type": "text"},
        ])
        assert len(questions) == 2


class TestSurvey:
    """Tests for Survey schema."""

    def test_camel_case_round_trip(self, sample_survey):
        wire = sample_survey.to_wire()

        assert wire["surveyId"] == "survey-1"
        assert wire["ownerId"] == "owner-1"
        assert wire["isActive"] is True
        assert wire["isPublic"] is False
        assert wire["responseCount"] == 0
        assert wire["settings"] == {"theme": "default"}
        assert Survey.model_validate(wire) == sample_survey

    def test_negative_response_count_rejected(self, sample_survey):
        wire = sample_survey.to_wire()
        wire["responseCount"] = -1
        with pytest.raises(ValidationError):
            Survey.model_validate(wire)


class TestAnswer:
    """Tests for Answer schema."""

    def test_reads_question_id_alias(self):
        answer = Answer.model_validate({"questionId": "q1", "value": "yes"})
        assert answer.question_id == "q1"

    def test_list_value(self):
        answer = Answer.model_validate({"questionId": "q1", "value": ["a", "b"]})
        assert answer.value == ["a", "b"]

    def test_missing_question_id_rejected(self):
        with pytest.raises(ValidationError):
            Answer.model_validate({"value": "yes"})


class TestRequestBodies:
    """Tests for request body schemas."""

    def test_upsert_request_is_lenient(self):
        """Test that title/questions of any type reach the validation service."""
        body = SurveyUpsertRequest.model_validate({"title": 5, "questions": "nope", "extra": 1})
        assert body.title == 5
        assert body.questions == "nope"

    def test_upsert_request_reads_camel_case_flags(self):
        body = SurveyUpsertRequest.model_validate({"isActive": False, "isPublic": True})
        data = body.model_dump()
        assert data["is_active"] is False
        assert data["is_public"] is True

    def test_submission_request_defaults(self):
        body = ResponseSubmissionRequest.model_validate({})
        assert body.answers is None
        assert body.metadata is None
