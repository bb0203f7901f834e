"""ResponseRecord model for storing submitted survey responses.

This module defines the ResponseRecord model which stores one respondent's
full set of answers to a survey.
"""

from typing import Any, Optional

from sqlalchemy import (
    Index,
    Integer,
    String,
    Text,
    JSON,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models.database import Base


class ResponseRecord(Base):
    """Model for storing survey responses.

    Responses reference their survey by id only; the reference is checked
    when the response is submitted, not enforced by a foreign key. Responses
    are never updated after they are written.

    Attributes:
        seq: Insertion sequence (tie-breaker for ordering)
        response_id: Public response identifier (UUID string)
        survey_id: Identifier of the survey answered
        answers: List of {questionId, value} documents
        respondent_id: Caller id of the respondent (NULL when anonymous)
        submitted_at: ISO-8601 submission timestamp
        response_metadata: Opaque client-supplied metadata
        ip_address: Source address of the submission
        user_agent: User-Agent header of the submission
    """

    __tablename__ = "responses"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    response_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        comment="Response identifier"
    )
    survey_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="Identifier of the survey answered"
    )

    # Response Data
    answers: Mapped[list] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        comment="List of answer documents"
    )
    respondent_id: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        comment="Caller id of the respondent, NULL for anonymous responses"
    )
    submitted_at: Mapped[str] = mapped_column(
        String(40),
        nullable=False,
        comment="When the response was submitted"
    )

    # Auxiliary data
    # "metadata" is reserved on declarative classes, hence the attribute name
    response_metadata: Mapped[dict] = mapped_column(
        "metadata",
        JSON,
        nullable=False,
        default=dict,
        comment="Opaque client-supplied metadata"
    )
    ip_address: Mapped[Optional[str]] = mapped_column(
        String(64),
        nullable=True,
        comment="Source address of the submission"
    )
    user_agent: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="User-Agent of the submission"
    )

    __table_args__ = (
        # Secondary index used to fetch all responses of a survey
        Index("idx_responses_survey", "survey_id", "submitted_at"),
    )

    def to_dict(self) -> dict[str, Any]:
        """Return the record in its camelCase wire shape."""
        data = {
            "responseId": self.response_id,
            "surveyId": self.survey_id,
            "answers": list(self.answers or []),
            "submittedAt": self.submitted_at,
            "metadata": dict(self.response_metadata or {}),
            "ipAddress": self.ip_address,
            "userAgent": self.user_agent,
        }
        if self.respondent_id is not None:
            data["respondentId"] = self.respondent_id
        return data

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"<ResponseRecord(response_id={self.response_id}, "
            f"survey_id={self.survey_id}, "
            f"answers={len(self.answers or [])})>"
        )
