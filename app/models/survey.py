"""SurveyRecord model for storing survey definitions.

This module defines the SurveyRecord model which stores a survey, its
ordered questions and the counters and flags that govern who may read it
and whether it still accepts responses.
"""

from typing import Any, Optional

from sqlalchemy import (
    Index,
    String,
    Text,
    Integer,
    Boolean,
    JSON,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models.database import Base


class SurveyRecord(Base):
    """Model for storing surveys.

    Questions and settings are stored as JSON documents exactly as they
    were accepted by the API. Timestamps are ISO-8601 strings.

    Attributes:
        survey_id: Primary key (UUID string)
        title: Survey title
        description: Free-text description
        questions: Ordered list of question documents
        owner_id: Identifier of the creating caller
        created_at: Creation timestamp (set once)
        updated_at: Last mutation timestamp
        is_active: Whether the survey accepts new responses
        is_public: Whether any caller may read the survey and its results
        response_count: Number of responses recorded by the atomic counter
        settings: Opaque survey configuration
    """

    __tablename__ = "surveys"

    survey_id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        comment="Survey identifier"
    )

    # Content
    title: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Survey title"
    )
    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        default="",
        comment="Survey description"
    )
    questions: Mapped[list] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        comment="Ordered list of question documents"
    )

    # Ownership
    owner_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Identifier of the creating caller"
    )

    # Timestamps (ISO-8601)
    created_at: Mapped[str] = mapped_column(
        String(40),
        nullable=False,
        comment="When the survey was created"
    )
    updated_at: Mapped[str] = mapped_column(
        String(40),
        nullable=False,
        comment="When the survey was last changed"
    )

    # Flags and counters
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        comment="Whether new responses are accepted"
    )
    is_public: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="Whether any caller may read the survey"
    )
    response_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Atomically incremented response counter"
    )

    settings: Mapped[dict] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
        comment="Opaque survey configuration"
    )

    __table_args__ = (
        # Index for listing a caller's own surveys
        Index("idx_surveys_owner", "owner_id"),
    )

    def to_dict(self) -> dict[str, Any]:
        """Return the record in its camelCase wire shape."""
        return {
            "surveyId": self.survey_id,
            "title": self.title,
            "description": self.description,
            "questions": list(self.questions or []),
            "ownerId": self.owner_id,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "isActive": self.is_active,
            "isPublic": self.is_public,
            "responseCount": self.response_count,
            "settings": dict(self.settings or {}),
        }

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"<SurveyRecord(survey_id={self.survey_id}, "
            f"owner_id={self.owner_id}, "
            f"is_active={self.is_active}, "
            f"is_public={self.is_public}, "
            f"response_count={self.response_count})>"
        )
