"""Survey store backed by SQLAlchemy.

This module wraps the database operations on survey records: fetch by id,
create, update, scan with optional filters, delete, and the atomic
response-count increment used after a response is written.
"""

from datetime import datetime, timezone
from contextlib import AbstractContextManager, nullcontext
from typing import Any, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from app.models.survey import SurveyRecord
from app.schemas.survey import Question, Survey
from app.logging_config import get_logger

logger = get_logger(__name__)

# Survey fields an update may change
UPDATABLE_FIELDS = frozenset({
    "title",
    "description",
    "questions",
    "owner_id",
    "updated_at",
    "is_active",
    "is_public",
    "settings",
})

# Integer columns that may be changed with atomic_increment
COUNTER_FIELDS = {
    "response_count": SurveyRecord.response_count,
}


def now_iso() -> str:
    """Return the current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _dump_questions(questions: list[Any]) -> list[dict[str, Any]]:
    return [q.to_wire() if isinstance(q, Question) else dict(q) for q in questions]


def _to_survey(record: SurveyRecord) -> Survey:
    return Survey.model_validate(record.to_dict())


class SurveyStore:
    """Store for survey records.

    One store is created per process and shared by all requests; each call
    opens its own short-lived session from the factory.
    ``lock`` is held around every call; stores sharing one connection
    must share one lock (see create_connection_lock).
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        lock: Optional[AbstractContextManager] = None
    ) -> None:
        self.session_factory = session_factory
        self.lock = lock if lock is not None else nullcontext()

    def get(self, survey_id: str) -> Optional[Survey]:
        """Fetch a survey by id.

        Args:
            survey_id: Survey identifier

        Returns:
            The survey, or None if no survey has this id
        """
        with self.lock, self.session_factory() as db:
            record = db.get(SurveyRecord, survey_id)
            return _to_survey(record) if record is not None else None

    def create(self, survey: Survey) -> Optional[Survey]:
        """Insert a new survey.

        Args:
            survey: Fully populated survey

        Returns:
            The stored survey, or None if the write failed
        """
        record = SurveyRecord(
            survey_id=survey.survey_id,
            title=survey.title,
            description=survey.description,
            questions=_dump_questions(survey.questions),
            owner_id=survey.owner_id,
            created_at=survey.created_at,
            updated_at=survey.updated_at,
            is_active=survey.is_active,
            is_public=survey.is_public,
            response_count=survey.response_count,
            settings=dict(survey.settings),
        )
        with self.lock, self.session_factory() as db:
            try:
                db.add(record)
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(
                    f"Error creating survey: {e}",
                    extra={"survey_id": survey.survey_id}
                )
                return None
            return _to_survey(record)

    def update(self, survey_id: str, fields: dict[str, Any]) -> Optional[Survey]:
        """Change fields of an existing survey.

        The identifier, creation time and response counter are never
        changed by this method, even if present in ``fields``.

        Args:
            survey_id: Survey identifier
            fields: snake_case field names mapped to their new values

        Returns:
            The updated survey, or None if it does not exist or the write failed
        """
        with self.lock, self.session_factory() as db:
            try:
                record = db.get(SurveyRecord, survey_id)
                if record is None:
                    logger.warning(
                        f"Survey to update not found: {survey_id}",
                        extra={"survey_id": survey_id}
                    )
                    return None

                for name, value in fields.items():
                    if name not in UPDATABLE_FIELDS:
                        continue
                    if name == "questions":
                        value = _dump_questions(value)
                    setattr(record, name, value)

                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(
                    f"Error updating survey: {e}",
                    extra={"survey_id": survey_id}
                )
                return None
            return _to_survey(record)

    def scan(
        self,
        owner_id: Optional[str] = None,
        is_public: Optional[bool] = None
    ) -> list[Survey]:
        """List surveys, optionally filtered by owner and visibility.

        Args:
            owner_id: Only return surveys owned by this caller
            is_public: Only return surveys with this visibility

        Returns:
            list[Survey]: Matching surveys, oldest first
        """
        query = select(SurveyRecord)
        if owner_id is not None:
            query = query.where(SurveyRecord.owner_id == owner_id)
        if is_public is not None:
            query = query.where(SurveyRecord.is_public == is_public)
        query = query.order_by(SurveyRecord.created_at, SurveyRecord.survey_id)

        with self.lock, self.session_factory() as db:
            return [_to_survey(record) for record in db.execute(query).scalars()]

    def atomic_increment(
        self,
        survey_id: str,
        field: str = "response_count",
        amount: int = 1
    ) -> Optional[Survey]:
        """Add to a counter of a survey in a single UPDATE statement.

        The addition is performed by the database (``SET col = col + :n``),
        so concurrent increments are never lost. ``updated_at`` is refreshed.

        Args:
            survey_id: Survey identifier
            field: Counter to increment
            amount: Amount to add

        Returns:
            The survey after the increment, or None if it does not exist
            or the write failed

        Raises:
            ValueError: If ``field`` is not a counter
        """
        column = COUNTER_FIELDS.get(field)
        if column is None:
            raise ValueError(f"Not a counter field: {field}")

        statement = (
            update(SurveyRecord)
            .where(SurveyRecord.survey_id == survey_id)
            .values({column: column + amount, SurveyRecord.updated_at: now_iso()})
        )

        with self.lock, self.session_factory() as db:
            try:
                result = db.execute(statement)
                if result.rowcount == 0:
                    db.rollback()
                    logger.warning(
                        f"Survey to increment not found: {survey_id}",
                        extra={"survey_id": survey_id}
                    )
                    return None
                db.commit()
                record = db.get(SurveyRecord, survey_id, populate_existing=True)
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(
                    f"Error incrementing survey {field}: {e}",
                    extra={"survey_id": survey_id}
                )
                return None
            return _to_survey(record) if record is not None else None

    def count(self) -> int:
        """Count stored surveys. Errors propagate to the caller."""
        with self.lock, self.session_factory() as db:
            return db.scalar(select(func.count()).select_from(SurveyRecord))

    def delete(self, survey_id: str) -> bool:
        """Delete a survey.

        Args:
            survey_id: Survey identifier

        Returns:
            bool: True if a survey was deleted, False if none had this id

        Raises:
            SQLAlchemyError: If the delete fails
        """
        with self.lock, self.session_factory() as db:
            try:
                record = db.get(SurveyRecord, survey_id)
                if record is None:
                    return False
                db.delete(record)
                db.commit()
                return True
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(
                    f"Error deleting survey: {e}",
                    extra={"survey_id": survey_id}
                )
                raise
