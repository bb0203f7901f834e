"""Response store backed by SQLAlchemy.

Responses are written once and read back per survey through the
survey_id index.
"""

from contextlib import AbstractContextManager, nullcontext
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from app.models.response import ResponseRecord
from app.schemas.survey import SurveyResponse
from app.logging_config import get_logger

logger = get_logger(__name__)


def _to_response(record: ResponseRecord) -> SurveyResponse:
    return SurveyResponse.model_validate(record.to_dict())


class ResponseStore:
    """Store for survey response records.

    Holds ``lock`` around every call, like SurveyStore.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        lock: Optional[AbstractContextManager] = None
    ) -> None:
        self.session_factory = session_factory
        self.lock = lock if lock is not None else nullcontext()

    def get(self, response_id: str) -> Optional[SurveyResponse]:
        """Fetch a response by its identifier."""
        with self.lock, self.session_factory() as db:
            record = db.execute(
                select(ResponseRecord).where(ResponseRecord.response_id == response_id)
            ).scalar_one_or_none()
            return _to_response(record) if record is not None else None

    def create(self, response: SurveyResponse) -> Optional[SurveyResponse]:
        """Insert a response.

        Args:
            response: Fully populated response

        Returns:
            The stored response, or None if the write failed
        """
        record = ResponseRecord(
            response_id=response.response_id,
            survey_id=response.survey_id,
            answers=[answer.to_wire() for answer in response.answers],
            respondent_id=response.respondent_id,
            submitted_at=response.submitted_at,
            response_metadata=dict(response.metadata),
            ip_address=response.ip_address,
            user_agent=response.user_agent,
        )
        with self.lock, self.session_factory() as db:
            try:
                db.add(record)
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                logger.error(
                    f"Error creating response: {e}",
                    extra={"survey_id": response.survey_id}
                )
                return None
            return _to_response(record)

    def query_by_survey(self, survey_id: str) -> list[SurveyResponse]:
        """Fetch all responses to a survey.

        Returns:
            list[SurveyResponse]: Responses ordered by submission time,
            then by insertion order
        """
        query = (
            select(ResponseRecord)
            .where(ResponseRecord.survey_id == survey_id)
            .order_by(ResponseRecord.submitted_at, ResponseRecord.seq)
        )
        with self.lock, self.session_factory() as db:
            return [_to_response(record) for record in db.execute(query).scalars()]
