"""Database models and session management.

This package contains all SQLAlchemy ORM models and database utilities.
"""

from app.models.database import (
    Base,
    create_db_engine,
    create_session_factory,
    create_connection_lock,
)
from app.models.survey import SurveyRecord
from app.models.response import ResponseRecord

__all__ = [
    "Base",
    "create_db_engine",
    "create_session_factory",
    "create_connection_lock",
    "SurveyRecord",
    "ResponseRecord",
]
