"""Routes package for FastAPI endpoints.

This package contains all API route modules for the survey service.
"""

from app.routes import health, responses, surveys

__all__ = ["health", "responses", "surveys"]
