import logging

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


def database_unavailable(db: Session | None = None) -> HTTPException:
    """Log the active SQLAlchemyError, roll back, and build the 503 response."""
    logger.exception('Database operation failed')
    if db is not None:
        try:
            db.rollback()
        except SQLAlchemyError:
            logger.exception('Rollback failed')
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail='Database unavailable. Verify DATABASE_URL and database credentials.',
    )
