"""
Unit-of-work error boundary for services
"""
import logging
from contextlib import contextmanager
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from bankcore.domain.errors import SystemFailureError

logger = logging.getLogger(__name__)


@contextmanager
def store_errors(db: Session, operation: str):
    """
    Rollback on any error; SQLAlchemyError -> SystemFailureError

    Ожидаемые ошибки (InvalidArgument, NotFound, ...) пробрасываются как есть.

    Usage:
        with store_errors(self.db, "update balance"):
            self.accounts.update(account)
            self.db.commit()
    """
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Store failure during %s", operation)
        raise SystemFailureError(f"{operation} failed: {exc}") from exc
    except Exception:
        db.rollback()
        raise
