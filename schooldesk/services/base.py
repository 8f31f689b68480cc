# schooldesk/services/base.py - Shared transaction handling for services
import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from schooldesk.core.exceptions import (
    ConcurrencyError, ConflictError, SchoolDeskError, StoreWriteError
)

logger = logging.getLogger(__name__)


class BaseService:
    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def unit_of_work(
        self,
        failure_message: str,
        conflict_message: Optional[str] = None,
    ) -> Iterator[Session]:
        """
        Run a block as one transaction and commit it.

        Any failure rolls back every write made inside the block. Store
        errors are logged and surfaced as generic messages; nothing is
        retried.
        """
        try:
            yield self.session
            self.session.commit()
        except SchoolDeskError:
            self.session.rollback()
            raise
        except StaleDataError as e:
            self.session.rollback()
            logger.warning(f"Concurrent update detected: {e}")
            raise ConcurrencyError(
                "The record was changed by another request. Reload it and try again."
            ) from e
        except IntegrityError as e:
            self.session.rollback()
            logger.warning(f"Integrity violation: {e.orig}")
            raise ConflictError(conflict_message or failure_message) from e
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"{failure_message}: {e}", exc_info=True)
            raise StoreWriteError(failure_message) from e
