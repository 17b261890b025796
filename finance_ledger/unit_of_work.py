"""
Unit of work: the atomic boundary for ledger writes.

Every ledger operation that writes more than one fact runs
inside ``UnitOfWork.atomic()``. The outermost block commits on
success and rolls back on any exception, so a failure partway
through never leaves rows visible to other readers. Nested
blocks join the enclosing one, which lets a journal entry call
post_entry N times and still commit (or fail) once.
"""

import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from finance_ledger.exceptions import PersistenceError

logger = logging.getLogger(__name__)


class UnitOfWork:

    def __init__(self, session: Session):
        self.session = session
        self._depth = 0
        self._after_commit = []

    @property
    def active(self) -> bool:
        return self._depth > 0

    def after_commit(self, callback) -> None:
        """
        Run ``callback`` once the outermost block has committed.

        Callbacks registered in a unit that rolls back are dropped.
        """
        self._after_commit.append(callback)

    @contextmanager
    def atomic(self):
        """Run the enclosed block as one all-or-nothing unit."""
        if self._depth:
            self._depth += 1
            try:
                yield self.session
            finally:
                self._depth -= 1
            return

        self._depth = 1
        try:
            yield self.session
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("Ledger unit of work rolled back", exc_info=True)
            raise PersistenceError(str(e)) from e
        except Exception:
            self.session.rollback()
            raise
        finally:
            self._depth = 0
            callbacks, self._after_commit = self._after_commit, []

        for callback in callbacks:
            callback()
