# eduauth/services/sequence.py
"""
Monotonic sequence allocation for certificate serials.

``allocate_next`` is the only writer of the counter and the only point where
concurrent issuances serialize. Each allocation commits on its own, before the
certificate row is written: if the caller fails afterwards, the number is
skipped for good. Gaps are fine, duplicates are not.
"""
from __future__ import annotations

import logging
import threading
from typing import Callable, Protocol

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from eduauth.core.errors import StorageError
from eduauth.models.sequence import COUNTER_ID, CertificateSequence

logger = logging.getLogger(__name__)


class SequenceStore(Protocol):
    def allocate_next(self) -> int: ...

    def current(self) -> int: ...


class SqlSequenceStore:
    """
    Counter kept in the single ``certificate_sequences`` row.

    The increment is one ``UPDATE ... SET last_sequence = last_sequence + 1
    RETURNING last_sequence``: the row lock taken by the UPDATE covers the
    whole read-increment-write, on PostgreSQL and SQLite alike.
    """

    def __init__(self, session_factory: Callable[[], Session], max_attempts: int = 3):
        self._session_factory = session_factory
        self._max_attempts = max_attempts

    def allocate_next(self) -> int:
        for attempt in range(1, self._max_attempts + 1):
            with self._session_factory() as db:
                try:
                    value = self._increment(db)
                    if value is None:
                        # primeira emissão: cria a linha já com 1
                        db.add(CertificateSequence(id=COUNTER_ID, last_sequence=1))
                        value = 1
                    db.commit()
                except IntegrityError:
                    # outro processo criou a linha primeiro; tenta o UPDATE de novo
                    db.rollback()
                    logger.debug("sequence row created concurrently, retrying (attempt %s)", attempt)
                    continue
                except SQLAlchemyError as exc:
                    db.rollback()
                    logger.exception("sequence allocation failed")
                    raise StorageError("Could not allocate a sequence number.") from exc
            logger.debug("allocated sequence %s", value)
            return int(value)
        raise StorageError("Could not allocate a sequence number.", details={"attempts": self._max_attempts})

    def current(self) -> int:
        try:
            with self._session_factory() as db:
                value = db.scalar(
                    select(CertificateSequence.last_sequence).where(CertificateSequence.id == COUNTER_ID)
                )
        except SQLAlchemyError as exc:
            raise StorageError("Could not read the sequence counter.") from exc
        return int(value or 0)

    @staticmethod
    def _increment(db: Session) -> int | None:
        stmt = (
            update(CertificateSequence)
            .where(CertificateSequence.id == COUNTER_ID)
            .values(last_sequence=CertificateSequence.last_sequence + 1)
            .returning(CertificateSequence.last_sequence)
            .execution_options(synchronize_session=False)
        )
        return db.execute(stmt).scalar_one_or_none()


class InMemorySequenceStore:
    """Process-local counter; for tests and single-process tooling."""

    def __init__(self, start: int = 0):
        self._value = start
        self._lock = threading.Lock()

    def allocate_next(self) -> int:
        with self._lock:
            self._value += 1
            return self._value

    def current(self) -> int:
        with self._lock:
            return self._value
