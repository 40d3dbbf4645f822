"""Database helpers and repositories for school records."""

from __future__ import annotations

import itertools
import logging
import threading
from typing import TYPE_CHECKING, Protocol, cast

import psycopg2

from school_directory.core import errors
from school_directory.db import connection
from school_directory.db import models as db_models

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)


class SchoolRepositoryProtocol(Protocol):
    """Protocol interface for recording and listing schools.

    ``register`` is the write path and ``list_all`` the read path.
    Implementations exist for tests/local development (in memory) and
    for production (PostgreSQL).
    """

    def register(
        self,
        record: db_models.ValidatedRecord,
        image: db_models.AssetReference,
    ) -> db_models.SchoolRecord: ...

    def list_all(self) -> list[db_models.SchoolSummary]: ...


class InMemorySchoolRepository(SchoolRepositoryProtocol):
    """Simple in-memory store for tests and local development.

    Stores records in insertion order and assigns ids from a counter.
    Data is lost when the process exits.
    """

    def __init__(self) -> None:
        """Initialize an empty in-memory repository."""
        self._records: list[db_models.SchoolRecord] = []
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def register(
        self,
        record: db_models.ValidatedRecord,
        image: db_models.AssetReference,
    ) -> db_models.SchoolRecord:
        """Append a record and assign it the next id.

        Args:
            record: Validated submission.
            image: Reference of the stored image.

        Returns:
            The persisted SchoolRecord.
        """
        with self._lock:
            school = db_models.SchoolRecord.from_validated(
                next(self._ids), record, image
            )
            self._records.append(school)
        return school

    def list_all(self) -> list[db_models.SchoolSummary]:
        """Get summaries of all stored schools in insertion order."""
        with self._lock:
            return [school.summary() for school in self._records]

    def records(self) -> list[db_models.SchoolRecord]:
        """Get full records; used by tests to inspect what was written."""
        with self._lock:
            return list(self._records)


class PostgresSchoolRepository(SchoolRepositoryProtocol):
    """PostgreSQL-backed repository for school records.

    All statements run on the process-wide connection owned by the
    ConnectionManager. The ``school`` table is created on first use.
    """

    CREATE_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS school (
      id SERIAL PRIMARY KEY,
      name TEXT NOT NULL,
      email TEXT NOT NULL,
      address TEXT NOT NULL,
      city TEXT NOT NULL,
      state TEXT NOT NULL,
      contact TEXT NOT NULL,
      image TEXT NOT NULL
    );
    """

    INSERT_SQL = """
    INSERT INTO school (name, email, address, city, state, contact, image)
    VALUES (%(name)s, %(email)s, %(address)s, %(city)s, %(state)s,
        %(contact)s, %(image)s)
    RETURNING id;
    """

    LIST_SQL = "SELECT id, name, address, city, image FROM school ORDER BY id"

    def __init__(self, manager: connection.ConnectionManager) -> None:
        """Initialize repository with the shared connection manager.

        Args:
            manager: Owner of the process-wide database connection.
        """
        self.manager = manager
        self._schema_ready = False
        self._schema_lock = threading.Lock()

    def _ensure_schema(self) -> None:
        """Create the school table once per repository instance."""
        if self._schema_ready:
            return
        with self._schema_lock:
            if self._schema_ready:
                return
            with self.manager.transaction() as cur:
                cur.execute(self.CREATE_TABLE_SQL)
            self._schema_ready = True

    def register(
        self,
        record: db_models.ValidatedRecord,
        image: db_models.AssetReference,
    ) -> db_models.SchoolRecord:
        """Insert all seven fields in one transaction.

        Either the row exists with every field populated or nothing was
        written. The stored image is not removed when the insert fails.

        Args:
            record: Validated submission.
            image: Reference of the already stored image.

        Returns:
            The persisted SchoolRecord with its assigned id.

        Raises:
            errors.ConnectionError: If the database is unreachable.
            errors.WriteError: If the insert fails.
        """
        try:
            self._ensure_schema()
            with self.manager.transaction() as cur:
                cur.execute(self.INSERT_SQL, self._to_row(record, image))
                row = cur.fetchone()
        except psycopg2.Error as exc:
            logger.error(
                "Failed to insert school %r", record.name, exc_info=True
            )
            raise errors.WriteError("Failed to add school") from exc

        if row is None:
            raise errors.WriteError("Failed to add school")

        school = db_models.SchoolRecord.from_validated(
            int(cast(int, row[0])), record, image
        )
        logger.info("Registered school %d (%s)", school.id, school.name)
        return school

    def list_all(self) -> list[db_models.SchoolSummary]:
        """Fetch the listing projection of every school, ordered by id.

        Returns:
            List of SchoolSummary; empty when no school is stored.

        Raises:
            errors.ConnectionError: If the database is unreachable.
            errors.ReadError: If the query fails.
        """
        try:
            self._ensure_schema()
            with self.manager.transaction() as cur:
                cur.execute(self.LIST_SQL)
                rows = cur.fetchall()
        except psycopg2.Error as exc:
            logger.error("Failed to list schools", exc_info=True)
            raise errors.ReadError("Failed to retrieve schools data") from exc

        return [self._from_row(row) for row in rows]

    @staticmethod
    def _to_row(
        record: db_models.ValidatedRecord,
        image: db_models.AssetReference,
    ) -> dict[str, object]:
        """Convert a validated record to insert parameters.

        Args:
            record: Validated submission.
            image: Reference of the stored image.

        Returns:
            Dictionary suitable for parameterized SQL insertion.
        """
        return {
            "name": record.name,
            "email": record.email,
            "address": record.address,
            "city": record.city,
            "state": record.state,
            "contact": record.contact,
            "image": image,
        }

    @staticmethod
    def _from_row(row: Sequence[object]) -> db_models.SchoolSummary:
        """Convert a listing row to a SchoolSummary.

        Args:
            row: ``(id, name, address, city, image)`` tuple.

        Returns:
            SchoolSummary with all fields populated.
        """
        school_id, name, address, city, image = row
        return db_models.SchoolSummary(
            id=int(cast(int, school_id)),
            name=str(name),
            address=str(address),
            city=str(city),
            image=str(image),
        )


_repository: SchoolRepositoryProtocol | None = None
_repository_lock = threading.Lock()


def get_school_repository() -> SchoolRepositoryProtocol:
    """Factory function for the process-wide school repository.

    Returns:
        PostgresSchoolRepository bound to the shared connection manager.
    """
    global _repository
    with _repository_lock:
        if _repository is None:
            _repository = PostgresSchoolRepository(
                connection.get_connection_manager()
            )
        return _repository


def reset_school_repository() -> None:
    """Forget the process-wide repository so the next one is rebuilt."""
    global _repository
    with _repository_lock:
        _repository = None
