"""PostgreSQL implementation of ProgressUnitOfWork."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import UUID

from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ConflictError
from app.repos.pg_certificate_repo import PgCertificateRepo
from app.repos.pg_completion_repo import PgCompletionRepo
from app.repos.pg_course_repo import PgCourseRepo
from app.repos.pg_enrollment_repo import PgEnrollmentRepo

logger = logging.getLogger(__name__)

# serialization_failure, deadlock_detected
_RETRYABLE_SQLSTATES = frozenset({"40001", "40P01"})


class PgUnitOfWork:
    """All four repos over one request-scoped session.

    The outer transaction belongs to get_uow(); locked() only
    opens a SAVEPOINT so a failed cascade rolls back without poisoning the
    rest of the request.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self.courses = PgCourseRepo(session)
        self.completions = PgCompletionRepo(session)
        self.enrollments = PgEnrollmentRepo(session)
        self.certificates = PgCertificateRepo(session)

    @asynccontextmanager
    async def locked(self, user_id: str, course_id: UUID) -> AsyncIterator[None]:
        try:
            async with self._session.begin_nested():
                await self.enrollments.lock(user_id, course_id)
                yield
        except DBAPIError as e:
            if _sqlstate(e) in _RETRYABLE_SQLSTATES:
                logger.warning(
                    "Lost storage race user=%s course=%s sqlstate=%s",
                    user_id,
                    course_id,
                    _sqlstate(e),
                )
                raise ConflictError() from e
            raise


def _sqlstate(error: DBAPIError) -> str | None:
    orig = error.orig
    # asyncpg exposes `sqlstate`, psycopg exposes `pgcode`
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
