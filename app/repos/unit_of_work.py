"""Transaction boundary for the completion → progress → certificate cascade.

A toggle writes a CompletionRecord, recomputes the Enrollment, and may
insert a Certificate.  Those three writes must land together or not at all,
and two toggles for the same (learner, course) must not interleave.

`locked(user_id, course_id)` provides both guarantees:

  - InMemoryUnitOfWork: a per-(learner, course) asyncio.Lock, plus a
    snapshot of the mutable repos that is restored if the body raises.
  - PgUnitOfWork (app/repos/pg_unit_of_work.py): a SAVEPOINT and a
    SELECT ... FOR UPDATE on the enrollment row.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Protocol
from uuid import UUID

from app.repos.certificate_repo import CertificateRepo, InMemoryCertificateRepo
from app.repos.completion_repo import CompletionRepo, InMemoryCompletionRepo
from app.repos.course_repo import CourseRepo, InMemoryCourseRepo
from app.repos.enrollment_repo import EnrollmentRepo, InMemoryEnrollmentRepo


class ProgressUnitOfWork(Protocol):
    courses: CourseRepo
    completions: CompletionRepo
    enrollments: EnrollmentRepo
    certificates: CertificateRepo

    def locked(
        self, user_id: str, course_id: UUID
    ) -> AbstractAsyncContextManager[None]: ...


class InMemoryUnitOfWork:
    def __init__(self) -> None:
        self.courses = InMemoryCourseRepo()
        self.completions = InMemoryCompletionRepo()
        self.enrollments = InMemoryEnrollmentRepo()
        self.certificates = InMemoryCertificateRepo()
        self._locks: dict[tuple[str, UUID], asyncio.Lock] = {}

    @asynccontextmanager
    async def locked(self, user_id: str, course_id: UUID) -> AsyncIterator[None]:
        lock = self._locks.setdefault((user_id, course_id), asyncio.Lock())
        async with lock:
            completions = self.completions.snapshot()
            enrollments = self.enrollments.snapshot()
            certificates = self.certificates.snapshot()
            try:
                yield
            except BaseException:
                self.completions.restore(completions)
                self.enrollments.restore(enrollments)
                self.certificates.restore(certificates)
                raise

    def reset(self) -> None:
        """Drop all state (used by the test fixtures)."""
        self.courses.clear()
        self.completions.restore({})
        self.enrollments.restore({})
        self.certificates.restore(({}, {}))
        self._locks.clear()
