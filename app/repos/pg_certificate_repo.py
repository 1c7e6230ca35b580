"""PostgreSQL implementation of CertificateRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.tables import CertificateRow
from app.models.certificate import Certificate


class PgCertificateRepo:
    """Satisfies the CertificateRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_enrollment(self, enrollment_id: UUID) -> Certificate | None:
        stmt = select(CertificateRow).where(CertificateRow.enrollment_id == enrollment_id)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_certificate(row)

    async def get_by_code(self, certificate_code: str) -> Certificate | None:
        stmt = select(CertificateRow).where(
            CertificateRow.certificate_code == certificate_code
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_certificate(row)

    async def add_if_absent(self, certificate: Certificate) -> Certificate:
        # ON CONFLICT (enrollment_id) DO NOTHING: a concurrent issuer that
        # loses the race falls through to the SELECT and returns the winner.
        # A certificate_code clash is a different unique index and still
        # raises, which we surface as ValueError so the issuer can retry.
        stmt = (
            insert(CertificateRow)
            .values(
                id=certificate.id,
                enrollment_id=certificate.enrollment_id,
                user_id=certificate.user_id,
                course_id=certificate.course_id,
                certificate_code=certificate.certificate_code,
                issued_at=certificate.issued_at,
            )
            .on_conflict_do_nothing(index_elements=[CertificateRow.enrollment_id])
        )
        try:
            async with self._session.begin_nested():
                await self._session.execute(stmt)
        except IntegrityError:
            raise ValueError("certificate code already exists") from None

        stored = await self.get_by_enrollment(certificate.enrollment_id)
        if stored is None:
            raise RuntimeError("certificate insert returned no row")
        return stored


def _row_to_certificate(row: CertificateRow) -> Certificate:
    return Certificate(
        id=row.id,
        enrollment_id=row.enrollment_id,
        user_id=row.user_id,
        course_id=row.course_id,
        certificate_code=row.certificate_code,
        issued_at=row.issued_at,
    )
