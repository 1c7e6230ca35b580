from __future__ import annotations

from typing import Protocol
from uuid import UUID

from app.models.certificate import Certificate


class CertificateRepo(Protocol):
    async def get_by_enrollment(self, enrollment_id: UUID) -> Certificate | None: ...
    async def get_by_code(self, certificate_code: str) -> Certificate | None: ...
    async def add_if_absent(self, certificate: Certificate) -> Certificate:
        """Insert unless the enrollment already has a certificate.

        Returns the stored certificate: the new one, or the existing winner.
        Raises ValueError when certificate_code is already taken by another
        enrollment (the caller should retry with a fresh code).
        """
        ...


class InMemoryCertificateRepo:
    def __init__(self) -> None:
        self._by_enrollment: dict[UUID, Certificate] = {}
        self._by_code: dict[str, Certificate] = {}

    async def get_by_enrollment(self, enrollment_id: UUID) -> Certificate | None:
        return self._by_enrollment.get(enrollment_id)

    async def get_by_code(self, certificate_code: str) -> Certificate | None:
        return self._by_code.get(certificate_code)

    async def add_if_absent(self, certificate: Certificate) -> Certificate:
        existing = self._by_enrollment.get(certificate.enrollment_id)
        if existing is not None:
            return existing
        if certificate.certificate_code in self._by_code:
            raise ValueError("certificate code already exists")
        self._by_enrollment[certificate.enrollment_id] = certificate
        self._by_code[certificate.certificate_code] = certificate
        return certificate

    def snapshot(self) -> tuple[dict[UUID, Certificate], dict[str, Certificate]]:
        return dict(self._by_enrollment), dict(self._by_code)

    def restore(
        self, snapshot: tuple[dict[UUID, Certificate], dict[str, Certificate]]
    ) -> None:
        by_enrollment, by_code = snapshot
        self._by_enrollment = dict(by_enrollment)
        self._by_code = dict(by_code)
