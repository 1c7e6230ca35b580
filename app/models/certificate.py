from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID, uuid4


@dataclass(frozen=True, slots=True)
class Certificate:
    """Proof of course completion, issued once per enrollment and never changed.

    certificate_code doubles as the public verification handle, so it is an
    opaque random token rather than anything derived from the learner.
    """

    id: UUID
    enrollment_id: UUID
    user_id: str
    course_id: UUID
    certificate_code: str
    issued_at: int

    @staticmethod
    def new(
        *,
        enrollment_id: UUID,
        user_id: str,
        course_id: UUID,
        certificate_code: str,
        issued_at: int,
    ) -> Certificate:
        return Certificate(
            id=uuid4(),
            enrollment_id=enrollment_id,
            user_id=user_id,
            course_id=course_id,
            certificate_code=certificate_code,
            issued_at=issued_at,
        )
