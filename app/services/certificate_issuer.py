"""Certificate issuance: NONE → ISSUED, exactly once per enrollment.

Issuance is triggered by the progress aggregator on the IN_PROGRESS →
COMPLETED edge, or lazily when a completed learner reads a certificate
that was never issued.  Either way the same `issue()` runs, and the
storage layer's one-certificate-per-enrollment constraint makes it
exactly-once: a second caller gets the first caller's certificate back.

Certificates are permanent.  Nothing here revokes or reissues, and
un-completing an item later does not touch an issued certificate.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass

from app.core.config import SETTINGS
from app.core.errors import ConflictError, InvalidStateError
from app.core.metrics import CERTIFICATES_ISSUED, INVARIANT_BREACHES
from app.models.certificate import Certificate
from app.models.progress import Enrollment
from app.repos.unit_of_work import ProgressUnitOfWork

logger = logging.getLogger(__name__)

# Crockford base32: no I, L, O or U, so codes survive being read aloud
# or retyped from a printed certificate.
_ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
_GROUPS = 4
_GROUP_LEN = 4  # 16 symbols x 5 bits = 80 bits of randomness
_MAX_CODE_ATTEMPTS = 5


@dataclass(frozen=True, slots=True)
class IssueResult:
    certificate: Certificate
    created: bool


def generate_certificate_code(prefix: str | None = None) -> str:
    """Return an opaque code like ``CERT-7QK2-M9XD-4TPA-HR3W``.

    Drawn from `secrets`, so it cannot be predicted from learner, course,
    or enrollment identifiers.
    """
    prefix = prefix or SETTINGS.cert_code_prefix
    symbols = "".join(
        secrets.choice(_ALPHABET) for _ in range(_GROUPS * _GROUP_LEN)
    )
    groups = [symbols[i : i + _GROUP_LEN] for i in range(0, len(symbols), _GROUP_LEN)]
    return "-".join([prefix, *groups])


async def issue(
    uow: ProgressUnitOfWork,
    enrollment: Enrollment,
    *,
    now: int,
    trigger: str = "completion",
) -> IssueResult:
    """Issue the enrollment's certificate, or return the one already issued.

    Must run inside uow.locked() for the enrollment.  Raises
    InvalidStateError when the enrollment is not COMPLETED: that is a
    caller bug, never a user error.
    """
    if not enrollment.is_completed:
        INVARIANT_BREACHES.labels(kind="issue_before_completion").inc()
        logger.error(
            "Invariant breach: certificate requested for enrollment=%s status=%s",
            enrollment.id,
            enrollment.status,
            extra={"enrollment_id": str(enrollment.id), "user_id": enrollment.user_id},
        )
        raise InvalidStateError(
            f"enrollment {enrollment.id} is {enrollment.status}, not COMPLETED"
        )

    existing = await uow.certificates.get_by_enrollment(enrollment.id)
    if existing is not None:
        return IssueResult(certificate=existing, created=False)

    for attempt in range(1, _MAX_CODE_ATTEMPTS + 1):
        candidate = Certificate.new(
            enrollment_id=enrollment.id,
            user_id=enrollment.user_id,
            course_id=enrollment.course_id,
            certificate_code=generate_certificate_code(),
            issued_at=now,
        )
        try:
            stored = await uow.certificates.add_if_absent(candidate)
        except ValueError:
            logger.warning(
                "Certificate code collision, regenerating attempt=%d", attempt
            )
            continue

        created = stored.id == candidate.id
        if created:
            CERTIFICATES_ISSUED.labels(trigger=trigger).inc()
            logger.info(
                "Certificate issued code=%s enrollment=%s trigger=%s",
                stored.certificate_code,
                enrollment.id,
                trigger,
                extra={
                    "user_id": enrollment.user_id,
                    "course_id": str(enrollment.course_id),
                    "enrollment_id": str(enrollment.id),
                    "certificate_code": stored.certificate_code,
                },
            )
        return IssueResult(certificate=stored, created=created)

    raise ConflictError("could not allocate a unique certificate code")
