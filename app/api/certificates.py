"""Public certificate verification.

GET /v1/certificates/{code}/verify needs no token: employers and anyone
else holding a certificate code can confirm who earned it, for which
course, and when.
"""

from __future__ import annotations

import json
import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.api.dependencies import get_uow
from app.api.errors import to_http_exception
from app.api.ratelimit import require_rate_limit
from app.core.errors import ProgressError
from app.core.metrics import CACHE_OPERATIONS
from app.repos.unit_of_work import ProgressUnitOfWork
from app.services import progress_service
from app.services.cache import cache_service
from app.services.rate_limiter import VERIFY_LIMIT

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/certificates", tags=["certificates"])

# Certificates never change, so the TTL only bounds cache size.
_VERIFY_CACHE_TTL = 3600


class CertificateVerifyOut(BaseModel):
    valid: bool
    certificate_code: str
    user_id: str
    course_id: str
    course_title: str
    issued_at: int


@router.get(
    "/{code}/verify",
    response_model=CertificateVerifyOut,
    dependencies=[Depends(require_rate_limit(VERIFY_LIMIT))],
)
async def verify_certificate(
    code: str,
    uow: Annotated[ProgressUnitOfWork, Depends(get_uow)],
) -> CertificateVerifyOut:
    cache_key = f"certificate:{code.strip().upper()}"

    cached = await cache_service.get(cache_key)
    if cached is not None:
        CACHE_OPERATIONS.labels(operation="hit").inc()
        return CertificateVerifyOut(**json.loads(cached))
    CACHE_OPERATIONS.labels(operation="miss").inc()

    try:
        verification = await progress_service.verify_certificate(uow, code)
    except ProgressError as e:
        logger.info("Certificate lookup failed code=%s", code)
        raise to_http_exception(e) from None

    certificate = verification.certificate
    out = CertificateVerifyOut(
        valid=True,
        certificate_code=certificate.certificate_code,
        user_id=certificate.user_id,
        course_id=str(certificate.course_id),
        course_title=verification.course_title,
        issued_at=certificate.issued_at,
    )
    await cache_service.set(cache_key, out.model_dump_json(), _VERIFY_CACHE_TTL)
    return out
