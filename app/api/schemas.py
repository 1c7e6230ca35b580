"""Response models shared by the course, progress and certificate routers."""

from __future__ import annotations

from pydantic import BaseModel

from app.models.certificate import Certificate
from app.models.course import ContentItem, Course
from app.models.progress import Enrollment, ProgressSnapshot


class CourseOut(BaseModel):
    id: str
    slug: str
    title: str
    status: str


class ItemOut(BaseModel):
    id: str
    slug: str
    title: str
    kind: str  # MODULE|WORKSHOP
    position: int


class EnrollmentOut(BaseModel):
    id: str
    user_id: str
    course_id: str
    status: str  # IN_PROGRESS|COMPLETED
    progress_percent: int
    enrolled_at: int
    updated_at: int
    completed_at: int | None


class ProgressOut(BaseModel):
    course_id: str
    progress_percent: int
    status: str
    completed_items: int
    total_items: int


class CertificateOut(BaseModel):
    certificate_code: str
    user_id: str
    course_id: str
    issued_at: int


def course_out(course: Course) -> CourseOut:
    return CourseOut(
        id=str(course.id), slug=course.slug, title=course.title, status=course.status
    )


def item_out(item: ContentItem) -> ItemOut:
    return ItemOut(
        id=str(item.id),
        slug=item.slug,
        title=item.title,
        kind=item.kind.value,
        position=item.position,
    )


def enrollment_out(enrollment: Enrollment) -> EnrollmentOut:
    return EnrollmentOut(
        id=str(enrollment.id),
        user_id=enrollment.user_id,
        course_id=str(enrollment.course_id),
        status=enrollment.status.value,
        progress_percent=enrollment.progress_percent,
        enrolled_at=enrollment.enrolled_at,
        updated_at=enrollment.updated_at,
        completed_at=enrollment.completed_at,
    )


def progress_out(snapshot: ProgressSnapshot) -> ProgressOut:
    return ProgressOut(
        course_id=str(snapshot.course_id),
        progress_percent=snapshot.progress_percent,
        status=snapshot.status.value,
        completed_items=snapshot.completed_items,
        total_items=snapshot.total_items,
    )


def certificate_out(certificate: Certificate) -> CertificateOut:
    return CertificateOut(
        certificate_code=certificate.certificate_code,
        user_id=certificate.user_id,
        course_id=str(certificate.course_id),
        issued_at=certificate.issued_at,
    )
