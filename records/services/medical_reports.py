"""
Medical reports and their image attachments.

Before creating or re-pointing a report every referenced row is looked up
explicitly, in a fixed order (patient, doctor, report type, center), so
the client gets a precise 404/400 instead of a generic foreign key
failure.  Images are stored as URLs; a report holds at most
``MAX_IMAGES_PER_REPORT`` of them.
"""
from __future__ import annotations

import logging

from django.db import transaction
from django.db.models import Count, Q
from rest_framework import status

from records.errors import AppError, ErrorMessages, get_or_404, translate_errors
from records.models import Doctor, HealthCenter, MedicalReport, Patient, ReportImage, ReportType, Role

from .common import iso, paginate, save_changes
from .doctors import DOCTOR
from .patients import PATIENT, ensure_patient_usable
from .report_types import REPORT_TYPE

logger = logging.getLogger(__name__)

REPORT = ErrorMessages(
    'Medical report',
    invalid_reference='The selected patient, doctor, report type or center does not exist',
)
IMAGE = ErrorMessages('Report image')
CENTER = ErrorMessages('Health center')

MAX_IMAGES_PER_REPORT = 20
SEARCH_LIMIT = 50

SORT_COLUMNS = {
    'createdAt': ('created_at',),
    'title': ('title',),
    'patientName': ('patient__person__last_name', 'patient__person__first_name'),
    'doctorName': ('doctor__person__last_name', 'doctor__person__first_name'),
}

REPORT_FIELDS = {
    'patientId': 'patient_id',
    'doctorId': 'doctor_id',
    'reportTypeId': 'report_type_id',
    'centerId': 'health_center_id',
    'title': 'title',
    'content': 'content',
}


# ---------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------
def format_image(img: ReportImage) -> dict:
    return {
        'id': img.id,
        'reportId': img.report_id,
        'url': img.url,
        'imageType': img.image_type,
        'description': img.description,
        'createdAt': iso(img.created_at),
    }


def format_report(r: MedicalReport) -> dict:
    images = list(r.images.all())
    return {
        'id': r.id,
        'title': r.title,
        'content': r.content,
        'createdAt': iso(r.created_at),
        'updatedAt': iso(r.updated_at),
        'patient': {
            'id': r.patient_id,
            'dni': r.patient.person.dni,
            'name': r.patient.person.full_name,
        },
        'doctor': {
            'id': r.doctor_id,
            'name': r.doctor.person.full_name,
            'licenseNumber': r.doctor.license_number,
        },
        'reportType': {
            'id': r.report_type_id,
            'name': r.report_type.name,
            'areaName': r.report_type.area.name,
        },
        'center': (
            {'id': r.health_center_id, 'name': r.health_center.name} if r.health_center_id else None
        ),
        'images': [format_image(i) for i in images],
        'imageCount': len(images),
    }


def format_report_summary(r: MedicalReport) -> dict:
    image_count = getattr(r, 'image_count', None)
    if image_count is None:
        image_count = r.images.count()
    return {
        'id': r.id,
        'title': r.title,
        'createdAt': iso(r.created_at),
        'patientName': r.patient.person.full_name,
        'patientDni': r.patient.person.dni,
        'doctorName': r.doctor.person.full_name,
        'reportTypeName': r.report_type.name,
        'areaName': r.report_type.area.name,
        'centerName': r.health_center.name if r.health_center_id else None,
        'imageCount': image_count,
        'hasImages': image_count > 0,
    }


# ---------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------
def _base_qs():
    return MedicalReport.objects.select_related(
        'patient__person', 'doctor__person', 'report_type__area', 'health_center'
    )


def _visible_to(qs, principal):
    # Patients only ever see reports about themselves.
    if principal is not None and principal.role_name == Role.PATIENT:
        return qs.filter(patient__person_id=principal.person_id)
    return qs


def _text_filter(term: str) -> Q:
    return (
        Q(title__icontains=term)
        | Q(content__icontains=term)
        | Q(patient__person__first_name__icontains=term)
        | Q(patient__person__last_name__icontains=term)
        | Q(patient__person__dni__icontains=term)
        | Q(doctor__person__first_name__icontains=term)
        | Q(doctor__person__last_name__icontains=term)
        | Q(report_type__name__icontains=term)
    )


def list_reports(principal, filters: dict):
    """Filtered, sorted and paginated reports.

    ``filters`` is the validated list query: ids, ``dateFrom``/``dateTo``
    (inclusive, by creation date), ``searchTerm``, ``page``, ``limit``,
    ``sortBy`` and ``sortOrder``.
    """
    with translate_errors(REPORT, 'list'):
        qs = _visible_to(_base_qs(), principal).prefetch_related('images')
        for key, column in (('patientId', 'patient_id'), ('doctorId', 'doctor_id'),
                            ('reportTypeId', 'report_type_id'), ('centerId', 'health_center_id')):
            if filters.get(key):
                qs = qs.filter(**{column: filters[key]})
        if filters.get('dateFrom'):
            qs = qs.filter(created_at__date__gte=filters['dateFrom'])
        if filters.get('dateTo'):
            qs = qs.filter(created_at__date__lte=filters['dateTo'])
        if filters.get('searchTerm'):
            qs = qs.filter(_text_filter(filters['searchTerm'].strip()))

        prefix = '-' if filters.get('sortOrder', 'desc') == 'desc' else ''
        columns = SORT_COLUMNS[filters.get('sortBy', 'createdAt')]
        qs = qs.order_by(*[prefix + c for c in columns], prefix + 'id')

        page, limit = filters.get('page', 1), filters.get('limit', 10)
        return paginate(qs, page, limit)


def search_reports(principal, query: str) -> list[MedicalReport]:
    with translate_errors(REPORT, 'search'):
        qs = _visible_to(_base_qs(), principal).annotate(image_count=Count('images'))
        qs = qs.filter(_text_filter(query.strip()))
        return list(qs.order_by('-created_at', '-id')[:SEARCH_LIMIT])


def get_report(report_id: int, principal=None) -> MedicalReport:
    report = get_or_404(_base_qs().prefetch_related('images'), REPORT, pk=report_id)
    if (principal is not None and principal.role_name == Role.PATIENT
            and report.patient.person_id != principal.person_id):
        raise AppError('You can only view your own medical reports', status.HTTP_403_FORBIDDEN)
    return report


# ---------------------------------------------------------------------
# Reference checks
# ---------------------------------------------------------------------
def _check_patient(patient_id: int) -> None:
    patient = get_or_404(Patient.objects.all(), PATIENT, pk=patient_id)
    ensure_patient_usable(patient)


def _check_doctor(doctor_id: int) -> Doctor:
    doctor = get_or_404(Doctor.objects.all(), DOCTOR, pk=doctor_id)
    if not doctor.is_active:
        raise AppError('Doctor is inactive', status.HTTP_400_BAD_REQUEST)
    return doctor


def _check_references(data: dict) -> None:
    if 'patientId' in data:
        _check_patient(data['patientId'])
    if 'doctorId' in data:
        _check_doctor(data['doctorId'])
    if 'reportTypeId' in data:
        get_or_404(ReportType.objects.all(), REPORT_TYPE, pk=data['reportTypeId'])
    if data.get('centerId') is not None:
        get_or_404(HealthCenter.objects.all(), CENTER, pk=data['centerId'])


def _author_check(principal, doctor_id: int) -> None:
    if principal.role_name == Role.ADMIN:
        return
    if not Doctor.objects.filter(pk=doctor_id, person_id=principal.person_id).exists():
        raise AppError('Doctors can only write reports under their own name', status.HTTP_403_FORBIDDEN)


def ensure_can_modify(principal, report: MedicalReport) -> None:
    """Only the doctor who wrote the report, or an admin, may change it."""
    if principal.role_name == Role.ADMIN:
        return
    if report.doctor.person_id != principal.person_id:
        raise AppError('Only the report author or an administrator can modify this report',
                       status.HTTP_403_FORBIDDEN)


# ---------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------
def _image_rows(report_id: int, images: list[dict]) -> list[ReportImage]:
    return [
        ReportImage(
            report_id=report_id,
            url=img['url'],
            image_type=img.get('imageType') or None,
            description=img.get('description') or None,
        )
        for img in images
    ]


def create_report(principal, data: dict) -> MedicalReport:
    _check_references(data)
    _author_check(principal, data['doctorId'])
    images = data.get('images') or []
    with translate_errors(REPORT, 'create'), transaction.atomic():
        report = MedicalReport.objects.create(
            patient_id=data['patientId'],
            doctor_id=data['doctorId'],
            report_type_id=data['reportTypeId'],
            health_center_id=data.get('centerId'),
            title=data['title'],
            content=data['content'],
        )
        if images:
            ReportImage.objects.bulk_create(_image_rows(report.id, images))
    logger.info('medical report %s created by user %s', report.id, principal.id)
    return get_report(report.id)


def update_report(principal, report_id: int, data: dict) -> MedicalReport:
    report = get_report(report_id)
    ensure_can_modify(principal, report)
    _check_references(data)
    if 'doctorId' in data and data['doctorId'] != report.doctor_id:
        _author_check(principal, data['doctorId'])
    changes = {REPORT_FIELDS[k]: v for k, v in data.items() if k in REPORT_FIELDS}
    with translate_errors(REPORT, 'update'), transaction.atomic():
        save_changes(report, changes)
    return get_report(report.id)


def delete_report(principal, report_id: int) -> None:
    report = get_report(report_id)
    ensure_can_modify(principal, report)
    with translate_errors(REPORT, 'delete', deleting=True), transaction.atomic():
        report.delete()
    logger.info('medical report %s deleted by user %s', report_id, principal.id)


# ---------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------
def list_images(report_id: int, principal=None) -> list[ReportImage]:
    report = get_report(report_id, principal)
    return list(report.images.all())


def add_images(principal, report_id: int, images: list[dict]) -> list[ReportImage]:
    report = get_report(report_id)
    ensure_can_modify(principal, report)
    with translate_errors(IMAGE, 'add'), transaction.atomic():
        # Lock the report row so concurrent uploads cannot overshoot the cap.
        MedicalReport.objects.select_for_update().filter(pk=report.id).first()
        existing = ReportImage.objects.filter(report_id=report.id).count()
        if existing + len(images) > MAX_IMAGES_PER_REPORT:
            raise AppError(
                f'A report cannot have more than {MAX_IMAGES_PER_REPORT} images '
                f'(it has {existing}, {len(images)} more requested)',
                status.HTTP_400_BAD_REQUEST,
            )
        created = _image_rows(report.id, images)
        for row in created:
            row.save()
    return created


def _get_image(report: MedicalReport, image_id: int) -> ReportImage:
    return get_or_404(ReportImage.objects.all(), IMAGE, pk=image_id, report_id=report.id)


def update_image(principal, report_id: int, image_id: int, data: dict) -> ReportImage:
    report = get_report(report_id)
    ensure_can_modify(principal, report)
    image = _get_image(report, image_id)
    mapping = {'url': 'url', 'imageType': 'image_type', 'description': 'description'}
    with translate_errors(IMAGE, 'update'), transaction.atomic():
        save_changes(image, {mapping[k]: v for k, v in data.items() if k in mapping})
    return image


def delete_image(principal, report_id: int, image_id: int) -> None:
    report = get_report(report_id)
    ensure_can_modify(principal, report)
    image = _get_image(report, image_id)
    with translate_errors(IMAGE, 'delete', deleting=True), transaction.atomic():
        image.delete()
