from typing import Optional

from django.db import transaction
from django.db.models import Q
from rest_framework import status

from records.errors import AppError, ErrorMessages, get_or_404, translate_errors
from records.models import Doctor, MedicalArea, Person

from .common import remap, save_changes
from .medical_areas import AREA
from .persons import PERSON, format_person

DOCTOR = ErrorMessages(
    'Doctor',
    conflict='A doctor with this license number already exists',
    invalid_reference='The selected person or medical area does not exist',
)

DOCTOR_FIELDS = {
    'personId': 'person_id',
    'licenseNumber': 'license_number',
    'areaId': 'area_id',
    'isActive': 'is_active',
}


def format_doctor(d: Doctor) -> dict:
    return {
        'id': d.id,
        'licenseNumber': d.license_number,
        'isActive': d.is_active,
        'personId': d.person_id,
        'areaId': d.area_id,
        'areaName': d.area.name,
        'person': format_person(d.person),
    }


def _base_qs():
    return Doctor.objects.select_related('person', 'area')


def list_doctors(*, area_id: Optional[int] = None, include_inactive: bool = False) -> list[Doctor]:
    with translate_errors(DOCTOR, 'list'):
        qs = _base_qs()
        if not include_inactive:
            qs = qs.filter(is_active=True)
        if area_id:
            qs = qs.filter(area_id=area_id)
        return list(qs)


def search_doctors(q: str, *, include_inactive: bool = False) -> list[Doctor]:
    q = q.strip()
    with translate_errors(DOCTOR, 'search'):
        qs = _base_qs().filter(
            Q(license_number__icontains=q)
            | Q(person__first_name__icontains=q)
            | Q(person__last_name__icontains=q)
            | Q(area__name__icontains=q)
        )
        if not include_inactive:
            qs = qs.filter(is_active=True)
        return list(qs[:50])


def get_doctor(doctor_id: int) -> Doctor:
    return get_or_404(_base_qs(), DOCTOR, pk=doctor_id)


def create_doctor(data: dict) -> Doctor:
    get_or_404(Person.objects.all(), PERSON, pk=data['personId'])
    get_or_404(MedicalArea.objects.all(), AREA, pk=data['areaId'])
    if Doctor.objects.filter(person_id=data['personId']).exists():
        raise AppError('This person is already registered as a doctor', status.HTTP_409_CONFLICT)
    with translate_errors(DOCTOR, 'create'), transaction.atomic():
        doctor = Doctor.objects.create(**remap(data, DOCTOR_FIELDS))
    return get_doctor(doctor.id)


def update_doctor(doctor_id: int, data: dict) -> Doctor:
    doctor = get_doctor(doctor_id)
    if 'personId' in data and data['personId'] != doctor.person_id:
        get_or_404(Person.objects.all(), PERSON, pk=data['personId'])
        if Doctor.objects.filter(person_id=data['personId']).exists():
            raise AppError('This person is already registered as a doctor', status.HTTP_409_CONFLICT)
    if 'areaId' in data:
        get_or_404(MedicalArea.objects.all(), AREA, pk=data['areaId'])
    with translate_errors(DOCTOR, 'update'), transaction.atomic():
        save_changes(doctor, remap(data, DOCTOR_FIELDS))
    return get_doctor(doctor.id)


def deactivate_doctor(doctor_id: int) -> Doctor:
    """Doctors keep their reports, so deleting only flips ``is_active``."""
    doctor = get_doctor(doctor_id)
    if not doctor.is_active:
        raise AppError('Doctor is already inactive', status.HTTP_400_BAD_REQUEST)
    with translate_errors(DOCTOR, 'deactivate'), transaction.atomic():
        save_changes(doctor, {'is_active': False})
    return doctor
