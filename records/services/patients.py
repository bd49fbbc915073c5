from typing import Optional

from django.db import transaction
from django.db.models import Q
from rest_framework import status

from records.errors import AppError, ErrorMessages, get_or_404, translate_errors
from records.models import Patient, Person, SocialSecurityProvider

from .common import iso, paginate, remap, save_changes
from .persons import PERSON, format_person

PATIENT = ErrorMessages(
    'Patient',
    conflict='This person is already registered as a patient',
    invalid_reference='The selected person or provider does not exist',
)
PROVIDER = ErrorMessages('Social security provider')

PATIENT_FIELDS = {
    'personId': 'person_id',
    'providerId': 'provider_id',
    'affiliateNumber': 'affiliate_number',
    'bloodGroup': 'blood_group',
    'allergies': 'allergies',
    'preExistingConditions': 'pre_existing_conditions',
    'medications': 'medications',
}


def format_patient(p: Patient) -> dict:
    return {
        'id': p.id,
        'personId': p.person_id,
        'providerId': p.provider_id,
        'providerName': p.provider.name if p.provider_id else None,
        'affiliateNumber': p.affiliate_number,
        'bloodGroup': p.blood_group,
        'allergies': p.allergies,
        'preExistingConditions': p.pre_existing_conditions,
        'medications': p.medications,
        'isDeleted': p.is_deleted,
        'createdAt': iso(p.created_at),
        'updatedAt': iso(p.updated_at),
        'person': format_person(p.person),
    }


def _base_qs():
    return Patient.objects.select_related('person', 'provider')


def list_patients(*, page: int = 1, page_size: int = 10, include_deleted: bool = False,
                  provider_id: Optional[int] = None):
    with translate_errors(PATIENT, 'list'):
        qs = _base_qs()
        if not include_deleted:
            qs = qs.filter(is_deleted=False)
        if provider_id:
            qs = qs.filter(provider_id=provider_id)
        return paginate(qs, page, page_size)


def search_patients(*, q: Optional[str] = None, dni: Optional[str] = None) -> list[Patient]:
    with translate_errors(PATIENT, 'search'):
        qs = _base_qs().filter(is_deleted=False)
        if dni:
            qs = qs.filter(person__dni__icontains=dni.strip())
        if q:
            q = q.strip()
            qs = qs.filter(
                Q(person__first_name__icontains=q)
                | Q(person__last_name__icontains=q)
                | Q(person__dni__icontains=q)
                | Q(affiliate_number__icontains=q)
            )
        return list(qs[:50])


def get_patient(patient_id: int) -> Patient:
    return get_or_404(_base_qs().filter(is_deleted=False), PATIENT, pk=patient_id)


def _ensure_provider(provider_id) -> None:
    if provider_id is not None:
        get_or_404(SocialSecurityProvider.objects.all(), PROVIDER, pk=provider_id)


def create_patient(data: dict) -> Patient:
    get_or_404(Person.objects.all(), PERSON, pk=data['personId'])
    _ensure_provider(data.get('providerId'))
    with translate_errors(PATIENT, 'create'), transaction.atomic():
        patient = Patient.objects.create(**remap(data, PATIENT_FIELDS))
    return get_patient(patient.id)


def update_patient(patient_id: int, data: dict) -> Patient:
    patient = get_patient(patient_id)
    if 'personId' in data and data['personId'] != patient.person_id:
        get_or_404(Person.objects.all(), PERSON, pk=data['personId'])
    _ensure_provider(data.get('providerId'))
    with translate_errors(PATIENT, 'update'), transaction.atomic():
        save_changes(patient, remap(data, PATIENT_FIELDS))
    return get_patient(patient.id)


def soft_delete_patient(patient_id: int) -> None:
    patient = get_patient(patient_id)
    with translate_errors(PATIENT, 'delete'), transaction.atomic():
        save_changes(patient, {'is_deleted': True})


def ensure_patient_usable(patient: Patient) -> None:
    if patient.is_deleted:
        raise AppError('Patient has been deleted', status.HTTP_400_BAD_REQUEST)
