from django.db import transaction
from django.db.models import Q

from records.errors import ErrorMessages, get_or_404, translate_errors
from records.models import Person

from .common import iso, remap, save_changes

PERSON = ErrorMessages(
    'Person',
    conflict='A person with this DNI already exists',
    in_use='Person is still referenced by a user, doctor or patient',
)

PERSON_FIELDS = {
    'dni': 'dni',
    'firstName': 'first_name',
    'lastName': 'last_name',
    'birthDate': 'birth_date',
    'gender': 'gender',
    'phoneNumber': 'phone_number',
    'primaryEmail': 'primary_email',
    'address': 'address',
    'city': 'city',
    'province': 'province',
    'country': 'country',
    'postalCode': 'postal_code',
}

SEARCH_LIMIT = 50


def format_person(p: Person) -> dict:
    return {
        'id': p.id,
        'dni': p.dni,
        'firstName': p.first_name,
        'lastName': p.last_name,
        'fullName': p.full_name,
        'birthDate': iso(p.birth_date),
        'gender': p.gender,
        'phoneNumber': p.phone_number,
        'primaryEmail': p.primary_email,
        'address': p.address,
        'city': p.city,
        'province': p.province,
        'country': p.country,
        'postalCode': p.postal_code,
        'createdAt': iso(p.created_at),
        'updatedAt': iso(p.updated_at),
    }


def list_persons() -> list[Person]:
    with translate_errors(PERSON, 'list'):
        return list(Person.objects.all())


def search_persons(q: str) -> list[Person]:
    q = q.strip()
    with translate_errors(PERSON, 'search'):
        qs = Person.objects.filter(
            Q(dni__icontains=q) | Q(first_name__icontains=q) | Q(last_name__icontains=q)
        )
        return list(qs[:SEARCH_LIMIT])


def get_person(person_id: int) -> Person:
    return get_or_404(Person.objects.all(), PERSON, pk=person_id)


def create_person(data: dict) -> Person:
    with translate_errors(PERSON, 'create'), transaction.atomic():
        return Person.objects.create(**remap(data, PERSON_FIELDS))


def update_person(person_id: int, data: dict) -> Person:
    person = get_person(person_id)
    with translate_errors(PERSON, 'update'), transaction.atomic():
        save_changes(person, remap(data, PERSON_FIELDS))
    return person


def delete_person(person_id: int) -> None:
    person = get_person(person_id)
    with translate_errors(PERSON, 'delete', deleting=True), transaction.atomic():
        person.delete()
