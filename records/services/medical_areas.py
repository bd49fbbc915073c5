from django.db import transaction

from records.errors import ErrorMessages, get_or_404, translate_errors
from records.models import MedicalArea

from .common import remap, save_changes

AREA = ErrorMessages(
    'Medical area',
    conflict='Medical area with this name already exists',
    in_use='Medical area is still used by doctors or report types',
)

AREA_FIELDS = {'name': 'name', 'description': 'description'}


def format_area(a: MedicalArea) -> dict:
    return {'id': a.id, 'name': a.name, 'description': a.description}


def list_areas() -> list[MedicalArea]:
    with translate_errors(AREA, 'list'):
        return list(MedicalArea.objects.all())


def search_areas(q: str) -> list[MedicalArea]:
    with translate_errors(AREA, 'search'):
        return list(MedicalArea.objects.filter(name__icontains=q.strip()))


def get_area(area_id: int) -> MedicalArea:
    return get_or_404(MedicalArea.objects.all(), AREA, pk=area_id)


def create_area(data: dict) -> MedicalArea:
    with translate_errors(AREA, 'create'), transaction.atomic():
        return MedicalArea.objects.create(**remap(data, AREA_FIELDS))


def update_area(area_id: int, data: dict) -> MedicalArea:
    area = get_area(area_id)
    with translate_errors(AREA, 'update'), transaction.atomic():
        save_changes(area, remap(data, AREA_FIELDS))
    return area


def delete_area(area_id: int) -> None:
    area = get_area(area_id)
    with translate_errors(AREA, 'delete', deleting=True), transaction.atomic():
        area.delete()
