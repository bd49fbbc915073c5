from typing import Optional

from django.db import transaction

from records.errors import ErrorMessages, get_or_404, translate_errors
from records.models import MedicalArea, ReportType

from .common import remap, save_changes
from .medical_areas import AREA

REPORT_TYPE = ErrorMessages(
    'Report type',
    conflict='Report type with this name already exists',
    invalid_reference='The selected medical area does not exist',
    in_use='Report type is still used by medical reports',
)

REPORT_TYPE_FIELDS = {'areaId': 'area_id', 'name': 'name', 'description': 'description'}


def format_report_type(rt: ReportType) -> dict:
    return {
        'id': rt.id,
        'name': rt.name,
        'description': rt.description,
        'areaId': rt.area_id,
        'areaName': rt.area.name if rt.area_id else None,
    }


def _base_qs():
    return ReportType.objects.select_related('area')


def list_report_types(area_id: Optional[int] = None) -> list[ReportType]:
    with translate_errors(REPORT_TYPE, 'list'):
        qs = _base_qs()
        if area_id:
            qs = qs.filter(area_id=area_id)
        return list(qs)


def search_report_types(q: str) -> list[ReportType]:
    with translate_errors(REPORT_TYPE, 'search'):
        return list(_base_qs().filter(name__icontains=q.strip()))


def get_report_type(report_type_id: int) -> ReportType:
    return get_or_404(_base_qs(), REPORT_TYPE, pk=report_type_id)


def _ensure_area(area_id: int) -> None:
    # Both the area and the type name could fail on insert; check the area
    # first so the client learns which one is wrong.
    get_or_404(MedicalArea.objects.all(), AREA, pk=area_id)


def create_report_type(data: dict) -> ReportType:
    _ensure_area(data['areaId'])
    with translate_errors(REPORT_TYPE, 'create'), transaction.atomic():
        rt = ReportType.objects.create(**remap(data, REPORT_TYPE_FIELDS))
    return get_report_type(rt.id)


def update_report_type(report_type_id: int, data: dict) -> ReportType:
    rt = get_report_type(report_type_id)
    if 'areaId' in data:
        _ensure_area(data['areaId'])
    with translate_errors(REPORT_TYPE, 'update'), transaction.atomic():
        save_changes(rt, remap(data, REPORT_TYPE_FIELDS))
    return get_report_type(rt.id)


def delete_report_type(report_type_id: int) -> None:
    rt = get_report_type(report_type_id)
    with translate_errors(REPORT_TYPE, 'delete', deleting=True), transaction.atomic():
        rt.delete()
