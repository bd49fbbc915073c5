"""
Medical report endpoints.

Any authenticated user may read (patients are limited to their own
reports); doctors and admins create; only the authoring doctor or an
admin may update, delete or manage images.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated

from records.models import Role
from records.permissions import require_role
from records.responses import success_response
from records.serializers.medical_reports import (
    MedicalReportCreateSerializer,
    MedicalReportListQuerySerializer,
    MedicalReportSearchQuerySerializer,
    MedicalReportUpdateSerializer,
    ReportImageSerializer,
    ReportImageUpdateSerializer,
)
from records.services import medical_reports as report_service

StaffWrites = require_role(Role.ADMIN, Role.DOCTOR, methods=['POST', 'PUT', 'PATCH', 'DELETE'])


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, StaffWrites])
def report_collection(request):
    if request.method == 'GET':
        q = MedicalReportListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        vd = q.validated_data
        rows, total, total_pages = report_service.list_reports(request.user, vd)
        data = [report_service.format_report(r) for r in rows]
        return success_response(
            'Medical reports retrieved successfully',
            data=data,
            count=len(data),
            pagination={'page': vd['page'], 'limit': vd['limit'], 'total': total, 'totalPages': total_pages},
        )

    s = MedicalReportCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    report = report_service.create_report(request.user, s.validated_data)
    return success_response('Medical report created successfully', data=report_service.format_report(report),
                            status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def report_search(request):
    s = MedicalReportSearchQuerySerializer(data=request.query_params)
    s.is_valid(raise_exception=True)
    reports = report_service.search_reports(request.user, s.validated_data['query'])
    data = [report_service.format_report_summary(r) for r in reports]
    return success_response('Search completed', data=data, count=len(data))


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, StaffWrites])
def report_detail(request, pk: int):
    if request.method == 'GET':
        report = report_service.get_report(pk, request.user)
        return success_response('Medical report retrieved successfully', data=report_service.format_report(report))
    if request.method == 'DELETE':
        report_service.delete_report(request.user, pk)
        return success_response('Medical report deleted successfully')

    s = MedicalReportUpdateSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    report = report_service.update_report(request.user, pk, s.validated_data)
    return success_response('Medical report updated successfully', data=report_service.format_report(report))


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, StaffWrites])
def report_images(request, pk: int):
    """List a report's images, or attach one image object or a list of them."""
    if request.method == 'GET':
        data = [report_service.format_image(i) for i in report_service.list_images(pk, request.user)]
        return success_response('Report images retrieved successfully', data=data, count=len(data))

    payload = request.data
    many = isinstance(payload, list)
    if many and not payload:
        raise ValidationError({'images': ['At least one image is required']})
    s = ReportImageSerializer(data=payload, many=many)
    s.is_valid(raise_exception=True)
    images = report_service.add_images(request.user, pk, s.validated_data if many else [s.validated_data])
    data = [report_service.format_image(i) for i in images]
    return success_response('Images added successfully', data=data, count=len(data),
                            status=status.HTTP_201_CREATED)


@api_view(['PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, StaffWrites])
def report_image_detail(request, pk: int, image_id: int):
    if request.method == 'DELETE':
        report_service.delete_image(request.user, pk, image_id)
        return success_response('Image deleted successfully')

    s = ReportImageUpdateSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    image = report_service.update_image(request.user, pk, image_id, s.validated_data)
    return success_response('Image updated successfully', data=report_service.format_image(image))
