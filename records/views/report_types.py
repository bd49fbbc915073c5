from rest_framework import status
from rest_framework.decorators import api_view, permission_classes

from records.models import Role
from records.permissions import require_role
from records.responses import success_response
from records.serializers.common import SearchQuerySerializer
from records.serializers.report_types import ReportTypeListQuerySerializer, ReportTypeSerializer
from records.services import report_types as rt_service

AdminWrites = require_role(Role.ADMIN, methods=['POST', 'PATCH', 'DELETE'])


@api_view(['GET', 'POST'])
@permission_classes([AdminWrites])
def report_type_collection(request):
    if request.method == 'GET':
        q = ReportTypeListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        items = rt_service.list_report_types(q.validated_data.get('areaId'))
        data = [rt_service.format_report_type(rt) for rt in items]
        return success_response('Report types retrieved successfully', data=data, count=len(data))

    s = ReportTypeSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    rt = rt_service.create_report_type(s.validated_data)
    return success_response('Report type created successfully', data=rt_service.format_report_type(rt),
                            status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([])
def report_type_search(request):
    s = SearchQuerySerializer(data=request.query_params)
    s.is_valid(raise_exception=True)
    data = [rt_service.format_report_type(rt) for rt in rt_service.search_report_types(s.validated_data['q'])]
    return success_response('Search completed', data=data, count=len(data))


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([AdminWrites])
def report_type_detail(request, pk: int):
    if request.method == 'GET':
        return success_response('Report type retrieved successfully',
                                data=rt_service.format_report_type(rt_service.get_report_type(pk)))
    if request.method == 'DELETE':
        rt_service.delete_report_type(pk)
        return success_response('Report type deleted successfully')

    s = ReportTypeSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    rt = rt_service.update_report_type(pk, s.validated_data)
    return success_response('Report type updated successfully', data=rt_service.format_report_type(rt))
