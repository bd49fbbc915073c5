from rest_framework import status
from rest_framework.decorators import api_view, permission_classes

from records.models import Role
from records.permissions import require_role
from records.responses import success_response
from records.serializers.common import SearchQuerySerializer
from records.serializers.medical_areas import MedicalAreaSerializer
from records.services import medical_areas as area_service

# Catalog reads are public; every write needs an admin token.
AdminWrites = require_role(Role.ADMIN, methods=['POST', 'PUT', 'PATCH', 'DELETE'])


@api_view(['GET', 'POST'])
@permission_classes([AdminWrites])
def area_collection(request):
    if request.method == 'GET':
        data = [area_service.format_area(a) for a in area_service.list_areas()]
        return success_response('Medical areas retrieved successfully', data=data, count=len(data))

    s = MedicalAreaSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    area = area_service.create_area(s.validated_data)
    return success_response('Medical area created successfully', data=area_service.format_area(area),
                            status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([])
def area_search(request):
    s = SearchQuerySerializer(data=request.query_params)
    s.is_valid(raise_exception=True)
    data = [area_service.format_area(a) for a in area_service.search_areas(s.validated_data['q'])]
    return success_response('Search completed', data=data, count=len(data))


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([AdminWrites])
def area_detail(request, pk: int):
    if request.method == 'GET':
        return success_response('Medical area retrieved successfully',
                                data=area_service.format_area(area_service.get_area(pk)))
    if request.method == 'DELETE':
        area_service.delete_area(pk)
        return success_response('Medical area deleted successfully')

    s = MedicalAreaSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    area = area_service.update_area(pk, s.validated_data)
    return success_response('Medical area updated successfully', data=area_service.format_area(area))
