from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from records.models import Role
from records.permissions import require_role
from records.responses import success_response
from records.serializers.common import SearchQuerySerializer
from records.serializers.persons import PersonCreateSerializer, PersonUpdateSerializer
from records.services import persons as person_service

StaffWrites = require_role(Role.ADMIN, Role.DOCTOR, methods=['POST', 'PUT', 'PATCH'])
AdminDeletes = require_role(Role.ADMIN, methods=['DELETE'])


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, StaffWrites])
def person_collection(request):
    if request.method == 'GET':
        data = [person_service.format_person(p) for p in person_service.list_persons()]
        return success_response('Persons retrieved successfully', data=data, count=len(data))

    s = PersonCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    person = person_service.create_person(s.validated_data)
    return success_response('Person created successfully', data=person_service.format_person(person),
                            status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def person_search(request):
    s = SearchQuerySerializer(data=request.query_params)
    s.is_valid(raise_exception=True)
    data = [person_service.format_person(p) for p in person_service.search_persons(s.validated_data['q'])]
    return success_response('Search completed', data=data, count=len(data))


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, StaffWrites, AdminDeletes])
def person_detail(request, pk: int):
    if request.method == 'GET':
        return success_response('Person retrieved successfully',
                                data=person_service.format_person(person_service.get_person(pk)))
    if request.method == 'DELETE':
        person_service.delete_person(pk)
        return success_response('Person deleted successfully')

    s = PersonUpdateSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    person = person_service.update_person(pk, s.validated_data)
    return success_response('Person updated successfully', data=person_service.format_person(person))
