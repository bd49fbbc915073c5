from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes

from records.authentication import OptionalBearerAuthentication
from records.models import Role
from records.permissions import require_role
from records.responses import success_response
from records.serializers.common import SearchQuerySerializer
from records.serializers.doctors import DoctorListQuerySerializer, DoctorSerializer
from records.services import doctors as doctor_service

AdminWrites = require_role(Role.ADMIN, methods=['POST', 'PATCH', 'DELETE'])


def _is_admin(request) -> bool:
    return bool(request.user and request.user.role_name == Role.ADMIN)


@api_view(['GET', 'POST'])
@authentication_classes([OptionalBearerAuthentication])
@permission_classes([AdminWrites])
def doctor_collection(request):
    """List doctors (inactive ones only for admins) or register one."""
    if request.method == 'GET':
        q = DoctorListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        doctors = doctor_service.list_doctors(
            area_id=q.validated_data.get('areaId'),
            include_inactive=q.validated_data['includeInactive'] and _is_admin(request),
        )
        data = [doctor_service.format_doctor(d) for d in doctors]
        return success_response('Doctors retrieved successfully', data=data, count=len(data))

    s = DoctorSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    doctor = doctor_service.create_doctor(s.validated_data)
    return success_response('Doctor created successfully', data=doctor_service.format_doctor(doctor),
                            status=status.HTTP_201_CREATED)


@api_view(['GET'])
@authentication_classes([OptionalBearerAuthentication])
@permission_classes([])
def doctor_search(request):
    s = SearchQuerySerializer(data=request.query_params)
    s.is_valid(raise_exception=True)
    doctors = doctor_service.search_doctors(s.validated_data['q'], include_inactive=_is_admin(request))
    data = [doctor_service.format_doctor(d) for d in doctors]
    return success_response('Search completed', data=data, count=len(data))


@api_view(['GET', 'PATCH', 'DELETE'])
@authentication_classes([OptionalBearerAuthentication])
@permission_classes([AdminWrites])
def doctor_detail(request, pk: int):
    if request.method == 'GET':
        return success_response('Doctor retrieved successfully',
                                data=doctor_service.format_doctor(doctor_service.get_doctor(pk)))
    if request.method == 'DELETE':
        doctor = doctor_service.deactivate_doctor(pk)
        return success_response('Doctor deactivated successfully', data=doctor_service.format_doctor(doctor))

    s = DoctorSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    doctor = doctor_service.update_doctor(pk, s.validated_data)
    return success_response('Doctor updated successfully', data=doctor_service.format_doctor(doctor))
