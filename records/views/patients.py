from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from records.permissions import IsStaffRole
from records.responses import success_response
from records.serializers.patients import (
    PatientListQuerySerializer,
    PatientSearchQuerySerializer,
    PatientSerializer,
)
from records.services import patients as patient_service


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def patient_collection(request):
    if request.method == 'GET':
        q = PatientListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        vd = q.validated_data
        rows, total, total_pages = patient_service.list_patients(
            page=vd['page'],
            page_size=vd['pageSize'],
            include_deleted=vd['includeDeleted'],
            provider_id=vd.get('providerId'),
        )
        data = [patient_service.format_patient(p) for p in rows]
        return success_response(
            'Patients retrieved successfully',
            data=data,
            count=len(data),
            pagination={'page': vd['page'], 'pageSize': vd['pageSize'], 'total': total, 'totalPages': total_pages},
        )

    s = PatientSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    patient = patient_service.create_patient(s.validated_data)
    return success_response('Patient created successfully', data=patient_service.format_patient(patient),
                            status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffRole])
def patient_search(request):
    s = PatientSearchQuerySerializer(data=request.query_params)
    s.is_valid(raise_exception=True)
    patients = patient_service.search_patients(q=s.validated_data.get('q'), dni=s.validated_data.get('dni'))
    data = [patient_service.format_patient(p) for p in patients]
    return success_response('Search completed', data=data, count=len(data))


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsStaffRole])
def patient_detail(request, pk: int):
    if request.method == 'GET':
        return success_response('Patient retrieved successfully',
                                data=patient_service.format_patient(patient_service.get_patient(pk)))
    if request.method == 'DELETE':
        patient_service.soft_delete_patient(pk)
        return success_response('Patient deleted successfully')

    s = PatientSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    patient = patient_service.update_patient(pk, s.validated_data)
    return success_response('Patient updated successfully', data=patient_service.format_patient(patient))
