"""
URL mappings for the medical records API (mounted under ``/api/v1/``).

Literal segments such as ``search`` are declared before the ``<int:pk>``
routes of the same resource.  Trailing slashes are omitted.
"""
from django.urls import path

from .views import auth, doctors, health, medical_areas, medical_reports, patients, persons, report_types, users

urlpatterns = [
    path('health', health.healthz, name='healthz'),

    # Auth & users
    path('users/login', auth.login_view, name='login_view'),
    path('auth/login', auth.login_view, name='auth_login'),
    path('users/register', users.register, name='user_register'),
    path('users', users.user_list, name='user_list'),
    path('users/<int:pk>', users.user_detail, name='user_detail'),

    # Persons
    path('persons', persons.person_collection, name='person_collection'),
    path('persons/search', persons.person_search, name='person_search'),
    path('persons/<int:pk>', persons.person_detail, name='person_detail'),

    # Catalogs
    path('medical-areas', medical_areas.area_collection, name='area_collection'),
    path('medical-areas/search', medical_areas.area_search, name='area_search'),
    path('medical-areas/<int:pk>', medical_areas.area_detail, name='area_detail'),
    path('report-types', report_types.report_type_collection, name='report_type_collection'),
    path('report-types/search', report_types.report_type_search, name='report_type_search'),
    path('report-types/<int:pk>', report_types.report_type_detail, name='report_type_detail'),

    # Doctors & patients
    path('doctors', doctors.doctor_collection, name='doctor_collection'),
    path('doctors/search', doctors.doctor_search, name='doctor_search'),
    path('doctors/<int:pk>', doctors.doctor_detail, name='doctor_detail'),
    path('patients', patients.patient_collection, name='patient_collection'),
    path('patients/search', patients.patient_search, name='patient_search'),
    path('patients/<int:pk>', patients.patient_detail, name='patient_detail'),

    # Medical reports
    path('medical-reports', medical_reports.report_collection, name='report_collection'),
    path('medical-reports/search', medical_reports.report_search, name='report_search'),
    path('medical-reports/<int:pk>', medical_reports.report_detail, name='report_detail'),
    path('medical-reports/<int:pk>/images', medical_reports.report_images, name='report_images'),
    path('medical-reports/<int:pk>/images/<int:image_id>', medical_reports.report_image_detail,
         name='report_image_detail'),
]
