"""
URL configuration for the medical records API.

API routes live under ``/api/v1/``.  OpenAPI documentation is exposed at
``/swagger/`` and ``/redoc/`` and Prometheus metrics at ``/metrics``.
"""
from django.urls import include, path

from rest_framework import permissions
from drf_yasg.views import get_schema_view
from drf_yasg import openapi

api_info = openapi.Info(
    title="Medical Records API",
    default_version='v1',
    description="Persons, patients, doctors, medical areas, report types and medical reports.",
)

schema_view = get_schema_view(
    api_info,
    public=True,
    permission_classes=(permissions.AllowAny,),
)

urlpatterns = [
    path('api/v1/', include('records.routers')),
    path('', include('django_prometheus.urls')),
    path('swagger/', schema_view.with_ui('swagger', cache_timeout=0), name='schema-swagger-ui'),
    path('redoc/', schema_view.with_ui('redoc', cache_timeout=0), name='schema-redoc'),
]

handler404 = 'records.exceptions.not_found_view'
handler500 = 'records.exceptions.server_error_view'
