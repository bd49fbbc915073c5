from django.db import DatabaseError, connections
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny

from records.errors import AppError
from records.responses import success_response


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def healthz(request):
    try:
        with connections['default'].cursor() as c:
            c.execute('SELECT 1')
            row = c.fetchone()
    except DatabaseError as exc:
        raise AppError('Database unavailable', 503) from exc
    return success_response('ok', data={'database': bool(row and row[0] == 1)})
