from rest_framework import status as http_status
from rest_framework.response import Response


def success_response(message: str, data=None, count: int | None = None, status: int = http_status.HTTP_200_OK, **extra) -> Response:
    """The success envelope: ``{success, message, data?, count?, ...}``."""
    payload: dict[str, object] = {'success': True, 'message': message}
    if data is not None:
        payload['data'] = data
    if count is not None:
        payload['count'] = count
    payload.update(extra)
    return Response(payload, status=status)
