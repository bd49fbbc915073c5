from rest_framework.decorators import api_view, authentication_classes, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny

from records.responses import success_response
from records.serializers.auth import LoginSerializer
from records.services import auth as auth_service
from records.throttling import LoginRateThrottle


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def login_view(request):
    """Exchange email and password for an access token."""
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    result = auth_service.login(s.validated_data['email'], s.validated_data['password'])
    return success_response('Login successful', data=result)
