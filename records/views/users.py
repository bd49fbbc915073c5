from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated

from records.authentication import OptionalBearerAuthentication
from records.permissions import IsAdminRole, IsSelfOrAdmin
from records.responses import success_response
from records.serializers.users import RegisterSerializer, UserUpdateSerializer
from records.services import users as user_service


@api_view(['POST'])
@authentication_classes([OptionalBearerAuthentication])
@permission_classes([AllowAny])
def register(request):
    """Create an account.

    Works without a token for patient self-registration; an admin token
    unlocks the other roles.
    """
    s = RegisterSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user = user_service.register_user(request.user, s.validated_data)
    return success_response(
        'User registered successfully',
        data=user_service.format_user(user),
        status=status.HTTP_201_CREATED,
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def user_list(request):
    users = user_service.list_users()
    data = [user_service.format_user(u) for u in users]
    return success_response('Users retrieved successfully', data=data, count=len(data))


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated, IsSelfOrAdmin])
def user_detail(request, pk: int):
    if request.method == 'GET':
        user = user_service.get_user(pk)
        return success_response('User retrieved successfully', data=user_service.format_user(user))

    s = UserUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user = user_service.update_user(request.user, pk, s.validated_data)
    return success_response('User updated successfully', data=user_service.format_user(user))
