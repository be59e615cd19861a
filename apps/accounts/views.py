from rest_framework import status, serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAdminUser
from rest_framework.response import Response
from rest_framework_simplejwt.tokens import RefreshToken
from drf_spectacular.utils import extend_schema
from .serializers import (
    UserSerializer,
    AdminLoginSerializer,
    AdminCreateSerializer,
    PasswordChangeSerializer,
)
from .services import (
    authenticate_admin,
    create_admin,
    list_admins,
    change_admin_password,
    delete_admin,
    InvalidCredentialsError,
    InactiveAccountError,
    AdminNotFoundError,
    DuplicateUsernameError,
    InvalidAdminDataError,
    LastAdminError,
)


# Response serializers for API documentation
class TokensResponseSerializer(serializers.Serializer):
    refresh = serializers.CharField()
    access = serializers.CharField()


class AuthResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    user = UserSerializer()
    tokens = TokensResponseSerializer()


class MessageResponseSerializer(serializers.Serializer):
    message = serializers.CharField()


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()


@extend_schema(
    request=AdminLoginSerializer,
    responses={
        200: AuthResponseSerializer,
        400: ErrorResponseSerializer,
        401: ErrorResponseSerializer,
        403: ErrorResponseSerializer,
    },
    description="Authenticate an admin with username and password to receive JWT tokens.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def login(request):
    """Admin login with username and password."""
    serializer = AdminLoginSerializer(data=request.data)

    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        user = authenticate_admin(**serializer.validated_data)
    except InvalidCredentialsError as e:
        return Response({'error': str(e)}, status=status.HTTP_401_UNAUTHORIZED)
    except InactiveAccountError as e:
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)

    refresh = RefreshToken.for_user(user)

    return Response({
        'message': 'Login successful',
        'user': UserSerializer(user).data,
        'tokens': {
            'refresh': str(refresh),
            'access': str(refresh.access_token),
        }
    })


@extend_schema(
    responses={200: UserSerializer},
    description="Get the currently authenticated admin.",
    tags=['auth'],
)
@api_view(['GET'])
@permission_classes([IsAdminUser])
def get_current_user(request):
    """Get current authenticated admin."""
    return Response(UserSerializer(request.user).data)


@extend_schema(
    request=AdminCreateSerializer,
    responses={
        200: UserSerializer(many=True),
        201: UserSerializer,
        400: ErrorResponseSerializer,
    },
    description="List admin accounts, or create a new one.",
    tags=['auth'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsAdminUser])
def admin_list(request):
    """List or create admin accounts."""
    if request.method == 'GET':
        return Response(UserSerializer(list_admins(), many=True).data)

    serializer = AdminCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        user = create_admin(**serializer.validated_data)
    except (InvalidAdminDataError, DuplicateUsernameError) as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)


@extend_schema(
    request=PasswordChangeSerializer,
    responses={
        200: MessageResponseSerializer,
        400: ErrorResponseSerializer,
        404: ErrorResponseSerializer,
    },
    description="Set a new password for an admin account.",
    tags=['auth'],
)
@api_view(['PUT'])
@permission_classes([IsAdminUser])
def change_password(request, pk):
    """Change an admin's password."""
    serializer = PasswordChangeSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        change_admin_password(admin_id=pk, new_password=serializer.validated_data['password'])
    except InvalidAdminDataError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except AdminNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

    return Response({'message': 'Password changed'})


@extend_schema(
    responses={
        204: None,
        400: ErrorResponseSerializer,
        404: ErrorResponseSerializer,
    },
    description="Delete an admin account. The last admin cannot be deleted.",
    tags=['auth'],
)
@api_view(['DELETE'])
@permission_classes([IsAdminUser])
def remove_admin(request, pk):
    """Delete an admin account."""
    try:
        delete_admin(admin_id=pk)
    except LastAdminError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except AdminNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)

    return Response(status=status.HTTP_204_NO_CONTENT)
