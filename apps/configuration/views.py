from rest_framework import status, serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAdminUser
from rest_framework.response import Response
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema
from apps.ledger.services import send_test_email
from .serializers import (
    SettingValueSerializer,
    SettingEntrySerializer,
    CoffeePriceSerializer,
    TestEmailSerializer,
)
from .services import (
    get_all_settings,
    get_unit_price,
    get_admin_email,
    update_setting,
    update_settings,
    InvalidSettingError,
)


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()


class TestEmailResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    email = serializers.CharField()


@extend_schema(
    responses={200: CoffeePriceSerializer},
    description="Current price of one coffee (shown on the kiosk).",
    tags=['settings'],
)
@api_view(['GET'])
@permission_classes([AllowAny])
def coffee_price(request):
    return Response(CoffeePriceSerializer({'coffee_price': get_unit_price()}).data)


@extend_schema(
    request=OpenApiTypes.OBJECT,
    responses={
        200: SettingEntrySerializer(many=True),
        400: ErrorResponseSerializer,
    },
    description=(
        "GET: every setting with its effective value. "
        "PUT: update several settings at once; one invalid value rejects the batch."
    ),
    tags=['settings'],
)
@api_view(['GET', 'PUT'])
@permission_classes([IsAdminUser])
def settings_list(request):
    if request.method == 'PUT':
        if not isinstance(request.data, dict) or not request.data:
            return Response(
                {'error': 'Expected an object of setting values'},
                status=status.HTTP_400_BAD_REQUEST
            )
        try:
            values = request.data.dict() if hasattr(request.data, 'dict') else dict(request.data)
            update_settings(values=values)
        except InvalidSettingError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(get_all_settings())


@extend_schema(
    request=SettingValueSerializer,
    responses={
        200: SettingEntrySerializer,
        400: ErrorResponseSerializer,
    },
    description="Update one setting.",
    tags=['settings'],
)
@api_view(['PUT'])
@permission_classes([IsAdminUser])
def setting_detail(request, key):
    serializer = SettingValueSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        setting = update_setting(key=key, value=serializer.validated_data['value'])
    except InvalidSettingError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response({
        'key': setting.key,
        'value': setting.value,
        'updated_at': setting.updated_at,
    })


@extend_schema(
    request=TestEmailSerializer,
    responses={
        200: TestEmailResponseSerializer,
        400: ErrorResponseSerializer,
        502: ErrorResponseSerializer,
    },
    description="Send a test email to check the SMTP configuration.",
    tags=['settings'],
)
@api_view(['POST'])
@permission_classes([IsAdminUser])
def test_email(request):
    serializer = TestEmailSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    recipient = serializer.validated_data.get('email') or get_admin_email()
    if not recipient:
        return Response(
            {'error': 'No recipient given and no admin email configured'},
            status=status.HTTP_400_BAD_REQUEST
        )

    result = send_test_email(recipient)
    if not result['success']:
        return Response(
            {'error': f"Failed to send test email: {result['error']}"},
            status=status.HTTP_502_BAD_GATEWAY
        )

    return Response({'message': 'Test email sent', 'email': recipient})
