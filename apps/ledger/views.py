from django.http import HttpResponse, JsonResponse
from django.utils import timezone
from rest_framework import status, serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAdminUser
from rest_framework.response import Response
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema, OpenApiParameter
from .models import Actor
from .serializers import (
    MemberSerializer,
    MemberCreateSerializer,
    AmountSerializer,
    ConfirmPaymentSerializer,
    BalanceAdjustmentSerializer,
    PaymentSerializer,
    PaymentHistoryQuerySerializer,
    SettlementSerializer,
    ConfirmationSerializer,
    SummarySerializer,
)
from .services import (
    create_member,
    get_member,
    list_members,
    soft_delete_member,
    restore_member,
    hard_delete_member,
    increment_tab,
    decrement_tab,
    set_current_tab,
    request_settlement,
    confirm_payment,
    adjust_balance,
    get_payment_history,
    get_summary,
    export_data,
    export_csv,
    LedgerServiceError,
    MemberNotFoundError,
    StorageFailureError,
)


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()


class SoftDeleteResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    user = MemberSerializer()
    payment_email_sent = serializers.BooleanField()


class PurgeResponseSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    status = serializers.CharField()


def domain_error_response(error):
    """Translate a ledger service error into an HTTP response."""
    if isinstance(error, MemberNotFoundError):
        return Response({'error': str(error)}, status=status.HTTP_404_NOT_FOUND)
    if isinstance(error, StorageFailureError):
        # Details are in the log, never in the response
        return Response(
            {'error': 'Internal server error'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )
    return Response({'error': str(error)}, status=status.HTTP_400_BAD_REQUEST)


def _flag(request, name, default=False):
    value = request.query_params.get(name)
    if value is None:
        return default
    return value.lower() in ('1', 'true', 'yes')


# ============================================
# KIOSK (public)
# ============================================

@extend_schema(
    request=MemberCreateSerializer,
    parameters=[
        OpenApiParameter('include_deleted', bool, description="Admins only: include soft-deleted members"),
    ],
    responses={
        200: MemberSerializer(many=True),
        201: MemberSerializer,
        400: ErrorResponseSerializer,
    },
    description="List active members, or register a new one from the kiosk.",
    tags=['members'],
)
@api_view(['GET', 'POST'])
@permission_classes([AllowAny])
def member_list(request):
    """List or register members."""
    if request.method == 'GET':
        include_deleted = request.user.is_staff and _flag(request, 'include_deleted')
        members = list_members(include_deleted=include_deleted)
        return Response(MemberSerializer(members, many=True).data)

    serializer = MemberCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        result = create_member(**serializer.validated_data)
    except LedgerServiceError as e:
        return domain_error_response(e)

    data = MemberSerializer(result['member']).data
    if result['reactivated']:
        return Response(
            {**data, 'reactivated': True, 'message': 'Welcome back! Your account has been reactivated.'},
            status=status.HTTP_200_OK
        )
    return Response(data, status=status.HTTP_201_CREATED)


@extend_schema(
    methods=['GET'],
    responses={
        200: MemberSerializer,
        404: ErrorResponseSerializer,
    },
    description="Get a member.",
    tags=['members'],
)
@extend_schema(
    methods=['DELETE'],
    responses={
        200: SoftDeleteResponseSerializer,
        400: ErrorResponseSerializer,
        404: ErrorResponseSerializer,
    },
    description="Leave the kiosk (soft delete). An open tab is billed first.",
    tags=['members'],
)
@api_view(['GET', 'DELETE'])
@permission_classes([AllowAny])
def member_detail(request, pk):
    """Get or soft-delete a member."""
    if request.method == 'GET':
        try:
            member = get_member(pk, include_deleted=request.user.is_staff)
        except LedgerServiceError as e:
            return domain_error_response(e)
        return Response(MemberSerializer(member).data)

    reason = Actor.ADMIN if request.user.is_staff else Actor.USER
    try:
        result = soft_delete_member(pk, reason=reason)
    except LedgerServiceError as e:
        return domain_error_response(e)

    return Response({
        'message': 'User deleted',
        'user': MemberSerializer(result['member']).data,
        'payment_email_sent': result['notification_sent'],
    })


@extend_schema(
    request=None,
    responses={
        200: MemberSerializer,
        404: ErrorResponseSerializer,
    },
    description="Add one coffee at the current price to the member's tab.",
    tags=['members'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def increment(request, pk):
    try:
        member = increment_tab(pk)
    except LedgerServiceError as e:
        return domain_error_response(e)
    return Response(MemberSerializer(member).data)


@extend_schema(
    request=None,
    responses={
        200: MemberSerializer,
        404: ErrorResponseSerializer,
    },
    description="Remove one coffee from the member's tab (never below zero).",
    tags=['members'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def decrement(request, pk):
    try:
        member = decrement_tab(pk)
    except LedgerServiceError as e:
        return domain_error_response(e)
    return Response(MemberSerializer(member).data)


@extend_schema(
    request=None,
    responses={
        200: SettlementSerializer,
        400: ErrorResponseSerializer,
        404: ErrorResponseSerializer,
        500: ErrorResponseSerializer,
    },
    description=(
        "Settle the member's tab: apply credit, raise a payment request for "
        "the rest and email it. An email failure does not undo the request."
    ),
    tags=['members'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def pay(request, pk):
    try:
        result = request_settlement(pk)
    except LedgerServiceError as e:
        return domain_error_response(e)
    return Response(SettlementSerializer(result).data)


# ============================================
# ADMIN
# ============================================

@extend_schema(
    request=None,
    responses={
        200: MemberSerializer,
        400: ErrorResponseSerializer,
        404: ErrorResponseSerializer,
    },
    description="Restore a soft-deleted member.",
    tags=['admin'],
)
@api_view(['POST'])
@permission_classes([IsAdminUser])
def restore(request, pk):
    try:
        member = restore_member(pk)
    except LedgerServiceError as e:
        return domain_error_response(e)
    return Response(MemberSerializer(member).data)


@extend_schema(
    responses={
        200: PurgeResponseSerializer,
        404: ErrorResponseSerializer,
    },
    description="Permanently delete a member with all payments and audit history. Irreversible.",
    tags=['admin'],
)
@api_view(['DELETE'])
@permission_classes([IsAdminUser])
def permanent_delete(request, pk):
    try:
        result = hard_delete_member(pk)
    except LedgerServiceError as e:
        return domain_error_response(e)
    return Response(result)


@extend_schema(
    request=AmountSerializer,
    responses={
        200: MemberSerializer,
        400: ErrorResponseSerializer,
        404: ErrorResponseSerializer,
    },
    description="Set the member's tab directly. Negative values become zero.",
    tags=['admin'],
)
@api_view(['PUT'])
@permission_classes([IsAdminUser])
def set_tab(request, pk):
    serializer = AmountSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        member = set_current_tab(pk, serializer.validated_data['amount'])
    except LedgerServiceError as e:
        return domain_error_response(e)
    return Response(MemberSerializer(member).data)


@extend_schema(
    request=ConfirmPaymentSerializer,
    parameters=[
        OpenApiParameter(
            'Idempotency-Key', str, OpenApiParameter.HEADER,
            description="Retry token; a repeated key returns the first result",
        ),
    ],
    responses={
        200: ConfirmationSerializer,
        201: ConfirmationSerializer,
        400: ErrorResponseSerializer,
        404: ErrorResponseSerializer,
        500: ErrorResponseSerializer,
    },
    description="Record money received. Clears pending payments first; any surplus becomes credit.",
    tags=['admin'],
)
@api_view(['POST'])
@permission_classes([IsAdminUser])
def confirm(request, pk):
    serializer = ConfirmPaymentSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    idempotency_key = data.get('idempotency_key') or request.headers.get('Idempotency-Key')

    try:
        result = confirm_payment(
            pk,
            data['amount'],
            data.get('notes', ''),
            idempotency_key=idempotency_key,
        )
    except LedgerServiceError as e:
        return domain_error_response(e)

    return Response(
        ConfirmationSerializer(result).data,
        status=status.HTTP_200_OK if result['replayed'] else status.HTTP_201_CREATED
    )


@extend_schema(
    request=BalanceAdjustmentSerializer,
    responses={
        200: MemberSerializer,
        400: ErrorResponseSerializer,
        404: ErrorResponseSerializer,
    },
    description="Correct the member's balance by a signed amount. No payment is recorded.",
    tags=['admin'],
)
@api_view(['PUT'])
@permission_classes([IsAdminUser])
def balance(request, pk):
    serializer = BalanceAdjustmentSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        member = adjust_balance(
            pk,
            serializer.validated_data['amount'],
            serializer.validated_data.get('notes', ''),
        )
    except LedgerServiceError as e:
        return domain_error_response(e)
    return Response(MemberSerializer(member).data)


@extend_schema(
    parameters=[PaymentHistoryQuerySerializer],
    responses={200: PaymentSerializer(many=True)},
    description="Payment history, newest first.",
    tags=['admin'],
)
@api_view(['GET'])
@permission_classes([IsAdminUser])
def payment_list(request):
    query = PaymentHistoryQuerySerializer(data=request.query_params)
    query.is_valid(raise_exception=True)

    payments = get_payment_history(**query.validated_data)
    return Response(PaymentSerializer(payments, many=True).data)


@extend_schema(
    responses={200: SummarySerializer},
    description="Totals across all members and payments.",
    tags=['admin'],
)
@api_view(['GET'])
@permission_classes([IsAdminUser])
def payment_summary(request):
    return Response(SummarySerializer(get_summary()).data)


def _export_filename(extension):
    return f"coffee-export-{timezone.localdate().isoformat()}.{extension}"


@extend_schema(
    parameters=[OpenApiParameter('include_deleted', bool, description="Defaults to true")],
    responses={(200, 'text/csv'): OpenApiTypes.STR},
    description="Export members and payments as CSV.",
    tags=['admin'],
)
@api_view(['GET'])
@permission_classes([IsAdminUser])
def export_csv_view(request):
    content = export_csv(include_deleted=_flag(request, 'include_deleted', default=True))
    response = HttpResponse(content, content_type='text/csv; charset=utf-8')
    response['Content-Disposition'] = f'attachment; filename="{_export_filename("csv")}"'
    return response


@extend_schema(
    parameters=[OpenApiParameter('include_deleted', bool, description="Defaults to true")],
    responses={200: OpenApiTypes.OBJECT},
    description="Export members and payments as JSON.",
    tags=['admin'],
)
@api_view(['GET'])
@permission_classes([IsAdminUser])
def export_json_view(request):
    data = export_data(include_deleted=_flag(request, 'include_deleted', default=True))
    response = JsonResponse(data)
    response['Content-Disposition'] = f'attachment; filename="{_export_filename("json")}"'
    return response
