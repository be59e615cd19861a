from rest_framework import serializers
from .models import Member, Payment, PaymentType


class MemberSerializer(serializers.ModelSerializer):
    """Member with ledger state."""

    full_name = serializers.CharField(read_only=True)
    outstanding = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = Member
        fields = [
            'id',
            'first_name',
            'last_name',
            'full_name',
            'email',
            'current_tab',
            'pending_payment',
            'account_balance',
            'outstanding',
            'last_payment_request',
            'status',
            'deleted_at',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class MemberCreateSerializer(serializers.Serializer):
    """Kiosk registration (validation and sanitizing happen in the service)."""

    first_name = serializers.CharField(allow_blank=True, trim_whitespace=True)
    last_name = serializers.CharField(allow_blank=True, trim_whitespace=True)
    email = serializers.CharField(allow_blank=True, trim_whitespace=True)


class AmountSerializer(serializers.Serializer):
    """Raw amount; parsed into a Decimal by the ledger services."""

    amount = serializers.CharField()


class ConfirmPaymentSerializer(AmountSerializer):
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    idempotency_key = serializers.CharField(required=False, allow_blank=True, max_length=64)


class BalanceAdjustmentSerializer(AmountSerializer):
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class PaymentSerializer(serializers.ModelSerializer):
    user_name = serializers.CharField(source='member.full_name', read_only=True)
    user_email = serializers.CharField(source='member.email', read_only=True)

    class Meta:
        model = Payment
        fields = [
            'id',
            'member',
            'user_name',
            'user_email',
            'amount',
            'type',
            'confirmed_by_admin',
            'notes',
            'created_at',
        ]
        read_only_fields = fields


class PaymentHistoryQuerySerializer(serializers.Serializer):
    """Query parameters for the payment history."""

    member_id = serializers.IntegerField(required=False, min_value=1)
    type = serializers.ChoiceField(choices=PaymentType.choices, required=False)
    start_date = serializers.DateTimeField(required=False)
    end_date = serializers.DateTimeField(required=False)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=1000)

    def validate(self, data):
        start, end = data.get('start_date'), data.get('end_date')
        if start and end and start > end:
            raise serializers.ValidationError("start_date must be before end_date")
        return data


class SettlementSerializer(serializers.Serializer):
    """Outcome of a payment request."""

    member = MemberSerializer()
    payment = PaymentSerializer(allow_null=True)
    total_cost = serializers.DecimalField(max_digits=12, decimal_places=2)
    credit_applied = serializers.DecimalField(max_digits=12, decimal_places=2)
    amount_to_pay = serializers.DecimalField(max_digits=12, decimal_places=2)
    notification_sent = serializers.BooleanField()
    notification_error = serializers.CharField(allow_null=True)
    message = serializers.CharField()


class ConfirmationSerializer(serializers.Serializer):
    """Outcome of a payment confirmation."""

    member = MemberSerializer()
    payment = PaymentSerializer()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    pending_cleared = serializers.DecimalField(max_digits=12, decimal_places=2)
    credit_created = serializers.DecimalField(max_digits=12, decimal_places=2)
    replayed = serializers.BooleanField()
    message = serializers.CharField()


class SummarySerializer(serializers.Serializer):
    total_tab = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_pending = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_outstanding = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_credit = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_debt = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_requested = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_received = serializers.DecimalField(max_digits=12, decimal_places=2)
    member_count = serializers.IntegerField()
    active_count = serializers.IntegerField()
    deleted_count = serializers.IntegerField()
