from django.db import models
from django.db.models import Q
from django.core.validators import MinValueValidator
from django.utils import timezone
from decimal import Decimal


class MemberStatus(models.TextChoices):
    """
    Member lifecycle.

    PURGED is never stored: a hard delete removes the row, and the state
    only appears in the hard delete result.
    """
    ACTIVE = 'active', 'Active'
    DELETED = 'deleted', 'Deleted'
    PURGED = 'purged', 'Purged'


class PaymentType(models.TextChoices):
    REQUEST = 'request', 'Request'
    RECEIVED = 'received', 'Received'


class AuditAction(models.TextChoices):
    INCREMENT = 'increment', 'Increment'
    DECREMENT = 'decrement', 'Decrement'
    PAYMENT_REQUEST = 'payment_request', 'Payment request'
    PAYMENT_RECEIVED = 'payment_received', 'Payment received'
    BALANCE_ADJUSTMENT = 'balance_adjustment', 'Balance adjustment'
    SOFT_DELETE = 'soft_delete', 'Soft delete'
    RESTORE = 'restore', 'Restore'
    HARD_DELETE = 'hard_delete', 'Hard delete'
    USER_CREATED = 'user_created', 'User created'


class Actor(models.TextChoices):
    USER = 'user', 'User'
    ADMIN = 'admin', 'Admin'
    SYSTEM = 'system', 'System'


class MemberQuerySet(models.QuerySet):
    def active(self):
        return self.filter(status=MemberStatus.ACTIVE)

    def deleted(self):
        return self.filter(status=MemberStatus.DELETED)


class Member(models.Model):
    """Kiosk member and their running coffee ledger."""

    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    email = models.EmailField(unique=True, max_length=255)

    # Ledger (EUR, cent precision)
    current_tab = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    pending_payment = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    # Positive = credit owed to the member, negative = debt
    account_balance = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal('0.00')
    )
    last_payment_request = models.DateTimeField(null=True, blank=True)

    # Lifecycle
    status = models.CharField(
        max_length=10,
        choices=MemberStatus.choices[:2],
        default=MemberStatus.ACTIVE
    )
    deleted_at = models.DateTimeField(null=True, blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = MemberQuerySet.as_manager()

    class Meta:
        db_table = 'members'
        ordering = ['last_name', 'first_name']
        indexes = [
            models.Index(fields=['last_name', 'first_name'], name='members_last_na_6c2e1f_idx'),
            models.Index(fields=['status'], name='members_status_3b8a0d_idx'),
            models.Index(fields=['pending_payment'], name='members_pending_9f1c2a_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(current_tab__gte=0),
                name='members_current_tab_non_negative',
            ),
            models.CheckConstraint(
                condition=Q(pending_payment__gte=0),
                name='members_pending_payment_non_negative',
            ),
            models.CheckConstraint(
                condition=(
                    Q(status=MemberStatus.ACTIVE, deleted_at__isnull=True)
                    | Q(status=MemberStatus.DELETED, deleted_at__isnull=False)
                ),
                name='members_status_matches_deleted_at',
            ),
        ]

    def __str__(self):
        return f"{self.full_name} <{self.email}>"

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    @property
    def is_deleted(self):
        return self.status == MemberStatus.DELETED

    @property
    def outstanding(self):
        """Tab not yet settled plus payments not yet confirmed."""
        return self.current_tab + self.pending_payment


class Payment(models.Model):
    """Append-only payment trail: requests raised and money received."""

    member = models.ForeignKey(
        Member,
        on_delete=models.CASCADE,
        related_name='payments'
    )
    amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    type = models.CharField(max_length=10, choices=PaymentType.choices)
    confirmed_by_admin = models.BooleanField(default=False)
    notes = models.TextField(blank=True)

    # Caller-supplied token that makes a confirmation safe to retry
    idempotency_key = models.CharField(max_length=64, null=True, blank=True)

    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'payments'
        ordering = ['created_at', 'id']
        indexes = [
            models.Index(fields=['member', 'created_at'], name='payments_member__1d4e7b_idx'),
            models.Index(fields=['type'], name='payments_type_8a2f3c_idx'),
            models.Index(fields=['created_at'], name='payments_created_5e9b1d_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount__gt=0),
                name='payments_amount_positive',
            ),
            models.UniqueConstraint(
                fields=['member', 'idempotency_key'],
                condition=Q(idempotency_key__isnull=False),
                name='payments_member_idempotency_key_unique',
            ),
        ]

    def __str__(self):
        return f"{self.get_type_display()} {self.amount} EUR for member {self.member_id}"


class AuditEntry(models.Model):
    """Append-only forensic trail of every ledger mutation."""

    member = models.ForeignKey(
        Member,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='audit_entries'
    )
    action = models.CharField(max_length=20, choices=AuditAction.choices)
    old_value = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    new_value = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    performed_by = models.CharField(max_length=10, choices=Actor.choices, default=Actor.USER)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'audit_log'
        ordering = ['-created_at', '-id']
        verbose_name_plural = 'audit entries'
        indexes = [
            models.Index(fields=['member', 'created_at'], name='audit_log_member__7c3d2e_idx'),
            models.Index(fields=['action'], name='audit_log_action_4f6a8b_idx'),
        ]

    def __str__(self):
        return f"{self.action} by {self.performed_by} (member {self.member_id})"
