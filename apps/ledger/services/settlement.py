"""
Settlement engine.

Settlement runs in two phases. The first is a single database transaction
that zeroes the tab, moves the cost to pending_payment (minus any credit)
and appends a `request` payment. The second, after commit, asks the
notifier to email the member. The notification outcome is reported on the
result and never changes the ledger.

Confirmation is the admin side: money received first clears pending
payments, and anything beyond that becomes credit.

Ledger identities maintained here:
    after request_settlement:  current_tab == 0
                               Δaccount_balance == -total_cost
                               credit_applied + amount_to_pay == total_cost
    after confirm_payment:     Δaccount_balance == amount
                               pending_cleared + credit_created == amount
"""

import logging

from django.db import transaction
from django.utils import timezone

from apps.ledger.models import AuditAction, Actor, Payment, PaymentType
from .audit import record_audit
from .exceptions import NothingToSettleError
from .locking import lock_member, storage_errors
from .money import ZERO, check_ledger_value, round2, parse_payment_amount, to_decimal
from .notifications import EmailNotificationGateway

logger = logging.getLogger(__name__)


def request_settlement(member_id, *, pricing=None, notifier=None, clock=None) -> dict:
    """
    Turn the member's tab into a payment request.

    Existing credit (positive balance) is applied first. Only the remainder
    becomes pending and is emailed to the member.

    Args:
        member_id: Active member's id
        pricing: Accepted for symmetry with the tab services; the tab
            already holds money, so no price lookup happens here
        notifier: Object with notify(member, amount) -> {'success', 'error'}
        clock: Zero-arg callable returning an aware datetime

    Returns:
        dict with member, payment (None when credit covered everything),
        total_cost, credit_applied, amount_to_pay, notification_sent,
        notification_error, message

    Raises:
        MemberNotFoundError: If the member is missing or soft-deleted
        NothingToSettleError: If the tab is empty
        InvalidAmountError: If the balance would leave the storable range
        StorageFailureError: If the transaction fails (nothing is changed)
    """
    clock = clock or timezone.now
    notifier = notifier or EmailNotificationGateway()
    payment = None

    with storage_errors('process payment request', member_id):
        with transaction.atomic():
            member = lock_member(member_id)
            if member.current_tab <= 0:
                raise NothingToSettleError("No coffees to pay for")

            now = clock()
            old_tab = member.current_tab
            total_cost = round2(old_tab)
            credit_applied = min(max(ZERO, member.account_balance), total_cost)
            amount_to_pay = round2(total_cost - credit_applied)

            member.current_tab = ZERO
            member.account_balance = check_ledger_value(
                round2(member.account_balance - total_cost), "Balance"
            )
            member.last_payment_request = now
            update_fields = ['current_tab', 'account_balance', 'last_payment_request', 'updated_at']

            if amount_to_pay > 0:
                member.pending_payment = check_ledger_value(
                    round2(member.pending_payment + amount_to_pay), "Pending payment"
                )
                update_fields.append('pending_payment')

            member.save(update_fields=update_fields)

            if amount_to_pay > 0:
                payment = Payment.objects.create(
                    member=member,
                    amount=amount_to_pay,
                    type=PaymentType.REQUEST,
                    created_at=now,
                )

            record_audit(
                member=member,
                action=AuditAction.PAYMENT_REQUEST,
                old_value=old_tab,
                new_value=ZERO,
                amount=amount_to_pay,
                at=now,
            )

    notification_sent = False
    notification_error = None
    if amount_to_pay > 0:
        try:
            outcome = notifier.notify(member, amount_to_pay)
        except Exception as e:
            logger.exception(
                "Notifier raised after payment request: member=%s amount=%s",
                member.id, amount_to_pay,
            )
            outcome = {'success': False, 'error': str(e) or e.__class__.__name__}
        notification_sent = bool(outcome.get('success'))
        notification_error = outcome.get('error')
        if not notification_sent:
            logger.warning(
                "Payment request saved but email failed: member=%s amount=%s error=%s",
                member.id, amount_to_pay, notification_error,
            )

    logger.info(
        "Payment requested: member=%s total=%s credit=%s to_pay=%s email=%s",
        member.id, total_cost, credit_applied, amount_to_pay, notification_sent,
    )

    if amount_to_pay > 0:
        message = f"Payment request sent (€{amount_to_pay:.2f})"
    else:
        message = f"Paid from credit (€{total_cost:.2f})"

    return {
        'member': member,
        'payment': payment,
        'total_cost': total_cost,
        'credit_applied': credit_applied,
        'amount_to_pay': amount_to_pay,
        'notification_sent': notification_sent,
        'notification_error': notification_error,
        'message': message,
    }


def _confirmation_result(member, payment, pending_cleared, *, replayed):
    credit_created = round2(payment.amount - pending_cleared)
    if credit_created > 0:
        message = f"Payment confirmed. Credit: €{credit_created:.2f}"
    else:
        message = "Payment confirmed"
    return {
        'member': member,
        'payment': payment,
        'amount': payment.amount,
        'pending_cleared': pending_cleared,
        'credit_created': credit_created,
        'replayed': replayed,
        'message': message,
    }


def _replayed_pending_cleared(member, payment):
    # The audit row written with the original confirmation holds the pending before/after
    entry = member.audit_entries.filter(
        action=AuditAction.PAYMENT_RECEIVED,
        amount=payment.amount,
        created_at=payment.created_at,
    ).order_by('id').first()
    if entry is None or entry.old_value is None or entry.new_value is None:
        return ZERO
    return round2(entry.old_value - entry.new_value)


def confirm_payment(member_id, amount, notes='', *, idempotency_key=None, clock=None) -> dict:
    """
    Record money received from a member (admin).

    Works for soft-deleted members too, so departed staff can still settle.
    A repeated call with the same idempotency_key returns the first
    outcome with replayed=True and moves no money.

    Returns:
        dict with member, payment, amount, pending_cleared, credit_created,
        replayed, message

    Raises:
        InvalidAmountError: If amount is not numeric, not positive or above
            settings.COFFEE_MAX_PAYMENT_AMOUNT
        MemberNotFoundError: If the member does not exist
        StorageFailureError: If the transaction fails (nothing is changed)
    """
    clock = clock or timezone.now
    received = check_ledger_value(parse_payment_amount(amount), "Amount")
    idempotency_key = (idempotency_key or '').strip() or None

    with storage_errors('confirm payment', member_id):
        with transaction.atomic():
            member = lock_member(member_id, include_deleted=True)

            if idempotency_key:
                previous = member.payments.filter(
                    type=PaymentType.RECEIVED,
                    idempotency_key=idempotency_key,
                ).first()
                if previous is not None:
                    logger.info(
                        "Payment confirmation replayed: member=%s key=%s",
                        member.id, idempotency_key,
                    )
                    return _confirmation_result(
                        member,
                        previous,
                        _replayed_pending_cleared(member, previous),
                        replayed=True,
                    )

            now = clock()
            old_pending = member.pending_payment
            pending_cleared = min(received, old_pending)

            member.pending_payment = round2(old_pending - pending_cleared)
            member.account_balance = check_ledger_value(
                round2(member.account_balance + received), "Balance"
            )
            member.save(update_fields=['pending_payment', 'account_balance', 'updated_at'])

            payment = Payment.objects.create(
                member=member,
                amount=received,
                type=PaymentType.RECEIVED,
                confirmed_by_admin=True,
                notes=notes or '',
                idempotency_key=idempotency_key,
                created_at=now,
            )
            record_audit(
                member=member,
                action=AuditAction.PAYMENT_RECEIVED,
                old_value=old_pending,
                new_value=member.pending_payment,
                amount=received,
                performed_by=Actor.ADMIN,
                notes=notes,
                at=now,
            )

    result = _confirmation_result(member, payment, pending_cleared, replayed=False)
    logger.info(
        "Payment confirmed: member=%s amount=%s cleared=%s credit=%s balance=%s",
        member.id, received, pending_cleared, result['credit_created'], member.account_balance,
    )
    return result


def adjust_balance(member_id, delta, notes='', *, clock=None):
    """
    Admin correction of a member's balance. No payment record is written.

    Raises:
        InvalidAmountError: If delta is not a number, or the balance would
            leave the range the ledger can store
        MemberNotFoundError: If the member does not exist
    """
    clock = clock or timezone.now
    delta = check_ledger_value(to_decimal(delta), "Adjustment")

    with storage_errors('adjust balance', member_id):
        with transaction.atomic():
            member = lock_member(member_id, include_deleted=True)
            old_balance = member.account_balance
            member.account_balance = check_ledger_value(round2(old_balance + delta), "Balance")
            member.save(update_fields=['account_balance', 'updated_at'])
            record_audit(
                member=member,
                action=AuditAction.BALANCE_ADJUSTMENT,
                amount=delta,
                performed_by=Actor.ADMIN,
                notes=notes,
                at=clock(),
            )

    logger.info(
        "Balance adjusted: member=%s %s -> %s (%s)",
        member.id, old_balance, member.account_balance, notes or 'no notes',
    )
    return member
