"""
Read-side accessors: member lookups, payment history, the admin summary
and the data export.
"""

import csv
import io

from django.db.models import DecimalField, Q, Sum, Value, Count
from django.db.models.functions import Coalesce

from apps.ledger.models import Member, MemberStatus, Payment, PaymentType
from .exceptions import MemberNotFoundError
from .money import ZERO, round2

USER_EXPORT_HEADERS = [
    'ID', 'First Name', 'Last Name', 'Email', 'Current Tab',
    'Pending Payment', 'Account Balance', 'Last Payment Request',
    'Deleted', 'Deleted At', 'Created At',
]
PAYMENT_EXPORT_HEADERS = [
    'ID', 'User ID', 'User Name', 'Email', 'Amount', 'Type',
    'Confirmed', 'Notes', 'Created At',
]


def get_member(member_id, *, include_deleted: bool = False) -> Member:
    """
    Raises:
        MemberNotFoundError: If missing, purged, or soft-deleted while
            include_deleted is False
    """
    queryset = Member.objects.all() if include_deleted else Member.objects.active()
    try:
        return queryset.get(id=member_id)
    except (Member.DoesNotExist, ValueError, TypeError):
        raise MemberNotFoundError("User not found")


def list_members(include_deleted: bool = False):
    queryset = Member.objects.all() if include_deleted else Member.objects.active()
    return queryset.order_by('last_name', 'first_name', 'id')


def get_payment_history(
    member_id=None,
    type=None,
    start_date=None,
    end_date=None,
    limit=None,
):
    """
    Payments, newest first, with optional filters.

    Args:
        member_id: Only this member's payments
        type: 'request' or 'received'
        start_date / end_date: Inclusive datetime bounds on created_at
        limit: Maximum number of rows
    """
    queryset = Payment.objects.select_related('member').order_by('-created_at', '-id')

    if member_id is not None:
        queryset = queryset.filter(member_id=member_id)
    if type:
        queryset = queryset.filter(type=type)
    if start_date is not None:
        queryset = queryset.filter(created_at__gte=start_date)
    if end_date is not None:
        queryset = queryset.filter(created_at__lte=end_date)
    if limit:
        queryset = queryset[:int(limit)]

    return queryset


def _sum(field, **filters):
    return Coalesce(
        Sum(field, filter=Q(**filters) if filters else None),
        Value(ZERO),
        output_field=DecimalField(max_digits=12, decimal_places=2),
    )


def get_summary() -> dict:
    """
    Totals across all members (soft-deleted included, they may still owe).

    Returns:
        dict with total_tab, total_pending, total_outstanding, total_credit,
        total_debt, total_requested, total_received, member_count,
        active_count, deleted_count
    """
    members = Member.objects.aggregate(
        total_tab=_sum('current_tab'),
        total_pending=_sum('pending_payment'),
        total_credit=_sum('account_balance', account_balance__gt=0),
        total_debt=_sum('account_balance', account_balance__lt=0),
        member_count=Count('id'),
        active_count=Count('id', filter=Q(status=MemberStatus.ACTIVE)),
        deleted_count=Count('id', filter=Q(status=MemberStatus.DELETED)),
    )
    payments = Payment.objects.aggregate(
        total_requested=_sum('amount', type=PaymentType.REQUEST),
        total_received=_sum('amount', type=PaymentType.RECEIVED),
    )

    total_tab = round2(members['total_tab'])
    total_pending = round2(members['total_pending'])
    return {
        'total_tab': total_tab,
        'total_pending': total_pending,
        'total_outstanding': round2(total_tab + total_pending),
        'total_credit': round2(members['total_credit']),
        'total_debt': round2(abs(members['total_debt'])),
        'total_requested': round2(payments['total_requested']),
        'total_received': round2(payments['total_received']),
        'member_count': members['member_count'],
        'active_count': members['active_count'],
        'deleted_count': members['deleted_count'],
    }


def _iso(value):
    return value.isoformat() if value else ''


def export_data(include_deleted: bool = True) -> dict:
    """Plain-data snapshot of members and payments, JSON serializable."""
    members = list_members(include_deleted=include_deleted)
    payments = get_payment_history()
    if not include_deleted:
        payments = payments.filter(member__status=MemberStatus.ACTIVE)

    return {
        'users': [
            {
                'id': m.id,
                'first_name': m.first_name,
                'last_name': m.last_name,
                'email': m.email,
                'current_tab': str(m.current_tab),
                'pending_payment': str(m.pending_payment),
                'account_balance': str(m.account_balance),
                'last_payment_request': _iso(m.last_payment_request),
                'deleted': 'Yes' if m.is_deleted else 'No',
                'deleted_at': _iso(m.deleted_at),
                'created_at': _iso(m.created_at),
            }
            for m in members
        ],
        'payments': [
            {
                'id': p.id,
                'user_id': p.member_id,
                'user_name': p.member.full_name,
                'user_email': p.member.email,
                'amount': str(p.amount),
                'type': p.type,
                'confirmed_by_admin': p.confirmed_by_admin,
                'notes': p.notes,
                'created_at': _iso(p.created_at),
            }
            for p in payments
        ],
    }


def export_csv(include_deleted: bool = True) -> str:
    """Export as one CSV document with a USERS and a PAYMENTS section."""
    data = export_data(include_deleted=include_deleted)
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator='\n')

    buffer.write('USERS\n')
    buffer.write(','.join(USER_EXPORT_HEADERS) + '\n')
    for u in data['users']:
        writer.writerow([
            u['id'], u['first_name'], u['last_name'], u['email'], u['current_tab'],
            u['pending_payment'], u['account_balance'], u['last_payment_request'],
            u['deleted'], u['deleted_at'], u['created_at'],
        ])

    buffer.write('\nPAYMENTS\n')
    buffer.write(','.join(PAYMENT_EXPORT_HEADERS) + '\n')
    for p in data['payments']:
        writer.writerow([
            p['id'], p['user_id'], p['user_name'], p['user_email'], p['amount'], p['type'],
            'Yes' if p['confirmed_by_admin'] else 'No', p['notes'], p['created_at'],
        ])

    return buffer.getvalue()
