"""
Member lifecycle service.

Members register themselves at the kiosk. Leaving is a soft delete that
keeps the ledger for the admin; a hard delete purges the member together
with their payment and audit history.
"""

import logging
import re
from datetime import timedelta

from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import transaction, IntegrityError
from django.utils import timezone

from apps.ledger.models import AuditAction, Actor, Member, MemberStatus
from .audit import record_audit
from .exceptions import (
    AlreadyDeletedError,
    DuplicateEmailError,
    InvalidMemberDataError,
    LedgerServiceError,
    NotDeletedError,
)
from .locking import lock_member, storage_errors
from .settlement import request_settlement

logger = logging.getLogger(__name__)

MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 100

_SCRIPT_PROTOCOL = re.compile(r'javascript:', re.IGNORECASE)
_EVENT_HANDLER = re.compile(r'on\w+=', re.IGNORECASE)


def sanitize_input(value) -> str:
    """Strip markup fragments from free-text input."""
    if not isinstance(value, str):
        return ''
    value = value.strip().replace('<', '').replace('>', '')
    value = _SCRIPT_PROTOCOL.sub('', value)
    return _EVENT_HANDLER.sub('', value)


def _validate_member_data(first_name, last_name, email):
    errors = []
    for label, value in (('First name', first_name), ('Last name', last_name)):
        if not value:
            errors.append(f"{label} is required")
        elif len(value) < MIN_NAME_LENGTH:
            errors.append(f"{label} must be at least {MIN_NAME_LENGTH} characters")
        elif len(value) > MAX_NAME_LENGTH:
            errors.append(f"{label} must be at most {MAX_NAME_LENGTH} characters")

    if not email:
        errors.append("Email is required")
    else:
        try:
            validate_email(email)
        except ValidationError:
            errors.append("Invalid email format")

    if errors:
        raise InvalidMemberDataError(', '.join(errors))


def create_member(first_name, last_name, email, *, clock=None) -> dict:
    """
    Register a member, or reactivate a soft-deleted one with the same email.

    Returns:
        dict with member and reactivated (bool)

    Raises:
        InvalidMemberDataError: If names or email fail validation
        DuplicateEmailError: If an active member already uses the email
    """
    clock = clock or timezone.now
    first_name = sanitize_input(first_name)
    last_name = sanitize_input(last_name)
    email = sanitize_input(email).lower()
    _validate_member_data(first_name, last_name, email)

    with storage_errors('create user'):
        try:
            with transaction.atomic():
                existing = Member.objects.select_for_update().filter(email__iexact=email).first()

                if existing is not None and not existing.is_deleted:
                    raise DuplicateEmailError("Email already exists")

                if existing is not None:
                    existing.first_name = first_name
                    existing.last_name = last_name
                    existing.status = MemberStatus.ACTIVE
                    existing.deleted_at = None
                    existing.save(update_fields=[
                        'first_name', 'last_name', 'status', 'deleted_at', 'updated_at',
                    ])
                    record_audit(member=existing, action=AuditAction.RESTORE, at=clock())
                    logger.info("Member reactivated via registration: %s", existing.id)
                    return {'member': existing, 'reactivated': True}

                member = Member.objects.create(
                    first_name=first_name,
                    last_name=last_name,
                    email=email,
                )
                record_audit(member=member, action=AuditAction.USER_CREATED, at=clock())
        except IntegrityError:
            # Lost a race with a concurrent registration of the same email
            raise DuplicateEmailError("Email already exists")

    logger.info("Member created: %s", member.id)
    return {'member': member, 'reactivated': False}


def soft_delete_member(member_id, *, reason=Actor.USER, notifier=None, clock=None) -> dict:
    """
    Soft-delete a member. Ledger values are kept.

    An open tab is settled first, so a departing member still receives
    their payment request.

    Args:
        reason: Actor recorded on the audit row ('user', 'admin' or 'system')

    Returns:
        dict with member, settlement (request_settlement result or None),
        notification_sent, outstanding

    Raises:
        MemberNotFoundError: If the member does not exist
        AlreadyDeletedError: If the member is already soft-deleted
    """
    clock = clock or timezone.now
    performed_by = reason if reason in Actor.values else Actor.USER

    with transaction.atomic():
        member = lock_member(member_id, include_deleted=True)
        if member.is_deleted:
            raise AlreadyDeletedError("User already deleted")
        has_tab = member.current_tab > 0

    settlement = None
    if has_tab:
        settlement = request_settlement(member_id, notifier=notifier, clock=clock)
        logger.info(
            "Auto payment request on soft delete: member=%s amount=%s email=%s",
            member_id, settlement['amount_to_pay'], settlement['notification_sent'],
        )

    with storage_errors('delete user', member_id):
        with transaction.atomic():
            member = lock_member(member_id, include_deleted=True)
            if member.is_deleted:
                raise AlreadyDeletedError("User already deleted")

            now = clock()
            member.status = MemberStatus.DELETED
            member.deleted_at = now
            member.save(update_fields=['status', 'deleted_at', 'updated_at'])
            record_audit(
                member=member,
                action=AuditAction.SOFT_DELETE,
                performed_by=performed_by,
                at=now,
            )

    logger.info("Member soft-deleted: %s (reason=%s, outstanding=%s)", member.id, reason, member.outstanding)
    return {
        'member': member,
        'settlement': settlement,
        'notification_sent': bool(settlement and settlement['notification_sent']),
        'outstanding': member.outstanding,
    }


def restore_member(member_id, *, clock=None) -> Member:
    """
    Reactivate a soft-deleted member (admin).

    Raises:
        MemberNotFoundError: If the member does not exist
        NotDeletedError: If the member is active
    """
    clock = clock or timezone.now

    with storage_errors('restore user', member_id):
        with transaction.atomic():
            member = lock_member(member_id, include_deleted=True)
            if not member.is_deleted:
                raise NotDeletedError("User is not deleted")

            member.status = MemberStatus.ACTIVE
            member.deleted_at = None
            member.save(update_fields=['status', 'deleted_at', 'updated_at'])
            record_audit(
                member=member,
                action=AuditAction.RESTORE,
                performed_by=Actor.ADMIN,
                at=clock(),
            )

    logger.info("Member restored: %s", member.id)
    return member


def hard_delete_member(member_id) -> dict:
    """
    Permanently delete a member with all payments and audit entries (admin).

    Irreversible. Afterwards every operation on the id raises
    MemberNotFoundError.

    Returns:
        {'id': member_id, 'status': 'purged'}
    """
    with storage_errors('permanently delete user', member_id):
        with transaction.atomic():
            member = lock_member(member_id, include_deleted=True)
            payment_count, _ = member.payments.all().delete()
            audit_count, _ = member.audit_entries.all().delete()
            deleted_id = member.id
            member.delete()

    logger.warning(
        "Member permanently deleted: %s (%s payments, %s audit entries purged)",
        deleted_id, payment_count, audit_count,
    )
    return {'id': deleted_id, 'status': MemberStatus.PURGED.value}


def get_inactive_members(days: int, *, clock=None):
    """Active members with no ledger activity for more than `days` days."""
    clock = clock or timezone.now
    cutoff = clock() - timedelta(days=days)
    return Member.objects.active().filter(updated_at__lt=cutoff).order_by('id')


def cleanup_inactive_members(days: int = 365, *, notifier=None, clock=None) -> dict:
    """
    Soft-delete members inactive for more than `days` days.

    Open tabs are billed on the way out. A failure on one member is logged
    and does not stop the others.

    Returns:
        dict with deleted_count, members (list of deleted Member), failed (list of ids)
    """
    deleted = []
    failed = []
    for member in list(get_inactive_members(days, clock=clock)):
        try:
            result = soft_delete_member(
                member.id,
                reason=Actor.SYSTEM,
                notifier=notifier,
                clock=clock,
            )
        except LedgerServiceError:
            logger.exception("Inactivity cleanup failed for member %s", member.id)
            failed.append(member.id)
            continue
        deleted.append(result['member'])

    if deleted or failed:
        logger.info("Inactivity cleanup: %s deleted, %s failed", len(deleted), len(failed))
    else:
        logger.info("No inactive members to clean up")

    return {'deleted_count': len(deleted), 'members': deleted, 'failed': failed}
