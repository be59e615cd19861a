"""Audit trail recorder."""

import logging

from django.utils import timezone

from apps.ledger.models import AuditEntry, Actor

logger = logging.getLogger(__name__)


def record_audit(
    *,
    member,
    action: str,
    old_value=None,
    new_value=None,
    amount=None,
    performed_by: str = Actor.USER,
    notes: str = '',
    at=None,
) -> AuditEntry:
    """
    Append one audit row.

    Must be called inside the same transaction as the mutation it
    describes, so the row and the ledger change commit or roll back
    together.
    """
    entry = AuditEntry.objects.create(
        member=member,
        action=action,
        old_value=old_value,
        new_value=new_value,
        amount=amount,
        performed_by=performed_by,
        notes=notes or '',
        created_at=at or timezone.now(),
    )
    logger.debug(
        "Audit %s member=%s old=%s new=%s amount=%s by=%s",
        action, getattr(member, 'id', None), old_value, new_value, amount, performed_by,
    )
    return entry
