"""Row locking and database error translation shared by the ledger services."""

import logging
from contextlib import contextmanager

from django.db import DatabaseError

from apps.ledger.models import Member
from .exceptions import MemberNotFoundError, StorageFailureError

logger = logging.getLogger(__name__)


def lock_member(member_id, *, include_deleted: bool = False) -> Member:
    """
    Load a member with a row lock. Call inside transaction.atomic().

    Raises:
        MemberNotFoundError: If the member does not exist, or is
            soft-deleted and include_deleted is False
    """
    queryset = Member.objects.all() if include_deleted else Member.objects.active()
    try:
        return queryset.select_for_update().get(id=member_id)
    except (Member.DoesNotExist, ValueError, TypeError):
        raise MemberNotFoundError("User not found")


@contextmanager
def storage_errors(operation: str, member_id=None):
    """
    Re-raise database errors as StorageFailureError.

    Wrap the transaction.atomic() block, not its body, so the rollback has
    already happened when the error is translated.
    """
    try:
        yield
    except DatabaseError as e:
        logger.exception("Storage failure during %s (member=%s)", operation, member_id)
        raise StorageFailureError(f"Failed to {operation}") from e
