"""Domain exceptions for the coffee ledger."""


class LedgerServiceError(Exception):
    """Base exception for ledger service errors."""
    pass


class MemberNotFoundError(LedgerServiceError):
    """Member does not exist, was purged, or is soft-deleted where an active member is required."""
    pass


class AlreadyDeletedError(LedgerServiceError):
    pass


class NotDeletedError(LedgerServiceError):
    pass


class NothingToSettleError(LedgerServiceError):
    """Settlement requested with an empty tab."""
    pass


class InvalidAmountError(LedgerServiceError):
    """Amount is not numeric, not finite, not positive, or above the ceiling."""
    pass


class StorageFailureError(LedgerServiceError):
    """The database rejected a ledger write; the transaction was rolled back."""
    pass


class DuplicateEmailError(LedgerServiceError):
    pass


class InvalidMemberDataError(LedgerServiceError):
    pass
