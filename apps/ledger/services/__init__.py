"""Services for the coffee ledger business logic."""

from .exceptions import (
    LedgerServiceError,
    MemberNotFoundError,
    AlreadyDeletedError,
    NotDeletedError,
    NothingToSettleError,
    InvalidAmountError,
    StorageFailureError,
    DuplicateEmailError,
    InvalidMemberDataError,
)
from .money import round2, to_decimal, parse_payment_amount
from .tab_management import increment_tab, decrement_tab, set_current_tab
from .settlement import request_settlement, confirm_payment, adjust_balance
from .member_management import (
    create_member,
    soft_delete_member,
    restore_member,
    hard_delete_member,
    get_inactive_members,
    cleanup_inactive_members,
)
from .reporting import (
    get_member,
    list_members,
    get_payment_history,
    get_summary,
    export_data,
    export_csv,
)
from .notifications import EmailNotificationGateway, send_test_email

__all__ = [
    # Exceptions
    'LedgerServiceError',
    'MemberNotFoundError',
    'AlreadyDeletedError',
    'NotDeletedError',
    'NothingToSettleError',
    'InvalidAmountError',
    'StorageFailureError',
    'DuplicateEmailError',
    'InvalidMemberDataError',
    # Money
    'round2',
    'to_decimal',
    'parse_payment_amount',
    # Tab
    'increment_tab',
    'decrement_tab',
    'set_current_tab',
    # Settlement
    'request_settlement',
    'confirm_payment',
    'adjust_balance',
    # Members
    'create_member',
    'soft_delete_member',
    'restore_member',
    'hard_delete_member',
    'get_inactive_members',
    'cleanup_inactive_members',
    # Reporting
    'get_member',
    'list_members',
    'get_payment_history',
    'get_summary',
    'export_data',
    'export_csv',
    # Notifications
    'EmailNotificationGateway',
    'send_test_email',
]
