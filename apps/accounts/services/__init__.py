"""Services for admin account business logic."""

from .exceptions import (
    AccountsServiceError,
    InvalidCredentialsError,
    InactiveAccountError,
    AdminNotFoundError,
    DuplicateUsernameError,
    InvalidAdminDataError,
    LastAdminError,
)
from .user_authentication import authenticate_admin
from .admin_management import (
    create_admin,
    list_admins,
    change_admin_password,
    delete_admin,
    ensure_default_admin,
)

__all__ = [
    # Exceptions
    'AccountsServiceError',
    'InvalidCredentialsError',
    'InactiveAccountError',
    'AdminNotFoundError',
    'DuplicateUsernameError',
    'InvalidAdminDataError',
    'LastAdminError',
    # Services
    'authenticate_admin',
    'create_admin',
    'list_admins',
    'change_admin_password',
    'delete_admin',
    'ensure_default_admin',
]
