"""Domain-specific exceptions for accounts services."""


class AccountsServiceError(Exception):
    """Base exception for accounts services."""
    pass


class InvalidCredentialsError(AccountsServiceError):
    """Raised when authentication credentials are invalid."""
    pass


class InactiveAccountError(AccountsServiceError):
    """Raised when account is deactivated."""
    pass


class AdminNotFoundError(AccountsServiceError):
    """Raised when admin account does not exist."""
    pass


class DuplicateUsernameError(AccountsServiceError):
    """Raised when the username is already taken."""
    pass


class InvalidAdminDataError(AccountsServiceError):
    """Raised when username or password do not meet the minimum rules."""
    pass


class LastAdminError(AccountsServiceError):
    """Raised when deleting the only remaining admin account."""
    pass
