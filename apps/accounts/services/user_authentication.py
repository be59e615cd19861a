"""Admin authentication service."""

import logging

from django.db import transaction
from django.contrib.auth import get_user_model
from django.utils import timezone

from .exceptions import InvalidCredentialsError, InactiveAccountError

User = get_user_model()

logger = logging.getLogger(__name__)


@transaction.atomic
def authenticate_admin(*, username: str, password: str) -> User:
    """
    Authenticate admin with username and password.

    Uses select_for_update() to prevent race conditions when updating last_login.

    Args:
        username: Admin username (case-insensitive)
        password: Admin password

    Returns:
        Authenticated User instance

    Raises:
        InvalidCredentialsError: If credentials are invalid
        InactiveAccountError: If account is deactivated
    """
    if not username or not password:
        raise InvalidCredentialsError("Username and password required")

    try:
        user = (
            User.objects
            .select_for_update()
            .get(username__iexact=username.strip())
        )
    except User.DoesNotExist:
        logger.warning("Failed admin login for unknown username %r", username)
        raise InvalidCredentialsError("Invalid credentials")

    if not user.check_password(password):
        logger.warning("Failed admin login for %s", user.username)
        raise InvalidCredentialsError("Invalid credentials")

    if not user.is_active:
        raise InactiveAccountError("Account is deactivated")

    user.last_login = timezone.now()
    user.save(update_fields=['last_login'])

    logger.info("Admin %s logged in", user.username)
    return user
