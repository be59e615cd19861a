"""
Admin account management service.

Admin accounts are separate from kiosk members. At least one admin must
always remain so the panel can never be locked out.
"""

import logging

from django.contrib.auth import get_user_model
from django.db import transaction, IntegrityError
from django.db.models import QuerySet

from .exceptions import (
    AdminNotFoundError,
    DuplicateUsernameError,
    InvalidAdminDataError,
    LastAdminError,
)

User = get_user_model()

logger = logging.getLogger(__name__)

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 4


def _validate_password(password: str) -> None:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise InvalidAdminDataError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )


@transaction.atomic
def create_admin(*, username: str, password: str) -> User:
    """
    Create a new admin account.

    Args:
        username: Login name, stored lower-case
        password: Plain password, hashed by Django

    Returns:
        Created User instance

    Raises:
        InvalidAdminDataError: If username or password is too short
        DuplicateUsernameError: If username already exists (case-insensitive)
    """
    username = (username or '').strip().lower()
    if len(username) < MIN_USERNAME_LENGTH:
        raise InvalidAdminDataError(
            f"Username must be at least {MIN_USERNAME_LENGTH} characters"
        )
    _validate_password(password)

    if User.objects.filter(username__iexact=username).exists():
        raise DuplicateUsernameError("Username already exists")

    try:
        user = User.objects.create_user(username=username, password=password)
    except IntegrityError:
        raise DuplicateUsernameError("Username already exists")

    logger.info("Admin account created: %s", username)
    return user


def list_admins() -> QuerySet:
    """Return all admin accounts ordered by username."""
    return User.objects.order_by('username')


@transaction.atomic
def change_admin_password(*, admin_id: int, new_password: str) -> User:
    """
    Set a new password for an admin account.

    Raises:
        InvalidAdminDataError: If the password is too short
        AdminNotFoundError: If the admin does not exist
    """
    _validate_password(new_password)

    try:
        user = User.objects.select_for_update().get(id=admin_id)
    except User.DoesNotExist:
        raise AdminNotFoundError("Admin user not found")

    user.set_password(new_password)
    user.save(update_fields=['password'])

    logger.info("Admin password changed: %s", user.username)
    return user


@transaction.atomic
def delete_admin(*, admin_id: int) -> None:
    """
    Delete an admin account.

    Raises:
        LastAdminError: If this is the only admin left
        AdminNotFoundError: If the admin does not exist
    """
    # Lock every admin row so two concurrent deletes cannot remove the last two
    admins = list(User.objects.select_for_update().order_by('id'))
    if len(admins) <= 1:
        raise LastAdminError("Cannot delete the last admin user")

    target = next((a for a in admins if a.id == admin_id), None)
    if target is None:
        raise AdminNotFoundError("Admin user not found")

    username = target.username
    target.delete()
    logger.info("Admin account deleted: %s", username)


def ensure_default_admin(*, username: str = 'admin', password: str = 'admin'):
    """
    Create the initial admin account on a fresh install.

    Returns:
        The created User, or None if any admin already exists
    """
    if User.objects.exists():
        return None

    user = create_admin(username=username, password=password)
    logger.warning("Created default admin '%s' - change its password", username)
    return user
