"""
Kiosk settings service.

Settings are read from the database on every call (never cached), so a price
change made in the admin panel applies to the very next tab increment.
Values missing from the database fall back to the Django settings defaults.
"""

import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.conf import settings
from django.db import transaction

from apps.configuration.models import Setting, SettingKey
from .exceptions import InvalidSettingError

logger = logging.getLogger(__name__)

MAX_COFFEE_PRICE = Decimal('100')


def _defaults():
    return {
        SettingKey.COFFEE_PRICE: str(settings.COFFEE_DEFAULT_PRICE),
        SettingKey.ADMIN_EMAIL: settings.COFFEE_ADMIN_EMAIL,
        SettingKey.BANK_IBAN: settings.COFFEE_BANK_IBAN,
        SettingKey.BANK_BIC: settings.COFFEE_BANK_BIC,
        SettingKey.BANK_OWNER: settings.COFFEE_BANK_OWNER,
    }


def get_setting(key: str):
    """Return the stored value for key, or its default (None for unknown keys)."""
    row = Setting.objects.filter(key=key).values_list('value', flat=True).first()
    if row is not None:
        return row
    return _defaults().get(key)


def get_all_settings() -> dict:
    """
    Return every known setting with its effective value.

    Returns:
        dict mapping key -> {'value': str, 'updated_at': datetime | None}
    """
    stored = {s.key: s for s in Setting.objects.all()}
    result = {}
    for key, default in _defaults().items():
        row = stored.get(key)
        result[str(key)] = {
            'value': row.value if row else default,
            'updated_at': row.updated_at if row else None,
        }
    return result


def get_unit_price() -> Decimal:
    """Current price of one coffee, cent-rounded."""
    raw = get_setting(SettingKey.COFFEE_PRICE)
    try:
        price = Decimal(str(raw))
    except (InvalidOperation, TypeError):
        logger.error("Stored coffee price %r is not a number, using default", raw)
        price = Decimal(str(settings.COFFEE_DEFAULT_PRICE))
    return price.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)


def get_admin_email() -> str:
    return get_setting(SettingKey.ADMIN_EMAIL) or ''


def get_bank_details() -> dict:
    return {
        'iban': get_setting(SettingKey.BANK_IBAN) or '',
        'bic': get_setting(SettingKey.BANK_BIC) or '',
        'owner': get_setting(SettingKey.BANK_OWNER) or '',
    }


class SettingsPricingProvider:
    """Pricing provider backed by the coffee_price setting."""

    def get_unit_price(self) -> Decimal:
        return get_unit_price()


def clean_setting_value(key: str, value) -> str:
    if key not in SettingKey.values:
        raise InvalidSettingError(f"Invalid setting key: {key}")

    if key == SettingKey.COFFEE_PRICE:
        try:
            price = Decimal(str(value).strip())
        except (InvalidOperation, TypeError):
            raise InvalidSettingError("Invalid coffee price (must be 0-100)")
        if not price.is_finite() or price < 0 or price > MAX_COFFEE_PRICE:
            raise InvalidSettingError("Invalid coffee price (must be 0-100)")
        return str(price.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP))

    value = '' if value is None else str(value).strip()

    if key == SettingKey.ADMIN_EMAIL and '@' not in value:
        raise InvalidSettingError("Invalid email address")

    if key == SettingKey.BANK_IBAN:
        value = value.replace(' ', '').upper()

    return value


@transaction.atomic
def update_setting(*, key: str, value) -> Setting:
    """
    Validate and store a single setting.

    Raises:
        InvalidSettingError: If key is unknown or value fails validation
    """
    clean = clean_setting_value(key, value)
    setting, _ = Setting.objects.update_or_create(key=key, defaults={'value': clean})
    logger.info("Setting updated: %s = %s", key, clean)
    return setting


@transaction.atomic
def update_settings(*, values: dict) -> dict:
    """
    Validate and store several settings at once.

    All values are validated before anything is written; one bad value
    rejects the whole batch.

    Raises:
        InvalidSettingError: Lists every failing key
    """
    cleaned = {}
    errors = []
    for key, value in values.items():
        try:
            cleaned[key] = clean_setting_value(key, value)
        except InvalidSettingError as e:
            errors.append(f"{key}: {e}")

    if errors:
        raise InvalidSettingError('; '.join(errors))

    for key, value in cleaned.items():
        Setting.objects.update_or_create(key=key, defaults={'value': value})

    logger.info("Settings updated: %s", ', '.join(sorted(cleaned)))
    return cleaned
