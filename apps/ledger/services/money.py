"""
Money helpers.

All ledger arithmetic happens on Decimal values rounded to whole cents
(ROUND_HALF_UP) after every step.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.conf import settings

from .exceptions import InvalidAmountError

CENT = Decimal('0.01')
ZERO = Decimal('0.00')

# Largest magnitude a Decimal(10, 2) ledger column can hold
LEDGER_LIMIT = Decimal('99999999.99')

# Inputs beyond 10**20 are rejected before any arithmetic
MAX_INPUT_EXPONENT = 20


def round2(value) -> Decimal:
    """Round a number to cents."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def to_decimal(value) -> Decimal:
    """
    Convert user input to a cent-rounded Decimal.

    Accepts Decimal, int, float and numeric strings. Booleans are rejected.

    Raises:
        InvalidAmountError: If the value is not a finite number
    """
    if isinstance(value, bool) or value is None:
        raise InvalidAmountError("Amount must be a number")
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise InvalidAmountError("Amount must be a number")
    if not amount.is_finite():
        raise InvalidAmountError("Amount must be a finite number")
    if amount and amount.adjusted() > MAX_INPUT_EXPONENT:
        raise InvalidAmountError("Amount is too large")
    try:
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise InvalidAmountError("Amount is too large")


def check_ledger_value(value: Decimal, label: str) -> Decimal:
    """
    Reject a result the ledger columns cannot store.

    Raises:
        InvalidAmountError: If abs(value) exceeds LEDGER_LIMIT
    """
    if abs(value) > LEDGER_LIMIT:
        raise InvalidAmountError(f"{label} would exceed {LEDGER_LIMIT}")
    return value


def parse_payment_amount(value) -> Decimal:
    """
    Parse an incoming payment amount.

    Raises:
        InvalidAmountError: If not numeric, not positive, or above
            settings.COFFEE_MAX_PAYMENT_AMOUNT
    """
    amount = to_decimal(value)
    if amount <= 0:
        raise InvalidAmountError("Amount must be greater than zero")
    ceiling = Decimal(str(settings.COFFEE_MAX_PAYMENT_AMOUNT))
    if amount > ceiling:
        raise InvalidAmountError(f"Amount must not exceed {ceiling}")
    return amount
