"""
EPC QR codes ("GiroCode") for SEPA credit transfers.

EPC069-12 is the European standard for encoding a transfer into a QR code.
Most European banking apps pre-fill the transfer when it is scanned.

Format (one field per line)::

    BCD
    002
    1
    SCT
    <BIC>
    <beneficiary name>
    <IBAN>
    EUR<amount>
    <purpose>
    <structured reference>
    <remittance text>

Version 002 makes the BIC optional. Requires ``qrcode[pil]``.
"""

from io import BytesIO
from decimal import Decimal

import qrcode

MAX_NAME_LENGTH = 70
MAX_TEXT_LENGTH = 140
MAX_AMOUNT = Decimal('999999999.99')


def generate_epc_payload(*, iban, amount, name, bic='', text=''):
    """
    Build the EPC payload string.

    Args:
        iban: Beneficiary IBAN, spaces allowed
        amount: Decimal amount in EUR, 0.01 - 999999999.99
        name: Beneficiary name, truncated to 70 characters
        bic: Optional BIC
        text: Unstructured remittance text, truncated to 140 characters

    Raises:
        ValueError: If IBAN or name is missing or the amount is out of range
    """
    iban = (iban or '').replace(' ', '').upper()
    if not iban:
        raise ValueError("IBAN is required for a transfer QR code")
    if not name:
        raise ValueError("Beneficiary name is required for a transfer QR code")

    amount = Decimal(str(amount))
    if amount < Decimal('0.01') or amount > MAX_AMOUNT:
        raise ValueError(f"Amount out of range for a transfer QR code: {amount}")

    # Line breaks would shift every following field
    clean_text = ' '.join((text or '').split())[:MAX_TEXT_LENGTH]
    clean_name = ' '.join(name.split())[:MAX_NAME_LENGTH]

    lines = [
        'BCD',
        '002',
        '1',
        'SCT',
        (bic or '').replace(' ', '').upper(),
        clean_name,
        iban,
        f'EUR{amount:.2f}',
        '',
        '',
        clean_text,
    ]
    return '\n'.join(lines)


def generate_qr_png(payload: str) -> bytes:
    """Render a payload as PNG bytes (error correction M, as EPC requires)."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=8,
        border=4,
    )
    qr.add_data(payload)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buffer = BytesIO()
    img.save(buffer, format='PNG')
    return buffer.getvalue()


def payment_reference(member) -> str:
    return f"Coffee - {member.first_name} {member.last_name}"


def generate_for_member(member, amount, bank_details: dict):
    """
    Build the transfer QR code for a payment request.

    Returns:
        tuple (payload, png_bytes), or None when no IBAN is configured
    """
    if not bank_details.get('iban'):
        return None

    payload = generate_epc_payload(
        iban=bank_details['iban'],
        bic=bank_details.get('bic', ''),
        name=bank_details.get('owner') or 'Coffee Fund',
        amount=amount,
        text=payment_reference(member),
    )
    return payload, generate_qr_png(payload)
