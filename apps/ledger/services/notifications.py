"""
Notification gateway.

Sends the payment-request email once a settlement has committed. A failed
send is reported back to the caller and logged; it never raises and never
touches the ledger.
"""

import logging
from email.mime.image import MIMEImage

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string

from apps.configuration.services import get_admin_email, get_bank_details
from .money import round2
from .payment_qr import generate_for_member, payment_reference

logger = logging.getLogger(__name__)

PAYMENT_REQUEST_SUBJECT = "Coffee Payment Request"


def build_payment_request_email(member, amount, *, connection=None) -> EmailMultiAlternatives:
    """Compose the payment-request email, CC'd to the admin, with a transfer QR code when an IBAN is set."""
    bank = get_bank_details()
    qr = generate_for_member(member, amount, bank)
    context = {
        'member': member,
        'amount': f"{round2(amount):.2f}",
        'bank': bank,
        'reference': payment_reference(member),
        'has_qr': qr is not None,
    }

    admin_email = get_admin_email()
    message = EmailMultiAlternatives(
        subject=PAYMENT_REQUEST_SUBJECT,
        body=render_to_string('ledger/emails/payment_request.txt', context),
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=[member.email],
        cc=[admin_email] if admin_email else [],
        connection=connection,
    )
    message.attach_alternative(
        render_to_string('ledger/emails/payment_request.html', context),
        'text/html',
    )

    if qr is not None:
        _, png = qr
        image = MIMEImage(png, 'png')
        image.add_header('Content-ID', '<payment-qr>')
        image.add_header('Content-Disposition', 'inline', filename='payment-qr.png')
        message.mixed_subtype = 'related'
        message.attach(image)

    return message


class EmailNotificationGateway:
    """
    Default notifier used by the settlement engine.

    Each attempt is bounded by settings.EMAIL_TIMEOUT. Retries happen after
    the ledger commit, so a retry can never create a second payment record.
    """

    def __init__(self, *, attempts=None, connection=None):
        self.attempts = max(1, attempts or settings.COFFEE_NOTIFICATION_ATTEMPTS)
        self.connection = connection

    def notify(self, member, amount) -> dict:
        last_error = None
        for attempt in range(1, self.attempts + 1):
            try:
                build_payment_request_email(member, amount, connection=self.connection).send()
            # Any failure (SMTP, DNS, template, QR rendering) is reported, not raised
            except Exception as e:
                last_error = str(e) or e.__class__.__name__
                logger.warning(
                    "Payment request email failed (attempt %s/%s) member=%s: %s",
                    attempt, self.attempts, member.id, last_error,
                )
                continue

            logger.info("Payment request email sent: member=%s amount=%s", member.id, amount)
            return {'success': True, 'error': None}

        return {'success': False, 'error': last_error}


def send_test_email(recipient: str) -> dict:
    """Send a plain test message to check the SMTP configuration."""
    try:
        EmailMultiAlternatives(
            subject="Coffee Tab - Test Email",
            body="This is a test email from Coffee Tab. Your email settings work.",
            from_email=settings.DEFAULT_FROM_EMAIL,
            to=[recipient],
        ).send()
    except Exception as e:
        logger.warning("Test email to %s failed: %s", recipient, e)
        return {'success': False, 'error': str(e) or e.__class__.__name__}

    logger.info("Test email sent to %s", recipient)
    return {'success': True, 'error': None}
