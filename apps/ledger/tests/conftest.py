import pytest
from datetime import datetime, timezone as dt_timezone
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User
from apps.ledger.models import Member, MemberStatus


class FixedPricing:
    """Pricing provider with a settable unit price."""

    def __init__(self, price='0.50'):
        self.price = Decimal(price)

    def get_unit_price(self):
        return self.price


class RecordingNotifier:
    """Notifier double that records calls and returns a canned outcome."""

    def __init__(self, success=True, error=None):
        self.success = success
        self.error = error
        self.calls = []

    def notify(self, member, amount):
        self.calls.append((member.id, amount))
        return {'success': self.success, 'error': self.error}


@pytest.fixture
def pricing():
    return FixedPricing('0.50')


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def failing_notifier():
    return RecordingNotifier(success=False, error='SMTP connection refused')


@pytest.fixture
def fixed_now():
    return datetime(2026, 3, 2, 9, 30, tzinfo=dt_timezone.utc)


@pytest.fixture
def clock(fixed_now):
    return lambda: fixed_now


@pytest.fixture
def make_member(db):
    """Factory for members with a given ledger state."""
    counter = {'n': 0}

    def _make(tab='0.00', pending='0.00', balance='0.00', deleted=False, **kwargs):
        counter['n'] += 1
        defaults = {
            'first_name': 'Ada',
            'last_name': f'Lovelace{counter["n"]}',
            'email': f'ada{counter["n"]}@example.com',
        }
        defaults.update(kwargs)
        member = Member.objects.create(
            current_tab=Decimal(tab),
            pending_payment=Decimal(pending),
            account_balance=Decimal(balance),
            **defaults,
        )
        if deleted:
            Member.objects.filter(id=member.id).update(
                status=MemberStatus.DELETED,
                deleted_at=datetime(2026, 1, 1, tzinfo=dt_timezone.utc),
            )
            member.refresh_from_db()
        return member

    return _make


@pytest.fixture
def member(make_member):
    """An active member with an empty ledger."""
    return make_member(first_name='Grace', last_name='Hopper', email='grace@example.com')


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def admin_user(db):
    """Create and return an admin account."""
    return User.objects.create_user(username='admin', password='admin1234')


@pytest.fixture
def admin_client(admin_user):
    """Return API client authenticated as admin."""
    client = APIClient()
    refresh = RefreshToken.for_user(admin_user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def non_admin_client(db):
    """Authenticated account without admin rights."""
    user = User.objects.create_user(username='kiosk', password='kiosk1234', is_staff=False)
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client
