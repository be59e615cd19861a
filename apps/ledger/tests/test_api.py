import pytest
from decimal import Decimal
from unittest.mock import patch
from django.db import DatabaseError
from django.urls import reverse
from rest_framework import status
from apps.ledger.models import Member, MemberStatus, Payment, PaymentType


@pytest.fixture(autouse=True)
def quiet_notifier():
    """Keep the kiosk pay endpoint off the real email gateway."""
    with patch(
        'apps.ledger.services.settlement.EmailNotificationGateway.notify',
        return_value={'success': True, 'error': None},
    ) as notify:
        yield notify


# =============================================================================
# Kiosk endpoints
# =============================================================================

@pytest.mark.django_db
class TestMemberList:
    """Tests for GET/POST /api/members/"""

    def test_list_active_members(self, api_client, make_member):
        active = make_member()
        make_member(deleted=True)

        response = api_client.get(reverse('ledger:member-list'))

        assert response.status_code == status.HTTP_200_OK
        assert [m['id'] for m in response.data] == [active.id]

    def test_include_deleted_ignored_for_kiosk(self, api_client, make_member):
        make_member()
        make_member(deleted=True)

        response = api_client.get(reverse('ledger:member-list'), {'include_deleted': 'true'})

        assert len(response.data) == 1

    def test_include_deleted_for_admin(self, admin_client, make_member):
        make_member()
        make_member(deleted=True)

        response = admin_client.get(reverse('ledger:member-list'), {'include_deleted': 'true'})

        assert len(response.data) == 2

    def test_register(self, api_client):
        data = {'first_name': 'Grace', 'last_name': 'Hopper', 'email': 'Grace@Example.com'}

        response = api_client.post(reverse('ledger:member-list'), data, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['email'] == 'grace@example.com'
        assert response.data['current_tab'] == '0.00'
        assert Member.objects.filter(email='grace@example.com').exists()

    def test_register_duplicate(self, api_client, member):
        data = {'first_name': 'Grace', 'last_name': 'Hopper', 'email': member.email}

        response = api_client.post(reverse('ledger:member-list'), data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'error' in response.data

    def test_register_invalid(self, api_client, db):
        data = {'first_name': 'G', 'last_name': 'Hopper', 'email': 'nope'}

        response = api_client.post(reverse('ledger:member-list'), data, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_register_reactivates(self, api_client, make_member):
        old = make_member(email='back@example.com', deleted=True)
        data = {'first_name': 'Back', 'last_name': 'Again', 'email': 'back@example.com'}

        response = api_client.post(reverse('ledger:member-list'), data, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['reactivated'] is True
        assert response.data['id'] == old.id


@pytest.mark.django_db
class TestMemberDetail:
    """Tests for GET/DELETE /api/members/{id}/"""

    def test_get_member(self, api_client, member):
        response = api_client.get(reverse('ledger:member-detail', args=[member.id]))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['full_name'] == 'Grace Hopper'

    def test_get_unknown_member(self, api_client, db):
        response = api_client.get(reverse('ledger:member-detail', args=[999]))

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_leave(self, api_client, make_member):
        member = make_member(tab='1.00')

        response = api_client.delete(reverse('ledger:member-detail', args=[member.id]))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['payment_email_sent'] is True
        member.refresh_from_db()
        assert member.status == MemberStatus.DELETED
        assert member.pending_payment == Decimal('1.00')

    def test_leave_twice(self, api_client, make_member):
        member = make_member(deleted=True)

        response = api_client.delete(reverse('ledger:member-detail', args=[member.id]))

        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestTabEndpoints:
    """Tests for POST /api/members/{id}/increment|decrement/"""

    def test_increment(self, api_client, member, settings):
        settings.COFFEE_DEFAULT_PRICE = Decimal('0.50')

        response = api_client.post(reverse('ledger:member-increment', args=[member.id]))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['current_tab'] == '0.50'

    def test_decrement_never_negative(self, api_client, member):
        response = api_client.post(reverse('ledger:member-decrement', args=[member.id]))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['current_tab'] == '0.00'

    def test_increment_deleted_member(self, api_client, make_member):
        member = make_member(deleted=True)

        response = api_client.post(reverse('ledger:member-increment', args=[member.id]))

        assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.django_db
class TestPay:
    """Tests for POST /api/members/{id}/pay/"""

    def test_pay(self, api_client, make_member, quiet_notifier):
        member = make_member(tab='5.00', balance='3.00')

        response = api_client.post(reverse('ledger:member-pay', args=[member.id]))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['amount_to_pay'] == '2.00'
        assert response.data['credit_applied'] == '3.00'
        assert response.data['notification_sent'] is True
        assert response.data['payment']['amount'] == '2.00'
        assert response.data['member']['pending_payment'] == '2.00'
        assert response.data['message'] == 'Payment request sent (€2.00)'
        quiet_notifier.assert_called_once()

    def test_pay_email_failure_still_succeeds(self, api_client, make_member, quiet_notifier):
        quiet_notifier.return_value = {'success': False, 'error': 'timeout'}
        member = make_member(tab='5.00')

        response = api_client.post(reverse('ledger:member-pay', args=[member.id]))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['notification_sent'] is False
        assert response.data['notification_error'] == 'timeout'
        assert Payment.objects.filter(member=member, type=PaymentType.REQUEST).count() == 1

    def test_pay_from_credit(self, api_client, make_member):
        member = make_member(tab='2.00', balance='5.00')

        response = api_client.post(reverse('ledger:member-pay', args=[member.id]))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['payment'] is None
        assert response.data['message'] == 'Paid from credit (€2.00)'

    def test_pay_empty_tab(self, api_client, member):
        response = api_client.post(reverse('ledger:member-pay', args=[member.id]))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'No coffees to pay for'

    def test_pay_storage_failure(self, api_client, make_member):
        """Database errors surface as a generic 500."""
        member = make_member(tab='5.00')

        with patch.object(Payment.objects, 'create', side_effect=DatabaseError('database is locked')):
            response = api_client.post(reverse('ledger:member-pay', args=[member.id]))

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.data == {'error': 'Internal server error'}
        member.refresh_from_db()
        assert member.current_tab == Decimal('5.00')


# =============================================================================
# Admin endpoints
# =============================================================================

@pytest.mark.django_db
class TestAdminPermissions:
    """Admin endpoints reject anonymous and non-admin callers."""

    @pytest.mark.parametrize('name,method', [
        ('ledger:member-restore', 'post'),
        ('ledger:member-permanent-delete', 'delete'),
        ('ledger:member-tab', 'put'),
        ('ledger:member-confirm-payment', 'post'),
        ('ledger:member-balance', 'put'),
    ])
    def test_anonymous_rejected(self, api_client, member, name, method):
        response = getattr(api_client, method)(reverse(name, args=[member.id]), {}, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.parametrize('name', [
        'ledger:payment-list',
        'ledger:payment-summary',
        'ledger:export-csv',
        'ledger:export-json',
    ])
    def test_reports_require_admin(self, api_client, non_admin_client, name):
        assert api_client.get(reverse(name)).status_code == status.HTTP_401_UNAUTHORIZED
        assert non_admin_client.get(reverse(name)).status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestConfirmPaymentEndpoint:
    """Tests for POST /api/members/{id}/confirm-payment/"""

    def test_confirm(self, admin_client, make_member):
        member = make_member(pending='5.00', balance='-5.00')
        url = reverse('ledger:member-confirm-payment', args=[member.id])

        response = admin_client.post(url, {'amount': 10, 'notes': 'cash'}, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['credit_created'] == '5.00'
        assert response.data['member']['account_balance'] == '5.00'
        assert response.data['message'] == 'Payment confirmed. Credit: €5.00'

    def test_confirm_invalid_amount(self, admin_client, member):
        url = reverse('ledger:member-confirm-payment', args=[member.id])

        response = admin_client.post(url, {'amount': -1}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert not Payment.objects.exists()

    def test_confirm_huge_amount(self, admin_client, member):
        url = reverse('ledger:member-confirm-payment', args=[member.id])

        response = admin_client.post(url, {'amount': '1e30'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert not Payment.objects.exists()

    def test_confirm_idempotency_header(self, admin_client, make_member):
        member = make_member(pending='5.00', balance='-5.00')
        url = reverse('ledger:member-confirm-payment', args=[member.id])

        first = admin_client.post(url, {'amount': '5.00'}, format='json', HTTP_IDEMPOTENCY_KEY='tx-42')
        second = admin_client.post(url, {'amount': '5.00'}, format='json', HTTP_IDEMPOTENCY_KEY='tx-42')

        assert first.status_code == status.HTTP_201_CREATED
        assert second.status_code == status.HTTP_200_OK
        assert second.data['replayed'] is True
        member.refresh_from_db()
        assert member.account_balance == Decimal('0.00')

    def test_confirm_unknown_member(self, admin_client, db):
        url = reverse('ledger:member-confirm-payment', args=[999])

        response = admin_client.post(url, {'amount': 1}, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.django_db
class TestAdminMemberManagement:

    def test_set_tab(self, admin_client, member):
        response = admin_client.put(
            reverse('ledger:member-tab', args=[member.id]), {'amount': '3.20'}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['current_tab'] == '3.20'

    def test_adjust_balance(self, admin_client, member):
        response = admin_client.put(
            reverse('ledger:member-balance', args=[member.id]),
            {'amount': '-1.25', 'notes': 'refund'},
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['account_balance'] == '-1.25'

    @pytest.mark.parametrize('name,amount', [
        ('member-balance', '1e12'),
        ('member-tab', '1e9'),
    ])
    def test_unstorable_amount_rejected(self, admin_client, api_client, member, name, amount):
        """The ledger stays readable after an out-of-range admin correction."""
        response = admin_client.put(
            reverse(f'ledger:{name}', args=[member.id]), {'amount': amount}, format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert api_client.get(reverse('ledger:member-list')).status_code == status.HTTP_200_OK

    def test_restore(self, admin_client, make_member):
        member = make_member(deleted=True)

        response = admin_client.post(reverse('ledger:member-restore', args=[member.id]))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == MemberStatus.ACTIVE

    def test_restore_active(self, admin_client, member):
        response = admin_client.post(reverse('ledger:member-restore', args=[member.id]))

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_permanent_delete(self, admin_client, member):
        response = admin_client.delete(reverse('ledger:member-permanent-delete', args=[member.id]))

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {'id': member.id, 'status': 'purged'}
        assert not Member.objects.filter(id=member.id).exists()

        again = admin_client.get(reverse('ledger:member-detail', args=[member.id]))
        assert again.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.django_db
class TestReportingEndpoints:

    def test_payment_list_filters(self, admin_client, make_member):
        member = make_member(tab='2.00')
        admin_client.post(reverse('ledger:member-pay', args=[member.id]))
        admin_client.post(
            reverse('ledger:member-confirm-payment', args=[member.id]), {'amount': 2}, format='json'
        )

        response = admin_client.get(reverse('ledger:payment-list'), {'type': 'received'})

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 1
        assert response.data[0]['user_name'] == member.full_name

    def test_payment_list_bad_type(self, admin_client):
        response = admin_client.get(reverse('ledger:payment-list'), {'type': 'refund'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_summary(self, admin_client, make_member):
        make_member(tab='1.50', balance='2.00')

        response = admin_client.get(reverse('ledger:payment-summary'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['total_tab'] == '1.50'
        assert response.data['total_credit'] == '2.00'
        assert response.data['member_count'] == 1

    def test_export_csv(self, admin_client, member):
        response = admin_client.get(reverse('ledger:export-csv'))

        assert response.status_code == status.HTTP_200_OK
        assert response['Content-Type'].startswith('text/csv')
        assert 'attachment; filename="coffee-export-' in response['Content-Disposition']
        assert response.content.decode().startswith('USERS\n')

    def test_export_json(self, admin_client, member):
        response = admin_client.get(reverse('ledger:export-json'))

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body['users'][0]['email'] == member.email
        assert body['payments'] == []
