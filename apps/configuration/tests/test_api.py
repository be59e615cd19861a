from unittest.mock import patch

import pytest
from django.core import mail
from django.urls import reverse
from rest_framework import status
from apps.configuration.models import Setting


# =============================================================================
# Public Endpoints
# =============================================================================

@pytest.mark.django_db
class TestCoffeePrice:
    """Tests for GET /api/settings/coffee-price/"""

    def test_public(self, api_client):
        Setting.objects.create(key='coffee_price', value='0.70')

        response = api_client.get(reverse('configuration:coffee-price'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['coffee_price'] == '0.70'


# =============================================================================
# Admin Endpoints
# =============================================================================

@pytest.mark.django_db
class TestSettingsAdmin:
    """Tests for /api/settings/"""

    def test_requires_admin(self, api_client):
        response = api_client.get(reverse('configuration:settings-list'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_list(self, admin_client):
        response = admin_client.get(reverse('configuration:settings-list'))

        assert response.status_code == status.HTTP_200_OK
        assert 'coffee_price' in response.data

    def test_update_one(self, admin_client):
        url = reverse('configuration:setting-detail', args=['coffee_price'])
        response = admin_client.put(url, {'value': '0.65'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['value'] == '0.65'
        assert Setting.objects.get(key='coffee_price').value == '0.65'

    def test_update_invalid_price(self, admin_client):
        url = reverse('configuration:setting-detail', args=['coffee_price'])
        response = admin_client.put(url, {'value': '250'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert not Setting.objects.exists()

    def test_update_unknown_key(self, admin_client):
        url = reverse('configuration:setting-detail', args=['theme'])
        response = admin_client.put(url, {'value': 'dark'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_batch_update(self, admin_client):
        response = admin_client.put(
            reverse('configuration:settings-list'),
            {'coffee_price': '0.55', 'bank_owner': 'Coffee Club'},
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['coffee_price']['value'] == '0.55'
        assert response.data['bank_owner']['value'] == 'Coffee Club'

    def test_batch_rejected_as_a_whole(self, admin_client):
        response = admin_client.put(
            reverse('configuration:settings-list'),
            {'coffee_price': '0.55', 'admin_email': 'broken'},
            format='json',
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert not Setting.objects.exists()


@pytest.mark.django_db
class TestTestEmail:
    """Tests for POST /api/settings/test-email/"""

    def test_sends_to_admin_email(self, admin_client):
        Setting.objects.create(key='admin_email', value='boss@example.com')

        response = admin_client.post(reverse('configuration:test-email'), {}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['email'] == 'boss@example.com'
        assert len(mail.outbox) == 1
        assert mail.outbox[0].to == ['boss@example.com']

    def test_explicit_recipient(self, admin_client):
        response = admin_client.post(
            reverse('configuration:test-email'), {'email': 'ops@example.com'}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert mail.outbox[0].to == ['ops@example.com']

    def test_smtp_failure(self, admin_client):
        failure = {'success': False, 'error': 'Connection refused'}
        with patch('apps.configuration.views.send_test_email', return_value=failure):
            response = admin_client.post(
                reverse('configuration:test-email'), {'email': 'ops@example.com'}, format='json'
            )

        assert response.status_code == status.HTTP_502_BAD_GATEWAY
        assert 'Connection refused' in response.data['error']
