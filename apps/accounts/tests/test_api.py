import pytest
from django.urls import reverse
from rest_framework import status
from apps.accounts.models import User


# =============================================================================
# Login Tests
# =============================================================================

@pytest.mark.django_db
class TestLogin:
    """Tests for POST /api/auth/login/"""

    def test_login_success(self, api_client, admin_user):
        """Successful login returns JWT tokens."""
        url = reverse('accounts:login')
        response = api_client.post(url, {'username': 'admin', 'password': 'admin1234'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['user']['username'] == 'admin'
        assert 'access' in response.data['tokens']
        assert 'refresh' in response.data['tokens']

    def test_login_wrong_password(self, api_client, admin_user):
        url = reverse('accounts:login')
        response = api_client.post(url, {'username': 'admin', 'password': 'nope'})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_inactive(self, api_client, admin_user):
        admin_user.is_active = False
        admin_user.save()

        url = reverse('accounts:login')
        response = api_client.post(url, {'username': 'admin', 'password': 'admin1234'})

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_login_missing_fields(self, api_client, db):
        response = api_client.post(reverse('accounts:login'), {'username': 'admin'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_token_grants_access(self, api_client, admin_user):
        """The access token authenticates subsequent requests."""
        login = api_client.post(
            reverse('accounts:login'), {'username': 'admin', 'password': 'admin1234'}
        )
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {login.data['tokens']['access']}")

        response = api_client.get(reverse('accounts:current-user'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['username'] == 'admin'


# =============================================================================
# Admin Account Tests
# =============================================================================

@pytest.mark.django_db
class TestAdminAccounts:
    """Tests for /api/auth/admins/"""

    def test_requires_authentication(self, api_client, db):
        response = api_client.get(reverse('accounts:admin-list'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_list_admins(self, authenticated_client, second_admin):
        response = authenticated_client.get(reverse('accounts:admin-list'))

        assert response.status_code == status.HTTP_200_OK
        assert [a['username'] for a in response.data] == ['admin', 'treasurer']
        assert 'password' not in response.data[0]

    def test_create_admin(self, authenticated_client):
        response = authenticated_client.post(
            reverse('accounts:admin-list'), {'username': 'Barista', 'password': 'beans'}
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['username'] == 'barista'

    def test_create_admin_too_short(self, authenticated_client):
        response = authenticated_client.post(
            reverse('accounts:admin-list'), {'username': 'barista', 'password': 'abc'}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_create_duplicate(self, authenticated_client):
        response = authenticated_client.post(
            reverse('accounts:admin-list'), {'username': 'ADMIN', 'password': 'whatever'}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_change_password(self, authenticated_client, second_admin):
        url = reverse('accounts:admin-password', args=[second_admin.id])
        response = authenticated_client.put(url, {'password': 'fresh-pass'})

        assert response.status_code == status.HTTP_200_OK
        second_admin.refresh_from_db()
        assert second_admin.check_password('fresh-pass')

    def test_change_password_unknown(self, authenticated_client):
        url = reverse('accounts:admin-password', args=[999])
        response = authenticated_client.put(url, {'password': 'fresh-pass'})

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_delete_admin(self, authenticated_client, second_admin):
        url = reverse('accounts:admin-delete', args=[second_admin.id])
        response = authenticated_client.delete(url)

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not User.objects.filter(id=second_admin.id).exists()

    def test_cannot_delete_last_admin(self, authenticated_client, admin_user):
        url = reverse('accounts:admin-delete', args=[admin_user.id])
        response = authenticated_client.delete(url)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert User.objects.filter(id=admin_user.id).exists()
