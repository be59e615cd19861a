import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def admin_user(db):
    """Create and return an admin account."""
    return User.objects.create_user(username='admin', password='admin1234')


@pytest.fixture
def second_admin(db):
    return User.objects.create_user(username='treasurer', password='coffee42')


@pytest.fixture
def authenticated_client(api_client, admin_user):
    """Return API client authenticated as admin."""
    refresh = RefreshToken.for_user(admin_user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client
