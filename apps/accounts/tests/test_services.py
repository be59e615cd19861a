import pytest
from io import StringIO
from django.core.management import call_command
from apps.accounts.models import User
from apps.accounts.services import (
    authenticate_admin,
    create_admin,
    change_admin_password,
    delete_admin,
    ensure_default_admin,
    InvalidCredentialsError,
    InactiveAccountError,
    AdminNotFoundError,
    DuplicateUsernameError,
    InvalidAdminDataError,
    LastAdminError,
)


@pytest.mark.django_db
class TestAuthentication:

    def test_authenticate_case_insensitive(self, admin_user):
        user = authenticate_admin(username='ADMIN', password='admin1234')

        assert user == admin_user
        assert user.last_login is not None

    def test_wrong_password(self, admin_user):
        with pytest.raises(InvalidCredentialsError):
            authenticate_admin(username='admin', password='wrong')

    def test_unknown_user(self, db):
        with pytest.raises(InvalidCredentialsError):
            authenticate_admin(username='ghost', password='whatever')

    def test_inactive_account(self, admin_user):
        admin_user.is_active = False
        admin_user.save()

        with pytest.raises(InactiveAccountError):
            authenticate_admin(username='admin', password='admin1234')


@pytest.mark.django_db
class TestAdminManagement:

    def test_create_admin_lowercases_username(self, db):
        user = create_admin(username='  Barista ', password='beans')

        assert user.username == 'barista'
        assert user.is_staff is True
        assert user.check_password('beans')

    @pytest.mark.parametrize('username,password', [
        ('ab', 'longenough'),
        ('barista', 'abc'),
        ('', 'longenough'),
    ])
    def test_create_admin_validation(self, db, username, password):
        with pytest.raises(InvalidAdminDataError):
            create_admin(username=username, password=password)

    def test_create_admin_duplicate(self, admin_user):
        with pytest.raises(DuplicateUsernameError):
            create_admin(username='Admin', password='another')

    def test_change_password(self, admin_user):
        change_admin_password(admin_id=admin_user.id, new_password='n3wpass')

        admin_user.refresh_from_db()
        assert admin_user.check_password('n3wpass')

    def test_change_password_unknown(self, db):
        with pytest.raises(AdminNotFoundError):
            change_admin_password(admin_id=999, new_password='n3wpass')

    def test_delete_admin(self, admin_user, second_admin):
        delete_admin(admin_id=second_admin.id)

        assert not User.objects.filter(id=second_admin.id).exists()

    def test_cannot_delete_last_admin(self, admin_user):
        with pytest.raises(LastAdminError):
            delete_admin(admin_id=admin_user.id)

        assert User.objects.filter(id=admin_user.id).exists()

    def test_delete_unknown_admin(self, admin_user, second_admin):
        with pytest.raises(AdminNotFoundError):
            delete_admin(admin_id=999)


@pytest.mark.django_db
class TestDefaultAdmin:

    def test_creates_on_empty_install(self, db):
        user = ensure_default_admin()

        assert user.username == 'admin'
        assert user.check_password('admin')

    def test_noop_when_admin_exists(self, admin_user):
        assert ensure_default_admin(username='other', password='other') is None
        assert User.objects.count() == 1

    def test_management_command(self, db):
        out = StringIO()

        call_command('ensure_default_admin', '--username', 'boss', '--password', 'secret', stdout=out)
        call_command('ensure_default_admin', stdout=out)

        assert list(User.objects.values_list('username', flat=True)) == ['boss']
        assert 'Nothing to do' in out.getvalue()
