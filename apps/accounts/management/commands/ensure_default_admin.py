"""
Management command to bootstrap the first admin account.

Does nothing when any admin already exists, so it is safe to run on every deploy.

Usage:
    python manage.py ensure_default_admin --username admin --password secret
"""

from django.core.management.base import BaseCommand, CommandError

from apps.accounts.services import ensure_default_admin, AccountsServiceError


class Command(BaseCommand):
    help = 'Create the initial admin account if no admin exists yet'

    def add_arguments(self, parser):
        parser.add_argument('--username', default='admin')
        parser.add_argument('--password', default='admin')

    def handle(self, *args, **options):
        try:
            user = ensure_default_admin(
                username=options['username'],
                password=options['password'],
            )
        except AccountsServiceError as e:
            raise CommandError(str(e))

        if user is None:
            self.stdout.write(self.style.SUCCESS('Admin accounts already exist. Nothing to do.'))
            return

        self.stdout.write(
            self.style.WARNING(f"Created admin '{user.username}'. Change the password now.")
        )
