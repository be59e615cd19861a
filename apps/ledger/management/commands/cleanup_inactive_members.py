"""
Management command to soft-delete members with no activity for a long time.

Open tabs are billed (payment request email) before the member is removed.
Meant to run from cron, e.g. daily.

Usage:
    python manage.py cleanup_inactive_members
    python manage.py cleanup_inactive_members --days 180 --dry-run
"""

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from apps.ledger.services import cleanup_inactive_members, get_inactive_members


class Command(BaseCommand):
    help = 'Soft-delete members inactive for more than --days days'

    def add_arguments(self, parser):
        parser.add_argument(
            '--days',
            type=int,
            default=settings.COFFEE_INACTIVITY_DAYS,
            help='Inactivity threshold in days (default: COFFEE_INACTIVITY_DAYS)',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show who would be removed without making changes',
        )

    def handle(self, *args, **options):
        days = options['days']
        if days < 1:
            raise CommandError('--days must be at least 1')

        inactive = list(get_inactive_members(days))
        if not inactive:
            self.stdout.write(
                self.style.SUCCESS(f'No members inactive for more than {days} days.')
            )
            return

        self.stdout.write(f'\nFound {len(inactive)} inactive member(s):\n')
        for member in inactive:
            self.stdout.write(
                f'  - {member.full_name} <{member.email}> | tab {member.current_tab} € | '
                f'pending {member.pending_payment} € | last activity {member.updated_at:%Y-%m-%d}'
            )

        if options['dry_run']:
            self.stdout.write(
                self.style.WARNING('\n--dry-run mode: No changes made.')
            )
            return

        result = cleanup_inactive_members(days)

        self.stdout.write(
            self.style.SUCCESS(f"\nSoft-deleted {result['deleted_count']} member(s).")
        )
        if result['failed']:
            self.stdout.write(
                self.style.ERROR(f"Failed for member id(s): {', '.join(map(str, result['failed']))}")
            )
