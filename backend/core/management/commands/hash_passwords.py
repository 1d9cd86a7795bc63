"""
Management command to give accounts without a usable password a default one
Usage: python manage.py hash_passwords --password secret123 [--email a@aal.rw ...] [--dry-run]
"""
from django.core.management.base import BaseCommand, CommandError
from backend.core.models import User


class Command(BaseCommand):
    help = "Sets a hashed default password on users that have no usable password"

    def add_arguments(self, parser):
        parser.add_argument('--password', required=True, help='Default password to hash and store')
        parser.add_argument(
            '--email',
            action='append',
            default=[],
            help='Only update this email (repeatable)',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='List the users that would be updated without saving',
        )

    def handle(self, *args, **options):
        password = options['password']
        if len(password) < 6:
            raise CommandError('Password must be at least 6 characters')

        users = User.objects.all().order_by('email')
        emails = [email.strip().lower() for email in options['email']]
        if emails:
            users = users.filter(email__in=emails)

        updated = 0
        for user in users:
            if user.has_usable_password():
                self.stdout.write(f'  Skipping {user.email}: already has a password')
                continue
            if options['dry_run']:
                self.stdout.write(f'  Would update {user.email}')
                continue
            user.set_password(password)
            user.save(update_fields=['password'])
            updated += 1
            self.stdout.write(self.style.SUCCESS(f'✓ Updated password for {user.email}'))

        self.stdout.write(self.style.SUCCESS(f'Done: {updated} user(s) updated'))
