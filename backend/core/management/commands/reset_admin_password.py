"""
Reset (or create) the administrator account's password.
"""
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

User = get_user_model()


class Command(BaseCommand):
    help = 'Reset the password of an administrator, creating the account if needed'

    def add_arguments(self, parser):
        parser.add_argument('--email', default='admin@evotech.ma', help='Administrator email')
        parser.add_argument('--password', required=True, help='New password')
        parser.add_argument(
            '--create',
            action='store_true',
            help='Create the administrator when no user has this email',
        )

    def handle(self, *args, **options):
        email = options['email'].strip().lower()
        password = options['password']
        if len(password) < 6:
            raise CommandError('Password must be at least 6 characters')

        user = User.objects.filter(email__iexact=email).first()
        if user is None:
            if not options['create']:
                raise CommandError(f'User with email {email} not found (use --create)')
            user = User.objects.create_user(
                username=email,
                email=email,
                password=password,
                name='Administrator',
                role='admin',
                is_staff=True,
                is_superuser=True,
            )
            self.stdout.write(self.style.SUCCESS(f'Administrator {email} created'))
            return

        user.set_password(password)
        user.status = 'active'
        user.save()
        self.stdout.write(self.style.SUCCESS(f'Password for {user.name} ({user.email}) has been reset'))
