from django.core.management.base import BaseCommand, CommandError

from auction.models import User


class Command(BaseCommand):
    help = "Create the auction admin account, or reset its password if it exists"

    def add_arguments(self, parser):
        parser.add_argument('username')
        parser.add_argument('password')
        parser.add_argument('--role', default=User.ADMIN, choices=[r for r, _ in User.ROLES])

    def handle(self, *args, **options):
        if len(options['password']) < 4:
            raise CommandError('Password must be at least 4 characters')

        user, created = User.objects.get_or_create(
            username=options['username'],
            defaults={'role': options['role']},
        )
        user.role = options['role']
        if user.role == User.ADMIN:
            user.is_staff = True
            user.is_superuser = True
        user.set_password(options['password'])
        user.save()

        verb = 'Created' if created else 'Updated'
        self.stdout.write(self.style.SUCCESS(f'{verb} {user.role} account "{user.username}"'))
