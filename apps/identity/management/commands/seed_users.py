from django.core.management.base import BaseCommand

from apps.identity.models import User, UserRole

DEMO_PASSWORD = 'password'

DEMO_USERS = (
    ('admin', UserRole.ADMIN, 'Ada', 'Admin'),
    ('coach', UserRole.COACH, 'Carla', 'Coach'),
    ('mentee', UserRole.MENTEE, 'Mia', 'Mentee'),
)


class Command(BaseCommand):
    help = "Create (or refresh) one demo account per role, password 'password'"

    def handle(self, *args, **options):
        for username, role, first_name, last_name in DEMO_USERS:
            is_admin = role == UserRole.ADMIN
            user, created = User.objects.update_or_create(
                username=username,
                defaults={
                    'email': f'{username}@example.com',
                    'first_name': first_name,
                    'last_name': last_name,
                    'role': role,
                    'is_staff': is_admin,
                    'is_superuser': is_admin,
                },
            )
            if created:
                user.set_password(DEMO_PASSWORD)
                user.save(update_fields=['password'])
            verb = 'Created' if created else 'Refreshed'
            self.stdout.write(self.style.SUCCESS(f'{verb} {role.lower()} account "{username}"'))
