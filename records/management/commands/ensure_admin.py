from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from records.models import Person, Role, User


class Command(BaseCommand):
    help = "Ensure an active admin account exists with the given password (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument('--email', required=True)
        parser.add_argument('--password', required=True)
        parser.add_argument('--dni', required=True)
        parser.add_argument('--first-name', default='System')
        parser.add_argument('--last-name', default='Administrator')

    @transaction.atomic
    def handle(self, *args, **opts):
        role, _ = Role.objects.get_or_create(name=Role.ADMIN)
        person, _ = Person.objects.get_or_create(
            dni=opts['dni'],
            defaults={'first_name': opts['first_name'], 'last_name': opts['last_name']},
        )
        user = User.objects.filter(email=opts['email'].lower()).first()
        if user is None:
            if User.objects.filter(person=person).exists():
                raise CommandError(f"person {person.dni} is already linked to another account")
            User.objects.create_user(email=opts['email'].lower(), password=opts['password'],
                                     person=person, role=role, is_verified=True)
            self.stdout.write(self.style.SUCCESS(f"created admin {opts['email']}"))
            return
        # force password, role and active flag back to a usable admin
        user.set_password(opts['password'])
        user.role = role
        user.is_active = True
        user.save(update_fields=['password', 'role', 'is_active', 'updated_at'])
        self.stdout.write(self.style.SUCCESS(f"updated admin {opts['email']}"))
