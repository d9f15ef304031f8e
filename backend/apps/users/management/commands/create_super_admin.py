"""
Create a Super Admin user.

Run: python manage.py create_super_admin
     python manage.py create_super_admin --name "Jane Doe" --email jane@example.com --no-input
"""

import getpass
import os

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.management.base import BaseCommand, CommandError
from django.core.validators import validate_email
from django.db import transaction

from apps.audit.context import AuditContext
from apps.audit.recorder import recorder
from apps.users.models import Permission, Role, User, UserStatus
from apps.users.roles import seed_default_roles

MIN_PASSWORD_LENGTH = 8
PASSWORD_ENV_VAR = "SUPER_ADMIN_PASSWORD"


class Command(BaseCommand):
    help = "Create a Super Admin user"

    def add_arguments(self, parser):
        parser.add_argument("--name", help="Full name")
        parser.add_argument("--email", help="Email address")
        parser.add_argument(
            "--no-input",
            action="store_true",
            dest="no_input",
            help=f"Do not prompt; the password is read from ${PASSWORD_ENV_VAR}",
        )

    def handle(self, *args, **options):
        no_input = options["no_input"]

        name = options["name"] or (None if no_input else input("Full Name: ").strip())
        email = options["email"] or (None if no_input else input("Email Address: ").strip())
        if not name:
            raise CommandError("Name is required")

        try:
            validate_email(email or "")
        except DjangoValidationError:
            raise CommandError(f"Invalid email address: {email!r}")

        email = User.objects.normalize_email(email)
        if User.objects.filter(email__iexact=email).exists():
            raise CommandError(f"A user with email {email} already exists")

        if no_input:
            password = os.environ.get(PASSWORD_ENV_VAR, "")
        else:
            password = getpass.getpass("Password (min 8 characters): ")
            if password != getpass.getpass("Confirm Password: "):
                raise CommandError("Passwords do not match")

        if len(password) < MIN_PASSWORD_LENGTH:
            raise CommandError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )

        with transaction.atomic():
            seed_default_roles(Role, Permission)
            user = User.objects.create_user(
                email=email,
                password=password,
                name=name,
                role=Role.objects.get(name=Role.SUPER_ADMIN),
                status=UserStatus.ACTIVE,
            )
            recorder.created(user, context=AuditContext())

        self.stdout.write(self.style.SUCCESS("Super Admin created successfully"))
        self.stdout.write(f"  Name: {user.name}")
        self.stdout.write(f"  Email: {user.email}")
        self.stdout.write(f"  Role: {Role.SUPER_ADMIN}")
