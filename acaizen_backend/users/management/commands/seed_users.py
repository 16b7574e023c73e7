# users/management/commands/seed_users.py

from __future__ import annotations

from dataclasses import dataclass

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from permissions.roles import ROLE_ADMIN, ROLE_CASHIER, ROLE_MANAGER


@dataclass(frozen=True)
class SeedUserSpec:
    label: str
    role: str
    email: str
    first_name: str = ""
    last_name: str = ""


SEED_USERS = [
    SeedUserSpec("Admin", ROLE_ADMIN, "admin@example.com", "System", "Admin"),
    SeedUserSpec("Manager", ROLE_MANAGER, "manager@example.com", "Loja", "Gerente"),
    SeedUserSpec("Cashier", ROLE_CASHIER, "cashier@example.com", "Caixa", "Frente"),
]


class Command(BaseCommand):
    help = "Seed staff users (admin, manager, cashier)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--password",
            type=str,
            default="Pass1234!",
            help="Password for seeded users (default: Pass1234!)",
        )
        parser.add_argument(
            "--force-password",
            action="store_true",
            help="Reset password for existing seeded users too.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        password = options.get("password") or ""
        force_password = bool(options.get("force_password"))

        if len(password) < 6:
            raise CommandError("--password must be at least 6 characters.")

        User = get_user_model()

        created_count = 0
        updated_count = 0

        for seed in SEED_USERS:
            is_admin = seed.role == ROLE_ADMIN

            user, created = User.objects.get_or_create(
                email=seed.email,
                defaults={
                    "role": seed.role,
                    "first_name": seed.first_name,
                    "last_name": seed.last_name,
                    "is_staff": True,
                    "is_superuser": is_admin,
                    "is_active": True,
                },
            )

            dirty = created
            if user.role != seed.role:
                user.role = seed.role
                dirty = True
            if not user.is_active:
                user.is_active = True
                dirty = True
            if user.is_superuser != is_admin:
                user.is_superuser = is_admin
                dirty = True

            if created or force_password:
                user.set_password(password)
                dirty = True

            if dirty:
                user.save()

            if created:
                created_count += 1
                self.stdout.write(self.style.SUCCESS(f"✔ Created {seed.label}: {seed.email}"))
            elif dirty:
                updated_count += 1
                self.stdout.write(f"• Updated {seed.label}: {seed.email}")

        self.stdout.write(
            self.style.SUCCESS(f"Done. created={created_count} updated={updated_count}")
        )
