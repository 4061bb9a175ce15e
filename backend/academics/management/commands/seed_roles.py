import os

from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.core.management.base import BaseCommand

from academics.permissions import ADMIN, LECTURER, ROLES, STUDENT


class Command(BaseCommand):
    help = "Ensure the Admin / Lecturer / Student groups exist and (optionally) create a user for each via env vars or CLI args."

    def add_arguments(self, parser):
        parser.add_argument("--admin-username", default=os.getenv("ADMIN_USER"))
        parser.add_argument("--admin-password", default=os.getenv("ADMIN_PASSWORD"))
        parser.add_argument("--lecturer-username", default=os.getenv("LECTURER_USER"))
        parser.add_argument("--lecturer-password", default=os.getenv("LECTURER_PASSWORD"))
        parser.add_argument("--student-username", default=os.getenv("STUDENT_USER"))
        parser.add_argument("--student-password", default=os.getenv("STUDENT_PASSWORD"))
        parser.add_argument("--no-users", action="store_true", help="Only create groups; skip user creation.")

    def handle(self, *args, **options):
        created_groups = [name for name in ROLES if Group.objects.get_or_create(name=name)[1]]
        if created_groups:
            self.stdout.write(self.style.SUCCESS(f"Created groups: {', '.join(created_groups)}"))
        else:
            self.stdout.write("Groups already present.")

        if options["no_users"]:
            return

        self._upsert_user(options["admin_username"], options["admin_password"], ADMIN, is_staff=True, is_super=True)
        self._upsert_user(options["lecturer_username"], options["lecturer_password"], LECTURER)
        self._upsert_user(options["student_username"], options["student_password"], STUDENT)

        self.stdout.write(self.style.SUCCESS("Role seeding complete."))

    def _upsert_user(self, username, password, group_name, is_staff=False, is_super=False):
        if not username or not password:
            return
        User = get_user_model()
        user = User.objects.filter(username=username).first()
        if user:
            user.is_active = True
            user.is_staff = is_staff
            user.is_superuser = is_super
            # always reset password when one is given explicitly
            user.set_password(password)
            user.save()
            self.stdout.write(self.style.WARNING(f"Updated user '{username}'."))
        else:
            user = User.objects.create_user(
                username=username, password=password,
                is_staff=is_staff, is_superuser=is_super,
            )
            self.stdout.write(self.style.SUCCESS(f"Created user '{username}'."))
        user.groups.add(Group.objects.get(name=group_name))
