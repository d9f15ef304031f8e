"""
Activity log verification command.

Checks that the activity log honours its own rules.
Run: python manage.py verify_audit_trail
"""

from django.core.management.base import BaseCommand, CommandError

from apps.audit.models import AuditAction, AuditEntry
from apps.audit.profiles import default_field_label, registered_models
from apps.audit.recorder import SENSITIVE_FIELDS


class Command(BaseCommand):
    help = "Verify activity log invariants"

    def add_arguments(self, parser):
        parser.add_argument(
            "--sample",
            type=int,
            default=500,
            help="Records per audited model to check for a 'created' entry",
        )

    def handle(self, *args, **options):
        self.stdout.write("Verifying activity log...")

        errors = []
        warnings = []

        # Check 1: credentials never reach stored values
        self.stdout.write("\n[1] Checking for sensitive values...")
        sensitive_keys = set(SENSITIVE_FIELDS)
        sensitive_keys |= {default_field_label(name) for name in SENSITIVE_FIELDS}
        leaking = []
        entries = AuditEntry.objects.exclude(old_values__isnull=True, new_values__isnull=True)
        for entry in entries.only("id", "old_values", "new_values").iterator():
            keys = set(entry.old_values or {}) | set(entry.new_values or {})
            if keys & sensitive_keys:
                leaking.append(entry.id)
        if leaking:
            errors.append(f"Found {len(leaking)} entries storing sensitive values")
            for entry_id in leaking[:10]:
                self.stdout.write(self.style.ERROR(f"  Entry {entry_id}"))
        else:
            self.stdout.write(self.style.SUCCESS("  No sensitive values stored"))

        # Check 2: the log never audits itself
        self.stdout.write("\n[2] Checking for self-referencing entries...")
        self_entries = AuditEntry.objects.filter(subject_type=AuditEntry._meta.label)
        if self_entries.exists():
            errors.append(f"Found {self_entries.count()} entries about activity log entries")
        else:
            self.stdout.write(self.style.SUCCESS("  No self-referencing entries"))

        # Check 3: audited records carry a 'created' entry
        self.stdout.write("\n[3] Checking 'created' entries for audited records...")
        for model in registered_models():
            created_ids = set(
                AuditEntry.objects.filter(
                    subject_type=model._meta.label, action=AuditAction.CREATED
                ).values_list("subject_id", flat=True)
            )
            pks = model._default_manager.values_list("pk", flat=True)[: options["sample"]]
            missing = [pk for pk in pks if str(pk) not in created_ids]
            if missing:
                # Bulk imports and seeded rows are created with logging off
                warnings.append(
                    f"{model._meta.label}: {len(missing)} records without a 'created' entry"
                )
        if not warnings:
            self.stdout.write(self.style.SUCCESS("  All sampled records have a 'created' entry"))

        self.stdout.write("\n" + "=" * 50)
        for warning in warnings:
            self.stdout.write(self.style.WARNING(f"  ! {warning}"))

        if errors:
            for error in errors:
                self.stdout.write(self.style.ERROR(f"  x {error}"))
            raise CommandError(f"Activity log verification failed with {len(errors)} error(s)")

        self.stdout.write(self.style.SUCCESS("Activity log verified"))
