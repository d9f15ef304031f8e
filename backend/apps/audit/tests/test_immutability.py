from unittest import mock

from django.test import TestCase
from django.utils import timezone

from apps.audit.models import AuditEntry


class AuditEntryImmutabilityTests(TestCase):
    def setUp(self):
        self.entry = AuditEntry.objects.create(
            action="created",
            description="Created region Region I",
            subject_type="registry.Region",
            subject_id="1",
            request_id="test-request-id",
        )

    def test_save_of_persisted_entry_is_blocked(self):
        self.entry.description = "MODIFIED"
        with self.assertRaises(ValueError):
            self.entry.save()

    def test_instance_delete_is_blocked(self):
        with self.assertRaises(ValueError):
            self.entry.delete()

    def test_bulk_update_is_blocked(self):
        with self.assertRaises(ValueError):
            AuditEntry.objects.filter(pk=self.entry.pk).update(action="MODIFIED")

    def test_bulk_delete_is_blocked(self):
        with self.assertRaises(ValueError):
            AuditEntry.objects.filter(pk=self.entry.pk).delete()

    def test_missing_optional_fields_stored_as_null(self):
        entry = AuditEntry.objects.get(pk=self.entry.pk)
        self.assertIsNone(entry.actor_id)
        self.assertEqual(entry.actor_name, "System")
        self.assertIsNone(entry.old_values)
        self.assertIsNone(entry.ip_address)


class AuditEntryOrderingTests(TestCase):
    def test_newest_first_breaks_timestamp_ties_by_id(self):
        instant = timezone.now()
        with mock.patch("django.utils.timezone.now", return_value=instant):
            entries = [
                AuditEntry.objects.create(action="created", description=f"Entry {n}")
                for n in range(4)
            ]
        self.assertEqual({entry.created_at for entry in entries}, {instant})

        expected = sorted((entry.id for entry in entries), reverse=True)
        self.assertEqual(list(AuditEntry.objects.newest_first().values_list("id", flat=True)), expected)
        self.assertEqual(list(AuditEntry.objects.values_list("id", flat=True)), expected)
