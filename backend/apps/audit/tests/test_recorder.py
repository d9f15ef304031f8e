"""
Change detection, value transformation and log writing.
"""

import uuid
from types import SimpleNamespace
from unittest import mock

from django.db import DatabaseError
from django.test import TestCase

from apps.audit.context import (
    AuditContext,
    clear_request_context,
    set_current_actor,
    set_request_context,
)
from apps.audit.models import AuditEntry
from apps.audit.profiles import AuditProfile, default_field_label, default_model_label
from apps.audit.recorder import recorder, snapshot, transform_values
from apps.audit.services import record_audit_entry, resolve_instance_label
from apps.registry import services as registry_services
from apps.registry.models import HEI, DocumentRequirement, Program, Region
from apps.users.models import Role, User


def _admin_user():
    return User.objects.create_user(
        email=f"admin_{uuid.uuid4().hex[:8]}@example.com",
        password="testpass123",
        name="Audit Admin",
        role=Role.objects.get(name=Role.ADMIN),
    )


class RecorderTests(TestCase):
    def setUp(self):
        self.region = Region.objects.create(code="R1", name="Region I")
        self.ctx = AuditContext()

    def _entries(self, instance):
        return AuditEntry.objects.for_subject(instance._meta.label, instance.pk)

    def test_create_writes_one_entry_with_instance_label(self):
        program = Program.objects.create(code="TES", name="Tertiary Education Subsidy")
        recorder.created(program, context=self.ctx)

        entries = self._entries(program)
        self.assertEqual(entries.count(), 1)
        entry = entries.get()
        self.assertEqual(entry.action, "created")
        self.assertIn("Tertiary Education Subsidy", entry.description)
        self.assertEqual(entry.description, "Created program Tertiary Education Subsidy")
        self.assertEqual(entry.module, "Programs")
        self.assertIsNone(entry.old_values)
        self.assertIsNone(entry.new_values)

    def test_update_touching_only_updated_at_writes_nothing(self):
        before = snapshot(self.region)
        self.region.save()

        self.assertIsNone(recorder.updated(self.region, before, context=self.ctx))
        self.assertEqual(self._entries(self.region).count(), 0)

    def test_update_records_only_changed_fields(self):
        before = snapshot(self.region)
        self.region.name = "Ilocos Region"
        self.region.save()

        entry = recorder.updated(self.region, before, context=self.ctx)
        self.assertEqual(entry.old_values, {"Name": "Region I"})
        self.assertEqual(entry.new_values, {"Name": "Ilocos Region"})
        self.assertEqual(entry.description, "Updated region Ilocos Region")

    def test_sensitive_field_never_stored(self):
        user = _admin_user()
        before = snapshot(user)
        user.set_password("another-pass-123")
        user.name = "Renamed Admin"
        user.save()

        entry = recorder.updated(user, before, context=self.ctx)
        stored = set(entry.old_values) | set(entry.new_values)
        self.assertNotIn("password", stored)
        self.assertNotIn("Password", stored)
        self.assertEqual(entry.new_values, {"Name": "Renamed Admin"})

    def test_sensitive_only_change_writes_entry_without_values(self):
        user = _admin_user()
        before = snapshot(user)
        user.set_password("another-pass-123")
        user.save()

        entry = recorder.updated(user, before, context=self.ctx)
        self.assertIsNotNone(entry)
        self.assertIsNone(entry.old_values)
        self.assertIsNone(entry.new_values)

    def test_disabled_context_writes_nothing(self):
        disabled = AuditContext(enabled=False)
        program = Program.objects.create(code="X", name="Program X")
        recorder.created(program, context=disabled)

        before = snapshot(program)
        program.name = "Program Y"
        program.save()
        recorder.updated(program, before, context=disabled)
        recorder.delete(program, context=disabled)

        self.assertEqual(AuditEntry.objects.count(), 0)

    def test_foreign_key_resolves_to_display_values(self):
        other = Region.objects.create(code="R2", name="Region II")
        hei = HEI.objects.create(uii="01001", name="Sample University", region=self.region)

        before = snapshot(hei)
        hei.region = other
        hei.save()

        entry = recorder.updated(hei, before, context=self.ctx)
        self.assertEqual(entry.old_values, {"Region": "Region I"})
        self.assertEqual(entry.new_values, {"Region": "Region II"})

    def test_unresolvable_foreign_key_keeps_raw_id(self):
        hei = HEI.objects.create(uii="01002", name="Another College", region=self.region)
        missing = uuid.uuid4()

        old, new = transform_values(hei, {"region_id": self.region.id}, {"region_id": missing})
        self.assertEqual(old, {"Region": "Region I"})
        self.assertEqual(new, {"Region": missing})

    def test_falsy_foreign_key_kept_as_is(self):
        hei = HEI.objects.create(uii="01003", name="Third College")
        old, new = transform_values(hei, {"region_id": None}, {"region_id": self.region.id})
        self.assertEqual(old, {"Region": None})
        self.assertEqual(new, {"Region": "Region I"})

    def test_keys_only_in_old_diff_are_kept(self):
        old, new = transform_values(
            self.region, {"name": "Region I", "code": "R1"}, {"name": "Region One"}
        )
        self.assertEqual(list(new), ["Name", "Code"])
        self.assertEqual(old["Code"], "R1")
        self.assertIsNone(new["Code"])

    def test_hidden_fields_dropped(self):
        program = Program.objects.create(code="P", name="Program")
        requirement = DocumentRequirement.objects.create(
            program=program, code="DOC", name="Billing", reference_image_path="a.png"
        )
        before = snapshot(requirement)
        requirement.reference_image_path = "b.png"
        requirement.name = "Billing Statement"
        requirement.save()

        entry = recorder.updated(requirement, before, context=self.ctx)
        self.assertEqual(entry.new_values, {"Name": "Billing Statement"})

    def test_delete_writes_entry_without_values(self):
        program = Program.objects.create(code="DEL", name="Doomed Program")
        pk = program.pk
        recorder.delete(program, context=self.ctx)

        entry = AuditEntry.objects.for_subject("registry.Program", pk).get()
        self.assertEqual(entry.action, "deleted")
        self.assertEqual(entry.description, "Deleted program Doomed Program")
        self.assertIsNone(entry.old_values)
        self.assertIsNone(entry.new_values)
        self.assertFalse(Program.objects.filter(pk=pk).exists())

    def test_audit_entry_is_never_audited(self):
        entry = AuditEntry.objects.create(action="x", description="x")
        self.assertIsNone(recorder.created(entry, context=self.ctx))
        self.assertEqual(AuditEntry.objects.count(), 1)

    def test_failed_audit_insert_rolls_back_mutation(self):
        admin = _admin_user()
        with mock.patch(
            "apps.audit.recorder.record_audit_entry", side_effect=DatabaseError("boom")
        ):
            with self.assertRaises(DatabaseError):
                registry_services.create_record(
                    admin.id, "programs", {"code": "RB", "name": "Rolled Back"}
                )
        self.assertFalse(Program.objects.filter(code="RB").exists())


class LabelTests(TestCase):
    def test_control_no_outranks_name(self):
        subject = SimpleNamespace(pk=1, control_no="LQ-2024-001", name="Some Name")
        self.assertEqual(resolve_instance_label(subject, AuditProfile()), "LQ-2024-001")

    def test_label_falls_back_to_pk(self):
        subject = SimpleNamespace(pk=42, name="")
        self.assertEqual(resolve_instance_label(subject, AuditProfile()), "42")

    def test_default_labels(self):
        self.assertEqual(default_model_label(DocumentRequirement), "document requirement")
        self.assertEqual(default_field_label("hei_id"), "Hei")
        self.assertEqual(default_field_label("date_submitted"), "Date Submitted")


class WriterTests(TestCase):
    def tearDown(self):
        clear_request_context()

    def test_actor_defaults_to_system(self):
        entry = record_audit_entry(action="created", description="Seeded")
        self.assertIsNone(entry.actor_id)
        self.assertEqual(entry.actor_name, "System")

    def test_actor_defaults_to_request_actor(self):
        admin = _admin_user()
        set_request_context(request_id="req-1", ip_address="10.0.0.1", user_agent="tests")
        set_current_actor(admin)

        entry = record_audit_entry(action="created", description="By request")
        self.assertEqual(entry.actor_id, admin.id)
        self.assertEqual(entry.actor_name, "Audit Admin")
        self.assertEqual(entry.request_id, "req-1")
        self.assertEqual(entry.ip_address, "10.0.0.1")

    def test_context_actor_wins_over_request_actor(self):
        request_actor = _admin_user()
        context_actor = _admin_user()
        set_current_actor(request_actor)

        entry = record_audit_entry(
            action="created",
            description="By context",
            context=AuditContext().for_actor(context_actor),
        )
        self.assertEqual(entry.actor_id, context_actor.id)

    def test_module_defaults_to_profile_then_class_name(self):
        region = Region.objects.create(code="R9", name="Region IX")
        entry = record_audit_entry(action="noted", description="Noted", subject=region)
        self.assertEqual(entry.module, "Regions")
        self.assertEqual(entry.subject_type, "registry.Region")
        self.assertEqual(entry.subject_label, "Region IX")

    def test_writer_emits_structured_log(self):
        with self.assertLogs("apps.audit.services", level="INFO") as logs:
            record_audit_entry(action="created", description="Logged", module="Regions")
        record = logs.records[0]
        self.assertEqual(record.getMessage(), "audit_entry_recorded")
        self.assertEqual(record.operation, "created")
        self.assertEqual(record.audit_module, "Regions")
