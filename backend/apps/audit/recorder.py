"""
Activity recorder - turns record lifecycle events into activity log entries.

Services call the recorder explicitly after each successful mutation, inside
the same transaction.atomic block, so a rolled-back mutation never leaves an
entry behind and a failed audit insert aborts the mutation.

    before = snapshot(hei)
    hei.name = "New name"
    hei.save()
    recorder.updated(hei, before, context=ctx)
"""

from django.db import transaction

from apps.audit.context import resolve_context
from apps.audit.models import AuditAction, AuditEntry
from apps.audit.profiles import get_profile
from apps.audit.services import record_audit_entry, resolve_instance_label

# Never part of a diff: bookkeeping timestamp and credentials.
EXCLUDED_FIELDS = frozenset({"updated_at"})
SENSITIVE_FIELDS = frozenset(
    {
        "password",
        "two_factor_secret",
        "two_factor_recovery_codes",
        "remember_token",
    }
)


def snapshot(instance):
    """Column values of instance keyed by attname (FKs as raw ids)."""
    return {
        field.attname: field.value_from_object(instance)
        for field in instance._meta.concrete_fields
    }


def detect_changes(before, after):
    """
    Raw (old, new) maps for fields whose value differs, minus the
    bookkeeping timestamp.
    """
    new = {}
    for name, value in after.items():
        if name in EXCLUDED_FIELDS:
            continue
        if name in before and before[name] == value:
            continue
        new[name] = value
    old = {name: before.get(name) for name in new}
    return old, new


def strip_sensitive(values):
    return {name: value for name, value in values.items() if name not in SENSITIVE_FIELDS}


def _display(resolver, value):
    if not value:
        return value
    resolved = resolver(value)
    return value if resolved is None else resolved


def transform_values(instance, old, new, profile=None):
    """
    Relabel a raw diff for display: drop hidden fields, rename columns to
    their configured labels, and show foreign keys through the related
    record. Keys present only in `old` are kept with a None new value.
    """
    profile = profile or get_profile(instance)
    hidden = set(profile.hidden_fields)

    fields = [name for name in new if name not in hidden]
    fields += [name for name in old if name not in new and name not in hidden]

    transformed_old = {}
    transformed_new = {}
    for name in fields:
        old_value = old.get(name)
        new_value = new.get(name)

        resolver = profile.foreign_keys.get(name)
        if resolver is not None:
            old_value = _display(resolver, old_value)
            new_value = _display(resolver, new_value)

        label = profile.label_for_field(name)
        transformed_old[label] = old_value
        transformed_new[label] = new_value

    return transformed_old, transformed_new


def describe(action, instance, profile=None, pk=None):
    profile = profile or get_profile(instance)
    return "{} {} {}".format(
        action.capitalize(),
        profile.model_label_for(type(instance)),
        resolve_instance_label(instance, profile, pk=pk),
    )


class AuditRecorder:
    """Change detector for created / updated / deleted events."""

    def is_suppressed(self, instance, context):
        if isinstance(instance, AuditEntry):
            return True
        return not context.enabled

    def created(self, instance, context=None):
        ctx = resolve_context(context)
        if self.is_suppressed(instance, ctx):
            return None

        return record_audit_entry(
            action=AuditAction.CREATED,
            description=describe(AuditAction.CREATED, instance),
            subject=instance,
            context=ctx,
        )

    def updated(self, instance, before, context=None):
        """
        Record an update given the snapshot taken before the mutation.

        Returns None when nothing but the bookkeeping timestamp changed.
        Sensitive and hidden fields still count as a change but never
        appear in the stored values.
        """
        ctx = resolve_context(context)
        if self.is_suppressed(instance, ctx):
            return None

        old, new = detect_changes(before, snapshot(instance))
        if not new:
            return None

        profile = get_profile(instance)
        old_values, new_values = transform_values(
            instance, strip_sensitive(old), strip_sensitive(new), profile
        )

        return record_audit_entry(
            action=AuditAction.UPDATED,
            description=describe(AuditAction.UPDATED, instance, profile),
            subject=instance,
            old_values=old_values or None,
            new_values=new_values or None,
            context=ctx,
        )

    def deleted(self, instance, context=None, subject_id=None):
        """
        Record a deletion. Django clears instance.pk on delete(), so callers
        pass the primary key captured beforehand.
        """
        ctx = resolve_context(context)
        if self.is_suppressed(instance, ctx):
            return None

        pk = subject_id if subject_id is not None else instance.pk
        return record_audit_entry(
            action=AuditAction.DELETED,
            description=describe(AuditAction.DELETED, instance, pk=pk),
            subject=instance,
            subject_id=pk,
            context=ctx,
        )

    def delete(self, instance, context=None):
        """Delete instance and record the deletion in one transaction."""
        pk = instance.pk
        with transaction.atomic():
            instance.delete()
            return self.deleted(instance, context=context, subject_id=pk)


recorder = AuditRecorder()
