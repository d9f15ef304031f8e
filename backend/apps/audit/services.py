"""
Audit service - creates immutable activity log entries.

All audit entries are append-only. No updates or deletions.
"""

import json
import logging

from django.core.serializers.json import DjangoJSONEncoder

from apps.audit.context import get_current_actor, get_request_context, resolve_context
from apps.audit.models import AuditEntry
from apps.audit.profiles import get_profile

logger = logging.getLogger(__name__)

SYSTEM_ACTOR_NAME = "System"


def resolve_instance_label(instance, profile=None, pk=None):
    """First non-empty candidate label field, falling back to the primary key."""
    profile = profile or get_profile(instance)
    for attr in profile.label_fields:
        value = getattr(instance, attr, None)
        if value not in (None, ""):
            return str(value)
    return str(pk if pk is not None else instance.pk)


def _json_safe(values):
    if not values:
        return None
    return json.loads(json.dumps(values, cls=DjangoJSONEncoder))


def _actor_or_none(actor):
    if actor is None or not getattr(actor, "is_authenticated", False):
        return None
    return actor


def record_audit_entry(
    action,
    description,
    subject=None,
    module=None,
    old_values=None,
    new_values=None,
    actor=None,
    *,
    subject_id=None,
    context=None,
):
    """
    Create an activity log entry.

    Args:
        action: Verb ('created', 'updated', 'deleted', or a workflow action)
        description: Human-readable sentence
        subject: Affected model instance (optional)
        module: Grouping label; defaults to the subject's profile module
        old_values: Label -> value mapping before the change (optional)
        new_values: Label -> value mapping after the change (optional)
        actor: User who caused the change; defaults to the context actor,
            then to the authenticated user of the current request
        subject_id: Primary key override, for subjects already deleted
        context: AuditContext (optional)

    Returns:
        AuditEntry: Created entry
    """
    ctx = resolve_context(context)
    request_ctx = get_request_context()

    actor = _actor_or_none(actor or ctx.actor or get_current_actor())

    subject_type = None
    subject_label = None
    if subject is not None:
        profile = get_profile(subject)
        subject_type = subject._meta.label
        if subject_id is None:
            subject_id = subject.pk
        subject_label = resolve_instance_label(subject, profile, pk=subject_id)
        if module is None:
            module = profile.module_for(type(subject))

    entry = AuditEntry.objects.create(
        actor=actor,
        actor_name=(getattr(actor, "name", None) or str(actor)) if actor else SYSTEM_ACTOR_NAME,
        action=action,
        description=description[:500],
        subject_type=subject_type,
        subject_id=str(subject_id) if subject_id is not None else None,
        subject_label=subject_label[:255] if subject_label else None,
        module=module,
        old_values=_json_safe(old_values),
        new_values=_json_safe(new_values),
        ip_address=request_ctx.ip_address if request_ctx else None,
        user_agent=request_ctx.user_agent if request_ctx else None,
        request_id=request_ctx.request_id if request_ctx else None,
    )

    logger.info(
        "audit_entry_recorded",
        extra={
            "operation": action,
            "entity_id": entry.subject_id,
            "audit_module": module,
        },
    )

    return entry
