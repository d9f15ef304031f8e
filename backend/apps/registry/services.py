"""
Registry services - all mutations flow through this layer.

Rules:
- All mutations wrapped in transaction.atomic
- Use select_for_update for row-level locking
- Record an activity log entry for every mutation
- No direct model.save() from views
- Mutations require the manage_registry permission
"""

import logging

from django.db import transaction
from django.db.models import ProtectedError

from core.db import conflict_on_integrity_error
from core.exceptions import (
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from apps.audit.context import AuditContext
from apps.audit.recorder import recorder, snapshot
from apps.registry.models import (
    HEI,
    AcademicYear,
    DocumentRequirement,
    Program,
    Region,
    Semester,
)

logger = logging.getLogger(__name__)

REGISTRY_MODELS = {
    "regions": Region,
    "programs": Program,
    "heis": HEI,
    "semesters": Semester,
    "academic-years": AcademicYear,
    "document-requirements": DocumentRequirement,
}


def get_model(kind):
    try:
        return REGISTRY_MODELS[kind]
    except KeyError:
        raise NotFoundError(f"Unknown registry type '{kind}'")


def _get_registry_manager(actor_id):
    from apps.users.models import User

    try:
        actor = User.objects.select_related("role").get(id=actor_id)
    except User.DoesNotExist:
        raise NotFoundError(f"User {actor_id} does not exist")

    if not actor.has_permission("manage_registry"):
        raise PermissionDeniedError("Only registry managers can modify registry records")

    return actor


def _duplicate_message(model):
    return f"A {model._meta.verbose_name} with these identifiers already exists"


def get_record(model, record_id, lock=False):
    queryset = model.objects.select_for_update() if lock else model.objects
    try:
        return queryset.get(id=record_id)
    except (model.DoesNotExist, ValueError):
        raise NotFoundError(f"{model.__name__} {record_id} does not exist")


def create_record(actor_id, kind, attrs, context=None):
    """
    Create a registry record.

    Args:
        actor_id: UUID of the acting user
        kind: Registry type slug ('regions', 'heis', ...)
        attrs: Validated model attributes
        context: AuditContext (optional)

    Returns:
        Created model instance
    """
    model = get_model(kind)
    actor = _get_registry_manager(actor_id)
    context = (context or AuditContext()).for_actor(actor)

    with transaction.atomic():
        with conflict_on_integrity_error(_duplicate_message(model)):
            instance = model.objects.create(**attrs)
        recorder.created(instance, context=context)

    logger.info(
        "registry_record_created",
        extra={"operation": f"{kind}.create", "entity_id": str(instance.id)},
    )
    return instance


def update_record(actor_id, kind, record_id, attrs, context=None):
    """Apply attrs to an existing registry record."""
    model = get_model(kind)
    actor = _get_registry_manager(actor_id)
    context = (context or AuditContext()).for_actor(actor)

    if not attrs:
        raise ValidationError("No fields to update")

    with transaction.atomic():
        instance = get_record(model, record_id, lock=True)
        before = snapshot(instance)
        for name, value in attrs.items():
            setattr(instance, name, value)
        with conflict_on_integrity_error(_duplicate_message(model)):
            instance.save()
        recorder.updated(instance, before, context=context)

    logger.info(
        "registry_record_updated",
        extra={"operation": f"{kind}.update", "entity_id": str(instance.id)},
    )
    return instance


def delete_record(actor_id, kind, record_id, context=None):
    """Delete a registry record. Records still referenced are refused."""
    model = get_model(kind)
    actor = _get_registry_manager(actor_id)
    context = (context or AuditContext()).for_actor(actor)

    try:
        with transaction.atomic():
            instance = get_record(model, record_id, lock=True)
            recorder.delete(instance, context=context)
    except ProtectedError:
        raise InvalidStateError(
            f"{model.__name__} {record_id} is still referenced and cannot be deleted"
        )

    logger.info(
        "registry_record_deleted",
        extra={"operation": f"{kind}.delete", "entity_id": str(record_id)},
    )
