"""
Notification services - fan workflow actions out to the users they concern.

Notifications are written in the caller's transaction, so a rolled-back
workflow action leaves no notifications behind.
"""

import logging

from django.db import transaction
from django.utils import timezone

from core.exceptions import NotFoundError
from apps.audit.services import SYSTEM_ACTOR_NAME, resolve_instance_label
from apps.notifications.models import Notification

logger = logging.getLogger(__name__)

NOTIFIABLE_ACTIONS = frozenset(
    {
        "submitted",
        "endorsed_to_accounting",
        "returned_to_hei",
        "endorsed_to_coa",
        "returned_to_rc",
        "imported_beneficiaries",
        "toggled_status",
    }
)

# Accountants hear about reports entering or leaving their queue
ACCOUNTING_ACTIONS = frozenset(
    {"endorsed_to_accounting", "endorsed_to_coa", "returned_to_rc"}
)


def _liquidation_recipients(liquidation, action):
    from apps.users.models import Role, User, UserStatus

    active = User.objects.filter(status=UserStatus.ACTIVE)
    recipients = []
    if liquidation.created_by_id:
        recipients.extend(active.filter(id=liquidation.created_by_id))
    recipients.extend(active.filter(role__name=Role.HEI, hei_id=liquidation.hei_id))

    region_id = liquidation.hei.region_id
    if region_id:
        recipients.extend(
            active.filter(role__name=Role.REGIONAL_COORDINATOR, region_id=region_id)
        )
    if action in ACCOUNTING_ACTIONS:
        recipients.extend(active.filter(role__name=Role.ACCOUNTANT))
    return recipients


def recipients_for(action, subject):
    """Users to notify about `action` on `subject`, before the actor is excluded."""
    from apps.liquidations.models import Liquidation
    from apps.users.models import User

    if isinstance(subject, Liquidation):
        return _liquidation_recipients(subject, action)
    if isinstance(subject, User):
        return [subject]
    return []


def dispatch(action, description, subject=None, module=None, actor=None):
    """
    Notify the users concerned by a workflow action.

    The actor is never notified of their own action and each recipient
    gets at most one notification.

    Returns:
        list[Notification]: Created notifications
    """
    if action not in NOTIFIABLE_ACTIONS or subject is None:
        return []

    actor_id = getattr(actor, "id", None)
    seen = set()
    recipients = []
    for user in recipients_for(action, subject):
        if user.id == actor_id or user.id in seen:
            continue
        seen.add(user.id)
        recipients.append(user)

    if not recipients:
        return []

    subject_label = resolve_instance_label(subject)
    notifications = Notification.objects.bulk_create(
        [
            Notification(
                user=user,
                actor=actor,
                actor_name=getattr(actor, "name", None) or SYSTEM_ACTOR_NAME,
                action=action,
                description=description[:500],
                subject_type=subject._meta.label,
                subject_id=str(subject.pk),
                subject_label=subject_label[:255],
                module=module,
            )
            for user in recipients
        ]
    )

    logger.info(
        "notifications_dispatched",
        extra={
            "operation": action,
            "entity_id": str(subject.pk),
            "recipients": len(notifications),
        },
    )
    return notifications


def mark_read(user_id, notification_id):
    """Mark one of the user's notifications read. Idempotent."""
    with transaction.atomic():
        try:
            notification = (
                Notification.objects.for_user(user_id)
                .select_for_update()
                .get(id=notification_id)
            )
        except Notification.DoesNotExist:
            raise NotFoundError(f"Notification {notification_id} does not exist")

        if notification.read_at is None:
            notification.read_at = timezone.now()
            notification.save(update_fields=["read_at"])
    return notification


def mark_all_read(user_id):
    """Mark every unread notification of the user read. Returns the count."""
    count = Notification.objects.for_user(user_id).unread().update(read_at=timezone.now())
    logger.info(
        "notifications_marked_read",
        extra={"operation": "notifications.read_all", "entity_id": str(user_id), "count": count},
    )
    return count
