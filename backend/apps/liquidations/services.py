"""
Liquidation services - all mutations flow through this layer.

Rules:
- All mutations wrapped in transaction.atomic
- Use select_for_update for row-level locking
- Validate state transitions before changes
- Record activity log entries for all mutations
- No direct model.save() from views
"""

import logging
import uuid
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.db.models import Q, Sum
from django.utils import timezone
from django.utils.dateparse import parse_date

from core.db import conflict_on_integrity_error
from core.exceptions import (
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from apps.audit.context import AuditContext
from apps.audit.recorder import recorder, snapshot
from apps.audit.services import record_audit_entry
from apps.liquidations.audit_profiles import LIQUIDATION_MODULE
from apps.liquidations.models import (
    Liquidation,
    LiquidationBeneficiary,
    LiquidationStatus,
)
from apps.liquidations.state_machine import is_editable, validate_transition

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "hei",
    "program",
    "semester",
    "academic_year",
    "batch_no",
    "amount_received",
    "remarks",
)

BENEFICIARY_FIELDS = (
    "student_no",
    "last_name",
    "first_name",
    "middle_name",
    "extension_name",
    "award_no",
    "date_disbursed",
    "amount",
    "remarks",
)


@dataclass
class ImportResult:
    imported: int = 0
    errors: list = field(default_factory=list)


def _get_actor(actor_id):
    from apps.users.models import User

    try:
        return User.objects.select_related("role").get(id=actor_id)
    except User.DoesNotExist:
        raise NotFoundError(f"User {actor_id} does not exist")


def _require(actor, permission_name, message):
    if not actor.has_permission(permission_name):
        raise PermissionDeniedError(message)


def scope_liquidations(user, queryset=None):
    """
    Restrict a Liquidation queryset to what user may see.

    HEI users see their institution's reports, regional coordinators the
    reports of HEIs in their region, holders of view_all_liquidations see
    everything, and anyone else only the reports they created.
    """
    queryset = Liquidation.objects.all() if queryset is None else queryset

    if user.is_hei_user and user.hei_id:
        return queryset.filter(hei_id=user.hei_id)
    if user.is_regional_coordinator and user.region_id:
        return queryset.filter(hei__region_id=user.region_id)
    if user.has_permission("view_all_liquidations"):
        return queryset
    return queryset.filter(created_by_id=user.id)


def get_liquidation(actor, liquidation_id, lock=False):
    """Fetch a liquidation within the actor's scope."""
    queryset = scope_liquidations(actor)
    if lock:
        queryset = queryset.select_for_update(of=("self",))
    try:
        return queryset.get(id=liquidation_id)
    except (Liquidation.DoesNotExist, ValueError):
        raise NotFoundError(f"Liquidation {liquidation_id} does not exist")


def _check_hei_assignment(actor, hei):
    if actor.is_regional_coordinator and actor.region_id and hei.region_id != actor.region_id:
        raise PermissionDeniedError(
            "You can only create liquidations for HEIs in your assigned region"
        )
    if actor.is_hei_user and actor.hei_id != hei.id:
        raise PermissionDeniedError("You can only create liquidations for your own HEI")


def _check_editable(liquidation):
    if not is_editable(liquidation.status):
        raise InvalidStateError(
            f"Cannot modify liquidation with status {liquidation.status}",
            {"current_status": liquidation.status},
        )


def create_liquidation(actor_id, attrs, context=None):
    """
    Create a new Liquidation with status DRAFT.

    Args:
        actor_id: User identifier
        attrs: Validated attributes (control_no, hei, program, semester,
            academic_year, batch_no, amount_received, remarks)
        context: AuditContext (optional)

    Returns:
        Liquidation: Created liquidation

    Raises:
        NotFoundError: If actor does not exist
        PermissionDeniedError: If actor may not create for this HEI
        ConflictError: If the control number is already used
    """
    actor = _get_actor(actor_id)
    _require(actor, "create_liquidation", "You cannot create liquidations")
    _check_hei_assignment(actor, attrs["hei"])
    context = (context or AuditContext()).for_actor(actor)

    with transaction.atomic():
        with conflict_on_integrity_error(
            f"Liquidation with control no. '{attrs.get('control_no')}' already exists"
        ):
            liquidation = Liquidation.objects.create(
                **attrs,
                status=LiquidationStatus.DRAFT,
                created_by=actor,
            )
        recorder.created(liquidation, context=context)

    logger.info(
        "liquidation_created",
        extra={"operation": "liquidations.create", "entity_id": str(liquidation.id)},
    )
    return liquidation


def update_liquidation(actor_id, liquidation_id, attrs, context=None):
    """Update a DRAFT or RETURNED_TO_HEI liquidation."""
    actor = _get_actor(actor_id)
    _require(actor, "edit_liquidation", "You cannot edit liquidations")
    context = (context or AuditContext()).for_actor(actor)

    unknown = set(attrs) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(
            "Fields cannot be updated", {"fields": sorted(unknown)}
        )
    if not attrs:
        raise ValidationError("No fields to update")

    with transaction.atomic():
        liquidation = get_liquidation(actor, liquidation_id, lock=True)
        _check_editable(liquidation)
        if "hei" in attrs:
            _check_hei_assignment(actor, attrs["hei"])

        before = snapshot(liquidation)
        for name, value in attrs.items():
            setattr(liquidation, name, value)
        liquidation.save()
        recorder.updated(liquidation, before, context=context)

    logger.info(
        "liquidation_updated",
        extra={"operation": "liquidations.update", "entity_id": str(liquidation.id)},
    )
    return liquidation


def delete_liquidation(actor_id, liquidation_id, context=None):
    """Delete a DRAFT liquidation and its beneficiaries."""
    actor = _get_actor(actor_id)
    _require(actor, "delete_liquidation", "You cannot delete liquidations")
    context = (context or AuditContext()).for_actor(actor)

    with transaction.atomic():
        liquidation = get_liquidation(actor, liquidation_id, lock=True)
        if liquidation.status != LiquidationStatus.DRAFT:
            raise InvalidStateError(
                f"Cannot delete liquidation with status {liquidation.status}"
            )
        recorder.delete(liquidation, context=context)

    logger.info(
        "liquidation_deleted",
        extra={"operation": "liquidations.delete", "entity_id": str(liquidation_id)},
    )


# -----------------------------
# Workflow
# -----------------------------


def _transition(actor, liquidation_id, target, action, verb, context, remarks=None, **changes):
    """
    Move a liquidation to `target`, then record the lifecycle update, the
    workflow entry and notifications. `verb` completes the description
    ("Submitted liquidation X for review").
    """
    from apps.notifications import services as notifications

    context = (context or AuditContext()).for_actor(actor)

    with transaction.atomic():
        liquidation = get_liquidation(actor, liquidation_id, lock=True)
        validate_transition(liquidation.status, target)

        before = snapshot(liquidation)
        liquidation.status = target
        for name, value in changes.items():
            setattr(liquidation, name, value)
        if remarks:
            liquidation.remarks = remarks
        liquidation.save()
        recorder.updated(liquidation, before, context=context)

        description = verb.format(control_no=liquidation.control_no)
        if context.enabled:
            record_audit_entry(
                action=action,
                description=description,
                subject=liquidation,
                module=LIQUIDATION_MODULE,
                context=context,
            )
        notifications.dispatch(
            action=action,
            description=description,
            subject=liquidation,
            module=LIQUIDATION_MODULE,
            actor=actor,
        )

    logger.info(
        "liquidation_transitioned",
        extra={
            "operation": f"liquidations.{action}",
            "entity_id": str(liquidation.id),
            "from_status": before["status"],
            "to_status": target,
        },
    )
    return liquidation


def submit(actor_id, liquidation_id, remarks=None, context=None):
    """Submit a DRAFT or RETURNED_TO_HEI liquidation for RC review."""
    actor = _get_actor(actor_id)
    _require(actor, "edit_liquidation", "You cannot submit liquidations")
    return _transition(
        actor,
        liquidation_id,
        LiquidationStatus.SUBMITTED,
        "submitted",
        "Submitted liquidation {control_no} for review",
        context,
        remarks=remarks,
        date_submitted=timezone.now(),
    )


def endorse_to_accounting(actor_id, liquidation_id, remarks=None, context=None):
    """RC action: endorse a submitted liquidation to accounting."""
    actor = _get_actor(actor_id)
    _require(actor, "review_liquidation", "Only regional coordinators can endorse to accounting")
    return _transition(
        actor,
        liquidation_id,
        LiquidationStatus.ENDORSED_TO_ACCOUNTING,
        "endorsed_to_accounting",
        "Endorsed liquidation {control_no} to Accounting",
        context,
        remarks=remarks,
        reviewed_by=actor,
        reviewed_at=timezone.now(),
    )


def return_to_hei(actor_id, liquidation_id, remarks, context=None):
    """RC action: return a submitted liquidation to the HEI for compliance."""
    actor = _get_actor(actor_id)
    _require(actor, "review_liquidation", "Only regional coordinators can return to HEI")
    if not remarks or not remarks.strip():
        raise ValidationError("Remarks are required when returning to HEI")
    return _transition(
        actor,
        liquidation_id,
        LiquidationStatus.RETURNED_TO_HEI,
        "returned_to_hei",
        "Returned liquidation {control_no} to HEI",
        context,
        remarks=remarks.strip(),
        reviewed_by=actor,
        reviewed_at=timezone.now(),
    )


def endorse_to_coa(actor_id, liquidation_id, remarks=None, context=None):
    """Accountant action: endorse to COA. Terminal."""
    actor = _get_actor(actor_id)
    _require(actor, "accounting_review", "Only accountants can endorse to COA")
    now = timezone.now()
    return _transition(
        actor,
        liquidation_id,
        LiquidationStatus.ENDORSED_TO_COA,
        "endorsed_to_coa",
        "Endorsed liquidation {control_no} to COA",
        context,
        remarks=remarks,
        accountant_reviewed_by=actor,
        accountant_reviewed_at=now,
        coa_endorsed_by=actor,
        coa_endorsed_at=now,
    )


def return_to_rc(actor_id, liquidation_id, remarks, context=None):
    """Accountant action: return an endorsed liquidation to the RC."""
    actor = _get_actor(actor_id)
    _require(actor, "accounting_review", "Only accountants can return to RC")
    if not remarks or not remarks.strip():
        raise ValidationError("Remarks are required when returning to RC")
    return _transition(
        actor,
        liquidation_id,
        LiquidationStatus.RETURNED_TO_RC,
        "returned_to_rc",
        "Returned liquidation {control_no} to RC",
        context,
        remarks=remarks.strip(),
        accountant_reviewed_by=actor,
        accountant_reviewed_at=timezone.now(),
    )


# -----------------------------
# Beneficiaries
# -----------------------------


def _refresh_amount_liquidated(liquidation):
    total = liquidation.beneficiaries.aggregate(total=Sum("amount"))["total"] or Decimal("0.00")
    # Queryset update: the running total is not a lifecycle change of its own
    Liquidation.objects.filter(pk=liquidation.pk).update(amount_liquidated=total)
    liquidation.amount_liquidated = total
    return total


def clean_beneficiary_row(row):
    """
    Normalize one beneficiary row (string values, as read from a file or
    JSON body) into model attributes.

    Raises:
        ValidationError: On a missing required value or bad date/amount
    """
    values = {}
    for name in BENEFICIARY_FIELDS:
        value = row.get(name)
        if isinstance(value, str):
            value = value.strip()
        values[name] = value if value not in ("", None) else None

    missing = [name for name in ("student_no", "last_name", "first_name") if not values[name]]
    if missing:
        raise ValidationError(f"Missing {', '.join(missing)}")

    date_disbursed = values["date_disbursed"]
    if date_disbursed is not None and not hasattr(date_disbursed, "year"):
        try:
            parsed = parse_date(str(date_disbursed))
        except ValueError:
            parsed = None
        if parsed is None:
            raise ValidationError(f"Invalid date_disbursed '{date_disbursed}' (use YYYY-MM-DD)")
        values["date_disbursed"] = parsed

    values["amount"] = _parse_amount(values["amount"])
    return values


def _parse_amount(raw):
    if raw is None:
        return Decimal("0.00")

    field = LiquidationBeneficiary._meta.get_field("amount")
    try:
        amount = Decimal(str(raw).replace(",", ""))
    except InvalidOperation:
        raise ValidationError(f"Invalid amount '{raw}'")
    if not amount.is_finite():
        raise ValidationError(f"Invalid amount '{raw}'")
    if amount < 0:
        raise ValidationError("Amount cannot be negative")

    # Digits left of the point that fit the column
    limit = Decimal(10) ** (field.max_digits - field.decimal_places)
    if amount >= limit:
        raise ValidationError(f"Amount '{raw}' is too large")
    return amount.quantize(Decimal(1).scaleb(-field.decimal_places))


def add_beneficiary(actor_id, liquidation_id, attrs, context=None):
    """Add one beneficiary to an editable liquidation."""
    actor = _get_actor(actor_id)
    _require(actor, "edit_liquidation", "You cannot edit liquidations")
    context = (context or AuditContext()).for_actor(actor)

    with transaction.atomic():
        liquidation = get_liquidation(actor, liquidation_id, lock=True)
        _check_editable(liquidation)

        beneficiary = LiquidationBeneficiary.objects.create(
            liquidation=liquidation, **clean_beneficiary_row(attrs)
        )
        recorder.created(beneficiary, context=context)
        _refresh_amount_liquidated(liquidation)

    logger.info(
        "beneficiary_added",
        extra={"operation": "liquidations.add_beneficiary", "entity_id": str(beneficiary.id)},
    )
    return beneficiary


def import_beneficiaries(actor_id, liquidation_id, rows, context=None):
    """
    Bulk-add beneficiaries to an editable liquidation.

    Per-row activity logging is disabled; one 'imported_beneficiaries'
    entry summarizes the import. Rows failing validation are reported in
    the result and skipped; blank rows are ignored.

    Returns:
        ImportResult
    """
    from apps.notifications import services as notifications

    actor = _get_actor(actor_id)
    _require(actor, "edit_liquidation", "You cannot edit liquidations")
    context = (context or AuditContext()).for_actor(actor)
    row_context = context.disabled()

    result = ImportResult()

    with transaction.atomic():
        liquidation = get_liquidation(actor, liquidation_id, lock=True)
        _check_editable(liquidation)

        for index, row in enumerate(rows, start=1):
            if not any(value not in (None, "") for value in row.values()):
                continue
            try:
                values = clean_beneficiary_row(row)
            except ValidationError as exc:
                result.errors.append(f"Row {index}: {exc.message}")
                continue

            beneficiary = LiquidationBeneficiary.objects.create(
                liquidation=liquidation, **values
            )
            recorder.created(beneficiary, context=row_context)
            result.imported += 1

        _refresh_amount_liquidated(liquidation)

        if result.imported > 0:
            description = (
                f"Imported {result.imported} beneficiaries for liquidation "
                f"{liquidation.control_no}"
            )
            if context.enabled:
                record_audit_entry(
                    action="imported_beneficiaries",
                    description=description,
                    subject=liquidation,
                    module=LIQUIDATION_MODULE,
                    context=context,
                )
            notifications.dispatch(
                action="imported_beneficiaries",
                description=description,
                subject=liquidation,
                module=LIQUIDATION_MODULE,
                actor=actor,
            )

    logger.info(
        "beneficiaries_imported",
        extra={
            "operation": "liquidations.import_beneficiaries",
            "entity_id": str(liquidation.id),
            "imported": result.imported,
            "errors": len(result.errors),
        },
    )
    return result


def list_liquidations(actor, search=None, status=None, program_id=None):
    """Role-scoped liquidation queryset with optional filters."""
    queryset = scope_liquidations(
        actor,
        Liquidation.objects.select_related("hei", "program", "semester", "created_by"),
    )
    if search:
        queryset = queryset.filter(
            Q(control_no__icontains=search) | Q(hei__name__icontains=search)
        )
    if status and status != "all":
        queryset = queryset.filter(status=status)
    if program_id and program_id != "all":
        try:
            program_id = uuid.UUID(str(program_id))
        except ValueError:
            raise ValidationError("Invalid program filter", {"program": program_id})
        queryset = queryset.filter(program_id=program_id)
    return queryset.order_by("control_no")
