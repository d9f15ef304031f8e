"""
Liquidation domain models: Liquidation, LiquidationBeneficiary.

A liquidation is the report an HEI files to account for scholarship funds
it received; beneficiaries are the students the funds were disbursed to.
"""

import uuid
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models


class LiquidationStatus(models.TextChoices):
    DRAFT = "DRAFT", "Draft"
    SUBMITTED = "SUBMITTED", "Submitted"
    RETURNED_TO_HEI = "RETURNED_TO_HEI", "Returned to HEI"
    ENDORSED_TO_ACCOUNTING = "ENDORSED_TO_ACCOUNTING", "Endorsed to Accounting"
    RETURNED_TO_RC = "RETURNED_TO_RC", "Returned to RC"
    ENDORSED_TO_COA = "ENDORSED_TO_COA", "Endorsed to COA"


class Liquidation(models.Model):
    """Liquidation report for funds released to an HEI under a program."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    control_no = models.CharField(max_length=100, unique=True)
    hei = models.ForeignKey(
        "registry.HEI", on_delete=models.PROTECT, related_name="liquidations"
    )
    program = models.ForeignKey(
        "registry.Program", on_delete=models.PROTECT, related_name="liquidations"
    )
    semester = models.ForeignKey(
        "registry.Semester",
        on_delete=models.PROTECT,
        related_name="liquidations",
        null=True,
        blank=True,
    )
    academic_year = models.CharField(max_length=20)
    batch_no = models.CharField(max_length=100, null=True, blank=True)
    amount_received = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(0)],
    )
    amount_liquidated = models.DecimalField(
        max_digits=15, decimal_places=2, default=Decimal("0.00")
    )
    status = models.CharField(
        max_length=30,
        choices=LiquidationStatus.choices,
        default=LiquidationStatus.DRAFT,
    )
    date_submitted = models.DateTimeField(null=True, blank=True)
    remarks = models.TextField(null=True, blank=True)
    created_by = models.ForeignKey(
        "users.User",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_liquidations",
    )
    # RC review
    reviewed_by = models.ForeignKey(
        "users.User",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reviewed_liquidations",
    )
    reviewed_at = models.DateTimeField(null=True, blank=True)
    # Accountant review
    accountant_reviewed_by = models.ForeignKey(
        "users.User",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="accountant_reviewed_liquidations",
    )
    accountant_reviewed_at = models.DateTimeField(null=True, blank=True)
    coa_endorsed_by = models.ForeignKey(
        "users.User",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="coa_endorsed_liquidations",
    )
    coa_endorsed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "liquidations"
        ordering = ["control_no"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount_received__gte=0),
                name="liquidation_amount_received_non_negative",
            ),
            # date_submitted NOT NULL once the report leaves DRAFT
            models.CheckConstraint(
                condition=models.Q(status="DRAFT") | models.Q(date_submitted__isnull=False),
                name="date_submitted_set_when_not_draft",
            ),
        ]
        indexes = [
            models.Index(fields=["status"], name="idx_liquidation_status"),
            models.Index(fields=["hei"], name="idx_liquidation_hei"),
            models.Index(fields=["created_by"], name="idx_liquidation_created_by"),
        ]

    def __str__(self):
        return f"{self.control_no} ({self.status})"


class LiquidationBeneficiary(models.Model):
    """Student who received funds covered by a liquidation."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    liquidation = models.ForeignKey(
        Liquidation, on_delete=models.CASCADE, related_name="beneficiaries"
    )
    student_no = models.CharField(max_length=50)
    last_name = models.CharField(max_length=100)
    first_name = models.CharField(max_length=100)
    middle_name = models.CharField(max_length=100, null=True, blank=True)
    extension_name = models.CharField(max_length=20, null=True, blank=True)
    award_no = models.CharField(max_length=100, null=True, blank=True)
    date_disbursed = models.DateField(null=True, blank=True)
    amount = models.DecimalField(
        max_digits=15,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(0)],
    )
    remarks = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "liquidation_beneficiaries"
        ordering = ["last_name", "first_name"]
        indexes = [
            models.Index(fields=["liquidation"], name="idx_beneficiary_liquidation"),
        ]

    def __str__(self):
        return self.full_name

    @property
    def full_name(self):
        name = " ".join(
            part for part in (self.first_name, self.middle_name, self.last_name) if part
        )
        if self.extension_name:
            name = f"{name} {self.extension_name}"
        return name
