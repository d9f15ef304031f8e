# Liquidation reports and their beneficiaries.

import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models

STATUS_CHOICES = [
    ("DRAFT", "Draft"),
    ("SUBMITTED", "Submitted"),
    ("RETURNED_TO_HEI", "Returned to HEI"),
    ("ENDORSED_TO_ACCOUNTING", "Endorsed to Accounting"),
    ("RETURNED_TO_RC", "Returned to RC"),
    ("ENDORSED_TO_COA", "Endorsed to COA"),
]


def _user_fk(related_name):
    return models.ForeignKey(
        blank=True,
        null=True,
        on_delete=django.db.models.deletion.SET_NULL,
        related_name=related_name,
        to="users.user",
    )


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("registry", "0001_initial"),
        ("users", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Liquidation",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("control_no", models.CharField(max_length=100, unique=True)),
                ("academic_year", models.CharField(max_length=20)),
                ("batch_no", models.CharField(blank=True, max_length=100, null=True)),
                (
                    "amount_received",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        max_digits=15,
                        validators=[django.core.validators.MinValueValidator(0)],
                    ),
                ),
                ("amount_liquidated", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=15)),
                ("status", models.CharField(choices=STATUS_CHOICES, default="DRAFT", max_length=30)),
                ("date_submitted", models.DateTimeField(blank=True, null=True)),
                ("remarks", models.TextField(blank=True, null=True)),
                ("reviewed_at", models.DateTimeField(blank=True, null=True)),
                ("accountant_reviewed_at", models.DateTimeField(blank=True, null=True)),
                ("coa_endorsed_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "hei",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="liquidations",
                        to="registry.hei",
                    ),
                ),
                (
                    "program",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="liquidations",
                        to="registry.program",
                    ),
                ),
                (
                    "semester",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="liquidations",
                        to="registry.semester",
                    ),
                ),
                ("created_by", _user_fk("created_liquidations")),
                ("reviewed_by", _user_fk("reviewed_liquidations")),
                ("accountant_reviewed_by", _user_fk("accountant_reviewed_liquidations")),
                ("coa_endorsed_by", _user_fk("coa_endorsed_liquidations")),
            ],
            options={
                "db_table": "liquidations",
                "ordering": ["control_no"],
                "indexes": [
                    models.Index(fields=["status"], name="idx_liquidation_status"),
                    models.Index(fields=["hei"], name="idx_liquidation_hei"),
                    models.Index(fields=["created_by"], name="idx_liquidation_created_by"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(amount_received__gte=0),
                        name="liquidation_amount_received_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(status="DRAFT") | models.Q(date_submitted__isnull=False),
                        name="date_submitted_set_when_not_draft",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="LiquidationBeneficiary",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("student_no", models.CharField(max_length=50)),
                ("last_name", models.CharField(max_length=100)),
                ("first_name", models.CharField(max_length=100)),
                ("middle_name", models.CharField(blank=True, max_length=100, null=True)),
                ("extension_name", models.CharField(blank=True, max_length=20, null=True)),
                ("award_no", models.CharField(blank=True, max_length=100, null=True)),
                ("date_disbursed", models.DateField(blank=True, null=True)),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        max_digits=15,
                        validators=[django.core.validators.MinValueValidator(0)],
                    ),
                ),
                ("remarks", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "liquidation",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="beneficiaries",
                        to="liquidations.liquidation",
                    ),
                ),
            ],
            options={
                "db_table": "liquidation_beneficiaries",
                "ordering": ["last_name", "first_name"],
                "indexes": [
                    models.Index(fields=["liquidation"], name="idx_beneficiary_liquidation"),
                ],
            },
        ),
    ]
