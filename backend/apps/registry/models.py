"""
Registry master data models: regions, programs, HEIs, semesters,
academic years, document requirements.

All models:
- UUID primary keys
- Unique constraints on identifiers
- PROTECT foreign keys where other records depend on the row
- Temporal tracking (created_at, updated_at)
"""

import uuid
from django.db import models


class RecordStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    INACTIVE = "inactive", "Inactive"


class Region(models.Model):
    """Administrative region grouping HEIs and regional coordinators."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    code = models.CharField(max_length=20, unique=True)
    name = models.CharField(max_length=255)
    description = models.TextField(null=True, blank=True)
    status = models.CharField(
        max_length=10, choices=RecordStatus.choices, default=RecordStatus.ACTIVE
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "regions"
        ordering = ["code"]

    def __str__(self):
        return self.name

    @property
    def is_active(self):
        return self.status == RecordStatus.ACTIVE


class Program(models.Model):
    """Scholarship program."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    code = models.CharField(max_length=50, unique=True)
    name = models.CharField(max_length=255)
    description = models.TextField(null=True, blank=True)
    status = models.CharField(
        max_length=10, choices=RecordStatus.choices, default=RecordStatus.ACTIVE
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "programs"
        ordering = ["name"]

    def __str__(self):
        return self.name

    @property
    def is_active(self):
        return self.status == RecordStatus.ACTIVE


class HEI(models.Model):
    """Higher-education institution, identified by its UII."""

    TYPE_CHOICES = [
        ("Public", "Public"),
        ("Private", "Private"),
        ("LUC", "Local University/College"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    uii = models.CharField(max_length=20, unique=True)
    code = models.CharField(max_length=50, null=True, blank=True)
    name = models.CharField(max_length=255)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default="Private")
    region = models.ForeignKey(
        Region,
        on_delete=models.PROTECT,
        related_name="heis",
        null=True,
        blank=True,
    )
    status = models.CharField(
        max_length=10, choices=RecordStatus.choices, default=RecordStatus.ACTIVE
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "heis"
        ordering = ["name"]
        verbose_name = "HEI"
        verbose_name_plural = "HEIs"
        indexes = [
            models.Index(fields=["region"], name="idx_hei_region"),
        ]

    def __str__(self):
        return f"{self.uii} - {self.name}"

    @property
    def is_active(self):
        return self.status == RecordStatus.ACTIVE


class Semester(models.Model):
    """Academic semester period (1st, 2nd, Summer)."""

    CODE_FIRST = "1ST"
    CODE_SECOND = "2ND"
    CODE_SUMMER = "SUM"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    code = models.CharField(max_length=10, unique=True)
    name = models.CharField(max_length=100)
    sort_order = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "semesters"
        ordering = ["sort_order"]

    def __str__(self):
        return self.name


class AcademicYear(models.Model):
    """Academic year, e.g. code '2025-2026'."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    code = models.CharField(max_length=20, unique=True)
    name = models.CharField(max_length=100)
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "academic_years"
        ordering = ["-code"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(start_date__isnull=True)
                | models.Q(end_date__isnull=True)
                | models.Q(end_date__gt=models.F("start_date")),
                name="academic_year_end_after_start",
            )
        ]

    def __str__(self):
        return self.name


class DocumentRequirement(models.Model):
    """Document an HEI must upload for liquidations under a program."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    program = models.ForeignKey(
        Program, on_delete=models.CASCADE, related_name="document_requirements"
    )
    code = models.CharField(max_length=50)
    name = models.CharField(max_length=255)
    description = models.TextField(null=True, blank=True)
    reference_image_path = models.CharField(max_length=500, null=True, blank=True)
    upload_message = models.TextField(null=True, blank=True)
    sort_order = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    is_required = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "document_requirements"
        ordering = ["program", "sort_order"]
        constraints = [
            models.UniqueConstraint(
                fields=["program", "code"], name="unique_requirement_code_per_program"
            )
        ]

    def __str__(self):
        return f"{self.code} - {self.name}"
