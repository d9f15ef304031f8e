"""
Shared setup for liquidation and notification tests.
"""

import uuid
from decimal import Decimal

from django.utils import timezone

from apps.liquidations.models import Liquidation, LiquidationStatus
from apps.registry.models import HEI, Program, Region, Semester
from apps.users.models import Role, User


def make_user(role_name, name=None, **extra):
    return User.objects.create_user(
        email=f"{uuid.uuid4().hex[:10]}@example.com",
        password="testpass123",
        name=name or f"{role_name} User",
        role=Role.objects.get(name=role_name),
        **extra,
    )


class LiquidationFixtures:
    """Two regions with one HEI each, and a user per role."""

    def setUp(self):
        super().setUp()
        self.region = Region.objects.create(code="R7", name="Region VII")
        self.other_region = Region.objects.create(code="R1", name="Region I")
        self.hei = HEI.objects.create(uii="07001", name="Cebu College", region=self.region)
        self.other_hei = HEI.objects.create(
            uii="01001", name="Ilocos College", region=self.other_region
        )
        self.program = Program.objects.create(code="TES", name="Tertiary Education Subsidy")
        self.semester = Semester.objects.create(code="1ST", name="First Semester")

        self.hei_user = make_user(Role.HEI, name="Hana HEI", hei=self.hei)
        self.rc = make_user(Role.REGIONAL_COORDINATOR, name="Rico RC", region=self.region)
        self.other_rc = make_user(
            Role.REGIONAL_COORDINATOR, name="Olga RC", region=self.other_region
        )
        self.accountant = make_user(Role.ACCOUNTANT, name="Alma Accountant")
        self.admin = make_user(Role.ADMIN, name="Ada Admin")

    def attrs(self, **overrides):
        values = {
            "control_no": "LQ-2024-001",
            "hei": self.hei,
            "program": self.program,
            "semester": self.semester,
            "academic_year": "2024-2025",
            "batch_no": "B1",
            "amount_received": Decimal("100000.00"),
        }
        values.update(overrides)
        return values

    def make_liquidation(self, status=LiquidationStatus.DRAFT, **overrides):
        """Insert a liquidation directly, bypassing services and logging."""
        values = self.attrs(**overrides)
        values.setdefault("created_by", self.hei_user)
        if status != LiquidationStatus.DRAFT:
            values.setdefault("date_submitted", timezone.now())
        return Liquidation.objects.create(status=status, **values)
