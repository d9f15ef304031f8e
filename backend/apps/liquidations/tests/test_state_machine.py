from django.test import SimpleTestCase

from core.exceptions import InvalidStateError
from apps.liquidations.state_machine import (
    is_editable,
    is_terminal_state,
    validate_transition,
)


class LiquidationStateMachineTests(SimpleTestCase):
    def test_allowed_transitions(self):
        for current, target in [
            ("DRAFT", "SUBMITTED"),
            ("SUBMITTED", "ENDORSED_TO_ACCOUNTING"),
            ("SUBMITTED", "RETURNED_TO_HEI"),
            ("RETURNED_TO_HEI", "SUBMITTED"),
            ("ENDORSED_TO_ACCOUNTING", "ENDORSED_TO_COA"),
            ("ENDORSED_TO_ACCOUNTING", "RETURNED_TO_RC"),
            ("RETURNED_TO_RC", "ENDORSED_TO_ACCOUNTING"),
        ]:
            self.assertTrue(validate_transition(current, target))

    def test_disallowed_transition(self):
        with self.assertRaises(InvalidStateError) as ctx:
            validate_transition("DRAFT", "ENDORSED_TO_COA")
        self.assertEqual(ctx.exception.details["allowed_transitions"], ["SUBMITTED"])

    def test_terminal_state(self):
        self.assertTrue(is_terminal_state("ENDORSED_TO_COA"))
        self.assertFalse(is_terminal_state("DRAFT"))
        with self.assertRaises(InvalidStateError):
            validate_transition("ENDORSED_TO_COA", "SUBMITTED")

    def test_unknown_status(self):
        with self.assertRaises(InvalidStateError):
            validate_transition("ARCHIVED", "SUBMITTED")

    def test_editable_statuses(self):
        self.assertTrue(is_editable("DRAFT"))
        self.assertTrue(is_editable("RETURNED_TO_HEI"))
        self.assertFalse(is_editable("SUBMITTED"))
        self.assertFalse(is_editable("RETURNED_TO_RC"))
