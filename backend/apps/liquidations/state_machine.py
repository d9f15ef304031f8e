"""
State machine enforcement for Liquidation.

DRAFT -> SUBMITTED -> ENDORSED_TO_ACCOUNTING -> ENDORSED_TO_COA (terminal),
with return loops SUBMITTED <-> RETURNED_TO_HEI and
ENDORSED_TO_ACCOUNTING <-> RETURNED_TO_RC.
Raises InvalidStateError for disallowed transitions.
"""

from core.exceptions import InvalidStateError

LIQUIDATION_TRANSITIONS = {
    "DRAFT": ["SUBMITTED"],
    "SUBMITTED": ["ENDORSED_TO_ACCOUNTING", "RETURNED_TO_HEI"],
    "RETURNED_TO_HEI": ["SUBMITTED"],
    "ENDORSED_TO_ACCOUNTING": ["ENDORSED_TO_COA", "RETURNED_TO_RC"],
    "RETURNED_TO_RC": ["ENDORSED_TO_ACCOUNTING"],
    "ENDORSED_TO_COA": [],  # Terminal
}

# Statuses in which the HEI may edit the report and its beneficiaries
EDITABLE_STATUSES = ("DRAFT", "RETURNED_TO_HEI")


def validate_transition(current_status, target_status):
    """
    Validate a Liquidation state transition.

    Returns:
        bool: True if transition is allowed

    Raises:
        InvalidStateError: If transition is disallowed
    """
    if current_status not in LIQUIDATION_TRANSITIONS:
        raise InvalidStateError(
            f"Invalid current status: {current_status}",
            {"current_status": current_status},
        )

    allowed_targets = LIQUIDATION_TRANSITIONS[current_status]

    if not allowed_targets:
        raise InvalidStateError(
            f"Liquidation in state {current_status} is terminal and cannot transition",
            {"current_status": current_status, "target_status": target_status},
        )

    if target_status not in allowed_targets:
        raise InvalidStateError(
            (
                "Invalid transition: Liquidation cannot transition from "
                f"{current_status} to {target_status}"
            ),
            {
                "current_status": current_status,
                "target_status": target_status,
                "allowed_transitions": allowed_targets,
            },
        )

    return True


def is_terminal_state(status):
    """Check if a state is terminal (no transitions allowed)."""
    return status in LIQUIDATION_TRANSITIONS and not LIQUIDATION_TRANSITIONS[status]


def is_editable(status):
    return status in EDITABLE_STATUSES
