"""State machines for domain state holders.

Deterministic state machines that define valid transitions for the
two-stage (draft/applied) filter state.
"""

from enum import Enum

from storefront.domain.exceptions import InvalidStateTransitionError


class FilterStatus(str, Enum):
    """Draft/applied filter lifecycle states.

    State diagram:
        IDLE ──── mutate ────► PENDING ◄──┐
          │                      │        │ mutate (restarts window)
          │ apply                ├────────┘
          ▼                      │ quiet window elapsed / apply
        COMMITTING ◄─────────────┘
          │
          │ done
          ▼
        IDLE
    """

    IDLE = "idle"
    PENDING = "pending"
    COMMITTING = "committing"

    def can_transition_to(self, target: "FilterStatus") -> bool:
        """Check if transition to target state is valid.

        Args:
            target: Target state to transition to.

        Returns:
            True if transition is valid.
        """
        return target in _FILTER_TRANSITIONS.get(self, set())

    def allowed_transitions(self) -> list["FilterStatus"]:
        """Get list of valid target states.

        Returns:
            List of states that can be transitioned to.
        """
        return sorted(_FILTER_TRANSITIONS.get(self, set()), key=lambda s: s.value)

    def is_pending(self) -> bool:
        """Check if a commit is waiting for the quiet window.

        Returns:
            True while the pending indicator should be shown.
        """
        return self == FilterStatus.PENDING


# Filter state transitions (defined outside enum to avoid Enum restrictions)
_FILTER_TRANSITIONS: dict[FilterStatus, set[FilterStatus]] = {
    FilterStatus.IDLE: {FilterStatus.PENDING, FilterStatus.COMMITTING},
    FilterStatus.PENDING: {FilterStatus.PENDING, FilterStatus.COMMITTING},
    FilterStatus.COMMITTING: {FilterStatus.IDLE},
}


def validate_filter_transition(
    current: FilterStatus,
    target: FilterStatus,
) -> None:
    """Validate a filter state transition.

    Args:
        current: Current status.
        target: Target status.

    Raises:
        InvalidStateTransitionError: If transition is not allowed.
    """
    if not current.can_transition_to(target):
        raise InvalidStateTransitionError(
            entity_type="FilterState",
            current_state=current.value,
            target_state=target.value,
            allowed_transitions=[s.value for s in current.allowed_transitions()],
        )
