"""
Item and Claim State Machines

Transition tables for the item and claim lifecycles. The workflow engine asks
these before every conventional transition.
"""
from typing import Dict, List, Set

from unifind.core.states import ClaimStatus, ItemStatus


class ItemStateMachine:
    """
    State machine for item status.

    LOST and FOUND are initial states only; nothing transitions into them
    through the normal flow. ARCHIVED is terminal. Administrative overrides
    bypass this table on purpose, see `is_conventional`.
    """

    INITIAL_STATES: Set[ItemStatus] = {ItemStatus.LOST, ItemStatus.FOUND}

    # Define valid transitions (from_state -> set of valid to_states)
    TRANSITIONS: Dict[ItemStatus, Set[ItemStatus]] = {
        ItemStatus.LOST: {ItemStatus.ARCHIVED},
        ItemStatus.FOUND: {ItemStatus.CLAIMED, ItemStatus.ARCHIVED},
        ItemStatus.CLAIMED: {ItemStatus.ARCHIVED},
        ItemStatus.ARCHIVED: set()  # Terminal state
    }

    def get_valid_transitions(self, current: ItemStatus) -> List[ItemStatus]:
        return sorted(self.TRANSITIONS.get(current, set()), key=lambda s: s.value)

    def can_transition(self, current: ItemStatus, target: ItemStatus) -> bool:
        return target in self.TRANSITIONS.get(current, set())

    def is_conventional(self, current: ItemStatus, target: ItemStatus) -> bool:
        """True when `current -> target` follows the table (no-op writes included)."""
        return current == target or self.can_transition(current, target)


class ClaimStateMachine:
    """PENDING is the only non-terminal claim state."""

    TRANSITIONS: Dict[ClaimStatus, Set[ClaimStatus]] = {
        ClaimStatus.PENDING: {ClaimStatus.APPROVED, ClaimStatus.REJECTED},
        ClaimStatus.APPROVED: set(),
        ClaimStatus.REJECTED: set(),
    }

    def get_valid_transitions(self, current: ClaimStatus) -> List[ClaimStatus]:
        return sorted(self.TRANSITIONS.get(current, set()), key=lambda s: s.value)

    def can_transition(self, current: ClaimStatus, target: ClaimStatus) -> bool:
        return target in self.TRANSITIONS.get(current, set())


item_state_machine = ItemStateMachine()
claim_state_machine = ClaimStateMachine()
