import pytest

from unifind.core.states import ClaimStatus, ItemStatus
from unifind.state_machine import claim_state_machine, item_state_machine


class TestItemStateMachine:
    @pytest.mark.parametrize(
        "current,expected",
        [
            (ItemStatus.LOST, [ItemStatus.ARCHIVED]),
            (ItemStatus.FOUND, [ItemStatus.ARCHIVED, ItemStatus.CLAIMED]),
            (ItemStatus.CLAIMED, [ItemStatus.ARCHIVED]),
            (ItemStatus.ARCHIVED, []),
        ],
    )
    def test_valid_transitions(self, current, expected):
        assert item_state_machine.get_valid_transitions(current) == expected

    def test_nothing_moves_into_initial_states(self):
        for current in ItemStatus:
            for initial in item_state_machine.INITIAL_STATES:
                assert not item_state_machine.can_transition(current, initial)

    def test_archived_is_terminal(self):
        for target in ItemStatus:
            assert not item_state_machine.can_transition(ItemStatus.ARCHIVED, target)

    def test_is_conventional(self):
        assert item_state_machine.is_conventional(ItemStatus.FOUND, ItemStatus.CLAIMED)
        assert item_state_machine.is_conventional(ItemStatus.FOUND, ItemStatus.FOUND)
        assert not item_state_machine.is_conventional(ItemStatus.ARCHIVED, ItemStatus.FOUND)
        assert not item_state_machine.is_conventional(ItemStatus.LOST, ItemStatus.CLAIMED)


class TestClaimStateMachine:
    def test_pending_can_be_decided(self):
        assert claim_state_machine.get_valid_transitions(ClaimStatus.PENDING) == [
            ClaimStatus.APPROVED,
            ClaimStatus.REJECTED,
        ]

    @pytest.mark.parametrize("decided", [ClaimStatus.APPROVED, ClaimStatus.REJECTED])
    def test_decisions_are_terminal(self, decided):
        assert claim_state_machine.get_valid_transitions(decided) == []
        assert not claim_state_machine.can_transition(decided, ClaimStatus.PENDING)
