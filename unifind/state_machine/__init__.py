from .machine import ClaimStateMachine, ItemStateMachine, claim_state_machine, item_state_machine

__all__ = ["ClaimStateMachine", "ItemStateMachine", "claim_state_machine", "item_state_machine"]
