# Core module - states, models and errors
from .states import ClaimStatus, ItemCategory, ItemStatus, Role
from .models import Principal, ItemCreate, ItemFilters, ClaimCreate, ClaimReview, StatusUpdate
from .errors import WorkflowError, ValidationError, NotFound, InvalidState, Conflict, StoreUnavailable, Forbidden

__all__ = [
    "ClaimStatus",
    "ItemCategory",
    "ItemStatus",
    "Role",
    "Principal",
    "ItemCreate",
    "ItemFilters",
    "ClaimCreate",
    "ClaimReview",
    "StatusUpdate",
    "WorkflowError",
    "ValidationError",
    "NotFound",
    "InvalidState",
    "Conflict",
    "StoreUnavailable",
    "Forbidden",
]
