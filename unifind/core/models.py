"""
UniFind Pydantic Models

Defines the principal, the request payloads and the read-side views returned
by the workflow engine. Field names are snake_case in Python and camelCase on
the wire.
"""
from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .states import ClaimStatus, ItemCategory, ItemStatus, Role


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Principal(CamelModel):
    """Authenticated caller as resolved by the request layer."""
    id: int = Field(..., description="User id")
    role: Role = Field(..., description="STUDENT or ADMIN")
    email: str = Field(default="", description="Contact email")
    full_name: str = Field(default="", description="Display name")
    university_id: Optional[str] = Field(default=None, description="Campus id number")

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


# ============================================
# REQUEST PAYLOADS
# ============================================

class ItemCreate(CamelModel):
    """
    Fields for a lost report or a found registration.

    Presence of the required fields is checked by the workflow engine so a
    missing field surfaces as a ValidationError rather than a schema error.
    """
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[ItemCategory] = Field(default=None, description="Defaults to OTHER")
    location: Optional[str] = None
    event_date: Optional[date] = Field(default=None, description="Date the item was lost or found")


class ItemFilters(CamelModel):
    """Conjunctive filters for item listings."""
    status: Optional[ItemStatus] = None
    category: Optional[ItemCategory] = None
    q: Optional[str] = Field(default=None, description="Substring over title, description and location")
    date_from: Optional[date] = Field(default=None, alias="from")
    date_to: Optional[date] = Field(default=None, alias="to")


class ClaimCreate(CamelModel):
    item_id: Optional[int] = None
    proof_text: Optional[str] = None


class ClaimReview(CamelModel):
    admin_note: Optional[str] = None


class StatusUpdate(CamelModel):
    new_status: Optional[str] = Field(default=None, description="Any item status")
    reason: Optional[str] = None


# ============================================
# READ-SIDE VIEWS
# ============================================

class ItemRead(CamelModel):
    id: int
    title: str
    description: str
    category: ItemCategory
    status: ItemStatus
    location: str
    event_date: date
    reported_by_user_id: Optional[int] = None
    registered_by_admin_id: Optional[int] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class ItemDetail(ItemRead):
    """An item plus the statuses it may move to through the normal flow."""
    next_statuses: List[ItemStatus] = Field(default_factory=list)


class ClaimRead(CamelModel):
    id: int
    item_id: int
    student_user_id: int
    proof_text: Optional[str] = None
    status: ClaimStatus
    admin_note: Optional[str] = None
    reviewed_by_admin_id: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    created_at: datetime


class ClaimListing(CamelModel):
    """A claim joined with its item and claimant for review screens."""
    claim_id: int
    claim_status: ClaimStatus
    proof_text: Optional[str] = None
    admin_note: Optional[str] = None
    created_at: datetime
    item_id: int
    title: str
    category: ItemCategory
    location: str
    item_status: ItemStatus
    student_id: int
    student_name: str
    student_email: str


class StatusHistoryEntry(CamelModel):
    id: int
    item_id: int
    old_status: Optional[ItemStatus] = None
    new_status: ItemStatus
    changed_by_user_id: Optional[int] = None
    change_reason: Optional[str] = None
    changed_at: datetime


# ============================================
# OPERATION RESULTS
# ============================================

class ItemCreated(CamelModel):
    id: int
    status: ItemStatus


class ClaimSubmitted(CamelModel):
    claim_id: int
    status: ClaimStatus


class ClaimApproved(CamelModel):
    claim_id: int
    claim_status: ClaimStatus
    item_id: int
    item_status: ItemStatus


class ClaimRejected(CamelModel):
    claim_id: int
    claim_status: ClaimStatus


class ItemStatusChanged(CamelModel):
    id: int
    old_status: ItemStatus
    new_status: ItemStatus


class ItemList(CamelModel):
    count: int
    items: List[ItemRead]


class ClaimList(CamelModel):
    count: int
    claims: List[ClaimListing]


class ItemHistory(CamelModel):
    item_id: int
    count: int
    history: List[StatusHistoryEntry]


class WorkflowSummary(CamelModel):
    """Counts for the staff dashboard."""
    total_items: int
    items_by_status: Dict[str, int]
    total_claims: int
    claims_by_status: Dict[str, int]
