"""
Claim Endpoints

Students submit claims on FOUND items; staff list, approve and reject them.
"""
from typing import Optional

from fastapi import APIRouter, status

from unifind.api.deps import Workflow
from unifind.core.models import (
    ClaimApproved,
    ClaimCreate,
    ClaimList,
    ClaimRead,
    ClaimRejected,
    ClaimReview,
    ClaimSubmitted,
)
from unifind.core.states import ClaimStatus
from unifind.security import AdminPrincipal, StudentPrincipal

router = APIRouter(prefix="/claims", tags=["claims"])


@router.post("", response_model=ClaimSubmitted, status_code=status.HTTP_201_CREATED)
def submit_claim(request: ClaimCreate, student: StudentPrincipal, workflow: Workflow) -> ClaimSubmitted:
    """
    Submit a claim for a FOUND item.

    Fails with 409 if the item is not FOUND or the student already has a
    pending claim on it.
    """
    return workflow.submit_claim(student, request.item_id, request.proof_text)


@router.get("", response_model=ClaimList)
def list_claims(
    admin: AdminPrincipal,
    workflow: Workflow,
    status: Optional[ClaimStatus] = None,
) -> ClaimList:
    """List claims joined with item and claimant, newest first."""
    return workflow.list_claims(admin, status)


@router.get("/{claim_id}", response_model=ClaimRead)
def get_claim(claim_id: int, admin: AdminPrincipal, workflow: Workflow) -> ClaimRead:
    return workflow.get_claim(admin, claim_id)


@router.patch("/{claim_id}/approve", response_model=ClaimApproved)
def approve_claim(
    claim_id: int,
    admin: AdminPrincipal,
    workflow: Workflow,
    review: Optional[ClaimReview] = None,
) -> ClaimApproved:
    """
    Approve a claim.

    Side effects, all in one transaction:
    - claim becomes APPROVED
    - item becomes CLAIMED
    - status history record
    """
    note = review.admin_note if review else None
    return workflow.approve_claim(admin, claim_id, note)


@router.patch("/{claim_id}/reject", response_model=ClaimRejected)
def reject_claim(
    claim_id: int,
    admin: AdminPrincipal,
    workflow: Workflow,
    review: Optional[ClaimReview] = None,
) -> ClaimRejected:
    """Reject a claim. adminNote is required; the item is left unchanged."""
    note = review.admin_note if review else None
    return workflow.reject_claim(admin, claim_id, note)
