"""
Claim Store

Owns claim rows. Reviews are guarded updates so a claim is decided exactly
once, even when two reviewers race.
"""
import logging
from typing import Dict, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from unifind.core.errors import Conflict, InvalidState, NotFound
from unifind.core.models import ClaimListing, Principal
from unifind.core.states import ClaimStatus
from unifind.storage.tables import Claim, Item, User, utcnow

logger = logging.getLogger(__name__)

DUPLICATE_PENDING_MESSAGE = "You already have a pending claim for this item"

_REVIEW_VERBS = {
    ClaimStatus.APPROVED: "approved",
    ClaimStatus.REJECTED: "rejected",
}


class ClaimStore:
    def __init__(self, session: Session):
        self.session = session

    def create(self, item_id: int, student_id: int, proof_text: Optional[str]) -> Claim:
        """
        Insert a PENDING claim.

        Raises:
            Conflict: If the student already holds a PENDING claim on the item
        """
        claim = Claim(
            item_id=item_id,
            student_user_id=student_id,
            proof_text=proof_text,
            status=ClaimStatus.PENDING,
        )
        try:
            with self.session.begin_nested():
                self.session.add(claim)
                self.session.flush()
        except IntegrityError:
            # The partial unique index caught a duplicate that slipped past
            # the engine's pre-check.
            if self.find_pending(item_id, student_id) is not None:
                logger.warning(f"Duplicate pending claim on item {item_id} by user {student_id}")
                raise Conflict(DUPLICATE_PENDING_MESSAGE)
            raise
        return claim

    def get(self, claim_id: int, for_update: bool = False) -> Claim:
        """
        Raises:
            NotFound: If no claim has this id
        """
        claim = self.session.get(
            Claim, claim_id, with_for_update=for_update, populate_existing=for_update
        )
        if claim is None:
            raise NotFound("Claim not found")
        return claim

    def find_pending(self, item_id: int, student_id: int) -> Optional[Claim]:
        return self.session.scalars(
            select(Claim)
            .where(
                Claim.item_id == item_id,
                Claim.student_user_id == student_id,
                Claim.status == ClaimStatus.PENDING,
            )
            .limit(1)
        ).first()

    def review(
        self,
        claim_id: int,
        decision: ClaimStatus,
        note: Optional[str],
        reviewer: Principal,
    ) -> Claim:
        """
        Decide a PENDING claim.

        Raises:
            NotFound: If no claim has this id
            InvalidState: If the claim has already been decided
        """
        if decision not in _REVIEW_VERBS:
            raise ValueError(f"Claims cannot be reviewed to {decision.value}")

        claim = self.get(claim_id)
        result = self.session.execute(
            update(Claim)
            .where(Claim.id == claim_id, Claim.status == ClaimStatus.PENDING)
            .values(
                status=decision,
                admin_note=note,
                reviewed_by_admin_id=reviewer.id,
                reviewed_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise InvalidState(f"Only PENDING claims can be {_REVIEW_VERBS[decision]}")

        self.session.refresh(claim)
        return claim

    def list(self, status: Optional[ClaimStatus], limit: int) -> List[ClaimListing]:
        """Claims joined with their item and claimant, newest first."""
        stmt = (
            select(Claim, Item, User)
            .join(Item, Item.id == Claim.item_id)
            .join(User, User.id == Claim.student_user_id)
        )
        if status:
            stmt = stmt.where(Claim.status == status)
        stmt = stmt.order_by(Claim.created_at.desc(), Claim.id.desc()).limit(limit)

        return [
            ClaimListing(
                claim_id=claim.id,
                claim_status=claim.status,
                proof_text=claim.proof_text,
                admin_note=claim.admin_note,
                created_at=claim.created_at,
                item_id=item.id,
                title=item.title,
                category=item.category,
                location=item.location,
                item_status=item.status,
                student_id=user.id,
                student_name=user.full_name,
                student_email=user.email,
            )
            for claim, item, user in self.session.execute(stmt).all()
        ]

    def count_by_status(self) -> Dict[str, int]:
        rows = self.session.execute(
            select(Claim.status, func.count(Claim.id)).group_by(Claim.status)
        ).all()
        counts = {status.value: 0 for status in ClaimStatus}
        for status, count in rows:
            counts[status.value] = count
        return counts
