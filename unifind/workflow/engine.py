"""
Workflow Engine

Enforces the item and claim state machines and couples them together. Every
operation runs in exactly one database transaction: either all of its writes
(item, claim, audit row) commit, or none do.
"""
import logging
from contextlib import contextmanager
from typing import Iterator, Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from unifind.config import Settings, settings as default_settings
from unifind.core.errors import (
    Conflict,
    Forbidden,
    InvalidState,
    StoreUnavailable,
    ValidationError,
    WorkflowError,
)
from unifind.core.models import (
    ClaimApproved,
    ClaimList,
    ClaimRead,
    ClaimRejected,
    ClaimSubmitted,
    ItemCreate,
    ItemCreated,
    ItemDetail,
    ItemFilters,
    ItemHistory,
    ItemList,
    ItemRead,
    ItemStatusChanged,
    Principal,
    StatusHistoryEntry,
    WorkflowSummary,
)
from unifind.core.states import ClaimStatus, ItemStatus, Role
from unifind.state_machine import claim_state_machine, item_state_machine
from unifind.storage import AuditLogWriter, ClaimStore, ItemStore, UserDirectory
from unifind.storage.claims import DUPLICATE_PENDING_MESSAGE

logger = logging.getLogger(__name__)

# (attribute, wire name) of the fields a report or registration must carry
REQUIRED_ITEM_FIELDS = (
    ("title", "title"),
    ("description", "description"),
    ("location", "location"),
    ("event_date", "eventDate"),
)


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _clean(value: Optional[str]) -> Optional[str]:
    """Strip text input; blank becomes None."""
    if value is None:
        return None
    value = value.strip()
    return value or None


class WorkflowEngine:
    """
    Orchestrates reports, registrations, claims, reviews and status overrides.

    The engine is stateless apart from its session factory; callers create
    one per application (or per test) and share it across requests.
    """

    def __init__(self, session_factory: sessionmaker, settings: Settings = default_settings):
        self.session_factory = session_factory
        self.settings = settings

    @contextmanager
    def _transaction(self, operation: str) -> Iterator[Session]:
        """
        Open a session and a transaction for one workflow operation.

        Business errors propagate untouched after rollback. Database failures
        are reported as StoreUnavailable.
        """
        session = self.session_factory()
        try:
            with session.begin():
                yield session
        except WorkflowError:
            raise
        except SQLAlchemyError as e:
            logger.error(f"{operation} failed in the store: {e}")
            raise StoreUnavailable(f"Store unavailable during {operation}") from e
        finally:
            session.close()

    @staticmethod
    def _require_role(principal: Principal, role: Role) -> None:
        if principal.role != role:
            raise Forbidden(f"{role.value} role required")

    # ============================================
    # ITEM CREATION
    # ============================================

    def _validate_item_fields(self, fields: ItemCreate) -> ItemCreate:
        missing = [wire for attr, wire in REQUIRED_ITEM_FIELDS if _blank(getattr(fields, attr))]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")
        return fields.model_copy(
            update={
                "title": fields.title.strip(),
                "description": fields.description.strip(),
                "location": fields.location.strip(),
            }
        )

    def _create_item(
        self,
        operation: str,
        principal: Principal,
        fields: ItemCreate,
        status: ItemStatus,
        reason: str,
    ) -> ItemCreated:
        fields = self._validate_item_fields(fields)

        with self._transaction(operation) as session:
            UserDirectory(session).ensure(principal)
            item = ItemStore(session).create(fields, principal, status)
            AuditLogWriter(session).append(item.id, None, status, principal.id, reason)
            item_id = item.id

        logger.info(f"Item {item_id} created as {status.value} by user {principal.id}")
        return ItemCreated(id=item_id, status=status)

    def report_lost(self, reporter: Principal, fields: ItemCreate) -> ItemCreated:
        """Student reports a lost item. The item starts LOST."""
        self._require_role(reporter, Role.STUDENT)
        return self._create_item(
            "report_lost", reporter, fields, ItemStatus.LOST, "Initial lost item report"
        )

    def register_found(self, staff: Principal, fields: ItemCreate) -> ItemCreated:
        """Staff registers a found item. The item starts FOUND."""
        self._require_role(staff, Role.ADMIN)
        return self._create_item(
            "register_found", staff, fields, ItemStatus.FOUND, "Initial found item registration"
        )

    # ============================================
    # CLAIMS
    # ============================================

    def submit_claim(
        self,
        student: Principal,
        item_id: Optional[int],
        proof_text: Optional[str] = None,
    ) -> ClaimSubmitted:
        """
        Student claims a FOUND item. The item status is not touched.

        Raises:
            ValidationError: If item_id is missing
            NotFound: If the item does not exist
            InvalidState: If the item is not FOUND
            Conflict: If the student already has a PENDING claim on the item
        """
        self._require_role(student, Role.STUDENT)
        if not item_id:
            raise ValidationError("Missing itemId")

        with self._transaction("submit_claim") as session:
            UserDirectory(session).ensure(student)
            item = ItemStore(session).get(item_id)
            if item.status != ItemStatus.FOUND:
                raise InvalidState("Item must be FOUND to claim")

            claims = ClaimStore(session)
            if claims.find_pending(item_id, student.id) is not None:
                raise Conflict(DUPLICATE_PENDING_MESSAGE)

            claim = claims.create(item_id, student.id, _clean(proof_text))
            claim_id = claim.id

        logger.info(f"Claim {claim_id} submitted on item {item_id} by user {student.id}")
        return ClaimSubmitted(claim_id=claim_id, status=ClaimStatus.PENDING)

    def approve_claim(
        self,
        admin: Principal,
        claim_id: int,
        note: Optional[str] = None,
    ) -> ClaimApproved:
        """
        Approve a PENDING claim and hand the item over.

        The claim, the item and the audit row are written in one transaction.
        The item is re-read under lock and moved with a compare-and-set on
        FOUND, so of two approvals racing for the same item only one can win;
        the loser gets InvalidState and its claim stays PENDING.

        Raises:
            NotFound: If the claim or its item does not exist
            InvalidState: If the claim is not PENDING or the item is not FOUND
        """
        self._require_role(admin, Role.ADMIN)
        note = _clean(note)

        with self._transaction("approve_claim") as session:
            UserDirectory(session).ensure(admin)
            claims = ClaimStore(session)
            items = ItemStore(session)

            claim = claims.get(claim_id, for_update=True)
            if not claim_state_machine.can_transition(claim.status, ClaimStatus.APPROVED):
                raise InvalidState("Only PENDING claims can be approved")

            item = items.get(claim.item_id, for_update=True)
            if item.status != ItemStatus.FOUND:
                logger.warning(
                    f"Approval of claim {claim_id} refused: item {item.id} is {item.status.value}"
                )
                raise InvalidState("Item must be FOUND to approve claim")

            item_id = item.id
            old_status = item.status
            claims.review(claim_id, ClaimStatus.APPROVED, note, admin)
            items.transition_status(item_id, ItemStatus.FOUND, ItemStatus.CLAIMED)
            AuditLogWriter(session).append(
                item_id, old_status, ItemStatus.CLAIMED, admin.id, note or "Claim approved"
            )

        logger.info(f"Claim {claim_id} approved by user {admin.id}; item {item_id} is CLAIMED")
        return ClaimApproved(
            claim_id=claim_id,
            claim_status=ClaimStatus.APPROVED,
            item_id=item_id,
            item_status=ItemStatus.CLAIMED,
        )

    def reject_claim(self, admin: Principal, claim_id: int, note: Optional[str]) -> ClaimRejected:
        """
        Reject a PENDING claim. A note is mandatory; the item stays as it is.

        Raises:
            ValidationError: If the note is missing or blank
            NotFound: If the claim does not exist
            InvalidState: If the claim is not PENDING
        """
        self._require_role(admin, Role.ADMIN)
        note = _clean(note)
        if note is None:
            raise ValidationError("adminNote is required for rejection")

        with self._transaction("reject_claim") as session:
            UserDirectory(session).ensure(admin)
            claims = ClaimStore(session)
            claim = claims.get(claim_id, for_update=True)
            if not claim_state_machine.can_transition(claim.status, ClaimStatus.REJECTED):
                raise InvalidState("Only PENDING claims can be rejected")
            claims.review(claim_id, ClaimStatus.REJECTED, note, admin)

        logger.warning(f"Claim {claim_id} rejected by user {admin.id}: {note}")
        return ClaimRejected(claim_id=claim_id, claim_status=ClaimStatus.REJECTED)

    # ============================================
    # ADMINISTRATIVE OVERRIDE
    # ============================================

    def set_item_status(
        self,
        admin: Principal,
        item_id: int,
        new_status: Union[ItemStatus, str, None],
        reason: Optional[str] = None,
    ) -> ItemStatusChanged:
        """
        Impose any item status directly.

        This is the escape hatch for archiving and corrections: the transition
        table is not enforced, only that the item exists and the status is one
        of the four known values. Moves outside the table are logged.

        Raises:
            ValidationError: If new_status is missing or unknown
            NotFound: If the item does not exist
        """
        self._require_role(admin, Role.ADMIN)
        if _blank(new_status):
            raise ValidationError("Missing newStatus")
        try:
            target = ItemStatus(new_status)
        except ValueError:
            valid = [s.value for s in ItemStatus]
            raise ValidationError(f"Invalid status {new_status}. Valid statuses: {valid}")

        with self._transaction("set_item_status") as session:
            UserDirectory(session).ensure(admin)
            old_status = ItemStore(session).update_status(item_id, target)
            AuditLogWriter(session).append(
                item_id, old_status, target, admin.id, _clean(reason) or "Admin status update"
            )

        if not item_state_machine.is_conventional(old_status, target):
            logger.warning(
                f"Admin override on item {item_id}: {old_status.value} -> {target.value} "
                f"is outside the normal transition table (user {admin.id})"
            )
        else:
            logger.info(f"Item {item_id} moved {old_status.value} -> {target.value} by user {admin.id}")

        return ItemStatusChanged(id=item_id, old_status=old_status, new_status=target)

    # ============================================
    # READS
    # ============================================

    def get_item(self, item_id: int) -> ItemDetail:
        with self._transaction("get_item") as session:
            detail = ItemDetail.model_validate(ItemStore(session).get(item_id))
        detail.next_statuses = item_state_machine.get_valid_transitions(detail.status)
        return detail

    def item_history(self, admin: Principal, item_id: int) -> ItemHistory:
        self._require_role(admin, Role.ADMIN)
        with self._transaction("item_history") as session:
            ItemStore(session).get(item_id)
            entries = [
                StatusHistoryEntry.model_validate(row)
                for row in AuditLogWriter(session).history(item_id)
            ]
        return ItemHistory(item_id=item_id, count=len(entries), history=entries)

    def list_found_items(self, filters: Optional[ItemFilters] = None) -> ItemList:
        """Public listing: FOUND items only, whatever status the filter asks for."""
        filters = (filters or ItemFilters()).model_copy(update={"status": ItemStatus.FOUND})
        return self._list_items("list_found_items", filters, self.settings.PUBLIC_PAGE_SIZE)

    def list_items(self, admin: Principal, filters: Optional[ItemFilters] = None) -> ItemList:
        """Admin listing over every status."""
        self._require_role(admin, Role.ADMIN)
        return self._list_items(
            "list_items", filters or ItemFilters(), self.settings.ADMIN_PAGE_SIZE
        )

    def _list_items(self, operation: str, filters: ItemFilters, limit: int) -> ItemList:
        with self._transaction(operation) as session:
            items = [ItemRead.model_validate(row) for row in ItemStore(session).list(filters, limit)]
        return ItemList(count=len(items), items=items)

    def get_claim(self, admin: Principal, claim_id: int) -> ClaimRead:
        self._require_role(admin, Role.ADMIN)
        with self._transaction("get_claim") as session:
            return ClaimRead.model_validate(ClaimStore(session).get(claim_id))

    def list_claims(self, admin: Principal, status: Optional[ClaimStatus] = None) -> ClaimList:
        self._require_role(admin, Role.ADMIN)
        with self._transaction("list_claims") as session:
            claims = ClaimStore(session).list(status, self.settings.CLAIM_PAGE_SIZE)
        return ClaimList(count=len(claims), claims=claims)

    def summary(self, admin: Principal) -> WorkflowSummary:
        """Counts per item and claim status for the dashboard."""
        self._require_role(admin, Role.ADMIN)
        with self._transaction("summary") as session:
            items_by_status = ItemStore(session).count_by_status()
            claims_by_status = ClaimStore(session).count_by_status()
        return WorkflowSummary(
            total_items=sum(items_by_status.values()),
            items_by_status=items_by_status,
            total_claims=sum(claims_by_status.values()),
            claims_by_status=claims_by_status,
        )
