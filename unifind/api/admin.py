"""Admin Endpoints: filtered item listings and dashboard counts."""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Query

from unifind.api.deps import Workflow
from unifind.core.models import ItemFilters, ItemList, WorkflowSummary
from unifind.core.states import ItemCategory, ItemStatus
from unifind.security import AdminPrincipal

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/items", response_model=ItemList)
def list_items(
    admin: AdminPrincipal,
    workflow: Workflow,
    status: Optional[ItemStatus] = None,
    category: Optional[ItemCategory] = None,
    q: Optional[str] = None,
    date_from: Optional[date] = Query(default=None, alias="from"),
    date_to: Optional[date] = Query(default=None, alias="to"),
) -> ItemList:
    """All items with optional filters, newest first."""
    filters = ItemFilters(
        status=status, category=category, q=q, date_from=date_from, date_to=date_to
    )
    return workflow.list_items(admin, filters)


@router.get("/items/lost", response_model=ItemList)
def list_lost_items(admin: AdminPrincipal, workflow: Workflow) -> ItemList:
    return workflow.list_items(admin, ItemFilters(status=ItemStatus.LOST))


@router.get("/items/claimed", response_model=ItemList)
def list_claimed_items(admin: AdminPrincipal, workflow: Workflow) -> ItemList:
    return workflow.list_items(admin, ItemFilters(status=ItemStatus.CLAIMED))


@router.get("/summary", response_model=WorkflowSummary)
def get_summary(admin: AdminPrincipal, workflow: Workflow) -> WorkflowSummary:
    """Summary statistics for the dashboard."""
    return workflow.summary(admin)
