"""
Item Endpoints

Lost reports, found registrations, the public found-item listing and the
administrative status override.
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Query, status

from unifind.api.deps import Workflow
from unifind.core.models import (
    ItemCreate,
    ItemCreated,
    ItemDetail,
    ItemFilters,
    ItemHistory,
    ItemList,
    ItemStatusChanged,
    StatusUpdate,
)
from unifind.core.states import ItemCategory
from unifind.security import AdminPrincipal, CurrentPrincipal, StudentPrincipal

router = APIRouter(prefix="/items", tags=["items"])


@router.post("/lost", response_model=ItemCreated, status_code=status.HTTP_201_CREATED)
def report_lost(fields: ItemCreate, student: StudentPrincipal, workflow: Workflow) -> ItemCreated:
    """
    Student reports a lost item.

    The item starts in LOST state and an initial audit record is written.
    """
    return workflow.report_lost(student, fields)


@router.post("/found", response_model=ItemCreated, status_code=status.HTTP_201_CREATED)
def register_found(fields: ItemCreate, admin: AdminPrincipal, workflow: Workflow) -> ItemCreated:
    """Staff registers a found item. The item starts in FOUND state."""
    return workflow.register_found(admin, fields)


@router.get("/found", response_model=ItemList)
def list_found_items(
    workflow: Workflow,
    category: Optional[ItemCategory] = None,
    q: Optional[str] = None,
    date_from: Optional[date] = Query(default=None, alias="from"),
    date_to: Optional[date] = Query(default=None, alias="to"),
) -> ItemList:
    """Public listing of FOUND items. No authentication required."""
    filters = ItemFilters(category=category, q=q, date_from=date_from, date_to=date_to)
    return workflow.list_found_items(filters)


@router.get("/{item_id}", response_model=ItemDetail)
def get_item(item_id: int, principal: CurrentPrincipal, workflow: Workflow) -> ItemDetail:
    return workflow.get_item(item_id)


@router.get("/{item_id}/history", response_model=ItemHistory)
def get_item_history(item_id: int, admin: AdminPrincipal, workflow: Workflow) -> ItemHistory:
    """Status audit trail for an item, oldest first."""
    return workflow.item_history(admin, item_id)


@router.patch("/{item_id}/status", response_model=ItemStatusChanged)
def update_item_status(
    item_id: int,
    update: StatusUpdate,
    admin: AdminPrincipal,
    workflow: Workflow,
) -> ItemStatusChanged:
    """
    Administrative override of an item's status.

    Any status may be imposed (e.g. archiving, or correcting a mistake); the
    change is always written to the audit trail.
    """
    return workflow.set_item_status(admin, item_id, update.new_status, update.reason)
