"""
Item Store

Owns item rows and their status field. Apart from status, no item field is
revised after creation.
"""
import logging
from typing import Dict, List

from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session

from unifind.core.errors import InvalidState, NotFound
from unifind.core.models import ItemCreate, ItemFilters, Principal
from unifind.core.states import ItemCategory, ItemStatus
from unifind.state_machine import item_state_machine
from unifind.storage.tables import Item, utcnow

logger = logging.getLogger(__name__)


def like_pattern(q: str) -> str:
    """Escape LIKE wildcards in `q` and wrap it for a substring match."""
    escaped = q.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class ItemStore:
    def __init__(self, session: Session):
        self.session = session

    def create(self, fields: ItemCreate, creator: Principal, status: ItemStatus) -> Item:
        """
        Insert a new item in one of the initial states.

        LOST items record the reporting student, FOUND items the registering
        staff member.
        """
        if status not in item_state_machine.INITIAL_STATES:
            raise InvalidState(f"Items cannot be created in status {status.value}")

        item = Item(
            title=fields.title,
            description=fields.description,
            category=fields.category or ItemCategory.OTHER,
            status=status,
            location=fields.location,
            event_date=fields.event_date,
        )
        if status == ItemStatus.LOST:
            item.reported_by_user_id = creator.id
        else:
            item.registered_by_admin_id = creator.id

        self.session.add(item)
        self.session.flush()
        return item

    def get(self, item_id: int, for_update: bool = False) -> Item:
        """
        Load an item by id.

        Raises:
            NotFound: If no item has this id
        """
        item = self.session.get(
            Item, item_id, with_for_update=for_update, populate_existing=for_update
        )
        if item is None:
            raise NotFound("Item not found")
        return item

    def list(self, filters: ItemFilters, limit: int) -> List[Item]:
        """Conjunctive filter over items, newest first, at most `limit` rows."""
        stmt = select(Item)

        if filters.status:
            stmt = stmt.where(Item.status == filters.status)
        if filters.category:
            stmt = stmt.where(Item.category == filters.category)
        if filters.q:
            pattern = like_pattern(filters.q)
            stmt = stmt.where(
                or_(
                    Item.title.ilike(pattern, escape="\\"),
                    Item.description.ilike(pattern, escape="\\"),
                    Item.location.ilike(pattern, escape="\\"),
                )
            )
        if filters.date_from:
            stmt = stmt.where(Item.event_date >= filters.date_from)
        if filters.date_to:
            stmt = stmt.where(Item.event_date <= filters.date_to)

        stmt = stmt.order_by(Item.created_at.desc(), Item.id.desc()).limit(limit)
        return list(self.session.scalars(stmt))

    def update_status(self, item_id: int, new_status: ItemStatus) -> ItemStatus:
        """
        Overwrite the status unconditionally. Returns the previous status.

        Raises:
            NotFound: If no item has this id
        """
        item = self.get(item_id, for_update=True)
        old_status = item.status
        item.status = new_status
        self.session.flush()
        return old_status

    def transition_status(self, item_id: int, expected: ItemStatus, new_status: ItemStatus) -> None:
        """
        Compare-and-set: move the item to `new_status` only if it is still
        `expected` at write time.

        Raises:
            NotFound: If no item has this id
            InvalidState: If the stored status is no longer `expected`
        """
        result = self.session.execute(
            update(Item)
            .where(Item.id == item_id, Item.status == expected)
            .values(status=new_status, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        item = self.session.get(Item, item_id, populate_existing=True)
        if result.rowcount == 1:
            return
        if item is None:
            raise NotFound("Item not found")
        logger.warning(
            f"Item {item_id} expected {expected.value} but is {item.status.value}; "
            f"refusing move to {new_status.value}"
        )
        raise InvalidState(f"Item must be {expected.value}, current status is {item.status.value}")

    def count_by_status(self) -> Dict[str, int]:
        rows = self.session.execute(
            select(Item.status, func.count(Item.id)).group_by(Item.status)
        ).all()
        counts = {status.value: 0 for status in ItemStatus}
        for status, count in rows:
            counts[status.value] = count
        return counts
