"""
Audit Log Writer

Appends item status changes to item_status_history. Rows are never updated or
deleted, and the writer raises no business errors: it runs inside the
caller's transaction and fails only when the store does.
"""
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from unifind.core.states import ItemStatus
from unifind.storage.tables import ItemStatusHistory


class AuditLogWriter:
    def __init__(self, session: Session):
        self.session = session

    def append(
        self,
        item_id: int,
        old_status: Optional[ItemStatus],
        new_status: ItemStatus,
        changed_by_user_id: Optional[int],
        reason: Optional[str],
    ) -> ItemStatusHistory:
        """Record one transition. `old_status` is None for the creation event."""
        entry = ItemStatusHistory(
            item_id=item_id,
            old_status=old_status,
            new_status=new_status,
            changed_by_user_id=changed_by_user_id,
            change_reason=reason,
        )
        self.session.add(entry)
        self.session.flush()
        return entry

    def history(self, item_id: int) -> List[ItemStatusHistory]:
        """All entries for an item, oldest first."""
        return list(
            self.session.scalars(
                select(ItemStatusHistory)
                .where(ItemStatusHistory.item_id == item_id)
                .order_by(ItemStatusHistory.id)
            )
        )
