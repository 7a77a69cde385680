# Storage module - tables and stores
from .tables import Claim, Item, ItemStatusHistory, User
from .items import ItemStore
from .claims import ClaimStore
from .audit import AuditLogWriter
from .users import UserDirectory

__all__ = [
    "Claim",
    "Item",
    "ItemStatusHistory",
    "User",
    "ItemStore",
    "ClaimStore",
    "AuditLogWriter",
    "UserDirectory",
]
