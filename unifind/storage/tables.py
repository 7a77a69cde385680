"""
UniFind Database Models

Four tables: users, items, claims and item_status_history.
"""
from datetime import date, datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from unifind.core.states import ClaimStatus, ItemCategory, ItemStatus, Role
from unifind.db import Base


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the timezone-less DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _enum(enum_cls, name: str) -> Enum:
    # Store the plain string values; no native ENUM type so SQLite and
    # PostgreSQL share one schema.
    return Enum(
        enum_cls,
        name=name,
        native_enum=False,
        validate_strings=True,
        values_callable=lambda e: [m.value for m in e],
        length=20,
    )


class User(Base):
    """Identity of an authenticated principal. Holds no credentials."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    university_id: Mapped[Optional[str]] = mapped_column(String(50))
    full_name: Mapped[str] = mapped_column(String(200), default="")
    email: Mapped[str] = mapped_column(String(200), default="")
    role: Mapped[Role] = mapped_column(_enum(Role, "user_role"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)


class Item(Base):
    __tablename__ = "items"
    __table_args__ = (
        # Exactly one creator reference is set
        CheckConstraint(
            "(reported_by_user_id IS NULL) <> (registered_by_admin_id IS NULL)",
            name="ck_items_single_creator",
        ),
        Index("ix_items_status_created", "status", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[ItemCategory] = mapped_column(
        _enum(ItemCategory, "item_category"), nullable=False, default=ItemCategory.OTHER
    )
    status: Mapped[ItemStatus] = mapped_column(_enum(ItemStatus, "item_status"), nullable=False)
    location: Mapped[str] = mapped_column(String(200), nullable=False)
    event_date: Mapped[date] = mapped_column(Date, nullable=False)
    reported_by_user_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id"))
    registered_by_admin_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id"))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    claims: Mapped[List["Claim"]] = relationship(back_populates="item")
    history: Mapped[List["ItemStatusHistory"]] = relationship(
        back_populates="item", order_by="ItemStatusHistory.id"
    )


class Claim(Base):
    __tablename__ = "claims"
    __table_args__ = (
        # At most one PENDING claim per (item, student)
        Index(
            "uq_claims_pending_per_student",
            "item_id",
            "student_user_id",
            unique=True,
            sqlite_where=text("status = 'PENDING'"),
            postgresql_where=text("status = 'PENDING'"),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    item_id: Mapped[int] = mapped_column(ForeignKey("items.id"), nullable=False, index=True)
    student_user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    proof_text: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[ClaimStatus] = mapped_column(
        _enum(ClaimStatus, "claim_status"), nullable=False, default=ClaimStatus.PENDING
    )
    admin_note: Mapped[Optional[str]] = mapped_column(Text)
    reviewed_by_admin_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id"))
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    item: Mapped[Item] = relationship(back_populates="claims")
    student: Mapped[User] = relationship(foreign_keys=[student_user_id])


class ItemStatusHistory(Base):
    """Append-only audit trail of item status changes."""

    __tablename__ = "item_status_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    item_id: Mapped[int] = mapped_column(ForeignKey("items.id"), nullable=False, index=True)
    old_status: Mapped[Optional[ItemStatus]] = mapped_column(_enum(ItemStatus, "item_status"))
    new_status: Mapped[ItemStatus] = mapped_column(_enum(ItemStatus, "item_status"), nullable=False)
    changed_by_user_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id"))
    change_reason: Mapped[Optional[str]] = mapped_column(Text)
    changed_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    item: Mapped[Item] = relationship(back_populates="history")
