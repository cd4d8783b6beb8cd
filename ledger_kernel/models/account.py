"""
Module: ledger_kernel.models.account
Responsibility: ORM persistence for entity-level chart of accounts rows as
    synchronized from the external accounting system.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - classification is one of Asset, Liability, Equity, Revenue, Expense.
    - account_type is the native type string from the source ledger (e.g.
      "Bank", "Accounts Receivable", "Cost of Goods Sold").  Report-time
      reclassification never writes back to this column.

Audit relevance:
    Statement placement is derived from (classification, account_type).  The
    row is the system of record; statement builders only ever work on
    in-memory copies.
"""

from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase, UUIDString


class Classification(str, Enum):
    """Top-level statement classification of an account."""

    ASSET = "Asset"
    LIABILITY = "Liability"
    EQUITY = "Equity"
    REVENUE = "Revenue"
    EXPENSE = "Expense"


class Account(TrackedBase):
    """
    Chart of accounts entry for a single entity.

    Guarantees:
        - entity_id is non-null; accounts are never shared across entities.
        - account_number may be null (some ledgers do not number accounts).
    """

    __tablename__ = "accounts"

    __table_args__ = (
        Index("idx_account_entity", "entity_id"),
        Index("idx_account_active", "is_active"),
    )

    entity_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("entities.id"),
        nullable=False,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    account_number: Mapped[str | None] = mapped_column(String(50), nullable=True)

    classification: Mapped[str] = mapped_column(String(20), nullable=False)

    account_type: Mapped[str] = mapped_column(String(100), nullable=False)

    # Latest balance reported by the source ledger
    current_balance: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
