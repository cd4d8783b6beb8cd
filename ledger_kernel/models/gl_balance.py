"""
Module: ledger_kernel.models.gl_balance
Responsibility: ORM persistence for monthly per-account balance snapshots.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - One row per (account_id, period_year, period_month)
      (uq_gl_balance_account_period).
    - Amounts are Decimal / Numeric(38, 9), never float.

Audit relevance:
    Every statement figure is derived from these rows.  Beginning, ending and
    net change are stored as supplied by the ledger; they are never re-derived
    from each other.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import ForeignKey, Index, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase, UUIDString


class GLBalance(TrackedBase):
    """One account's balance snapshot for one calendar month."""

    __tablename__ = "gl_balances"

    __table_args__ = (
        UniqueConstraint(
            "account_id", "period_year", "period_month",
            name="uq_gl_balance_account_period",
        ),
        Index("idx_gl_balance_entity_period", "entity_id", "period_year", "period_month"),
    )

    account_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("accounts.id"),
        nullable=False,
    )

    entity_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("entities.id"),
        nullable=False,
    )

    period_year: Mapped[int] = mapped_column(Integer, nullable=False)

    period_month: Mapped[int] = mapped_column(Integer, nullable=False)

    beginning_balance: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)

    ending_balance: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)

    net_change: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)

    debit_total: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)

    credit_total: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
