"""
Module: ledger_kernel.models.fixed_asset
Responsibility: ORM persistence for fixed assets and their externally
    computed monthly depreciation schedule.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - One schedule row per (fixed_asset_id, period_year, period_month).
    - The statement engine never computes depreciation; it only sums
      book_depreciation from this table.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase, UUIDString


class FixedAsset(TrackedBase):
    """A depreciable asset owned by an entity."""

    __tablename__ = "fixed_assets"

    entity_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("entities.id"),
        nullable=False,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    status: Mapped[str] = mapped_column(String(20), default="active", nullable=False)


class FixedAssetDepreciation(TrackedBase):
    """One month of a fixed asset's depreciation schedule."""

    __tablename__ = "fixed_asset_depreciation"

    __table_args__ = (
        UniqueConstraint(
            "fixed_asset_id", "period_year", "period_month",
            name="uq_depreciation_asset_period",
        ),
        Index("idx_depreciation_entity_year", "entity_id", "period_year"),
    )

    fixed_asset_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("fixed_assets.id"),
        nullable=False,
    )

    entity_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("entities.id"),
        nullable=False,
    )

    period_year: Mapped[int] = mapped_column(Integer, nullable=False)

    period_month: Mapped[int] = mapped_column(Integer, nullable=False)

    book_depreciation: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)

    tax_depreciation: Mapped[Decimal] = mapped_column(default=Decimal("0"), nullable=False)
