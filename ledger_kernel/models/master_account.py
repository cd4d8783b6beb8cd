"""
Module: ledger_kernel.models.master_account
Responsibility: ORM persistence for an organization's consolidated chart of
    accounts (master accounts) and explicit entity-account mappings.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - mapping_rules is a JSON array of rule objects with any of the keys
      account_number, account_number_prefix, name_contains, name_exact,
      account_type.
    - An entity account appears at most once in master_account_mappings
      (uq_master_mapping_account).

Audit relevance:
    Explicit mappings override rule matching.  Together they decide which
    entity balances roll into each consolidated line.
"""

from typing import Any
from uuid import UUID

from sqlalchemy import JSON, Boolean, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase, UUIDString


class MasterAccount(TrackedBase):
    """A consolidated account that many entity accounts may map into."""

    __tablename__ = "master_accounts"

    __table_args__ = (
        Index("idx_master_account_org", "organization_id"),
    )

    organization_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("organizations.id"),
        nullable=False,
    )

    account_number: Mapped[str] = mapped_column(String(50), nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    classification: Mapped[str] = mapped_column(String(20), nullable=False)

    account_type: Mapped[str] = mapped_column(String(100), nullable=False)

    normal_balance: Mapped[str] = mapped_column(String(10), default="debit", nullable=False)

    # Template evaluation order; lower wins
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    mapping_rules: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class MasterAccountMapping(TrackedBase):
    """Explicit (master account, entity, account) assignment."""

    __tablename__ = "master_account_mappings"

    __table_args__ = (
        UniqueConstraint("account_id", name="uq_master_mapping_account"),
        Index("idx_master_mapping_master", "master_account_id"),
    )

    master_account_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("master_accounts.id"),
        nullable=False,
    )

    entity_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("entities.id"),
        nullable=False,
    )

    account_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("accounts.id"),
        nullable=False,
    )
