"""
Module: ledger_kernel.models.organization
Responsibility: ORM persistence for organizations, their legal entities, and
    organization membership (the authorization context for report requests).
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - An entity belongs to exactly one organization.
    - (organization_id, user_id) is unique in organization_members.

Failure modes:
    - EntityNotFoundError / OrganizationNotFoundError are raised by the
      service layer when a requested id has no row here.
"""

from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ledger_kernel.db.base import TrackedBase, UUIDString


class Organization(TrackedBase):
    """A group of legal entities reported on together."""

    __tablename__ = "organizations"

    name: Mapped[str] = mapped_column(String(255), nullable=False)


class OrganizationMember(TrackedBase):
    """
    Membership of an authenticated user in an organization.

    Contract:
        A report request for an entity or organization is authorized only
        when the actor has a row here for the owning organization.
    """

    __tablename__ = "organization_members"

    __table_args__ = (
        UniqueConstraint("organization_id", "user_id", name="uq_org_member"),
    )

    organization_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("organizations.id"),
        nullable=False,
    )

    # Identity provider subject; not a foreign key.
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)

    role: Mapped[str] = mapped_column(String(50), default="member", nullable=False)


class Entity(TrackedBase):
    """A legal entity with its own chart of accounts and ledger."""

    __tablename__ = "entities"

    __table_args__ = (
        Index("idx_entity_organization", "organization_id"),
    )

    organization_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("organizations.id"),
        nullable=False,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    code: Mapped[str | None] = mapped_column(String(50), nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
