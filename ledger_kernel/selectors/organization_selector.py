"""
Module: ledger_kernel.selectors.organization_selector
Responsibility: Entity and organization lookups and the membership check
    that authorizes report requests.
Architecture position: Kernel > Selectors.
"""

from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import select

from ledger_kernel.models.organization import Entity, Organization, OrganizationMember
from ledger_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class EntityRow:
    id: str
    organization_id: str
    name: str
    code: str | None


@dataclass(frozen=True)
class OrganizationRow:
    id: str
    name: str


class OrganizationSelector(BaseSelector):
    """Selector over organizations, entities and organization_members."""

    def get_entity(self, entity_id: str) -> EntityRow | None:
        key = _as_uuid(entity_id)
        entity = self.session.get(Entity, key) if key is not None else None
        if entity is None:
            return None
        return _entity_row(entity)

    def get_organization(self, organization_id: str) -> OrganizationRow | None:
        key = _as_uuid(organization_id)
        org = self.session.get(Organization, key) if key is not None else None
        if org is None:
            return None
        return OrganizationRow(id=str(org.id), name=org.name)

    def active_entities(self, organization_id: str) -> list[EntityRow]:
        stmt = (
            select(Entity)
            .where(Entity.organization_id == organization_id)
            .where(Entity.is_active.is_(True))
            .order_by(Entity.name, Entity.id)
        )
        return [_entity_row(e) for (e,) in self._paginate(stmt)]

    def is_member(self, organization_id: str, user_id: str) -> bool:
        """True when ``user_id`` has a membership row in the organization."""
        stmt = (
            select(OrganizationMember.id)
            .where(OrganizationMember.organization_id == organization_id)
            .where(OrganizationMember.user_id == user_id)
            .limit(1)
        )
        return self.session.execute(stmt).first() is not None


def _entity_row(entity: Entity) -> EntityRow:
    return EntityRow(
        id=str(entity.id),
        organization_id=str(entity.organization_id),
        name=entity.name,
        code=entity.code,
    )


def _as_uuid(value) -> UUID | None:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None
