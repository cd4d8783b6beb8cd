"""
AccessService -- organization membership checks for report requests.

Responsibility:
    Resolves the entity / organization named by a request and verifies that
    the already-authenticated actor is a member of the owning organization.
    Authentication itself happens upstream; this service only receives the
    actor id.

Architecture position:
    Kernel > Services.  Read-only: uses OrganizationSelector and never
    writes.

Invariants enforced:
    - Every report path calls one of the ``require_*`` methods before any
      balance is loaded.

Failure modes:
    - EntityNotFoundError / OrganizationNotFoundError for unknown ids.
    - AccessDeniedError when the actor id is missing or not a member.
"""

from sqlalchemy.orm import Session

from ledger_kernel.exceptions import (
    AccessDeniedError,
    EntityNotFoundError,
    OrganizationNotFoundError,
)
from ledger_kernel.logging_config import get_logger
from ledger_kernel.selectors.organization_selector import (
    EntityRow,
    OrganizationRow,
    OrganizationSelector,
)

logger = get_logger("services.access")


class AccessService:
    """Membership-based authorization for entity and organization scope."""

    def __init__(self, session: Session):
        self.session = session
        self._organizations = OrganizationSelector(session)

    def require_organization_member(
        self,
        organization_id: str,
        actor_id: str | None,
    ) -> OrganizationRow:
        """Return the organization if ``actor_id`` belongs to it."""
        organization = self._organizations.get_organization(organization_id)
        if organization is None:
            raise OrganizationNotFoundError(str(organization_id))
        self._check_member(organization.id, actor_id)
        return organization

    def require_entity_access(
        self,
        entity_id: str,
        actor_id: str | None,
    ) -> tuple[EntityRow, OrganizationRow]:
        """Return (entity, owning organization) if ``actor_id`` may read it."""
        entity = self._organizations.get_entity(entity_id)
        if entity is None:
            raise EntityNotFoundError(str(entity_id))
        organization = self._organizations.get_organization(entity.organization_id)
        if organization is None:
            raise OrganizationNotFoundError(entity.organization_id)
        self._check_member(organization.id, actor_id)
        return entity, organization

    def _check_member(self, organization_id: str, actor_id: str | None) -> None:
        if not actor_id:
            logger.warning(
                "access_denied",
                extra={"organization_id": organization_id, "reason": "no_actor"},
            )
            raise AccessDeniedError(None, organization_id)
        if not self._organizations.is_member(organization_id, actor_id):
            logger.warning(
                "access_denied",
                extra={
                    "organization_id": organization_id,
                    "actor_id": actor_id,
                    "reason": "not_a_member",
                },
            )
            raise AccessDeniedError(actor_id, organization_id)
