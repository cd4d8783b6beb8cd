"""Tests for membership-based authorization (AccessService)."""

import pytest

from ledger_kernel.exceptions import (
    AccessDeniedError,
    EntityNotFoundError,
    OrganizationNotFoundError,
)
from ledger_kernel.services import AccessService

MISSING_ID = "00000000-0000-0000-0000-000000000000"


class TestRequireOrganizationMember:
    def test_member_gets_organization(self, session, seed, test_actor_id):
        org = seed.organization("Acme")

        row = AccessService(session).require_organization_member(str(org.id), test_actor_id)

        assert row.id == str(org.id)
        assert row.name == "Acme"

    def test_non_member_denied(self, session, seed):
        org = seed.organization(members=("someone-else",))

        with pytest.raises(AccessDeniedError) as exc_info:
            AccessService(session).require_organization_member(str(org.id), "intruder")

        assert exc_info.value.code == "ACCESS_DENIED"
        assert exc_info.value.actor_id == "intruder"

    def test_missing_actor_denied(self, session, seed):
        org = seed.organization()

        with pytest.raises(AccessDeniedError) as exc_info:
            AccessService(session).require_organization_member(str(org.id), None)

        assert exc_info.value.actor_id is None

    def test_unknown_organization(self, session, test_actor_id):
        with pytest.raises(OrganizationNotFoundError):
            AccessService(session).require_organization_member(MISSING_ID, test_actor_id)

    def test_denial_is_logged(self, session, seed, captured_logs):
        org = seed.organization(members=())

        with pytest.raises(AccessDeniedError):
            AccessService(session).require_organization_member(str(org.id), "intruder")

        denied = [r for r in captured_logs() if r["message"] == "access_denied"]
        assert denied and denied[0]["reason"] == "not_a_member"


class TestRequireEntityAccess:
    def test_member_gets_entity_and_owner(self, session, seed, test_actor_id):
        org = seed.organization()
        entity = seed.entity(org, "Acme West")

        entity_row, org_row = AccessService(session).require_entity_access(
            str(entity.id), test_actor_id
        )

        assert entity_row.name == "Acme West"
        assert org_row.id == str(org.id)

    def test_member_of_other_organization_denied(self, session, seed, test_actor_id):
        seed.organization("Mine", members=(test_actor_id,))
        other = seed.organization("Theirs", members=("owner",))
        entity = seed.entity(other)

        with pytest.raises(AccessDeniedError):
            AccessService(session).require_entity_access(str(entity.id), test_actor_id)

    def test_unknown_entity(self, session, test_actor_id):
        with pytest.raises(EntityNotFoundError) as exc_info:
            AccessService(session).require_entity_access(MISSING_ID, test_actor_id)

        assert exc_info.value.code == "ENTITY_NOT_FOUND"
