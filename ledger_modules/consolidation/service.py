"""
Consolidation Module Service (``ledger_modules.consolidation.service``).

Responsibility
--------------
Loads an organization's entities, accounts, balances and master accounts
through the kernel selectors and hands them to the pure consolidation
mapper.  Exposes the operator-facing views of the mapping layer: the
unmapped-account report (current balances and monthly), mapping
suggestions and the per-entity drill-down for a month.

Architecture position
---------------------
**Modules layer** -- thin glue between kernel selectors and
``mapper.py`` / ``suggestions.py``.  Constructor: ``session`` + optional
``page_size``.

Invariants enforced
-------------------
* Every public operator view checks organization membership first.
* Data loading is per entity inside a SAVEPOINT: one entity's database
  failure is logged, recorded in ``failed_entities`` and skipped; the other
  entities still consolidate.
* Only ``seed_master_accounts`` writes, and it only flushes; the caller
  owns the transaction.

Failure modes
-------------
* Unknown organization -> ``OrganizationNotFoundError``.
* Missing actor / non-member -> ``AccessDeniedError``.
* Failure loading master accounts or entities -> exception propagates.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ledger_config.loader import load_master_gl_template
from ledger_config.schema import MasterAccountTemplate
from ledger_kernel.domain.values import YearMonth
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.models.master_account import MasterAccount
from ledger_kernel.selectors.account_selector import AccountRow, AccountSelector
from ledger_kernel.selectors.balance_selector import BalanceSelector, RawBalance
from ledger_kernel.selectors.base import DEFAULT_PAGE_SIZE
from ledger_kernel.selectors.master_account_selector import MasterAccountSelector
from ledger_kernel.selectors.organization_selector import (
    EntityRow,
    OrganizationRow,
    OrganizationSelector,
)
from ledger_kernel.services.access_service import AccessService
from ledger_modules.consolidation.mapper import (
    ConsolidationResult,
    consolidate,
    entity_breakdown,
    template_from_row,
    unmapped_monthly_balances,
)
from ledger_modules.consolidation.models import (
    ConsolidationSummary,
    FailedEntity,
    MappingSuggestion,
    MasterAccountBreakdown,
    UnmappedAccount,
    UnmappedMonthlyBalances,
)
from ledger_modules.consolidation.suggestions import suggest_mappings

logger = get_logger("modules.consolidation.service")


@dataclass(frozen=True)
class OrganizationConsolidation:
    """Everything loaded and derived for one organization."""

    organization: OrganizationRow
    entities: tuple[EntityRow, ...]
    result: ConsolidationResult
    failed_entities: tuple[FailedEntity, ...] = ()

    def summary(self) -> ConsolidationSummary:
        return ConsolidationSummary(
            entity_count=len(self.entities),
            master_account_count=len(self.result.templates),
            mapped_account_count=len(self.result.mappings),
            unmapped_accounts=self.result.unmapped,
            failed_entities=self.failed_entities,
        )


class ConsolidationService:
    """
    Organization-level consolidation service.

    Contract
    --------
    * ``load_consolidation`` performs no authorization; callers that expose
      it must check membership first (``FinancialStatementsService`` does).
    * All other public methods take ``actor_id`` and authorize.

    Non-goals
    ---------
    * Does NOT persist suggestions or mappings (operators confirm them).
    * Does NOT build statements (see ``ledger_modules.reporting``).
    """

    def __init__(self, session: Session, page_size: int = DEFAULT_PAGE_SIZE):
        self._session = session
        self._access = AccessService(session)
        self._organizations = OrganizationSelector(session, page_size)
        self._accounts = AccountSelector(session, page_size)
        self._balances = BalanceSelector(session, page_size)
        self._masters = MasterAccountSelector(session, page_size)

    # =========================================================================
    # Loading
    # =========================================================================

    def load_templates(self, organization_id: str) -> tuple[MasterAccountTemplate, ...]:
        """Active master accounts in evaluation order."""
        rows = self._masters.active_master_accounts(organization_id)
        return tuple(template_from_row(r) for r in rows)

    def _load_entity(
        self,
        entity: EntityRow,
        months: Sequence[YearMonth],
    ) -> tuple[list[AccountRow], list[RawBalance]]:
        accounts = self._accounts.active_accounts([entity.id])
        balances: list[RawBalance] = []
        if months and accounts:
            balances = self._balances.balances_for(
                [a.id for a in accounts],
                [m.as_tuple() for m in months],
                entity_ids=[entity.id],
            )
        return accounts, balances

    def load_consolidation(
        self,
        organization: OrganizationRow,
        months: Sequence[YearMonth] = (),
        templates: Sequence[MasterAccountTemplate] | None = None,
    ) -> OrganizationConsolidation:
        """
        Load and consolidate every active entity of ``organization``.

        Entities are loaded one at a time; a ``SQLAlchemyError`` for one
        entity rolls back to its savepoint, is logged, and the entity is
        reported in ``failed_entities``.  Pass ``templates`` to reuse master
        accounts already loaded for this organization.
        """
        if templates is None:
            templates = self.load_templates(organization.id)
        templates = tuple(templates)
        entities = tuple(self._organizations.active_entities(organization.id))
        persisted = (
            self._masters.mappings_for([t.id for t in templates if t.id])
            if templates
            else []
        )

        all_accounts: list[AccountRow] = []
        all_balances: list[RawBalance] = []
        failed: list[FailedEntity] = []
        for entity in entities:
            savepoint = self._session.begin_nested()
            try:
                accounts, balances = self._load_entity(entity, months)
                savepoint.commit()
            except SQLAlchemyError as exc:
                savepoint.rollback()
                logger.exception(
                    "consolidation_entity_failed",
                    extra={
                        "organization_id": organization.id,
                        "failed_entity_id": entity.id,
                    },
                )
                failed.append(
                    FailedEntity(entity_id=entity.id, entity_name=entity.name, error=str(exc))
                )
                continue
            all_accounts.extend(accounts)
            all_balances.extend(balances)

        result = consolidate(
            templates,
            all_accounts,
            all_balances,
            persisted,
            {e.id: e for e in entities},
        )
        logger.info(
            "organization_consolidated",
            extra={
                "organization_id": organization.id,
                "entity_count": len(entities),
                "master_account_count": len(templates),
                "mapped_account_count": len(result.mappings),
                "unmapped_account_count": len(result.unmapped),
                "failed_entity_count": len(failed),
            },
        )
        return OrganizationConsolidation(
            organization=organization,
            entities=entities,
            result=result,
            failed_entities=tuple(failed),
        )

    # =========================================================================
    # Operator views
    # =========================================================================

    def unmapped_accounts(
        self,
        organization_id: str,
        actor_id: str | None,
    ) -> tuple[UnmappedAccount, ...]:
        """Entity accounts that match no master account."""
        with LogContext.bind(actor_id=actor_id, organization_id=organization_id):
            organization = self._access.require_organization_member(organization_id, actor_id)
            return self.load_consolidation(organization).result.unmapped

    def unmapped_monthly(
        self,
        organization_id: str,
        year: int,
        actor_id: str | None,
    ) -> tuple[UnmappedMonthlyBalances, ...]:
        """Monthly ending balances for a calendar year, per unmapped account."""
        with LogContext.bind(actor_id=actor_id, organization_id=organization_id):
            organization = self._access.require_organization_member(organization_id, actor_id)
            unmapped = self.load_consolidation(organization).result.unmapped
            monthly = self._balances.monthly_ending_balances([u.id for u in unmapped], year)
            return unmapped_monthly_balances(unmapped, monthly, year)

    def suggest_mappings(
        self,
        organization_id: str,
        actor_id: str | None,
    ) -> list[MappingSuggestion]:
        """Best master account candidate for each unmapped account."""
        with LogContext.bind(actor_id=actor_id, organization_id=organization_id):
            organization = self._access.require_organization_member(organization_id, actor_id)
            consolidation = self.load_consolidation(organization)
            suggestions = suggest_mappings(
                consolidation.result.unmapped, consolidation.result.templates
            )
            logger.info(
                "mapping_suggestions_generated",
                extra={
                    "organization_id": organization.id,
                    "suggestion_count": len(suggestions),
                },
            )
            return suggestions

    def entity_breakdown(
        self,
        organization_id: str,
        year: int,
        month: int,
        actor_id: str | None,
    ) -> tuple[MasterAccountBreakdown, ...]:
        """Per master account, each contributing entity account for one month."""
        with LogContext.bind(actor_id=actor_id, organization_id=organization_id):
            organization = self._access.require_organization_member(organization_id, actor_id)
            consolidation = self.load_consolidation(organization, (YearMonth(year, month),))
            return entity_breakdown(consolidation.result, year, month)

    # =========================================================================
    # Setup
    # =========================================================================

    def seed_master_accounts(
        self,
        organization_id: str,
        actor_id: str | None,
        templates: Iterable[MasterAccountTemplate] | None = None,
    ) -> int:
        """
        Create master accounts from a template (default: the bundled master
        GL).  Account numbers already present are skipped.  Flushes only.

        Returns:
            Number of master accounts created.
        """
        with LogContext.bind(actor_id=actor_id, organization_id=organization_id):
            organization = self._access.require_organization_member(organization_id, actor_id)
            templates = tuple(templates) if templates is not None else load_master_gl_template()
            existing = {
                r.account_number for r in self._masters.active_master_accounts(organization.id)
            }
            created = 0
            for template in templates:
                if template.account_number in existing:
                    continue
                self._session.add(
                    MasterAccount(
                        organization_id=organization.id,
                        account_number=template.account_number,
                        name=template.name,
                        classification=template.classification,
                        account_type=template.account_type,
                        normal_balance=template.normal_balance,
                        display_order=template.display_order,
                        mapping_rules=[_rule_to_dict(r) for r in template.mapping_rules],
                    )
                )
                existing.add(template.account_number)
                created += 1
            self._session.flush()
            logger.info(
                "master_accounts_seeded",
                extra={"organization_id": organization.id, "created_count": created},
            )
            return created


def _rule_to_dict(rule) -> dict[str, str]:
    return {
        key: value
        for key, value in (
            ("account_number", rule.account_number),
            ("account_number_prefix", rule.account_number_prefix),
            ("name_contains", rule.name_contains),
            ("name_exact", rule.name_exact),
            ("account_type", rule.account_type),
        )
        if value is not None
    }
