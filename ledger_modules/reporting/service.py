"""
Financial Statements Service (``ledger_modules.reporting.service``).

Responsibility
--------------
Orchestrates generation of the Income Statement, Balance Sheet and
Statement of Cash Flows for one entity or, consolidated through the master
chart of accounts, for a whole organization.  Bridges the kernel selectors
(accounts, GL balances, depreciation) to the pure builders:
``periods`` -> [``consolidation.mapper``] -> ``classification`` ->
``aggregation`` -> ``statements`` (x2) -> ``cash_flow``.
For organizations it also rebuilds a statement per entity and drills one
consolidated line down to its contributing entity accounts
(``drill_down``).

Architecture position
---------------------
**Modules layer** -- thin glue.  ``FinancialStatementsService`` is the sole
public entry point for statement generation.  Constructor: ``session`` +
``clock`` + ``config``.

Invariants enforced
-------------------
* Read-only -- no writes to any table.
* Authorization happens before any account or balance is loaded.
* All monetary amounts use ``Decimal`` -- NEVER ``float``.
* Every statement line carries an amount for every requested bucket.
* Same request + same data + same clock -> byte-identical
  ``render_to_json`` output.

Failure modes
-------------
* Missing ``entityId`` / ``organizationId`` -> ``MissingScopeIdentifierError``.
* Unknown scope -> ``InvalidScopeError``.
* Non-numeric parameter / unknown granularity ->
  ``InvalidRequestParameterError``.
* Start after end -> ``InvalidPeriodRangeError``.
* Missing actor or non-member -> ``AccessDeniedError``.
* Unknown entity / organization -> ``EntityNotFoundError`` /
  ``OrganizationNotFoundError``.
* Organization without master accounts -> empty statements, no error.
* Drill-down on an unknown line or period -> ``StatementLineNotFoundError``.

Audit relevance
---------------
``ReportMetadata`` carries the injected-clock timestamp and echoes every
request parameter.  One ``financial_statements_generated`` log event per
report.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.orm import Session

from ledger_config.schema import StatementLayout
from ledger_kernel.domain.clock import Clock, SystemClock
from ledger_kernel.domain.values import AccountInfo, YearMonth
from ledger_kernel.exceptions import (
    InvalidRequestParameterError,
    InvalidScopeError,
    MissingScopeIdentifierError,
)
from ledger_kernel.logging_config import LogContext, get_logger
from ledger_kernel.selectors.account_selector import AccountRow, AccountSelector
from ledger_kernel.selectors.balance_selector import BalanceSelector, RawBalance
from ledger_kernel.selectors.depreciation_selector import DepreciationSelector
from ledger_kernel.selectors.organization_selector import EntityRow, OrganizationRow
from ledger_kernel.services.access_service import AccessService
from ledger_modules.consolidation.models import ConsolidationSummary
from ledger_modules.consolidation.service import ConsolidationService, OrganizationConsolidation
from ledger_modules.reporting.aggregation import aggregate_by_bucket
from ledger_modules.reporting.cash_flow import (
    CASH_FLOW_STATEMENT_ID,
    CASH_FLOW_TITLE,
    bucket_depreciation,
    build_cash_flow_statement,
    cash_reconciliation_gaps,
)
from ledger_modules.reporting.classification import reclassify_accounts
from ledger_modules.reporting.config import ReportingConfig
from ledger_modules.reporting.drill_down import build_entity_statements, drill_down
from ledger_modules.reporting.models import (
    DrillDown,
    EntityStatement,
    FinancialStatementsReport,
    Granularity,
    PeriodBucket,
    ReportMetadata,
    Scope,
    StatementData,
)
from ledger_modules.reporting.periods import collect_required_months, get_periods_in_range
from ledger_modules.reporting.statements import build_statement, extract_line_amounts

logger = get_logger("modules.reporting.service")

DEFAULT_START_YEAR = 2025
DEFAULT_START_MONTH = 1
DEFAULT_END_YEAR = 2025
DEFAULT_END_MONTH = 12


# =========================================================================
# Request
# =========================================================================


def _int_param(params: Mapping[str, str], name: str, default: int) -> int:
    raw = params.get(name)
    if raw is None:
        return default
    try:
        return int(str(raw).strip())
    except ValueError:
        raise InvalidRequestParameterError(name, raw) from None


def _bool_param(params: Mapping[str, str], name: str) -> bool:
    raw = params.get(name)
    return raw is not None and str(raw).strip().lower() == "true"


@dataclass(frozen=True)
class StatementRequest:
    """Parameters of one financial statements request."""

    scope: Scope = Scope.ENTITY
    entity_id: str | None = None
    organization_id: str | None = None
    start_year: int = DEFAULT_START_YEAR
    start_month: int = DEFAULT_START_MONTH
    end_year: int = DEFAULT_END_YEAR
    end_month: int = DEFAULT_END_MONTH
    granularity: Granularity = Granularity.MONTHLY
    include_budget: bool = False
    include_yoy: bool = False

    @classmethod
    def from_query_params(cls, params: Mapping[str, str]) -> StatementRequest:
        """
        Parse HTTP-GET style parameters (``scope``, ``entityId``,
        ``organizationId``, ``startYear``, ``startMonth``, ``endYear``,
        ``endMonth``, ``granularity``, ``includeBudget``, ``includeYoY``).

        Missing values take the defaults (entity scope, 2025-01 .. 2025-12,
        monthly).  Boolean flags are true only for the string ``"true"``.
        """
        request = cls(
            scope=Scope.parse(params.get("scope") or Scope.ENTITY),
            entity_id=params.get("entityId") or None,
            organization_id=params.get("organizationId") or None,
            start_year=_int_param(params, "startYear", DEFAULT_START_YEAR),
            start_month=_int_param(params, "startMonth", DEFAULT_START_MONTH),
            end_year=_int_param(params, "endYear", DEFAULT_END_YEAR),
            end_month=_int_param(params, "endMonth", DEFAULT_END_MONTH),
            granularity=Granularity.parse(params.get("granularity") or Granularity.MONTHLY),
            include_budget=_bool_param(params, "includeBudget"),
            include_yoy=_bool_param(params, "includeYoY"),
        )
        request.validate()
        return request

    def validate(self) -> None:
        """Raise when the identifier required by the scope is missing."""
        if self.scope is Scope.ENTITY and not self.entity_id:
            raise MissingScopeIdentifierError(self.scope.value, "entityId")
        if self.scope is Scope.ORGANIZATION and not self.organization_id:
            raise MissingScopeIdentifierError(self.scope.value, "organizationId")

    def period_buckets(self) -> tuple[PeriodBucket, ...]:
        """Reporting columns for the requested range and granularity."""
        return get_periods_in_range(
            self.start_year,
            self.start_month,
            self.end_year,
            self.end_month,
            self.granularity,
        )

    def required_months(self, buckets: Sequence[PeriodBucket]) -> tuple[YearMonth, ...]:
        """Every month whose balances must be loaded to fill ``buckets``."""
        return collect_required_months(buckets, self.include_yoy)

    @property
    def start_period(self) -> str:
        return f"{self.start_year}-{self.start_month}"

    @property
    def end_period(self) -> str:
        return f"{self.end_year}-{self.end_month}"


@dataclass(frozen=True)
class _Statements:
    income_statement: StatementData
    balance_sheet: StatementData
    cash_flow_statement: StatementData


def _account_info(row: AccountRow) -> AccountInfo:
    return AccountInfo(
        id=row.id,
        name=row.name,
        account_number=row.account_number,
        classification=row.classification,
        account_type=row.account_type,
        entity_id=row.entity_id,
    )


def _years(buckets: Sequence[PeriodBucket]) -> list[int]:
    return sorted({m.year for b in buckets for m in b.months})


# =========================================================================
# Service
# =========================================================================


class FinancialStatementsService:
    """
    Financial statements generation service.

    Contract
    --------
    * ``generate`` returns a ``FinancialStatementsReport`` whose three
      statements share ``periods``.
    * ``entity_statements`` and ``drill_down`` are organization scope only.
    * Read-only.

    Guarantees
    ----------
    * No financial logic lives in this class; it delegates to the pure
      builders.
    * Clock is injectable for deterministic testing.

    Non-goals
    ---------
    * Does NOT compute budgets or year-over-year columns; the request flags
      are echoed in metadata.
    * Does NOT post, close or adjust anything.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        config: ReportingConfig | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._config = config or ReportingConfig.with_defaults()
        self._access = AccessService(session)
        self._accounts = AccountSelector(session, self._config.page_size)
        self._balances = BalanceSelector(session, self._config.page_size)
        self._depreciation = DepreciationSelector(session, self._config.page_size)
        self._consolidation = ConsolidationService(session, self._config.page_size)

    # =========================================================================
    # Public API
    # =========================================================================

    def generate(
        self,
        request: StatementRequest,
        actor_id: str | None,
    ) -> FinancialStatementsReport:
        """
        Generate the three statements for ``request`` on behalf of
        ``actor_id``.

        Raises:
            MissingScopeIdentifierError, InvalidPeriodRangeError,
            InvalidRequestParameterError, AccessDeniedError,
            EntityNotFoundError, OrganizationNotFoundError.
        """
        request.validate()
        buckets = request.period_buckets()

        with LogContext.bind(
            actor_id=actor_id,
            entity_id=request.entity_id,
            organization_id=request.organization_id,
        ):
            if request.scope is Scope.ENTITY:
                report = self._generate_entity(request, buckets, actor_id)
            else:
                report = self._generate_organization(request, buckets, actor_id)

            logger.info(
                "financial_statements_generated",
                extra={
                    "scope": request.scope.value,
                    "granularity": request.granularity.value,
                    "start_period": request.start_period,
                    "end_period": request.end_period,
                    "period_count": len(report.periods),
                },
            )
            return report

    def entity_statements(
        self,
        request: StatementRequest,
        statement_id: str,
        actor_id: str | None,
    ) -> tuple[EntityStatement, ...]:
        """
        The consolidated ``statement_id`` statement (income statement or
        balance sheet) rebuilt once per entity of the organization.

        Amount lines, subtotals and computed lines of the entity statements
        sum to the consolidated ones.

        Raises:
            InvalidScopeError: ``request`` is not organization scope.
            InvalidRequestParameterError: unknown ``statement_id``.
            AccessDeniedError, OrganizationNotFoundError.
        """
        layout = self._layout(statement_id)
        with LogContext.bind(actor_id=actor_id, organization_id=request.organization_id):
            buckets, consolidation = self._load_organization(request, actor_id)
            statements = build_entity_statements(
                layout,
                consolidation.result,
                buckets,
                self._config.other_expense_name_patterns,
            )
            logger.info(
                "entity_statements_generated",
                extra={
                    "statement_id": layout.id,
                    "entity_count": len(statements),
                    "period_count": len(buckets),
                },
            )
            return statements

    def drill_down(
        self,
        request: StatementRequest,
        statement_id: str,
        line_id: str,
        period_key: str,
        actor_id: str | None,
    ) -> DrillDown:
        """
        Entity accounts behind one line of the consolidated statement for
        one period.  Row amounts sum to the line's amount.

        Raises:
            InvalidScopeError: ``request`` is not organization scope.
            InvalidRequestParameterError: unknown ``statement_id``.
            StatementLineNotFoundError: unknown line or period.
            AccessDeniedError, OrganizationNotFoundError.
        """
        layout = self._layout(statement_id)
        with LogContext.bind(actor_id=actor_id, organization_id=request.organization_id):
            buckets, consolidation = self._load_organization(request, actor_id)
            result = drill_down(
                layout,
                consolidation.result,
                buckets,
                line_id,
                period_key,
                self._config.other_expense_name_patterns,
            )
            logger.info(
                "statement_line_drilled_down",
                extra={
                    "statement_id": layout.id,
                    "line_id": line_id,
                    "period_key": period_key,
                    "row_count": len(result.rows),
                },
            )
            return result

    # =========================================================================
    # Scopes
    # =========================================================================

    def _generate_entity(
        self,
        request: StatementRequest,
        buckets: tuple[PeriodBucket, ...],
        actor_id: str | None,
    ) -> FinancialStatementsReport:
        entity, organization = self._access.require_entity_access(
            request.entity_id, actor_id
        )
        months = request.required_months(buckets)

        accounts = [_account_info(r) for r in self._accounts.active_accounts([entity.id])]
        balances: list[RawBalance] = []
        if accounts:
            balances = self._balances.balances_for(
                [a.id for a in accounts],
                [m.as_tuple() for m in months],
                entity_ids=[entity.id],
            )
        depreciation = bucket_depreciation(
            self._depreciation.book_depreciation([entity.id], _years(buckets)),
            buckets,
        )

        statements = self._build_statements(
            accounts, balances, buckets, depreciation, consolidated=False
        )
        return FinancialStatementsReport(
            periods=tuple(b.period for b in buckets),
            income_statement=statements.income_statement,
            balance_sheet=statements.balance_sheet,
            cash_flow_statement=statements.cash_flow_statement,
            metadata=self._metadata(request, entity=entity, organization=organization),
        )

    def _generate_organization(
        self,
        request: StatementRequest,
        buckets: tuple[PeriodBucket, ...],
        actor_id: str | None,
    ) -> FinancialStatementsReport:
        organization = self._access.require_organization_member(
            request.organization_id, actor_id
        )
        templates = self._consolidation.load_templates(organization.id)
        if not templates:
            logger.info(
                "organization_has_no_master_accounts",
                extra={"organization_id": organization.id},
            )
            return self._empty_report(request, organization)

        months = request.required_months(buckets)
        consolidation = self._consolidation.load_consolidation(
            organization, months, templates=templates
        )
        failed_ids = {f.entity_id for f in consolidation.failed_entities}
        loaded_entity_ids = [e.id for e in consolidation.entities if e.id not in failed_ids]
        depreciation = bucket_depreciation(
            self._depreciation.book_depreciation(loaded_entity_ids, _years(buckets)),
            buckets,
        )

        statements = self._build_statements(
            list(consolidation.result.accounts),
            list(consolidation.result.balances),
            buckets,
            depreciation,
            consolidated=True,
        )
        return FinancialStatementsReport(
            periods=tuple(b.period for b in buckets),
            income_statement=statements.income_statement,
            balance_sheet=statements.balance_sheet,
            cash_flow_statement=statements.cash_flow_statement,
            metadata=self._metadata(request, organization=organization),
            consolidation=consolidation.summary(),
        )

    # =========================================================================
    # Internal helpers
    # =========================================================================

    def _layout(self, statement_id: str) -> StatementLayout:
        for layout in (self._config.income_statement, self._config.balance_sheet):
            if layout.id == statement_id:
                return layout
        raise InvalidRequestParameterError("statementId", statement_id)

    def _load_organization(
        self,
        request: StatementRequest,
        actor_id: str | None,
    ) -> tuple[tuple[PeriodBucket, ...], OrganizationConsolidation]:
        """Authorize, then consolidate the organization over the request's months."""
        if request.scope is not Scope.ORGANIZATION:
            raise InvalidScopeError(request.scope.value)
        request.validate()
        buckets = request.period_buckets()
        organization = self._access.require_organization_member(
            request.organization_id, actor_id
        )
        consolidation = self._consolidation.load_consolidation(
            organization, request.required_months(buckets)
        )
        return buckets, consolidation

    def _build_statements(
        self,
        accounts: list[AccountInfo],
        balances: list[RawBalance],
        buckets: tuple[PeriodBucket, ...],
        depreciation: dict[str, Decimal],
        consolidated: bool,
    ) -> _Statements:
        config = self._config
        accounts = reclassify_accounts(accounts, config.other_expense_name_patterns)
        aggregated = aggregate_by_bucket(accounts, balances, buckets)

        income_layout = config.income_statement
        balance_layout = config.balance_sheet
        income_statement = build_statement(
            income_layout,
            accounts,
            aggregated,
            buckets,
            title=income_layout.display_title(consolidated),
        )
        balance_sheet = build_statement(
            balance_layout,
            accounts,
            aggregated,
            buckets,
            title=balance_layout.display_title(consolidated),
        )
        net_income = extract_line_amounts(
            income_statement, income_layout.net_income_line_id, buckets
        )
        cash_flow = build_cash_flow_statement(
            accounts,
            aggregated,
            buckets,
            depreciation,
            net_income,
            config.cash_flow,
        )

        if config.warn_on_cash_gap:
            gaps = {
                k: v for k, v in cash_reconciliation_gaps(cash_flow, buckets).items() if v != 0
            }
            if gaps:
                logger.warning(
                    "cash_flow_reconciliation_gap",
                    extra={"gaps": {k: str(v) for k, v in gaps.items()}},
                )

        logger.debug(
            "statements_built",
            extra={
                "account_count": len(accounts),
                "balance_row_count": len(balances),
                "bucket_count": len(buckets),
            },
        )
        return _Statements(income_statement, balance_sheet, cash_flow)

    def _empty_report(
        self,
        request: StatementRequest,
        organization: OrganizationRow,
    ) -> FinancialStatementsReport:
        return FinancialStatementsReport(
            periods=(),
            income_statement=StatementData(
                id=self._config.income_statement.id,
                title=self._config.income_statement.title,
            ),
            balance_sheet=StatementData(
                id=self._config.balance_sheet.id,
                title=self._config.balance_sheet.title,
            ),
            cash_flow_statement=StatementData(
                id=CASH_FLOW_STATEMENT_ID,
                title=CASH_FLOW_TITLE,
            ),
            metadata=self._metadata(request, organization=organization),
            consolidation=ConsolidationSummary(
                entity_count=0,
                master_account_count=0,
                mapped_account_count=0,
            ),
        )

    def _metadata(
        self,
        request: StatementRequest,
        entity: EntityRow | None = None,
        organization: OrganizationRow | None = None,
    ) -> ReportMetadata:
        """Build report metadata with injected clock timestamp."""
        return ReportMetadata(
            generated_at=self._clock.now().isoformat(),
            scope=request.scope,
            granularity=request.granularity,
            start_period=request.start_period,
            end_period=request.end_period,
            entity_id=entity.id if entity else None,
            entity_name=entity.name if entity else None,
            organization_id=organization.id if organization else None,
            organization_name=organization.name if organization else None,
            include_budget=request.include_budget,
            include_yoy=request.include_yoy,
        )

