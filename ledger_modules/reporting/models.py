"""
Financial Statements Domain Models (``ledger_modules.reporting.models``).

Responsibility
--------------
Frozen dataclass value objects for the statement engine: periods and
buckets, per-bucket aggregated amounts, statement structures (statement,
section, line item), report metadata, and the complete financial statements
report.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Consumed by the
pure builders in this package and returned to callers by
``FinancialStatementsService``.

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* All monetary fields use ``Decimal`` -- NEVER ``float``.
* Amount maps are keyed by bucket key and carry every bucket of the request.

Audit relevance
---------------
``ReportMetadata`` records the generation timestamp (injected clock) and
echoes the request parameters for report reproducibility.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from ledger_kernel.domain.values import AccountInfo, YearMonth
from ledger_kernel.exceptions import InvalidRequestParameterError, InvalidScopeError
from ledger_modules.consolidation.models import ConsolidationSummary

__all__ = [
    "AccountInfo",
    "BucketedAmounts",
    "DrillDown",
    "DrillDownRow",
    "EntityStatement",
    "FinancialStatementsReport",
    "Granularity",
    "LineItem",
    "Period",
    "PeriodBucket",
    "ReportMetadata",
    "Scope",
    "StatementData",
    "StatementSection",
    "YearMonth",
]


# =========================================================================
# Enums
# =========================================================================


class Granularity(str, Enum):
    """Width of one reporting column."""

    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUAL = "annual"

    @classmethod
    def parse(cls, value: str | Granularity) -> Granularity:
        """Parse a request value; ``yearly`` is accepted as ``annual``."""
        if isinstance(value, Granularity):
            return value
        normalized = str(value).strip().lower()
        if normalized == "yearly":
            return cls.ANNUAL
        try:
            return cls(normalized)
        except ValueError:
            raise InvalidRequestParameterError("granularity", value) from None


class Scope(str, Enum):
    """Reporting scope: a single entity or a consolidated organization."""

    ENTITY = "entity"
    ORGANIZATION = "organization"

    @classmethod
    def parse(cls, value: str | Scope) -> Scope:
        if isinstance(value, Scope):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidScopeError(str(value)) from None


# =========================================================================
# Periods
# =========================================================================


@dataclass(frozen=True)
class Period:
    """Display identity of one reporting column."""

    key: str
    label: str
    year: int
    start_month: int
    end_month: int
    end_year: int


@dataclass(frozen=True)
class PeriodBucket:
    """A Period plus the calendar months it covers, in order."""

    period: Period
    months: tuple[YearMonth, ...]

    @property
    def key(self) -> str:
        return self.period.key

    @property
    def label(self) -> str:
        return self.period.label


# =========================================================================
# Aggregation
# =========================================================================


@dataclass(frozen=True)
class BucketedAmounts:
    """One account's amounts per bucket key."""

    net_change: dict[str, Decimal] = field(default_factory=dict)
    ending_balance: dict[str, Decimal] = field(default_factory=dict)
    beginning_balance: dict[str, Decimal] = field(default_factory=dict)

    def delta(self, bucket_key: str) -> Decimal:
        """ending - beginning for the bucket."""
        return (
            self.ending_balance.get(bucket_key, Decimal("0"))
            - self.beginning_balance.get(bucket_key, Decimal("0"))
        )


# =========================================================================
# Statements
# =========================================================================


@dataclass(frozen=True)
class LineItem:
    """A single statement row."""

    id: str
    label: str
    amounts: dict[str, Decimal] = field(default_factory=dict)
    indent: int = 0
    is_total: bool = False
    is_grand_total: bool = False
    is_header: bool = False
    is_separator: bool = False
    show_dollar_sign: bool = False
    account_number: str | None = None
    is_percentage: bool = False


@dataclass(frozen=True)
class StatementSection:
    """Ordered account lines plus one subtotal line."""

    id: str
    title: str
    lines: tuple[LineItem, ...] = ()
    subtotal_line: LineItem | None = None


@dataclass(frozen=True)
class StatementData:
    """A complete statement: ordered sections (computed lines included)."""

    id: str
    title: str
    sections: tuple[StatementSection, ...] = ()

    def find_line(self, line_id: str) -> LineItem | None:
        """Locate a line (account, subtotal or computed) by id."""
        for section in self.sections:
            if section.subtotal_line is not None and section.subtotal_line.id == line_id:
                return section.subtotal_line
            for line in section.lines:
                if line.id == line_id:
                    return line
        return None


# =========================================================================
# Report
# =========================================================================


@dataclass(frozen=True)
class ReportMetadata:
    """Metadata attached to every financial statements report."""

    generated_at: str  # ISO format timestamp from injected clock
    scope: Scope
    granularity: Granularity
    start_period: str  # "YYYY-M"
    end_period: str
    entity_id: str | None = None
    entity_name: str | None = None
    organization_id: str | None = None
    organization_name: str | None = None
    include_budget: bool = False
    include_yoy: bool = False


@dataclass(frozen=True)
class FinancialStatementsReport:
    """The three statements over a shared set of periods."""

    periods: tuple[Period, ...]
    income_statement: StatementData
    balance_sheet: StatementData
    cash_flow_statement: StatementData
    metadata: ReportMetadata
    consolidation: ConsolidationSummary | None = None


# =========================================================================
# Consolidated drill-down
# =========================================================================


@dataclass(frozen=True)
class EntityStatement:
    """One entity's column set of a consolidated statement."""

    entity_id: str
    entity_name: str
    statement: StatementData


@dataclass(frozen=True)
class DrillDownRow:
    """One entity account's signed contribution to a statement line."""

    entity_id: str
    entity_name: str
    account_id: str
    account_name: str
    account_number: str | None
    master_account_id: str
    section_id: str
    amount: Decimal


@dataclass(frozen=True)
class DrillDown:
    """
    Contributing entity accounts behind one consolidated line and period.

    ``total`` is the sum of the row amounts and equals the line's amount
    in the consolidated statement for ``period_key``.
    """

    statement_id: str
    line_id: str
    period_key: str
    total: Decimal
    rows: tuple[DrillDownRow, ...] = ()
