"""
Consolidation Domain Models (``ledger_modules.consolidation.models``).

Responsibility
--------------
Frozen dataclass value objects produced by the consolidation mapper:
resolved mappings, the unmapped-account report, per-entity drill-down
lines, mapping suggestions, and the summary attached to a consolidated
financial statements report.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  No dependency on
the reporting module, so reporting may embed ``ConsolidationSummary``
without an import cycle.

Invariants enforced
-------------------
* All models are ``frozen=True``.
* All monetary fields use ``Decimal`` -- NEVER ``float``.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

CONSOLIDATED_ENTITY_ID = "consolidated"


class MappingSource(str, Enum):
    """How an entity account was assigned to its master account."""

    PERSISTED = "persisted"
    RULE = "rule"


class SuggestionConfidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class ResolvedMapping:
    """One entity account routed to one master account."""

    master_account_id: str
    entity_id: str
    account_id: str
    source: MappingSource


@dataclass(frozen=True)
class UnmappedAccount:
    """An entity account that matched no master account template."""

    id: str
    entity_id: str
    entity_name: str
    entity_code: str | None
    name: str
    account_number: str | None
    classification: str
    account_type: str
    current_balance: Decimal


@dataclass(frozen=True)
class UnmappedMonthlyBalances:
    """Ending balance per month (1..12) for one unmapped account."""

    account: UnmappedAccount
    year: int
    ending_balances: tuple[Decimal, ...]  # index 0 = January


@dataclass(frozen=True)
class EntityBreakdownLine:
    """One contributing entity account's figures for a single month."""

    entity_id: str
    entity_name: str
    account_id: str
    account_name: str
    account_number: str | None
    beginning_balance: Decimal
    ending_balance: Decimal
    debit_total: Decimal
    credit_total: Decimal
    net_change: Decimal


@dataclass(frozen=True)
class MasterAccountBreakdown:
    """Drill-down of a master account into its contributors."""

    master_account_id: str
    account_number: str
    name: str
    classification: str
    account_type: str
    lines: tuple[EntityBreakdownLine, ...]
    beginning_balance: Decimal
    ending_balance: Decimal
    debit_total: Decimal
    credit_total: Decimal
    net_change: Decimal


@dataclass(frozen=True)
class MappingSuggestion:
    """A proposed master account for an unmapped entity account."""

    account: UnmappedAccount
    master_account_id: str | None
    master_account_number: str
    master_account_name: str
    confidence: SuggestionConfidence
    reason: str


@dataclass(frozen=True)
class FailedEntity:
    """An entity whose data could not be loaded during consolidation."""

    entity_id: str
    entity_name: str
    error: str


@dataclass(frozen=True)
class ConsolidationSummary:
    """Audit companion to a consolidated report."""

    entity_count: int
    master_account_count: int
    mapped_account_count: int
    unmapped_accounts: tuple[UnmappedAccount, ...] = ()
    failed_entities: tuple[FailedEntity, ...] = ()
