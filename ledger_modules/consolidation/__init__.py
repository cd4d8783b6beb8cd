"""
Consolidation Module (``ledger_modules.consolidation``).

Responsibility
--------------
Maps every entity's chart of accounts onto the organization's master chart
of accounts and merges their balances into synthetic, master-level rows
that the reporting module treats like a single entity.

Architecture position
---------------------
**Modules layer**.  ``mapper`` and ``suggestions`` are pure;
``ConsolidationService`` loads data through kernel selectors.

Invariants enforced
-------------------
* Each entity account maps to at most one master account.
* Unmapped accounts are reported and contribute nothing to consolidated
  figures.
* Consolidated balances equal the sum of their mapped entity balances,
  column by column.
"""

from ledger_modules.consolidation.mapper import (
    ConsolidationResult,
    consolidate,
    entity_breakdown,
    find_master_for_account,
    resolve_mappings,
)
from ledger_modules.consolidation.models import (
    CONSOLIDATED_ENTITY_ID,
    ConsolidationSummary,
    EntityBreakdownLine,
    FailedEntity,
    MappingSource,
    MappingSuggestion,
    MasterAccountBreakdown,
    ResolvedMapping,
    SuggestionConfidence,
    UnmappedAccount,
    UnmappedMonthlyBalances,
)
from ledger_modules.consolidation.service import (
    ConsolidationService,
    OrganizationConsolidation,
)
from ledger_modules.consolidation.suggestions import suggest_mappings

__all__ = [
    # Service
    "ConsolidationService",
    "OrganizationConsolidation",
    # Pure functions
    "consolidate",
    "entity_breakdown",
    "find_master_for_account",
    "resolve_mappings",
    "suggest_mappings",
    "ConsolidationResult",
    # Models
    "CONSOLIDATED_ENTITY_ID",
    "ConsolidationSummary",
    "EntityBreakdownLine",
    "FailedEntity",
    "MappingSource",
    "MappingSuggestion",
    "MasterAccountBreakdown",
    "ResolvedMapping",
    "SuggestionConfidence",
    "UnmappedAccount",
    "UnmappedMonthlyBalances",
]
