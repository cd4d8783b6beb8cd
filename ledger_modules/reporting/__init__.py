"""
Financial Reporting Module (``ledger_modules.reporting``).

Responsibility
--------------
Read-only module that generates the Income Statement, Balance Sheet and
Statement of Cash Flows (indirect method) over monthly, quarterly or annual
columns, for a single entity or consolidated across an organization.
Consolidated statements can be split per entity and drilled down to the
contributing entity accounts.

Architecture position
---------------------
**Modules layer**.  Period bucketing, reclassification, aggregation,
statement assembly and cash flow derivation are pure functions;
``FinancialStatementsService`` is the only piece that touches the database.

Invariants enforced
-------------------
* No rows are written by this module.
* Statement generation is deterministic: the same data, request and clock
  render to identical JSON.

Failure modes
-------------
* Bad request parameters -> typed ``ReportRequestError`` subclasses.
* Missing monthly balance rows -> zero contribution.
"""

from ledger_modules.reporting.config import CashFlowAccountGroups, ReportingConfig
from ledger_modules.reporting.export import export_workbook
from ledger_modules.reporting.models import (
    BucketedAmounts,
    DrillDown,
    DrillDownRow,
    EntityStatement,
    FinancialStatementsReport,
    Granularity,
    LineItem,
    Period,
    PeriodBucket,
    ReportMetadata,
    Scope,
    StatementData,
    StatementSection,
)
from ledger_modules.reporting.service import FinancialStatementsService, StatementRequest
from ledger_modules.reporting.statements import render_to_dict, render_to_json

__all__ = [
    # Service
    "FinancialStatementsService",
    "StatementRequest",
    # Config
    "ReportingConfig",
    "CashFlowAccountGroups",
    # Rendering
    "export_workbook",
    "render_to_dict",
    "render_to_json",
    # Models
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
]
