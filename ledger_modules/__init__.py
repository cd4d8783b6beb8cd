"""
Ledger Modules.

Thin orchestration layers over the Ledger Kernel and Ledger Config.
Each module contains:
- Domain models (frozen value objects)
- Pure builders (zero I/O)
- A service bridging kernel selectors to the builders

Modules:
- Consolidation: master chart of accounts, mapping resolution, unmapped
  report, mapping suggestions, per-entity drill-down
- Reporting: Income Statement, Balance Sheet and Statement of Cash Flows
  per entity or consolidated per organization, JSON / workbook rendering
"""
