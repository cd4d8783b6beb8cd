"""
Ledger Config - declarative statement layouts and consolidation templates.

Usage:
    from ledger_config import load_statement_layouts

    layouts = load_statement_layouts()
    income = layouts["income_statement"]
"""

from ledger_config.loader import (
    load_master_gl_template,
    load_statement_layouts,
)
from ledger_config.schema import (
    ComputedLineConfig,
    FormulaTerm,
    MappingRule,
    MasterAccountTemplate,
    StatementLayout,
    StatementSectionConfig,
)

__all__ = [
    "ComputedLineConfig",
    "FormulaTerm",
    "MappingRule",
    "MasterAccountTemplate",
    "StatementLayout",
    "StatementSectionConfig",
    "load_master_gl_template",
    "load_statement_layouts",
]
