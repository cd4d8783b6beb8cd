"""
Reporting Configuration Schema.

Defines the statement layouts, reclassification patterns, cash flow account
groups and data-access settings used by the financial statements service.
Layouts default to the bundled ``ledger_config`` YAML.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Self

from ledger_config.loader import load_statement_layouts
from ledger_config.schema import StatementLayout
from ledger_kernel.logging_config import get_logger
from ledger_kernel.selectors.base import DEFAULT_PAGE_SIZE
from ledger_modules.reporting.classification import OTHER_EXPENSE_NAME_PATTERNS

logger = get_logger("modules.reporting.config")


@lru_cache(maxsize=1)
def _bundled_layouts() -> dict[str, StatementLayout]:
    return load_statement_layouts()


def default_income_statement_layout() -> StatementLayout:
    return _bundled_layouts()["income_statement"]


def default_balance_sheet_layout() -> StatementLayout:
    return _bundled_layouts()["balance_sheet"]


@dataclass(frozen=True)
class CashFlowAccountGroups:
    """
    Account types driving the indirect cash flow statement.

    Operating assets and investing accounts enter with -delta, operating
    liabilities and financing accounts with +delta.  Cash types supply the
    independent beginning / ending cash figures.
    """

    cash_types: tuple[str, ...] = ("Bank",)
    operating_asset_types: tuple[str, ...] = (
        "Accounts Receivable",
        "Other Current Asset",
    )
    operating_liability_types: tuple[str, ...] = (
        "Accounts Payable",
        "Credit Card",
        "Other Current Liability",
    )
    investing_types: tuple[str, ...] = ("Fixed Asset", "Other Asset")
    financing_liability_types: tuple[str, ...] = ("Long Term Liability",)
    equity_types: tuple[str, ...] = ("Equity",)

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        return cls(**{k: tuple(v) for k, v in data.items()})


@dataclass
class ReportingConfig:
    """
    Configuration schema for the financial statements service.

    Controls statement layouts, reclassification and data-access paging.
    """

    income_statement: StatementLayout = field(
        default_factory=default_income_statement_layout,
    )
    balance_sheet: StatementLayout = field(
        default_factory=default_balance_sheet_layout,
    )

    # Lowercase substrings that move an Expense account to "Other Expense"
    other_expense_name_patterns: tuple[str, ...] = OTHER_EXPENSE_NAME_PATTERNS

    cash_flow: CashFlowAccountGroups = field(default_factory=CashFlowAccountGroups)

    # Rows per selector round trip
    page_size: int = DEFAULT_PAGE_SIZE

    # Log a warning when derived net cash change disagrees with the cash accounts
    warn_on_cash_gap: bool = True

    def __post_init__(self):
        if self.page_size < 1:
            raise ValueError("page_size must be positive")
        if not self.income_statement.use_net_change:
            raise ValueError("income statement layout must use net change")
        if self.balance_sheet.use_net_change:
            raise ValueError("balance sheet layout must use ending balances")
        if self.income_statement.net_income_line_id is None:
            raise ValueError("income statement layout must name its net income line")
        self.other_expense_name_patterns = tuple(
            p.lower() for p in self.other_expense_name_patterns
        )

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with standard defaults."""
        logger.info("reporting_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """
        Create config from dictionary.

        ``layouts_path`` points at an alternative layouts YAML file holding
        ``income_statement`` and ``balance_sheet``.
        """
        data = dict(data)
        layouts_path = data.pop("layouts_path", None)
        if layouts_path is not None:
            layouts = load_statement_layouts(Path(layouts_path))
            data.setdefault("income_statement", layouts["income_statement"])
            data.setdefault("balance_sheet", layouts["balance_sheet"])
        if isinstance(data.get("cash_flow"), dict):
            data["cash_flow"] = CashFlowAccountGroups.from_dict(data["cash_flow"])
        if "other_expense_name_patterns" in data:
            data["other_expense_name_patterns"] = tuple(data["other_expense_name_patterns"])
        logger.info(
            "reporting_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)
