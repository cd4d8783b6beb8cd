"""ReportingConfig construction and validation."""

import shutil
from dataclasses import replace

import pytest

from ledger_config.loader import DEFAULT_LAYOUTS_PATH
from ledger_modules.reporting.config import (
    CashFlowAccountGroups,
    ReportingConfig,
    default_balance_sheet_layout,
    default_income_statement_layout,
)


class TestDefaults:
    def test_with_defaults_uses_bundled_layouts(self):
        config = ReportingConfig.with_defaults()

        assert config.income_statement.id == "income_statement"
        assert config.balance_sheet.id == "balance_sheet"
        assert config.cash_flow == CashFlowAccountGroups()
        assert "interest" in config.other_expense_name_patterns
        assert config.warn_on_cash_gap

    def test_default_cash_flow_groups(self):
        groups = CashFlowAccountGroups()
        assert groups.cash_types == ("Bank",)
        assert groups.investing_types == ("Fixed Asset", "Other Asset")
        assert groups.financing_liability_types == ("Long Term Liability",)


class TestFromDict:
    def test_cash_flow_and_patterns(self):
        config = ReportingConfig.from_dict(
            {
                "cash_flow": {"cash_types": ["Bank", "Money Market"]},
                "other_expense_name_patterns": ["Penalty", "FX Loss"],
                "page_size": 50,
            }
        )

        assert config.cash_flow.cash_types == ("Bank", "Money Market")
        assert config.cash_flow.operating_asset_types == CashFlowAccountGroups().operating_asset_types
        assert config.other_expense_name_patterns == ("penalty", "fx loss")
        assert config.page_size == 50

    def test_layouts_path(self, tmp_path):
        path = tmp_path / "layouts.yaml"
        shutil.copy(DEFAULT_LAYOUTS_PATH, path)

        config = ReportingConfig.from_dict({"layouts_path": str(path)})

        assert config.income_statement == default_income_statement_layout()
        assert config.balance_sheet == default_balance_sheet_layout()

    def test_unknown_key_rejected(self):
        with pytest.raises(TypeError):
            ReportingConfig.from_dict({"no_such_option": True})


class TestValidation:
    def test_page_size_must_be_positive(self):
        with pytest.raises(ValueError, match="page_size"):
            ReportingConfig(page_size=0)

    def test_income_statement_must_use_net_change(self):
        layout = replace(default_income_statement_layout(), use_net_change=False)
        with pytest.raises(ValueError, match="net change"):
            ReportingConfig(income_statement=layout)

    def test_balance_sheet_must_use_ending_balances(self):
        layout = replace(default_balance_sheet_layout(), use_net_change=True)
        with pytest.raises(ValueError, match="ending balances"):
            ReportingConfig(balance_sheet=layout)

    def test_income_statement_needs_net_income_line(self):
        layout = replace(default_income_statement_layout(), net_income_line_id=None)
        with pytest.raises(ValueError, match="net income"):
            ReportingConfig(income_statement=layout)
