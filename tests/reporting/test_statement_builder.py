"""
Statement builder tests.

Pure functions over the bundled layouts: section placement, revenue sign
flip, computed lines, margin percentages and rendering.
"""

import json
from decimal import Decimal

import pytest

from ledger_config.schema import (
    ComputedLineConfig,
    FormulaTerm,
    StatementLayout,
    StatementSectionConfig,
)
from ledger_kernel.domain.values import AccountInfo
from ledger_kernel.selectors.balance_selector import RawBalance
from ledger_modules.reporting.aggregation import aggregate_by_bucket
from ledger_modules.reporting.config import (
    default_balance_sheet_layout,
    default_income_statement_layout,
)
from ledger_modules.reporting.periods import get_periods_in_range
from ledger_modules.reporting.statements import (
    build_statement,
    extract_line_amounts,
    margin_ratio,
    render_to_dict,
    render_to_json,
    subtotal_label,
)

SALES = AccountInfo("sales", "Sales", "4000", "Revenue", "Income")
COGS = AccountInfo("cogs", "Materials", "5000", "Expense", "Cost of Goods Sold")
RENT = AccountInfo("rent", "Rent", "6100", "Expense", "Expense")
INTEREST = AccountInfo("interest", "Interest Expense", "7100", "Expense", "Other Expense")
CASH = AccountInfo("cash", "Checking", "1000", "Asset", "Bank")
SAVINGS = AccountInfo("savings", "Savings", "1010", "Asset", "Bank")
LOAN = AccountInfo("loan", "Bank Loan", "2700", "Liability", "Long Term Liability")
EQUITY = AccountInfo("equity", "Owner Equity", "3000", "Equity", "Equity")


def _row(account_id: str, month: int, net: str, ending: str = "0") -> RawBalance:
    return RawBalance(
        account_id=account_id,
        entity_id="e1",
        period_year=2025,
        period_month=month,
        beginning_balance=Decimal(ending) - Decimal(net),
        ending_balance=Decimal(ending),
        net_change=Decimal(net),
    )


@pytest.fixture
def buckets():
    return get_periods_in_range(2025, 1, 2025, 2)


def _income(accounts, rows, buckets):
    aggregated = aggregate_by_bucket(accounts, rows, buckets)
    return build_statement(default_income_statement_layout(), accounts, aggregated, buckets)


class TestIncomeStatement:
    def test_revenue_sign_flip(self, buckets):
        statement = _income([SALES], [_row("sales", 1, "-5000")], buckets)

        line = statement.find_line("revenue-sales")
        assert line.amounts["2025-01"] == Decimal("5000")
        assert statement.find_line("revenue-total").amounts["2025-01"] == Decimal("5000")

    def test_computed_lines_follow_their_sections(self, buckets):
        statement = _income([SALES, COGS, RENT], [], buckets)

        assert [s.id for s in statement.sections] == [
            "revenue",
            "direct_operating_costs",
            "gross_margin",
            "gross_margin_pct",
            "other_operating_costs",
            "operating_margin",
            "operating_margin_pct",
            "other_expense",
            "other_income",
            "net_income",
            "net_income_pct",
        ]

    def test_margins_and_net_income(self, buckets):
        rows = [
            _row("sales", 1, "-1000"),
            _row("cogs", 1, "400"),
            _row("rent", 1, "100"),
            _row("interest", 1, "50"),
        ]
        statement = _income([SALES, COGS, RENT, INTEREST], rows, buckets)

        assert statement.find_line("gross_margin").amounts["2025-01"] == Decimal("600")
        assert statement.find_line("operating_margin").amounts["2025-01"] == Decimal("500")
        assert statement.find_line("net_income").amounts["2025-01"] == Decimal("450")
        assert statement.find_line("gross_margin_pct").amounts["2025-01"] == Decimal("0.6")
        assert statement.find_line("net_income_pct").amounts["2025-01"] == Decimal("0.45")

    def test_margin_safety_with_zero_revenue(self, buckets):
        statement = _income([SALES, RENT], [_row("rent", 1, "100")], buckets)

        for line_id in ("gross_margin_pct", "operating_margin_pct", "net_income_pct"):
            line = statement.find_line(line_id)
            assert line.is_percentage
            assert line.amounts["2025-01"] == Decimal("0")
            assert line.amounts["2025-02"] == Decimal("0")

    def test_line_flags(self, buckets):
        statement = _income([SALES, RENT], [], buckets)

        net_income = statement.find_line("net_income")
        assert net_income.is_grand_total and not net_income.is_total
        assert statement.find_line("gross_margin").is_total
        assert statement.find_line("revenue-sales").show_dollar_sign
        assert statement.find_line("revenue-sales").indent == 1

    def test_every_line_has_every_bucket(self, buckets):
        statement = _income([SALES, COGS, RENT], [_row("sales", 2, "-10")], buckets)
        for section in statement.sections:
            for line in (*section.lines, section.subtotal_line):
                assert set(line.amounts) == {"2025-01", "2025-02"}

    def test_net_income_extraction(self, buckets):
        statement = _income([SALES], [_row("sales", 2, "-10")], buckets)

        assert extract_line_amounts(statement, "net_income", buckets) == {
            "2025-01": Decimal("0"),
            "2025-02": Decimal("10"),
        }
        assert extract_line_amounts(statement, "missing", buckets)["2025-01"] == Decimal("0")


class TestBalanceSheet:
    def test_uses_ending_balances_sorted_by_number(self, buckets):
        accounts = [SAVINGS, CASH, LOAN, EQUITY]
        rows = [
            _row("cash", 1, "0", ending="700"),
            _row("savings", 1, "0", ending="300"),
            _row("loan", 1, "0", ending="400"),
            _row("equity", 1, "0", ending="600"),
        ]
        aggregated = aggregate_by_bucket(accounts, rows, buckets)
        statement = build_statement(default_balance_sheet_layout(), accounts, aggregated, buckets)

        current = next(s for s in statement.sections if s.id == "current_assets")
        assert [ln.label for ln in current.lines] == ["Checking", "Savings"]
        assert current.subtotal_line.label == "Total Current assets"
        assert statement.find_line("total_assets").amounts["2025-01"] == Decimal("1000")
        assert statement.find_line("total_liabilities_and_equity").amounts["2025-01"] == Decimal(
            "1000"
        )

    def test_no_sign_flip_outside_net_change_layouts(self, buckets):
        layout = StatementLayout(
            id="custom",
            title="Custom",
            sections=(
                StatementSectionConfig(
                    id="rev", title="Revenue", account_types=("Income",), classification="Revenue"
                ),
            ),
        )
        aggregated = aggregate_by_bucket([SALES], [_row("sales", 1, "-5", ending="-5")], buckets)
        statement = build_statement(layout, [SALES], aggregated, buckets)
        assert statement.find_line("rev-sales").amounts["2025-01"] == Decimal("-5")


class TestSkeleton:
    def test_no_buckets_gives_empty_amount_maps(self):
        statement = build_statement(default_income_statement_layout(), [SALES], {}, ())
        assert statement.find_line("net_income").amounts == {}
        assert len(statement.sections) == 11


class TestHelpers:
    @pytest.mark.parametrize(
        "title, expected",
        [
            ("CURRENT ASSETS", "Total Current assets"),
            ("Revenue", "Total Revenue"),
            ("", ""),
        ],
    )
    def test_subtotal_label(self, title, expected):
        assert subtotal_label(title) == expected

    def test_margin_ratio(self):
        assert margin_ratio(Decimal("5"), Decimal("0")) == Decimal("0")
        assert margin_ratio(Decimal("5"), Decimal("20")) == Decimal("0.25")

    def test_custom_computed_line_without_margin(self):
        layout = StatementLayout(
            id="mini",
            title="Mini",
            sections=(
                StatementSectionConfig(
                    id="cash", title="Cash", account_types=("Bank",), classification="Asset"
                ),
            ),
            computed_lines=(
                ComputedLineConfig(
                    id="double_check",
                    label="Check",
                    after_section="cash",
                    formula=(FormulaTerm("cash", 1), FormulaTerm("cash", -1)),
                ),
            ),
            revenue_section_id="cash",
        )
        buckets = get_periods_in_range(2025, 1, 2025, 1)
        aggregated = aggregate_by_bucket([CASH], [_row("cash", 1, "0", ending="9")], buckets)
        statement = build_statement(layout, [CASH], aggregated, buckets)

        assert statement.find_line("double_check").amounts["2025-01"] == Decimal("0")
        assert statement.find_line("double_check_pct") is None


class TestRendering:
    def test_render_to_dict_converts_decimals(self, buckets):
        statement = _income([SALES], [_row("sales", 1, "-12.50")], buckets)
        rendered = render_to_dict(statement)

        revenue = rendered["sections"][0]
        assert revenue["lines"][0]["amounts"]["2025-01"] == "12.50"

    def test_render_to_json_is_stable(self, buckets):
        first = render_to_json(_income([SALES, RENT], [_row("sales", 1, "-3")], buckets))
        second = render_to_json(_income([SALES, RENT], [_row("sales", 1, "-3")], buckets))
        assert first == second
        json.loads(first)
