"""
Indirect cash flow derivation tests.

Working-capital signs, depreciation add-back, financing ordering and the
(unenforced) reconciliation against the cash accounts.
"""

from decimal import Decimal

from ledger_kernel.domain.values import AccountInfo
from ledger_kernel.selectors.balance_selector import RawBalance
from ledger_kernel.selectors.depreciation_selector import DepreciationRow
from ledger_modules.reporting.aggregation import aggregate_by_bucket
from ledger_modules.reporting.cash_flow import (
    bucket_depreciation,
    build_cash_flow_statement,
    cash_reconciliation_gaps,
)
from ledger_modules.reporting.config import CashFlowAccountGroups
from ledger_modules.reporting.periods import get_periods_in_range

CASH = AccountInfo("cash", "Checking", "1000", "Asset", "Bank")
AR = AccountInfo("ar", "Accounts Receivable", "1100", "Asset", "Accounts Receivable")
AP = AccountInfo("ap", "Accounts Payable", "2000", "Liability", "Accounts Payable")
EQUIPMENT = AccountInfo("equip", "Equipment", "1500", "Asset", "Fixed Asset")
LOAN = AccountInfo("loan", "Term Loan", "2700", "Liability", "Long Term Liability")
STOCK = AccountInfo("stock", "Common Stock", "3000", "Equity", "Equity")

JAN = get_periods_in_range(2025, 1, 2025, 1)


def _row(account_id: str, beginning: str, ending: str, month: int = 1) -> RawBalance:
    return RawBalance(
        account_id=account_id,
        entity_id="e1",
        period_year=2025,
        period_month=month,
        beginning_balance=Decimal(beginning),
        ending_balance=Decimal(ending),
        net_change=Decimal(ending) - Decimal(beginning),
    )


def _statement(accounts, rows, depreciation=None, net_income=None, buckets=JAN, groups=None):
    aggregated = aggregate_by_bucket(accounts, rows, buckets)
    return build_cash_flow_statement(
        accounts,
        aggregated,
        buckets,
        depreciation_by_bucket=depreciation or {},
        net_income_by_bucket=net_income or {},
        groups=groups,
    )


class TestOperatingActivities:
    def test_receivable_increase_consumes_cash(self):
        statement = _statement([AR], [_row("ar", "500", "700")])

        assert statement.find_line("cf-wc-ar").amounts["2025-01"] == Decimal("-200")
        assert statement.find_line("cf-operating-total").amounts["2025-01"] == Decimal("-200")

    def test_payable_increase_provides_cash(self):
        statement = _statement([AP], [_row("ap", "300", "450")])
        assert statement.find_line("cf-wc-ap").amounts["2025-01"] == Decimal("150")

    def test_net_income_and_depreciation_start_operating(self):
        statement = _statement(
            [AR],
            [],
            depreciation={"2025-01": Decimal("40")},
            net_income={"2025-01": Decimal("1000")},
        )

        operating = statement.sections[0]
        assert [ln.id for ln in operating.lines[:4]] == [
            "cf-net-income",
            "cf-adjustments-header",
            "cf-depreciation",
            "cf-wc-header",
        ]
        assert operating.lines[1].is_header
        assert statement.find_line("cf-operating-total").amounts["2025-01"] == Decimal("1040")


class TestInvestingAndFinancing:
    def test_asset_purchase_is_negative(self):
        statement = _statement([EQUIPMENT], [_row("equip", "1000", "1600")])
        assert statement.find_line("cf-inv-equip").amounts["2025-01"] == Decimal("-600")
        assert statement.find_line("cf-investing-total").amounts["2025-01"] == Decimal("-600")

    def test_long_term_liabilities_before_equity(self):
        statement = _statement(
            [STOCK, LOAN],
            [_row("loan", "0", "5000"), _row("stock", "0", "1000")],
        )

        financing = next(s for s in statement.sections if s.id == "cf-financing")
        assert [ln.id for ln in financing.lines] == ["cf-fin-loan", "cf-fin-stock"]
        assert financing.subtotal_line.amounts["2025-01"] == Decimal("6000")

    def test_custom_groups(self):
        groups = CashFlowAccountGroups(investing_types=())
        statement = _statement([EQUIPMENT], [_row("equip", "0", "10")], groups=groups)
        assert statement.find_line("cf-inv-equip") is None


class TestReconciliation:
    def test_balanced_data_has_no_gap(self):
        # Customer paid 200 of receivables into the bank
        statement = _statement(
            [CASH, AR],
            [_row("cash", "1000", "1200"), _row("ar", "500", "300")],
        )

        assert statement.find_line("cf-net-change").amounts["2025-01"] == Decimal("200")
        assert statement.find_line("cf-cash-beginning").amounts["2025-01"] == Decimal("1000")
        assert statement.find_line("cf-cash-ending").amounts["2025-01"] == Decimal("1200")
        assert cash_reconciliation_gaps(statement, JAN) == {"2025-01": Decimal("0")}

    def test_depreciation_counted_in_operating_and_investing(self):
        """Investing uses the raw fixed-asset delta, so depreciation shows up twice."""
        statement = _statement(
            [CASH, EQUIPMENT],
            [_row("cash", "500", "500"), _row("equip", "1000", "900")],
            depreciation={"2025-01": Decimal("100")},
            net_income={"2025-01": Decimal("0")},
        )

        assert statement.find_line("cf-operating-total").amounts["2025-01"] == Decimal("100")
        assert statement.find_line("cf-investing-total").amounts["2025-01"] == Decimal("100")
        assert statement.find_line("cf-net-change").amounts["2025-01"] == Decimal("200")
        assert cash_reconciliation_gaps(statement, JAN) == {"2025-01": Decimal("-200")}

    def test_cash_ending_is_grand_total(self):
        statement = _statement([CASH], [_row("cash", "0", "10")])
        assert statement.find_line("cf-cash-ending").is_grand_total


class TestBucketDepreciation:
    def test_sums_into_quarters(self):
        buckets = get_periods_in_range(2025, 1, 2025, 6, "quarterly")
        rows = [
            DepreciationRow("e1", 2025, 1, Decimal("10")),
            DepreciationRow("e1", 2025, 3, Decimal("10")),
            DepreciationRow("e2", 2025, 4, Decimal("5")),
            DepreciationRow("e1", 2024, 12, Decimal("99")),
        ]

        assert bucket_depreciation(rows, buckets) == {
            "2025-Q1": Decimal("20"),
            "2025-Q2": Decimal("5"),
        }

    def test_every_bucket_present(self):
        buckets = get_periods_in_range(2025, 1, 2025, 2)
        assert bucket_depreciation([], buckets) == {
            "2025-01": Decimal("0"),
            "2025-02": Decimal("0"),
        }


def test_empty_buckets_give_skeleton():
    statement = _statement([CASH], [], buckets=())
    assert [s.id for s in statement.sections] == [
        "cf-operating",
        "cf-investing",
        "cf-financing",
        "cf-summary",
    ]
    assert statement.find_line("cf-net-change").amounts == {}
