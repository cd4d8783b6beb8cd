"""
Indirect-method Statement of Cash Flows.

Pure functions.  ZERO I/O.

Per bucket, with ``delta = ending - beginning`` for an account:

    Operating  = net income + depreciation
                 - sum(delta) over operating current assets
                 + sum(delta) over operating current liabilities
    Investing  = - sum(delta) over fixed / other assets
    Financing  = + sum(delta) over long-term liabilities, then equity
    Net change = Operating + Investing + Financing

Cash at beginning / end of period are summed independently from the cash
(Bank) accounts.  They are reconciliation figures, not derived from the net
change above, and may disagree with it when upstream data is incomplete or
when the same economic movement is reported twice.  In particular,
investing uses the RAW balance delta of fixed assets: depreciation added
back in operating is not removed from investing, so a bucket whose only
activity is depreciation shows a gap equal to the depreciation.
``cash_reconciliation_gaps`` reports that gap; it is never enforced.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from decimal import Decimal

from ledger_kernel.domain.values import AccountInfo
from ledger_kernel.selectors.depreciation_selector import DepreciationRow
from ledger_modules.reporting.config import CashFlowAccountGroups
from ledger_modules.reporting.models import (
    BucketedAmounts,
    LineItem,
    PeriodBucket,
    StatementData,
    StatementSection,
)

_ZERO = Decimal("0")

CASH_FLOW_STATEMENT_ID = "cash_flow"
CASH_FLOW_TITLE = "Statement of Cash Flows"


def bucket_depreciation(
    rows: Iterable[DepreciationRow],
    buckets: Sequence[PeriodBucket],
) -> dict[str, Decimal]:
    """Sum monthly book depreciation into buckets (every bucket present)."""
    month_to_bucket = {
        m.as_tuple(): bucket.key for bucket in buckets for m in bucket.months
    }
    totals = {b.key: _ZERO for b in buckets}
    for row in rows:
        key = month_to_bucket.get((row.period_year, row.period_month))
        if key is not None:
            totals[key] += row.book_depreciation
    return totals


def _delta(
    aggregated: Mapping[str, BucketedAmounts],
    account_id: str,
    bucket_key: str,
) -> Decimal:
    bucketed = aggregated.get(account_id)
    if bucketed is None:
        return _ZERO
    return bucketed.delta(bucket_key)


def _delta_lines(
    prefix: str,
    accounts: Sequence[AccountInfo],
    aggregated: Mapping[str, BucketedAmounts],
    buckets: Sequence[PeriodBucket],
    sign: int,
    totals: dict[str, Decimal],
) -> list[LineItem]:
    lines = []
    for account in accounts:
        amounts: dict[str, Decimal] = {}
        for bucket in buckets:
            value = _delta(aggregated, account.id, bucket.key) * sign
            amounts[bucket.key] = value
            totals[bucket.key] += value
        lines.append(
            LineItem(
                id=f"{prefix}-{account.id}",
                label=account.name,
                amounts=amounts,
                indent=1,
                account_number=account.account_number,
            )
        )
    return lines


def _of_types(accounts: Iterable[AccountInfo], types: tuple[str, ...]) -> list[AccountInfo]:
    return [a for a in accounts if a.account_type in types]


def build_cash_flow_statement(
    accounts: Sequence[AccountInfo],
    aggregated: Mapping[str, BucketedAmounts],
    buckets: Sequence[PeriodBucket],
    depreciation_by_bucket: Mapping[str, Decimal],
    net_income_by_bucket: Mapping[str, Decimal],
    groups: CashFlowAccountGroups | None = None,
) -> StatementData:
    """
    Derive the Statement of Cash Flows (indirect method).

    Accounts are grouped by ``account_type`` only.  Account lines keep the
    order of ``accounts``.
    """
    groups = groups or CashFlowAccountGroups()
    net_income = {b.key: net_income_by_bucket.get(b.key, _ZERO) for b in buckets}
    depreciation = {b.key: depreciation_by_bucket.get(b.key, _ZERO) for b in buckets}

    # --- Operating ---------------------------------------------------------
    operating_total = {b.key: net_income[b.key] + depreciation[b.key] for b in buckets}
    operating_lines = [
        LineItem(
            id="cf-net-income",
            label="Net income",
            amounts=net_income,
            indent=1,
            show_dollar_sign=True,
        ),
        LineItem(
            id="cf-adjustments-header",
            label="Adjustments to reconcile net income to net cash:",
            indent=1,
            is_header=True,
        ),
        LineItem(
            id="cf-depreciation",
            label="Depreciation and amortization",
            amounts=depreciation,
            indent=1,
        ),
        LineItem(
            id="cf-wc-header",
            label="Changes in operating assets and liabilities:",
            indent=1,
            is_header=True,
        ),
    ]
    # Asset increase consumes cash; liability increase provides it
    operating_lines += _delta_lines(
        "cf-wc", _of_types(accounts, groups.operating_asset_types),
        aggregated, buckets, -1, operating_total,
    )
    operating_lines += _delta_lines(
        "cf-wc", _of_types(accounts, groups.operating_liability_types),
        aggregated, buckets, 1, operating_total,
    )

    # --- Investing ---------------------------------------------------------
    investing_total = {b.key: _ZERO for b in buckets}
    investing_lines = _delta_lines(
        "cf-inv", _of_types(accounts, groups.investing_types),
        aggregated, buckets, -1, investing_total,
    )

    # --- Financing ---------------------------------------------------------
    financing_total = {b.key: _ZERO for b in buckets}
    financing_accounts = (
        _of_types(accounts, groups.financing_liability_types)
        + _of_types(accounts, groups.equity_types)
    )
    financing_lines = _delta_lines(
        "cf-fin", financing_accounts, aggregated, buckets, 1, financing_total,
    )

    # --- Summary -----------------------------------------------------------
    cash_accounts = _of_types(accounts, groups.cash_types)
    net_change: dict[str, Decimal] = {}
    cash_beginning: dict[str, Decimal] = {}
    cash_ending: dict[str, Decimal] = {}
    for bucket in buckets:
        key = bucket.key
        net_change[key] = operating_total[key] + investing_total[key] + financing_total[key]
        cash_beginning[key] = sum(
            (aggregated[a.id].beginning_balance.get(key, _ZERO)
             for a in cash_accounts if a.id in aggregated),
            _ZERO,
        )
        cash_ending[key] = sum(
            (aggregated[a.id].ending_balance.get(key, _ZERO)
             for a in cash_accounts if a.id in aggregated),
            _ZERO,
        )

    sections = (
        StatementSection(
            id="cf-operating",
            title="CASH FLOWS FROM OPERATING ACTIVITIES",
            lines=tuple(operating_lines),
            subtotal_line=LineItem(
                id="cf-operating-total",
                label="Net cash provided by (used in) operating activities",
                amounts=operating_total,
                is_total=True,
                show_dollar_sign=True,
            ),
        ),
        StatementSection(
            id="cf-investing",
            title="CASH FLOWS FROM INVESTING ACTIVITIES",
            lines=tuple(investing_lines),
            subtotal_line=LineItem(
                id="cf-investing-total",
                label="Net cash used in investing activities",
                amounts=investing_total,
                is_total=True,
                show_dollar_sign=True,
            ),
        ),
        StatementSection(
            id="cf-financing",
            title="CASH FLOWS FROM FINANCING ACTIVITIES",
            lines=tuple(financing_lines),
            subtotal_line=LineItem(
                id="cf-financing-total",
                label="Net cash provided by (used in) financing activities",
                amounts=financing_total,
                is_total=True,
                show_dollar_sign=True,
            ),
        ),
        StatementSection(
            id="cf-summary",
            title="",
            lines=(
                LineItem(
                    id="cf-net-change",
                    label="NET INCREASE (DECREASE) IN CASH",
                    amounts=net_change,
                    is_total=True,
                    show_dollar_sign=True,
                ),
                LineItem(
                    id="cf-cash-beginning",
                    label="Cash at beginning of period",
                    amounts=cash_beginning,
                    indent=1,
                ),
            ),
            subtotal_line=LineItem(
                id="cf-cash-ending",
                label="CASH AT END OF PERIOD",
                amounts=cash_ending,
                is_grand_total=True,
                show_dollar_sign=True,
            ),
        ),
    )
    return StatementData(
        id=CASH_FLOW_STATEMENT_ID,
        title=CASH_FLOW_TITLE,
        sections=sections,
    )


def cash_reconciliation_gaps(
    statement: StatementData,
    buckets: Sequence[PeriodBucket],
) -> dict[str, Decimal]:
    """
    (cash at end - cash at beginning) - derived net change, per bucket.

    Zero everywhere when the statement reconciles.
    """
    net = statement.find_line("cf-net-change")
    beginning = statement.find_line("cf-cash-beginning")
    ending = statement.find_line("cf-cash-ending")
    gaps: dict[str, Decimal] = {}
    for bucket in buckets:
        key = bucket.key
        begin_value = beginning.amounts.get(key, _ZERO) if beginning else _ZERO
        end_value = ending.amounts.get(key, _ZERO) if ending else _ZERO
        net_value = net.amounts.get(key, _ZERO) if net else _ZERO
        gaps[key] = (end_value - begin_value) - net_value
    return gaps
