"""
Balance aggregation: monthly snapshots -> per-bucket amounts.

Pure functions.  ZERO I/O.

For each account and bucket:

* ``net_change``        = sum of net change over the bucket months present
* ``ending_balance``    = ending balance of the LAST month present
* ``beginning_balance`` = beginning balance of the FIRST month present

Sparse data is zero: a month with no row contributes nothing to net change
and is skipped when finding the first / last month present.  An account
with no rows in a bucket gets zero for all three figures.  Missing rows are
never an error.

With complete, contiguous data this gives
``ending == beginning + net_change`` for balance-sheet accounts.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from decimal import Decimal

from ledger_kernel.domain.values import AccountInfo
from ledger_kernel.selectors.balance_selector import RawBalance
from ledger_modules.reporting.models import BucketedAmounts, PeriodBucket

_ZERO = Decimal("0")


def index_balances(
    balances: Iterable[RawBalance],
) -> dict[str, dict[tuple[int, int], RawBalance]]:
    """account_id -> (year, month) -> row.  Later duplicates win."""
    index: dict[str, dict[tuple[int, int], RawBalance]] = {}
    for bal in balances:
        index.setdefault(bal.account_id, {})[(bal.period_year, bal.period_month)] = bal
    return index


def aggregate_account(
    rows: dict[tuple[int, int], RawBalance],
    buckets: Sequence[PeriodBucket],
) -> BucketedAmounts:
    """Fold one account's monthly rows into ``buckets``."""
    net_change: dict[str, Decimal] = {}
    ending: dict[str, Decimal] = {}
    beginning: dict[str, Decimal] = {}
    for bucket in buckets:
        present = [rows[m.as_tuple()] for m in bucket.months if m.as_tuple() in rows]
        net_change[bucket.key] = sum((r.net_change for r in present), _ZERO)
        ending[bucket.key] = present[-1].ending_balance if present else _ZERO
        beginning[bucket.key] = present[0].beginning_balance if present else _ZERO
    return BucketedAmounts(
        net_change=net_change,
        ending_balance=ending,
        beginning_balance=beginning,
    )


def aggregate_by_bucket(
    accounts: Iterable[AccountInfo],
    balances: Iterable[RawBalance],
    buckets: Sequence[PeriodBucket],
) -> dict[str, BucketedAmounts]:
    """
    Aggregate raw balances for every account into every bucket.

    Every account in ``accounts`` gets an entry with a value for every
    bucket key, even when it has no balance rows.  Rows for accounts not in
    ``accounts`` are ignored.
    """
    index = index_balances(balances)
    return {
        account.id: aggregate_account(index.get(account.id, {}), buckets)
        for account in accounts
    }
