"""
Module: ledger_kernel.selectors.balance_selector
Responsibility: Read monthly balance snapshots for a set of accounts and a set
    of (year, month) pairs.  This is the ledger balance source consumed by the
    statement engine.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Only the requested months are returned; years are filtered in SQL and
      months in Python so the query stays portable.
    - Results are ordered by (account_id, period_year, period_month).

Failure modes:
    - Returns an empty list when no account ids or months are supplied.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import select

from ledger_kernel.models.gl_balance import GLBalance
from ledger_kernel.selectors.base import BaseSelector, chunked


@dataclass(frozen=True)
class RawBalance:
    """One account's monthly snapshot."""

    account_id: str
    entity_id: str
    period_year: int
    period_month: int
    beginning_balance: Decimal
    ending_balance: Decimal
    net_change: Decimal
    debit_total: Decimal = Decimal("0")
    credit_total: Decimal = Decimal("0")


class BalanceSelector(BaseSelector):
    """Selector over gl_balances."""

    def balances_for(
        self,
        account_ids: Iterable[str],
        months: Iterable[tuple[int, int]],
        entity_ids: Iterable[str] | None = None,
    ) -> list[RawBalance]:
        """
        Return balances for ``account_ids`` restricted to ``months``.

        Args:
            account_ids: Account ids (string form).
            months: (year, month) pairs to include.
            entity_ids: Optional additional entity filter.
        """
        wanted = {(int(y), int(m)) for y, m in months}
        ids = sorted({str(a) for a in account_ids})
        if not wanted or not ids:
            return []

        years = sorted({y for y, _ in wanted})
        entity_filter = sorted({str(e) for e in entity_ids}) if entity_ids is not None else None

        results: list[RawBalance] = []
        for chunk in chunked(ids):
            stmt = (
                select(GLBalance)
                .where(GLBalance.account_id.in_(chunk))
                .where(GLBalance.period_year.in_(years))
                .order_by(
                    GLBalance.account_id,
                    GLBalance.period_year,
                    GLBalance.period_month,
                )
            )
            if entity_filter is not None:
                stmt = stmt.where(GLBalance.entity_id.in_(entity_filter))

            for (row,) in self._paginate(stmt):
                if (row.period_year, row.period_month) not in wanted:
                    continue
                results.append(
                    RawBalance(
                        account_id=str(row.account_id),
                        entity_id=str(row.entity_id),
                        period_year=row.period_year,
                        period_month=row.period_month,
                        beginning_balance=row.beginning_balance,
                        ending_balance=row.ending_balance,
                        net_change=row.net_change,
                        debit_total=row.debit_total,
                        credit_total=row.credit_total,
                    )
                )
        return results

    def monthly_ending_balances(
        self,
        account_ids: Iterable[str],
        year: int,
    ) -> dict[str, dict[int, Decimal]]:
        """Ending balance per account per month for a calendar year."""
        months = [(year, m) for m in range(1, 13)]
        out: dict[str, dict[int, Decimal]] = {}
        for bal in self.balances_for(account_ids, months):
            out.setdefault(bal.account_id, {})[bal.period_month] = bal.ending_balance
        return out
