"""
Consolidated drill-down: per-entity statements and line contributors.

Pure functions.  ZERO I/O.

A master account's consolidated amount for a bucket is split across the
entity accounts mapped to it (its "shares"):

* net change: the account's net change over the bucket months
* ending / beginning balance: the account's balance in the month the
  consolidated figure was taken from, i.e. the last / first bucket month in
  which any contributor has a row.  An account without a row in that month
  contributes 0.

Shares sum exactly to the consolidated figures, sparse data included.

Per-entity statements are built from each entity's summed shares with the
same layout and builder as the consolidated statement, so every amount line,
subtotal and computed line sums across entities to the consolidated line.
Percentage lines are ratios and do not.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from decimal import Decimal

from ledger_config.schema import StatementLayout, StatementSectionConfig
from ledger_kernel.exceptions import StatementLineNotFoundError
from ledger_kernel.selectors.balance_selector import RawBalance
from ledger_modules.consolidation.mapper import ConsolidationResult
from ledger_modules.reporting.aggregation import index_balances
from ledger_modules.reporting.classification import (
    OTHER_EXPENSE_NAME_PATTERNS,
    reclassify_accounts,
)
from ledger_modules.reporting.models import (
    AccountInfo,
    BucketedAmounts,
    DrillDown,
    DrillDownRow,
    EntityStatement,
    PeriodBucket,
)
from ledger_modules.reporting.statements import (
    REVENUE_CLASSIFICATION,
    build_statement,
    section_accounts,
)

_ZERO = Decimal("0")


# =========================================================================
# Shares
# =========================================================================


def _share(
    rows: Mapping[tuple[int, int], RawBalance],
    anchors: Mapping[tuple[int, int], RawBalance],
    bucket: PeriodBucket,
) -> tuple[Decimal, Decimal, Decimal]:
    present = [m.as_tuple() for m in bucket.months if m.as_tuple() in anchors]
    if not present:
        return _ZERO, _ZERO, _ZERO
    net_change = sum((rows[k].net_change for k in present if k in rows), _ZERO)
    first, last = present[0], present[-1]
    beginning = rows[first].beginning_balance if first in rows else _ZERO
    ending = rows[last].ending_balance if last in rows else _ZERO
    return net_change, ending, beginning


def account_shares(
    result: ConsolidationResult,
    buckets: Sequence[PeriodBucket],
) -> dict[str, BucketedAmounts]:
    """Mapped entity account id -> its share of its master account's amounts."""
    master_rows = index_balances(result.balances)
    source_rows = index_balances(result.source_balances)

    shares: dict[str, BucketedAmounts] = {}
    for mapping in result.mappings:
        anchors = master_rows.get(mapping.master_account_id, {})
        rows = source_rows.get(mapping.account_id, {})
        amounts = BucketedAmounts()
        for bucket in buckets:
            net_change, ending, beginning = _share(rows, anchors, bucket)
            amounts.net_change[bucket.key] = net_change
            amounts.ending_balance[bucket.key] = ending
            amounts.beginning_balance[bucket.key] = beginning
        shares[mapping.account_id] = amounts
    return shares


def _sum_amounts(
    parts: Iterable[BucketedAmounts],
    buckets: Sequence[PeriodBucket],
) -> BucketedAmounts:
    total = BucketedAmounts(
        net_change={b.key: _ZERO for b in buckets},
        ending_balance={b.key: _ZERO for b in buckets},
        beginning_balance={b.key: _ZERO for b in buckets},
    )
    for part in parts:
        for bucket in buckets:
            total.net_change[bucket.key] += part.net_change[bucket.key]
            total.ending_balance[bucket.key] += part.ending_balance[bucket.key]
            total.beginning_balance[bucket.key] += part.beginning_balance[bucket.key]
    return total


# =========================================================================
# Per-entity statements
# =========================================================================


def build_entity_statements(
    layout: StatementLayout,
    result: ConsolidationResult,
    buckets: Sequence[PeriodBucket],
    name_patterns: Iterable[str] = OTHER_EXPENSE_NAME_PATTERNS,
    title: str | None = None,
) -> tuple[EntityStatement, ...]:
    """
    Rebuild the consolidated ``layout`` statement once per entity.

    Every entity of the organization gets a statement over the full master
    chart, in ``result.entity_names`` order; master accounts the entity
    does not contribute to show zero.
    """
    accounts = reclassify_accounts(result.accounts, name_patterns)
    shares = account_shares(result, buckets)

    statements: list[EntityStatement] = []
    for entity_id, entity_name in result.entity_names:
        parts: dict[str, list[BucketedAmounts]] = {}
        for mapping in result.mappings:
            if mapping.entity_id == entity_id:
                parts.setdefault(mapping.master_account_id, []).append(
                    shares[mapping.account_id]
                )
        aggregated = {mid: _sum_amounts(p, buckets) for mid, p in parts.items()}
        statements.append(
            EntityStatement(
                entity_id=entity_id,
                entity_name=entity_name,
                statement=build_statement(layout, accounts, aggregated, buckets, title=title),
            )
        )
    return tuple(statements)


# =========================================================================
# Line drill-down
# =========================================================================


def resolve_line(
    layout: StatementLayout,
    accounts: Sequence[AccountInfo],
    line_id: str,
) -> list[tuple[StatementSectionConfig, tuple[str, ...], int]]:
    """
    (section, master account ids, sign) terms whose signed sum is the line.

    Handles account lines (``<section>-<master id>``), section subtotals
    (``<section>-total``) and computed lines.  Empty for anything else,
    including percentage lines.
    """
    sections = {cfg.id: cfg for cfg in layout.sections}
    members = {
        cfg.id: tuple(a.id for a in section_accounts(cfg, accounts))
        for cfg in layout.sections
    }

    for comp in layout.computed_lines:
        if comp.id == line_id:
            return [
                (sections[t.section_id], members[t.section_id], t.sign)
                for t in comp.formula
            ]
    for cfg in layout.sections:
        if line_id == f"{cfg.id}-total":
            return [(cfg, members[cfg.id], 1)]
        for mid in members[cfg.id]:
            if line_id == f"{cfg.id}-{mid}":
                return [(cfg, (mid,), 1)]
    return []


def drill_down(
    layout: StatementLayout,
    result: ConsolidationResult,
    buckets: Sequence[PeriodBucket],
    line_id: str,
    period_key: str,
    name_patterns: Iterable[str] = OTHER_EXPENSE_NAME_PATTERNS,
) -> DrillDown:
    """
    Entity accounts behind one consolidated line for one bucket.

    Rows carry the sign the line applies (revenue flipped on net change
    layouts, formula signs on computed lines), so they sum to the line.
    Within a master account rows are ordered by entity name, then account
    number.

    Raises:
        StatementLineNotFoundError: ``period_key`` is not a bucket, or
            ``line_id`` is not an amount line of ``layout``.
    """
    bucket = next((b for b in buckets if b.key == period_key), None)
    if bucket is None:
        raise StatementLineNotFoundError(layout.id, line_id, period_key)
    accounts = reclassify_accounts(result.accounts, name_patterns)
    terms = resolve_line(layout, accounts, line_id)
    if not terms:
        raise StatementLineNotFoundError(layout.id, line_id)

    shares = account_shares(result, (bucket,))
    names = dict(result.entity_names)
    sources = {a.id: a for a in result.source_accounts}

    rows: list[DrillDownRow] = []
    for cfg, master_ids, sign in terms:
        flip = layout.use_net_change and cfg.classification == REVENUE_CLASSIFICATION
        for mid in master_ids:
            master_rows: list[DrillDownRow] = []
            for mapping in result.contributors(mid):
                share = shares[mapping.account_id]
                raw = (
                    share.net_change[bucket.key]
                    if layout.use_net_change
                    else share.ending_balance[bucket.key]
                )
                value = -raw if flip else raw
                account = sources.get(mapping.account_id)
                master_rows.append(
                    DrillDownRow(
                        entity_id=mapping.entity_id,
                        entity_name=names.get(mapping.entity_id, ""),
                        account_id=mapping.account_id,
                        account_name=account.name if account else "",
                        account_number=account.account_number if account else None,
                        master_account_id=mid,
                        section_id=cfg.id,
                        amount=value * sign,
                    )
                )
            master_rows.sort(
                key=lambda r: (r.entity_name, r.account_number or "", r.account_id)
            )
            rows.extend(master_rows)

    return DrillDown(
        statement_id=layout.id,
        line_id=line_id,
        period_key=bucket.key,
        total=sum((r.amount for r in rows), _ZERO),
        rows=tuple(rows),
    )
