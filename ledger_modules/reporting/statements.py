"""
Pure statement assembly functions.

These functions turn bucketed account amounts and a declarative
``StatementLayout`` into a ``StatementData`` structure.  ZERO I/O. ZERO side
effects.

All monetary values are Decimal.  All inputs/outputs are frozen dataclasses.

Functions in this module follow the ledger_kernel/domain/ purity convention:
- No database access
- No clock access
- No file I/O
- Deterministic: same inputs always produce same outputs (and, through
  ``render_to_json``, byte-identical output)
"""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Iterable, Mapping, Sequence
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from ledger_config.schema import ComputedLineConfig, StatementLayout, StatementSectionConfig
from ledger_kernel.domain.values import AccountInfo
from ledger_modules.reporting.models import (
    BucketedAmounts,
    LineItem,
    PeriodBucket,
    StatementData,
    StatementSection,
)

_ZERO = Decimal("0")
REVENUE_CLASSIFICATION = "Revenue"


# =========================================================================
# Helpers
# =========================================================================


def subtotal_label(title: str) -> str:
    """
    "Total " + title with only its first character kept as written.

    ``CURRENT ASSETS`` -> ``Total Current assets``; an empty title gives an
    empty label.
    """
    if not title:
        return ""
    return f"Total {title[0]}{title[1:].lower()}"


def _account_sort_key(account: AccountInfo) -> tuple[str, str]:
    return (account.account_number or "", account.id)


def _zeros(buckets: Sequence[PeriodBucket]) -> dict[str, Decimal]:
    return {b.key: _ZERO for b in buckets}


def section_accounts(
    config: StatementSectionConfig,
    accounts: Iterable[AccountInfo],
) -> list[AccountInfo]:
    """Accounts placed in a section, in line order."""
    selected = [
        a
        for a in accounts
        if a.classification == config.classification
        and a.account_type in config.account_types
    ]
    return sorted(selected, key=_account_sort_key)


def _build_section(
    config: StatementSectionConfig,
    accounts: Iterable[AccountInfo],
    aggregated: Mapping[str, BucketedAmounts],
    buckets: Sequence[PeriodBucket],
    use_net_change: bool,
) -> StatementSection:
    flip = use_net_change and config.classification == REVENUE_CLASSIFICATION
    totals = _zeros(buckets)
    lines: list[LineItem] = []

    for index, account in enumerate(section_accounts(config, accounts)):
        bucketed = aggregated.get(account.id)
        amounts: dict[str, Decimal] = {}
        for bucket in buckets:
            if bucketed is None:
                raw = _ZERO
            elif use_net_change:
                raw = bucketed.net_change.get(bucket.key, _ZERO)
            else:
                raw = bucketed.ending_balance.get(bucket.key, _ZERO)
            # Revenue is credit-negative in the ledger; show it positive
            value = -raw if flip else raw
            amounts[bucket.key] = value
            totals[bucket.key] += value

        lines.append(
            LineItem(
                id=f"{config.id}-{account.id}",
                label=account.name,
                amounts=amounts,
                indent=1,
                show_dollar_sign=index == 0,
                account_number=account.account_number,
            )
        )

    return StatementSection(
        id=config.id,
        title=config.title,
        lines=tuple(lines),
        subtotal_line=LineItem(
            id=f"{config.id}-total",
            label=subtotal_label(config.title),
            amounts=totals,
            is_total=True,
            show_dollar_sign=True,
        ),
    )


def _evaluate_formula(
    comp: ComputedLineConfig,
    section_totals: Mapping[str, Mapping[str, Decimal]],
    buckets: Sequence[PeriodBucket],
) -> dict[str, Decimal]:
    amounts: dict[str, Decimal] = {}
    for bucket in buckets:
        value = _ZERO
        for term in comp.formula:
            value += section_totals.get(term.section_id, {}).get(bucket.key, _ZERO) * term.sign
        amounts[bucket.key] = value
    return amounts


def margin_ratio(amount: Decimal, revenue: Decimal) -> Decimal:
    """amount / revenue, or 0 when revenue is 0."""
    if revenue == 0:
        return _ZERO
    return amount / revenue


# =========================================================================
# Statement builder
# =========================================================================


def build_statement(
    layout: StatementLayout,
    accounts: Sequence[AccountInfo],
    aggregated: Mapping[str, BucketedAmounts],
    buckets: Sequence[PeriodBucket],
    title: str | None = None,
) -> StatementData:
    """
    Assemble one statement from a layout.

    Sections are emitted in layout order, each with its account lines
    (sorted by account number) and a subtotal.  After each section, the
    computed lines placed after it are emitted in declaration order as
    pseudo-sections whose ``subtotal_line`` carries the value.  Computed
    lines with a ``margin_label`` are followed by a percentage-of-revenue
    line ``<id>_pct`` (0 where revenue is 0).

    With no buckets the result is a well-formed skeleton: every section and
    computed line present, all amount maps empty.
    """
    sections = [
        _build_section(cfg, accounts, aggregated, buckets, layout.use_net_change)
        for cfg in layout.sections
    ]
    section_totals = {s.id: s.subtotal_line.amounts for s in sections}
    revenue_totals = (
        section_totals.get(layout.revenue_section_id, {})
        if layout.revenue_section_id
        else None
    )

    final: list[StatementSection] = []
    for section in sections:
        final.append(section)
        for comp in layout.computed_lines:
            if comp.after_section != section.id:
                continue
            amounts = _evaluate_formula(comp, section_totals, buckets)
            final.append(
                StatementSection(
                    id=comp.id,
                    title="",
                    subtotal_line=LineItem(
                        id=comp.id,
                        label=comp.label,
                        amounts=amounts,
                        is_total=not comp.is_grand_total,
                        is_grand_total=comp.is_grand_total,
                        show_dollar_sign=True,
                    ),
                )
            )
            if comp.margin_label and revenue_totals is not None:
                pct_id = f"{comp.id}_pct"
                final.append(
                    StatementSection(
                        id=pct_id,
                        title="",
                        subtotal_line=LineItem(
                            id=pct_id,
                            label=comp.margin_label,
                            amounts={
                                b.key: margin_ratio(
                                    amounts[b.key], revenue_totals.get(b.key, _ZERO)
                                )
                                for b in buckets
                            },
                            indent=1,
                            is_percentage=True,
                        ),
                    )
                )

    return StatementData(
        id=layout.id,
        title=title or layout.title,
        sections=tuple(final),
    )


def extract_line_amounts(
    statement: StatementData,
    line_id: str,
    buckets: Sequence[PeriodBucket],
) -> dict[str, Decimal]:
    """A line's amount per bucket; zeros when the line is absent."""
    line = statement.find_line(line_id)
    return {
        b.key: (line.amounts.get(b.key, _ZERO) if line is not None else _ZERO)
        for b in buckets
    }


# =========================================================================
# Renderer (dict/JSON output)
# =========================================================================


def render_to_dict(obj: object) -> dict | list | str | int | float | bool | None:
    """
    Convert any report dataclass to a plain dict for JSON serialization.

    Handles:
    - Decimal -> str (preserving precision)
    - UUID -> str
    - date / datetime -> ISO format string
    - Enum -> .value
    - Nested frozen dataclasses -> nested dicts
    - Tuples -> lists
    - None preserved
    """
    if obj is None:
        return None
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, UUID):
        return str(obj)
    if isinstance(obj, (date, datetime)):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (list, tuple)):
        return [render_to_dict(item) for item in obj]
    if isinstance(obj, dict):
        return {str(k): render_to_dict(v) for k, v in obj.items()}
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: render_to_dict(getattr(obj, f.name))
            for f in dataclasses.fields(obj)
        }
    if isinstance(obj, (str, int, float, bool)):
        return obj
    return str(obj)


def render_to_json(obj: object) -> str:
    """Canonical JSON: sorted keys, Decimal as string.  Byte-stable."""
    return json.dumps(render_to_dict(obj), sort_keys=True, separators=(",", ":"))
