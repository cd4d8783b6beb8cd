"""
Consolidation mapper: N entities' accounts -> one master chart of accounts.

Pure functions.  ZERO I/O; the only side effect is a warning log for
stored mapping rules that cannot be used.

Resolution order for each entity account:

1. A persisted (master account, entity, account) mapping, when its master
   account is among the active templates.
2. Otherwise the first template, in declared order, with a matching rule.
3. Otherwise the account is UNMAPPED: it is reported separately and
   contributes nothing to any consolidated figure.

Each entity account therefore maps to at most one master account.

Consolidated balances are synthetic ``RawBalance`` rows, one per master
account per month, whose beginning, ending, net change, debit and credit
columns are each the independent sum of the mapped entity rows.  They are
never re-derived from each other.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal

from ledger_config.loader import parse_mapping_rule
from ledger_config.schema import MappingRule, MasterAccountTemplate
from ledger_kernel.domain.values import AccountInfo
from ledger_kernel.logging_config import get_logger
from ledger_kernel.selectors.account_selector import AccountRow
from ledger_kernel.selectors.balance_selector import RawBalance
from ledger_kernel.selectors.master_account_selector import MappingRow, MasterAccountRow
from ledger_kernel.selectors.organization_selector import EntityRow
from ledger_modules.consolidation.models import (
    CONSOLIDATED_ENTITY_ID,
    EntityBreakdownLine,
    MappingSource,
    MasterAccountBreakdown,
    ResolvedMapping,
    UnmappedAccount,
    UnmappedMonthlyBalances,
)

logger = get_logger("modules.consolidation.mapper")

_ZERO = Decimal("0")


# =========================================================================
# Templates
# =========================================================================


def _stored_rules(row: MasterAccountRow) -> tuple[MappingRule, ...]:
    rules: list[MappingRule] = []
    for raw in row.mapping_rules:
        if not isinstance(raw, dict):
            reason = f"Mapping rule is not an object: {raw!r}"
        else:
            try:
                rules.append(parse_mapping_rule(raw))
                continue
            except ValueError as exc:
                reason = str(exc)
        logger.warning(
            "master_account_rule_ignored",
            extra={
                "master_account_id": row.id,
                "account_number": row.account_number,
                "reason": reason,
            },
        )
    return tuple(rules)


def template_from_row(row: MasterAccountRow) -> MasterAccountTemplate:
    """
    Convert a stored master account into an evaluable template.

    Stored rules that do not parse (no criteria, unknown keys, not a
    mapping) are dropped with a ``master_account_rule_ignored`` warning;
    the remaining rules still apply.
    """
    return MasterAccountTemplate(
        account_number=row.account_number,
        name=row.name,
        classification=row.classification,
        account_type=row.account_type,
        normal_balance=row.normal_balance,
        display_order=row.display_order,
        mapping_rules=_stored_rules(row),
        id=row.id,
    )


def master_id(template: MasterAccountTemplate) -> str:
    """Stable id for a template; unsaved templates use their number."""
    return template.id or f"master-{template.account_number}"


def find_master_for_account(
    account_number: str | None,
    name: str,
    account_type: str | None,
    templates: Sequence[MasterAccountTemplate],
) -> MasterAccountTemplate | None:
    """First template, in order, with any matching rule; None when unmatched."""
    for template in templates:
        if template.matches(account_number, name, account_type):
            return template
    return None


# =========================================================================
# Mapping resolution
# =========================================================================


def _unmapped(account: AccountRow, entities: Mapping[str, EntityRow]) -> UnmappedAccount:
    entity = entities.get(account.entity_id)
    return UnmappedAccount(
        id=account.id,
        entity_id=account.entity_id,
        entity_name=entity.name if entity else "",
        entity_code=entity.code if entity else None,
        name=account.name,
        account_number=account.account_number,
        classification=account.classification,
        account_type=account.account_type,
        current_balance=account.current_balance,
    )


def resolve_mappings(
    accounts: Sequence[AccountRow],
    templates: Sequence[MasterAccountTemplate],
    persisted: Iterable[MappingRow] = (),
    entities: Mapping[str, EntityRow] | None = None,
) -> tuple[tuple[ResolvedMapping, ...], tuple[UnmappedAccount, ...]]:
    """
    Route every account to at most one master account.

    Returns (mappings, unmapped), both in the order of ``accounts``.
    """
    entities = entities or {}
    active_ids = {master_id(t) for t in templates}
    explicit: dict[str, str] = {}
    for row in persisted:
        if row.master_account_id in active_ids:
            explicit.setdefault(row.account_id, row.master_account_id)

    mappings: list[ResolvedMapping] = []
    unmapped: list[UnmappedAccount] = []
    for account in accounts:
        if account.id in explicit:
            mappings.append(
                ResolvedMapping(
                    master_account_id=explicit[account.id],
                    entity_id=account.entity_id,
                    account_id=account.id,
                    source=MappingSource.PERSISTED,
                )
            )
            continue
        template = find_master_for_account(
            account.account_number, account.name, account.account_type, templates
        )
        if template is None:
            unmapped.append(_unmapped(account, entities))
            continue
        mappings.append(
            ResolvedMapping(
                master_account_id=master_id(template),
                entity_id=account.entity_id,
                account_id=account.id,
                source=MappingSource.RULE,
            )
        )
    return tuple(mappings), tuple(unmapped)


# =========================================================================
# Consolidation
# =========================================================================


@dataclass(frozen=True)
class ConsolidationResult:
    """Synthetic master-level data plus everything needed for drill-down."""

    templates: tuple[MasterAccountTemplate, ...]
    accounts: tuple[AccountInfo, ...]
    balances: tuple[RawBalance, ...]
    mappings: tuple[ResolvedMapping, ...]
    unmapped: tuple[UnmappedAccount, ...]
    source_accounts: tuple[AccountRow, ...]
    source_balances: tuple[RawBalance, ...]
    entity_names: tuple[tuple[str, str], ...] = ()  # (id, name), ordered by name

    def contributors(self, master_account_id: str) -> tuple[ResolvedMapping, ...]:
        return tuple(m for m in self.mappings if m.master_account_id == master_account_id)


def consolidate(
    templates: Sequence[MasterAccountTemplate],
    accounts: Sequence[AccountRow],
    balances: Iterable[RawBalance],
    persisted: Iterable[MappingRow] = (),
    entities: Mapping[str, EntityRow] | None = None,
) -> ConsolidationResult:
    """
    Merge entity accounts and balances into master accounts.

    Every template yields one synthetic account (entity id
    ``"consolidated"``), whether or not anything maps to it.  Balances of
    unmapped accounts are dropped.
    """
    entities = entities or {}
    templates = tuple(templates)
    mappings, unmapped = resolve_mappings(accounts, templates, persisted, entities)
    target = {m.account_id: m.master_account_id for m in mappings}

    synthetic_accounts = tuple(
        AccountInfo(
            id=master_id(t),
            name=t.name,
            account_number=t.account_number,
            classification=t.classification,
            account_type=t.account_type,
            entity_id=CONSOLIDATED_ENTITY_ID,
        )
        for t in templates
    )

    sums: dict[tuple[str, int, int], list[Decimal]] = {}
    mapped_rows: list[RawBalance] = []
    for bal in balances:
        master = target.get(bal.account_id)
        if master is None:
            continue
        mapped_rows.append(bal)
        acc = sums.setdefault((master, bal.period_year, bal.period_month), [_ZERO] * 5)
        acc[0] += bal.beginning_balance
        acc[1] += bal.ending_balance
        acc[2] += bal.net_change
        acc[3] += bal.debit_total
        acc[4] += bal.credit_total

    order = {master_id(t): i for i, t in enumerate(templates)}
    synthetic_balances = tuple(
        RawBalance(
            account_id=master,
            entity_id=CONSOLIDATED_ENTITY_ID,
            period_year=year,
            period_month=month,
            beginning_balance=vals[0],
            ending_balance=vals[1],
            net_change=vals[2],
            debit_total=vals[3],
            credit_total=vals[4],
        )
        for (master, year, month), vals in sorted(
            sums.items(), key=lambda kv: (order.get(kv[0][0], len(order)), kv[0][1], kv[0][2])
        )
    )

    mapped_ids = set(target)
    return ConsolidationResult(
        templates=templates,
        accounts=synthetic_accounts,
        balances=synthetic_balances,
        mappings=mappings,
        unmapped=unmapped,
        source_accounts=tuple(a for a in accounts if a.id in mapped_ids),
        source_balances=tuple(mapped_rows),
        entity_names=tuple(
            (e.id, e.name) for e in sorted(entities.values(), key=lambda e: (e.name, e.id))
        ),
    )


def entity_breakdown(
    result: ConsolidationResult,
    year: int,
    month: int,
) -> tuple[MasterAccountBreakdown, ...]:
    """
    Per master account, each contributing entity account's figures for one
    month.  Lines sum exactly to the consolidated row for that month.
    Master accounts without contributors are omitted.
    """
    names = dict(result.entity_names)
    accounts = {a.id: a for a in result.source_accounts}
    month_rows = {
        b.account_id: b
        for b in result.source_balances
        if b.period_year == year and b.period_month == month
    }

    breakdowns: list[MasterAccountBreakdown] = []
    for template in result.templates:
        mid = master_id(template)
        contributors = result.contributors(mid)
        if not contributors:
            continue
        lines: list[EntityBreakdownLine] = []
        for mapping in contributors:
            account = accounts.get(mapping.account_id)
            row = month_rows.get(mapping.account_id)
            lines.append(
                EntityBreakdownLine(
                    entity_id=mapping.entity_id,
                    entity_name=names.get(mapping.entity_id, ""),
                    account_id=mapping.account_id,
                    account_name=account.name if account else "",
                    account_number=account.account_number if account else None,
                    beginning_balance=row.beginning_balance if row else _ZERO,
                    ending_balance=row.ending_balance if row else _ZERO,
                    debit_total=row.debit_total if row else _ZERO,
                    credit_total=row.credit_total if row else _ZERO,
                    net_change=row.net_change if row else _ZERO,
                )
            )
        lines.sort(key=lambda ln: (ln.entity_name, ln.account_number or "", ln.account_id))
        breakdowns.append(
            MasterAccountBreakdown(
                master_account_id=mid,
                account_number=template.account_number,
                name=template.name,
                classification=template.classification,
                account_type=template.account_type,
                lines=tuple(lines),
                beginning_balance=sum((ln.beginning_balance for ln in lines), _ZERO),
                ending_balance=sum((ln.ending_balance for ln in lines), _ZERO),
                debit_total=sum((ln.debit_total for ln in lines), _ZERO),
                credit_total=sum((ln.credit_total for ln in lines), _ZERO),
                net_change=sum((ln.net_change for ln in lines), _ZERO),
            )
        )
    return tuple(breakdowns)


def unmapped_monthly_balances(
    unmapped: Iterable[UnmappedAccount],
    monthly: Mapping[str, Mapping[int, Decimal]],
    year: int,
) -> tuple[UnmappedMonthlyBalances, ...]:
    """Twelve ending balances per unmapped account; missing months are 0."""
    return tuple(
        UnmappedMonthlyBalances(
            account=account,
            year=year,
            ending_balances=tuple(
                monthly.get(account.id, {}).get(m, _ZERO) for m in range(1, 13)
            ),
        )
        for account in unmapped
    )
