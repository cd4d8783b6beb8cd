"""
Module: ledger_kernel.selectors.master_account_selector
Responsibility: Read an organization's master accounts (in template
    evaluation order) and the explicit entity-account mappings into them.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - active_master_accounts() ordering is the template evaluation order:
      (display_order, account_number, id).  The mapper's first-match rule
      depends on it being stable.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from sqlalchemy import select

from ledger_kernel.models.master_account import MasterAccount, MasterAccountMapping
from ledger_kernel.selectors.base import BaseSelector, chunked


@dataclass(frozen=True)
class MasterAccountRow:
    """Master account as stored, rules still in raw JSON form."""

    id: str
    organization_id: str
    account_number: str
    name: str
    classification: str
    account_type: str
    normal_balance: str
    display_order: int
    mapping_rules: tuple[dict[str, Any], ...]


@dataclass(frozen=True)
class MappingRow:
    """Explicit (master account, entity, account) assignment."""

    master_account_id: str
    entity_id: str
    account_id: str


class MasterAccountSelector(BaseSelector):
    """Selector over master_accounts and master_account_mappings."""

    def active_master_accounts(self, organization_id: str) -> list[MasterAccountRow]:
        stmt = (
            select(MasterAccount)
            .where(MasterAccount.organization_id == organization_id)
            .where(MasterAccount.is_active.is_(True))
            .order_by(
                MasterAccount.display_order,
                MasterAccount.account_number,
                MasterAccount.id,
            )
        )
        return [
            MasterAccountRow(
                id=str(m.id),
                organization_id=str(m.organization_id),
                account_number=m.account_number,
                name=m.name,
                classification=m.classification,
                account_type=m.account_type,
                normal_balance=m.normal_balance,
                display_order=m.display_order,
                mapping_rules=tuple(m.mapping_rules or ()),
            )
            for (m,) in self._paginate(stmt)
        ]

    def mappings_for(self, master_account_ids: Iterable[str]) -> list[MappingRow]:
        ids = sorted({str(i) for i in master_account_ids})
        rows: list[MappingRow] = []
        for chunk in chunked(ids):
            stmt = (
                select(MasterAccountMapping)
                .where(MasterAccountMapping.master_account_id.in_(chunk))
                .order_by(MasterAccountMapping.master_account_id, MasterAccountMapping.id)
            )
            rows.extend(
                MappingRow(
                    master_account_id=str(m.master_account_id),
                    entity_id=str(m.entity_id),
                    account_id=str(m.account_id),
                )
                for (m,) in self._paginate(stmt)
            )
        return rows
