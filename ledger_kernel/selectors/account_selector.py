"""
Module: ledger_kernel.selectors.account_selector
Responsibility: Read active chart-of-accounts rows for one or more entities.
Architecture position: Kernel > Selectors.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import select

from ledger_kernel.models.account import Account
from ledger_kernel.selectors.base import BaseSelector, chunked


@dataclass(frozen=True)
class AccountRow:
    """Account metadata as stored."""

    id: str
    entity_id: str
    name: str
    account_number: str | None
    classification: str
    account_type: str
    current_balance: Decimal


class AccountSelector(BaseSelector):
    """Selector over accounts."""

    def active_accounts(self, entity_ids: Iterable[str]) -> list[AccountRow]:
        """Active accounts for ``entity_ids``, ordered by entity then number."""
        ids = sorted({str(e) for e in entity_ids})
        rows: list[AccountRow] = []
        for chunk in chunked(ids):
            stmt = (
                select(Account)
                .where(Account.entity_id.in_(chunk))
                .where(Account.is_active.is_(True))
                .order_by(Account.entity_id, Account.account_number, Account.id)
            )
            rows.extend(self._to_row(a) for (a,) in self._paginate(stmt))
        return rows

    @staticmethod
    def _to_row(account: Account) -> AccountRow:
        return AccountRow(
            id=str(account.id),
            entity_id=str(account.entity_id),
            name=account.name,
            account_number=account.account_number,
            classification=account.classification,
            account_type=account.account_type,
            current_balance=account.current_balance,
        )
