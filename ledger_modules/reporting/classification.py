"""
Account reclassification for statement placement.

Pure functions.  ZERO I/O.

Ledgers commonly book depreciation, interest, taxes and similar
non-operating items as plain operating "Expense" accounts.  Before sections
are assembled, such accounts are moved to "Other Expense" by name so they
land below operating margin.  Only the in-memory copy changes; the stored
account is never written.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable

from ledger_kernel.domain.values import AccountInfo

EXPENSE_CLASSIFICATION = "Expense"
EXPENSE_TYPE = "Expense"
OTHER_EXPENSE_TYPE = "Other Expense"

OTHER_EXPENSE_NAME_PATTERNS: tuple[str, ...] = (
    "vehicle depreciation",
    "interest expense",
    "interest",
    "tax",
    "amortization",
    "goodwill",
    "gain",
    "loss on sale",
    "loss on disposal",
    "fixed asset depreciation",
    "depreciation",
)


def is_other_expense(account: AccountInfo, patterns: Iterable[str]) -> bool:
    """True when ``account`` is an operating expense whose name matches a pattern."""
    if account.classification != EXPENSE_CLASSIFICATION:
        return False
    if account.account_type != EXPENSE_TYPE:
        return False
    name = (account.name or "").lower()
    return any(p.lower() in name for p in patterns)


def reclassify_accounts(
    accounts: Iterable[AccountInfo],
    patterns: Iterable[str] = OTHER_EXPENSE_NAME_PATTERNS,
) -> list[AccountInfo]:
    """Return accounts with matching expenses retyped to "Other Expense"."""
    patterns = tuple(patterns)
    return [
        dataclasses.replace(a, account_type=OTHER_EXPENSE_TYPE)
        if is_other_expense(a, patterns)
        else a
        for a in accounts
    ]
