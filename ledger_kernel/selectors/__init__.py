"""Read-only selectors (data-access collaborators) for the statement engine."""

from ledger_kernel.selectors.account_selector import AccountRow, AccountSelector
from ledger_kernel.selectors.balance_selector import BalanceSelector, RawBalance
from ledger_kernel.selectors.base import CHUNK_SIZE, DEFAULT_PAGE_SIZE, BaseSelector, chunked
from ledger_kernel.selectors.depreciation_selector import DepreciationRow, DepreciationSelector
from ledger_kernel.selectors.master_account_selector import (
    MappingRow,
    MasterAccountRow,
    MasterAccountSelector,
)
from ledger_kernel.selectors.organization_selector import (
    EntityRow,
    OrganizationRow,
    OrganizationSelector,
)

__all__ = [
    "AccountRow",
    "AccountSelector",
    "BalanceSelector",
    "BaseSelector",
    "CHUNK_SIZE",
    "DEFAULT_PAGE_SIZE",
    "DepreciationRow",
    "DepreciationSelector",
    "EntityRow",
    "MappingRow",
    "MasterAccountRow",
    "MasterAccountSelector",
    "OrganizationRow",
    "OrganizationSelector",
    "RawBalance",
    "chunked",
]
