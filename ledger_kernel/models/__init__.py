"""ORM models for the ledger statements kernel."""

from ledger_kernel.models.account import Account, Classification
from ledger_kernel.models.fixed_asset import FixedAsset, FixedAssetDepreciation
from ledger_kernel.models.gl_balance import GLBalance
from ledger_kernel.models.master_account import MasterAccount, MasterAccountMapping
from ledger_kernel.models.organization import Entity, Organization, OrganizationMember

__all__ = [
    "Account",
    "Classification",
    "Entity",
    "FixedAsset",
    "FixedAssetDepreciation",
    "GLBalance",
    "MasterAccount",
    "MasterAccountMapping",
    "Organization",
    "OrganizationMember",
]
