"""
Module: ledger_kernel.selectors.depreciation_selector
Responsibility: Sum externally computed book depreciation per entity per
    month.  This is the depreciation source consumed by the cash flow
    statement; no depreciation math happens here.
Architecture position: Kernel > Selectors.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import func, select

from ledger_kernel.models.fixed_asset import FixedAssetDepreciation
from ledger_kernel.selectors.base import BaseSelector, chunked


@dataclass(frozen=True)
class DepreciationRow:
    """Book depreciation summed over an entity's assets for one month."""

    entity_id: str
    period_year: int
    period_month: int
    book_depreciation: Decimal


class DepreciationSelector(BaseSelector):
    """Selector over fixed_asset_depreciation."""

    def book_depreciation(
        self,
        entity_ids: Iterable[str],
        years: Iterable[int],
    ) -> list[DepreciationRow]:
        """Monthly book depreciation totals for ``entity_ids`` in ``years``."""
        ids = sorted({str(e) for e in entity_ids})
        year_list = sorted({int(y) for y in years})
        if not ids or not year_list:
            return []

        rows: list[DepreciationRow] = []
        for chunk in chunked(ids):
            stmt = (
                select(
                    FixedAssetDepreciation.entity_id,
                    FixedAssetDepreciation.period_year,
                    FixedAssetDepreciation.period_month,
                    func.sum(FixedAssetDepreciation.book_depreciation),
                )
                .where(FixedAssetDepreciation.entity_id.in_(chunk))
                .where(FixedAssetDepreciation.period_year.in_(year_list))
                .group_by(
                    FixedAssetDepreciation.entity_id,
                    FixedAssetDepreciation.period_year,
                    FixedAssetDepreciation.period_month,
                )
                .order_by(
                    FixedAssetDepreciation.entity_id,
                    FixedAssetDepreciation.period_year,
                    FixedAssetDepreciation.period_month,
                )
            )
            for entity_id, year, month, total in self._paginate(stmt):
                rows.append(
                    DepreciationRow(
                        entity_id=str(entity_id),
                        period_year=year,
                        period_month=month,
                        book_depreciation=Decimal(str(total or 0)),
                    )
                )
        return rows
