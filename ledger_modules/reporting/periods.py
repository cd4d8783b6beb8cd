"""
Period bucketing: requested date range -> ordered reporting columns.

Pure functions.  ZERO I/O.

A request names an inclusive (start year, start month) .. (end year, end
month) range and a granularity.  The range is split into buckets that
partition it exactly: every month in the range belongs to exactly one
bucket, buckets are chronological, and no bucket extends past either end of
the range (quarters and years are cropped).
"""

from __future__ import annotations

from ledger_kernel.domain.values import YearMonth
from ledger_kernel.exceptions import InvalidPeriodRangeError
from ledger_modules.reporting.models import Granularity, Period, PeriodBucket


# Fixed English abbreviations; labels must not vary with the host locale.
_MONTH_ABBR = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)


def _yy(year: int) -> str:
    return f"{year % 100:02d}"


def months_in_range(
    start_year: int,
    start_month: int,
    end_year: int,
    end_month: int,
) -> tuple[YearMonth, ...]:
    """Every calendar month of the inclusive range, in order."""
    months: list[YearMonth] = []
    y, m = start_year, start_month
    while (y, m) <= (end_year, end_month):
        months.append(YearMonth(y, m))
        m += 1
        if m > 12:
            y, m = y + 1, 1
    return tuple(months)


def _bucket_identity(ym: YearMonth, granularity: Granularity) -> tuple[str, str]:
    if granularity is Granularity.MONTHLY:
        return (
            f"{ym.year}-{ym.month:02d}",
            f"{_MONTH_ABBR[ym.month - 1]}-{_yy(ym.year)}",
        )
    if granularity is Granularity.QUARTERLY:
        q = (ym.month - 1) // 3 + 1
        return f"{ym.year}-Q{q}", f"Q{q} {_yy(ym.year)}"
    return f"FY{ym.year}", f"FY {_yy(ym.year)}"


def get_periods_in_range(
    start_year: int,
    start_month: int,
    end_year: int,
    end_month: int,
    granularity: Granularity | str = Granularity.MONTHLY,
) -> tuple[PeriodBucket, ...]:
    """
    Split an inclusive month range into reporting buckets.

    Monthly keys look like ``2025-01`` (label ``Jan-25``), quarterly
    ``2025-Q1`` (``Q1 25``) and annual ``FY2025`` (``FY 25``).

    Raises:
        InvalidPeriodRangeError: start after end, or a month outside 1..12.
        InvalidRequestParameterError: unknown granularity.
    """
    granularity = Granularity.parse(granularity)
    if (
        not 1 <= start_month <= 12
        or not 1 <= end_month <= 12
        or (start_year, start_month) > (end_year, end_month)
    ):
        raise InvalidPeriodRangeError(start_year, start_month, end_year, end_month)

    grouped: dict[str, list[YearMonth]] = {}
    labels: dict[str, str] = {}
    for ym in months_in_range(start_year, start_month, end_year, end_month):
        key, label = _bucket_identity(ym, granularity)
        grouped.setdefault(key, []).append(ym)
        labels[key] = label

    buckets: list[PeriodBucket] = []
    for key, months in grouped.items():
        first, last = months[0], months[-1]
        buckets.append(
            PeriodBucket(
                period=Period(
                    key=key,
                    label=labels[key],
                    year=first.year,
                    start_month=first.month,
                    end_month=last.month,
                    end_year=last.year,
                ),
                months=tuple(months),
            )
        )
    return tuple(buckets)


def collect_required_months(
    buckets: tuple[PeriodBucket, ...] | list[PeriodBucket],
    include_yoy: bool = False,
) -> tuple[YearMonth, ...]:
    """
    All months that must be loaded to compute ``buckets``.

    Includes each bucket month, the month before it (beginning-balance
    lookups across bucket edges), and with ``include_yoy`` the same months a
    year earlier.  Sorted, no duplicates.
    """
    needed: set[YearMonth] = set()
    for bucket in buckets:
        for ym in bucket.months:
            needed.add(ym)
            needed.add(ym.prior())
            if include_yoy:
                needed.add(ym.year_earlier())
    return tuple(sorted(needed))
