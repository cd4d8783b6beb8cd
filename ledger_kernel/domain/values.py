"""
Values -- Immutable domain value objects shared by the statement modules.

Responsibility:
    Provides the account snapshot and calendar-month types that both the
    reporting engine and the consolidation mapper operate on.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - AccountInfo is frozen.  Report-time changes (reclassification,
      consolidation) produce new instances via ``dataclasses.replace``; the
      stored account row is never touched.
    - YearMonth.month is always in 1..12.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, order=True, slots=True)
class YearMonth:
    """A calendar month; ordered chronologically."""

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"month must be in 1..12, got {self.month}")

    def prior(self) -> YearMonth:
        """The calendar month immediately before this one."""
        if self.month == 1:
            return YearMonth(self.year - 1, 12)
        return YearMonth(self.year, self.month - 1)

    def year_earlier(self) -> YearMonth:
        return YearMonth(self.year - 1, self.month)

    def as_tuple(self) -> tuple[int, int]:
        return (self.year, self.month)


@dataclass(frozen=True, slots=True)
class AccountInfo:
    """
    Snapshot of account metadata needed for statement placement.

    This is the bridge between the ORM layer and the pure transformation
    functions.  Services convert selector rows to AccountInfo before calling
    any statement or consolidation function.
    """

    id: str
    name: str
    account_number: str | None
    classification: str  # Asset, Liability, Equity, Revenue, Expense
    account_type: str
    entity_id: str | None = None
