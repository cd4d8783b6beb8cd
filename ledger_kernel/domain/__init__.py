"""Pure domain types for the ledger kernel."""

from ledger_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from ledger_kernel.domain.values import AccountInfo, YearMonth

__all__ = [
    "AccountInfo",
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "YearMonth",
]
