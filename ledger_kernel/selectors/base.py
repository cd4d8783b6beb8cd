"""
Module: ledger_kernel.selectors.base
Responsibility: Abstract base class for all read-only query selectors, plus
    the pagination and IN-list chunking helpers every selector uses.
Architecture position: Kernel > Selectors.  May import from db/base.py and
    models/.  MUST NOT import from ledger_modules or ledger_config.
    Selectors NEVER create, modify, or delete data.

Invariants enforced:
    - Read-only access: Selectors accept a Session from the caller but MUST NOT
      call session.add(), session.delete(), session.commit(), or session.flush().
    - DTO return convention: Selectors return frozen dataclasses, NOT raw ORM
      model instances.
    - No silent truncation: result sets are read page by page
      (``page_size`` rows, default 1000) until a short page is returned, and
      IN lists are split into chunks of at most ``CHUNK_SIZE`` ids.

Failure modes:
    - SQLAlchemyError propagates to the caller unchanged.
"""

from abc import ABC
from collections.abc import Iterator, Sequence
from typing import Any, TypeVar

from sqlalchemy import Select
from sqlalchemy.orm import Session

DEFAULT_PAGE_SIZE = 1000
CHUNK_SIZE = 500

T = TypeVar("T")


def chunked(values: Sequence[T], size: int = CHUNK_SIZE) -> Iterator[list[T]]:
    """Yield consecutive slices of ``values`` with at most ``size`` items."""
    if size < 1:
        raise ValueError(f"chunk size must be positive, got {size}")
    items = list(values)
    for start in range(0, len(items), size):
        yield items[start:start + size]


class BaseSelector(ABC):
    """
    Abstract base class for all selectors.

    Contract:
        Selectors accept a Session from the caller, perform read-only queries,
        and return DTOs.  They MUST NOT mutate any data.

    Guarantees:
        - session is stored as a public attribute for subclass query use.
        - _paginate() yields every row of an ordered statement regardless of
          backend row limits.

    Non-goals:
        - BaseSelector does NOT define any query methods; subclasses implement
          domain-specific queries.
    """

    def __init__(self, session: Session, page_size: int = DEFAULT_PAGE_SIZE):
        """
        Initialize the selector.

        Args:
            session: SQLAlchemy session for database operations.
            page_size: Rows fetched per round trip.
        """
        if page_size < 1:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self.session = session
        self.page_size = page_size

    def _paginate(self, stmt: Select) -> Iterator[Any]:
        """
        Execute ``stmt`` page by page and yield each row.

        ``stmt`` must carry a deterministic ORDER BY; otherwise pages may
        overlap or skip rows.
        """
        offset = 0
        while True:
            page = self.session.execute(
                stmt.limit(self.page_size).offset(offset)
            ).all()
            yield from page
            if len(page) < self.page_size:
                return
            offset += self.page_size
