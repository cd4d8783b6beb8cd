"""
Pytest fixtures for the ledger statements test suite.

Provides:
- An in-memory SQLite database per test (all tables created)
- A session bound to it, rolled back after the test
- A deterministic clock
- Seed helpers for organizations, entities, accounts, balances, master
  accounts and depreciation

Environment Variables:
- DATABASE_URL: optional database URL.  Defaults to in-memory SQLite; point
  it at PostgreSQL to run the same suite against the production dialect.
"""

import json
import logging
import os
from datetime import datetime, timezone
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from ledger_kernel.db.engine import create_tables, drop_tables
from ledger_kernel.domain.clock import DeterministicClock
from ledger_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from ledger_kernel.models import (
    Account,
    Entity,
    FixedAsset,
    FixedAssetDepreciation,
    GLBalance,
    MasterAccount,
    MasterAccountMapping,
    Organization,
    OrganizationMember,
)

# Test actor ID for all member-scoped operations
TEST_ACTOR_ID = "user-test-actor"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture ledger_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, statements_service):
            statements_service.generate(...)
            logs = captured_logs()
            assert any(r["message"] == "financial_statements_generated" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("ledger_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


def get_database_url() -> str:
    return os.environ.get("DATABASE_URL", "sqlite://")


def _sqlite_savepoint_support(engine) -> None:
    """Let SQLAlchemy, not pysqlite, emit BEGIN so SAVEPOINT works."""

    @event.listens_for(engine, "connect")
    def _do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _do_begin(conn):
        conn.exec_driver_sql("BEGIN")


@pytest.fixture
def db_engine():
    """A fresh database with every table created."""
    url = get_database_url()
    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        _sqlite_savepoint_support(engine)
    else:
        engine = create_engine(url, pool_pre_ping=True)
    create_tables(engine)
    yield engine
    drop_tables(engine)
    engine.dispose()


@pytest.fixture
def session(db_engine):
    """Session for one test; everything it wrote is rolled back afterwards."""
    sess = Session(bind=db_engine, expire_on_commit=False)
    yield sess
    sess.rollback()
    sess.close()


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock(datetime(2025, 6, 30, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def test_actor_id() -> str:
    return TEST_ACTOR_ID


# =============================================================================
# Seed helpers
# =============================================================================


class LedgerSeeder:
    """Creates rows through the ORM and flushes after each helper call."""

    def __init__(self, session: Session):
        self.session = session

    def _add(self, obj):
        self.session.add(obj)
        self.session.flush()
        return obj

    def organization(self, name: str = "Acme Holdings", members=(TEST_ACTOR_ID,)) -> Organization:
        org = self._add(Organization(id=uuid4(), name=name))
        for user_id in members:
            self._add(OrganizationMember(id=uuid4(), organization_id=org.id, user_id=user_id))
        return org

    def entity(
        self,
        organization: Organization,
        name: str = "Acme Operating",
        code: str | None = None,
        is_active: bool = True,
    ) -> Entity:
        return self._add(
            Entity(
                id=uuid4(),
                organization_id=organization.id,
                name=name,
                code=code,
                is_active=is_active,
            )
        )

    def account(
        self,
        entity: Entity,
        name: str,
        account_number: str | None,
        classification: str,
        account_type: str,
        current_balance: Decimal | str = "0",
        is_active: bool = True,
    ) -> Account:
        return self._add(
            Account(
                id=uuid4(),
                entity_id=entity.id,
                name=name,
                account_number=account_number,
                classification=classification,
                account_type=account_type,
                current_balance=Decimal(current_balance),
                is_active=is_active,
            )
        )

    def balance(
        self,
        account: Account,
        year: int,
        month: int,
        beginning: Decimal | str = "0",
        ending: Decimal | str = "0",
        net_change: Decimal | str | None = None,
        debit: Decimal | str = "0",
        credit: Decimal | str = "0",
    ) -> GLBalance:
        beginning = Decimal(beginning)
        ending = Decimal(ending)
        net = ending - beginning if net_change is None else Decimal(net_change)
        return self._add(
            GLBalance(
                id=uuid4(),
                account_id=account.id,
                entity_id=account.entity_id,
                period_year=year,
                period_month=month,
                beginning_balance=beginning,
                ending_balance=ending,
                net_change=net,
                debit_total=Decimal(debit),
                credit_total=Decimal(credit),
            )
        )

    def master_account(
        self,
        organization: Organization,
        account_number: str,
        name: str,
        classification: str,
        account_type: str,
        mapping_rules: list[dict] | None = None,
        display_order: int = 0,
        is_active: bool = True,
    ) -> MasterAccount:
        return self._add(
            MasterAccount(
                id=uuid4(),
                organization_id=organization.id,
                account_number=account_number,
                name=name,
                classification=classification,
                account_type=account_type,
                display_order=display_order,
                mapping_rules=mapping_rules or [],
                is_active=is_active,
            )
        )

    def mapping(self, master: MasterAccount, account: Account) -> MasterAccountMapping:
        return self._add(
            MasterAccountMapping(
                id=uuid4(),
                master_account_id=master.id,
                entity_id=account.entity_id,
                account_id=account.id,
            )
        )

    def depreciation(
        self,
        entity: Entity,
        year: int,
        month: int,
        amount: Decimal | str,
        asset: FixedAsset | None = None,
    ) -> FixedAssetDepreciation:
        if asset is None:
            asset = self._add(FixedAsset(id=uuid4(), entity_id=entity.id, name="Equipment"))
        return self._add(
            FixedAssetDepreciation(
                id=uuid4(),
                fixed_asset_id=asset.id,
                entity_id=entity.id,
                period_year=year,
                period_month=month,
                book_depreciation=Decimal(amount),
                tax_depreciation=Decimal("0"),
            )
        )


@pytest.fixture
def seed(session) -> LedgerSeeder:
    return LedgerSeeder(session)
