"""
Selector tests against a real (SQLite) database.

Selectors are read-only and return frozen DTOs; these tests seed rows
through the ORM and check filtering, ordering and pagination.
"""

from decimal import Decimal

import pytest

from ledger_kernel.selectors import (
    AccountSelector,
    BalanceSelector,
    DepreciationSelector,
    MasterAccountSelector,
    OrganizationSelector,
)
from ledger_kernel.selectors.base import chunked


class TestChunked:
    def test_splits_into_bounded_slices(self):
        assert list(chunked([1, 2, 3, 4, 5], 2)) == [[1, 2], [3, 4], [5]]

    def test_empty_input_yields_nothing(self):
        assert list(chunked([], 3)) == []

    def test_rejects_non_positive_size(self):
        with pytest.raises(ValueError):
            list(chunked([1], 0))


class TestBalanceSelector:
    def test_only_requested_months_are_returned(self, session, seed):
        org = seed.organization()
        entity = seed.entity(org)
        cash = seed.account(entity, "Operating Cash", "1000", "Asset", "Bank")
        for month in (1, 2, 3):
            seed.balance(cash, 2025, month, beginning=month * 100, ending=(month + 1) * 100)
        seed.balance(cash, 2024, 2, beginning=0, ending=50)

        rows = BalanceSelector(session).balances_for([str(cash.id)], [(2025, 1), (2025, 3)])

        assert [(r.period_year, r.period_month) for r in rows] == [(2025, 1), (2025, 3)]
        assert rows[0].ending_balance == Decimal("200")
        assert rows[1].net_change == Decimal("100")

    def test_entity_filter(self, session, seed):
        org = seed.organization()
        a = seed.entity(org, "Alpha")
        b = seed.entity(org, "Beta")
        acct_a = seed.account(a, "Cash", "1000", "Asset", "Bank")
        acct_b = seed.account(b, "Cash", "1000", "Asset", "Bank")
        seed.balance(acct_a, 2025, 1, ending=10)
        seed.balance(acct_b, 2025, 1, ending=20)

        rows = BalanceSelector(session).balances_for(
            [str(acct_a.id), str(acct_b.id)], [(2025, 1)], entity_ids=[str(b.id)]
        )

        assert len(rows) == 1
        assert rows[0].entity_id == str(b.id)

    def test_empty_inputs_short_circuit(self, session):
        selector = BalanceSelector(session)
        assert selector.balances_for([], [(2025, 1)]) == []
        assert selector.balances_for(["x"], []) == []

    def test_pagination_reads_past_page_boundaries(self, session, seed):
        """A page size smaller than the result set must not truncate rows."""
        org = seed.organization()
        entity = seed.entity(org)
        accounts = [
            seed.account(entity, f"Account {i}", f"{1000 + i}", "Asset", "Bank")
            for i in range(7)
        ]
        for account in accounts:
            for month in range(1, 13):
                seed.balance(account, 2025, month, ending=month)

        months = [(2025, m) for m in range(1, 13)]
        rows = BalanceSelector(session, page_size=5).balances_for(
            [str(a.id) for a in accounts], months
        )

        assert len(rows) == 7 * 12
        assert len({(r.account_id, r.period_month) for r in rows}) == 7 * 12

    def test_monthly_ending_balances(self, session, seed):
        org = seed.organization()
        entity = seed.entity(org)
        acct = seed.account(entity, "Suspense", None, "Asset", "Other Current Asset")
        seed.balance(acct, 2025, 2, ending="12.50")
        seed.balance(acct, 2025, 11, ending="-3")

        monthly = BalanceSelector(session).monthly_ending_balances([str(acct.id)], 2025)

        assert monthly == {str(acct.id): {2: Decimal("12.50"), 11: Decimal("-3")}}

    def test_rejects_non_positive_page_size(self, session):
        with pytest.raises(ValueError):
            BalanceSelector(session, page_size=0)


class TestAccountSelector:
    def test_active_accounts_only(self, session, seed):
        org = seed.organization()
        entity = seed.entity(org)
        seed.account(entity, "Checking", "1010", "Asset", "Bank")
        seed.account(entity, "Old Savings", "1020", "Asset", "Bank", is_active=False)

        rows = AccountSelector(session).active_accounts([str(entity.id)])

        assert [r.name for r in rows] == ["Checking"]
        assert rows[0].entity_id == str(entity.id)
        assert rows[0].classification == "Asset"

    def test_ordered_by_account_number(self, session, seed):
        org = seed.organization()
        entity = seed.entity(org)
        seed.account(entity, "Revenue", "4000", "Revenue", "Income")
        seed.account(entity, "Cash", "1000", "Asset", "Bank")

        rows = AccountSelector(session, page_size=1).active_accounts([str(entity.id)])

        assert [r.account_number for r in rows] == ["1000", "4000"]


class TestDepreciationSelector:
    def test_sums_assets_per_entity_month(self, session, seed):
        org = seed.organization()
        entity = seed.entity(org)
        seed.depreciation(entity, 2025, 1, "100")
        seed.depreciation(entity, 2025, 1, "50")
        seed.depreciation(entity, 2025, 2, "100")
        seed.depreciation(entity, 2023, 1, "999")

        rows = DepreciationSelector(session).book_depreciation([str(entity.id)], [2025])

        assert [(r.period_month, r.book_depreciation) for r in rows] == [
            (1, Decimal("150")),
            (2, Decimal("100")),
        ]

    def test_no_entities(self, session):
        assert DepreciationSelector(session).book_depreciation([], [2025]) == []


class TestMasterAccountSelector:
    def test_active_master_accounts_in_display_order(self, session, seed):
        org = seed.organization()
        seed.master_account(org, "M4000", "Revenue", "Revenue", "Income", display_order=20)
        seed.master_account(org, "M1000", "Cash", "Asset", "Bank", display_order=10)
        seed.master_account(org, "M9999", "Retired", "Asset", "Bank", is_active=False)

        rows = MasterAccountSelector(session).active_master_accounts(str(org.id))

        assert [r.account_number for r in rows] == ["M1000", "M4000"]

    def test_mapping_rules_round_trip_as_dicts(self, session, seed):
        org = seed.organization()
        seed.master_account(
            org, "M1000", "Cash", "Asset", "Bank",
            mapping_rules=[{"account_number_prefix": "10"}],
        )

        (row,) = MasterAccountSelector(session).active_master_accounts(str(org.id))

        assert row.mapping_rules == ({"account_number_prefix": "10"},)

    def test_mappings_for(self, session, seed):
        org = seed.organization()
        entity = seed.entity(org)
        master = seed.master_account(org, "M1000", "Cash", "Asset", "Bank")
        acct = seed.account(entity, "Checking", "1010", "Asset", "Bank")
        seed.mapping(master, acct)

        rows = MasterAccountSelector(session).mappings_for([str(master.id)])

        assert len(rows) == 1
        assert rows[0].account_id == str(acct.id)
        assert rows[0].entity_id == str(entity.id)


class TestOrganizationSelector:
    def test_lookups(self, session, seed):
        org = seed.organization("Acme")
        entity = seed.entity(org, "Acme West", code="AW")
        selector = OrganizationSelector(session)

        assert selector.get_organization(str(org.id)).name == "Acme"
        row = selector.get_entity(str(entity.id))
        assert row.code == "AW"
        assert row.organization_id == str(org.id)

    def test_unknown_and_malformed_ids(self, session):
        selector = OrganizationSelector(session)
        assert selector.get_entity("not-a-uuid") is None
        assert selector.get_organization("00000000-0000-0000-0000-000000000000") is None

    def test_active_entities_sorted_by_name(self, session, seed):
        org = seed.organization()
        seed.entity(org, "Zeta")
        seed.entity(org, "Alpha")
        seed.entity(org, "Dormant", is_active=False)

        rows = OrganizationSelector(session).active_entities(str(org.id))

        assert [r.name for r in rows] == ["Alpha", "Zeta"]

    def test_membership(self, session, seed, test_actor_id):
        org = seed.organization(members=(test_actor_id,))
        selector = OrganizationSelector(session)

        assert selector.is_member(str(org.id), test_actor_id)
        assert not selector.is_member(str(org.id), "someone-else")
