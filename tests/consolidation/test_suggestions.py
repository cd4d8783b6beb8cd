"""Mapping suggestion scoring."""

from decimal import Decimal

import pytest

from ledger_config.schema import MasterAccountTemplate
from ledger_modules.consolidation.models import SuggestionConfidence, UnmappedAccount
from ledger_modules.consolidation.suggestions import best_match, normalize_name, suggest_mappings

CASH = MasterAccountTemplate("1000", "Cash & Equivalents", "Asset", "Bank", id="m-cash")
RECEIVABLES = MasterAccountTemplate(
    "1100", "Accounts Receivable", "Asset", "Accounts Receivable", id="m-ar"
)
PAYROLL = MasterAccountTemplate("2100", "Payroll Liabilities", "Liability", "Other Current Liability")
OFFICE = MasterAccountTemplate("6200", "Office Supplies", "Expense", "Expense", id="m-office")


def _unmapped(name, number=None, classification="Asset", account_type="Bank", account_id="u1"):
    return UnmappedAccount(
        id=account_id,
        entity_id="e1",
        entity_name="North",
        entity_code=None,
        name=name,
        account_number=number,
        classification=classification,
        account_type=account_type,
        current_balance=Decimal("0"),
    )


class TestBestMatch:
    def test_number_and_classification_is_high(self):
        master, confidence, reason = best_match(_unmapped("Whatever", "1000"), [CASH])
        assert master is CASH
        assert confidence is SuggestionConfidence.HIGH
        assert "1000" in reason

    def test_number_only_is_medium(self):
        account = _unmapped("Whatever", "2100", classification="Asset", account_type="Bank")
        master, confidence, _ = best_match(account, [PAYROLL])
        assert master is PAYROLL
        assert confidence is SuggestionConfidence.MEDIUM

    def test_exact_normalized_name_is_high(self):
        account = _unmapped("accounts-receivable", account_type="Accounts Receivable")
        master, confidence, _ = best_match(account, [CASH, RECEIVABLES])
        assert master is RECEIVABLES
        assert confidence is SuggestionConfidence.HIGH

    def test_name_containment_is_medium(self):
        account = _unmapped("Office Supplies - Warehouse", classification="Expense", account_type="Expense")
        master, confidence, _ = best_match(account, [OFFICE])
        assert master is OFFICE
        assert confidence is SuggestionConfidence.MEDIUM

    def test_type_only_is_low(self):
        account = _unmapped("Petty Float", account_type="Bank")
        master, confidence, _ = best_match(account, [RECEIVABLES, CASH])
        assert master is CASH
        assert confidence is SuggestionConfidence.LOW

    def test_number_match_returns_immediately(self):
        account = _unmapped("Accounts Receivable", "1000", account_type="Accounts Receivable")
        master, confidence, _ = best_match(account, [CASH, RECEIVABLES])
        assert master is CASH
        assert confidence is SuggestionConfidence.HIGH

    def test_no_candidate(self):
        account = _unmapped("Mystery", classification="Equity", account_type="Equity")
        assert best_match(account, [CASH, RECEIVABLES]) is None

    def test_short_names_do_not_partially_match(self):
        account = _unmapped("AR", classification="Asset", account_type="Other Current Asset")
        assert best_match(account, [RECEIVABLES]) is None

    def test_first_number_only_match_wins(self):
        payroll_clearing = MasterAccountTemplate(
            "2100", "Payroll Clearing", "Equity", "Equity", id="m-clearing"
        )
        account = _unmapped("Whatever", "2100", classification="Asset", account_type="Bank")

        master, confidence, _ = best_match(account, [PAYROLL, payroll_clearing])
        assert master is PAYROLL
        assert confidence is SuggestionConfidence.MEDIUM

        master, _, _ = best_match(account, [payroll_clearing, PAYROLL])
        assert master is payroll_clearing

    def test_name_containment_does_not_replace_number_match(self):
        account = _unmapped("Cash & Equivalents Reserve", "2100", account_type="Other Current Asset")
        master, confidence, reason = best_match(account, [PAYROLL, CASH])
        assert master is PAYROLL
        assert confidence is SuggestionConfidence.MEDIUM
        assert reason == "Account number match (2100)"


@pytest.mark.parametrize(
    "raw, expected",
    [("Cash & Equivalents", "cashequivalents"), ("A/R - Trade", "artrade"), ("", "")],
)
def test_normalize_name(raw, expected):
    assert normalize_name(raw) == expected


def test_suggestions_ordered_by_confidence():
    accounts = [
        _unmapped("Petty Float", account_id="low"),
        _unmapped("Mystery", classification="Equity", account_type="Equity", account_id="none"),
        _unmapped("Something", "1100", account_type="Accounts Receivable", account_id="high"),
    ]

    suggestions = suggest_mappings(accounts, [CASH, RECEIVABLES])

    assert [s.account.id for s in suggestions] == ["high", "low"]
    assert suggestions[0].master_account_id == "m-ar"
    assert suggestions[1].master_account_number == "1000"


def test_unsaved_template_gets_number_based_id():
    account = _unmapped("Payroll Liabilities", classification="Liability", account_type="Other Current Liability")
    (suggestion,) = suggest_mappings([account], [PAYROLL])
    assert suggestion.master_account_id == "master-2100"
