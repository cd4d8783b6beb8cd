"""
Mapping suggestions for unmapped entity accounts.

Pure functions.  ZERO I/O.

For each unmapped account every master template is scored; the best match
is kept:

* high   -- same account number and classification, or the same normalized
            name and classification
* medium -- same account number (any classification), or one normalized
            name contains the other with the same classification
* low    -- same classification and account type

Among candidates of equal confidence the earliest template wins; a later
exact-name match still replaces an earlier medium one.  Names are
normalized to lowercase alphanumerics.  Accounts with no candidate get no
suggestion.  Results are ordered high, medium, low; ties keep the order of
the unmapped accounts.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from ledger_config.schema import MasterAccountTemplate
from ledger_modules.consolidation.mapper import master_id
from ledger_modules.consolidation.models import (
    MappingSuggestion,
    SuggestionConfidence,
    UnmappedAccount,
)

_NON_ALNUM = re.compile(r"[^a-z0-9]")

_RANK = {
    SuggestionConfidence.HIGH: 0,
    SuggestionConfidence.MEDIUM: 1,
    SuggestionConfidence.LOW: 2,
}


def normalize_name(value: str) -> str:
    return _NON_ALNUM.sub("", (value or "").lower())


def best_match(
    account: UnmappedAccount,
    templates: Sequence[MasterAccountTemplate],
) -> tuple[MasterAccountTemplate, SuggestionConfidence, str] | None:
    """Best template for ``account`` with its confidence and reason."""
    best: tuple[MasterAccountTemplate, SuggestionConfidence, str] | None = None
    norm_account = normalize_name(account.name)

    for master in templates:
        same_class = account.classification == master.classification
        number_match = bool(account.account_number) and (
            account.account_number == master.account_number
        )

        if number_match and same_class:
            return (
                master,
                SuggestionConfidence.HIGH,
                f"Exact account number match ({account.account_number}) "
                "and same classification",
            )

        if number_match:
            # First number-only match in template order wins among mediums
            if best is None or best[1] is SuggestionConfidence.LOW:
                best = (
                    master,
                    SuggestionConfidence.MEDIUM,
                    f"Account number match ({account.account_number})",
                )
            continue

        norm_master = normalize_name(master.name)
        if same_class and norm_account == norm_master:
            if best is None or best[1] is not SuggestionConfidence.HIGH:
                best = (master, SuggestionConfidence.HIGH, "Exact name match and same classification")
            continue

        if (
            same_class
            and len(norm_account) > 2
            and len(norm_master) > 2
            and (norm_master in norm_account or norm_account in norm_master)
        ):
            if best is None or best[1] is SuggestionConfidence.LOW:
                best = (master, SuggestionConfidence.MEDIUM, "Name similarity and same classification")
            continue

        if same_class and account.account_type == master.account_type:
            if best is None:
                best = (
                    master,
                    SuggestionConfidence.LOW,
                    f"Same classification ({account.classification}) "
                    f"and type ({account.account_type})",
                )
    return best


def suggest_mappings(
    unmapped: Iterable[UnmappedAccount],
    templates: Sequence[MasterAccountTemplate],
) -> list[MappingSuggestion]:
    """One suggestion per unmapped account that has any candidate."""
    suggestions: list[MappingSuggestion] = []
    for account in unmapped:
        match = best_match(account, templates)
        if match is None:
            continue
        master, confidence, reason = match
        suggestions.append(
            MappingSuggestion(
                account=account,
                master_account_id=master_id(master),
                master_account_number=master.account_number,
                master_account_name=master.name,
                confidence=confidence,
                reason=reason,
            )
        )
    suggestions.sort(key=lambda s: _RANK[s.confidence])
    return suggestions
