"""
Statement configuration schema.

Defines the human-authored, reviewable data that drives statement assembly
and consolidation.  YAML files are parsed into these types by the loader;
the reporting and consolidation engines evaluate them generically.

  StatementLayout        = ordered sections + computed lines for one statement
  MasterAccountTemplate  = one consolidated account and its mapping rules

Adding a statement line or a master account is a data change here, never a
code change in the engines.
"""

from __future__ import annotations

from dataclasses import dataclass

from ledger_kernel.exceptions import InvalidLayoutError

# ---------------------------------------------------------------------------
# Consolidation templates
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MappingRule:
    """
    One matching criterion set for routing an entity account to a master
    account.  The rule matches when ANY populated criterion matches.

    Name comparisons are case-insensitive; number and type comparisons are
    exact.
    """

    account_number: str | None = None
    account_number_prefix: str | None = None
    name_contains: str | None = None
    name_exact: str | None = None
    account_type: str | None = None

    def matches(
        self,
        account_number: str | None,
        name: str,
        account_type: str | None = None,
    ) -> bool:
        if self.account_number and account_number == self.account_number:
            return True
        if (
            self.account_number_prefix
            and account_number is not None
            and account_number.startswith(self.account_number_prefix)
        ):
            return True
        lowered = (name or "").lower()
        if self.name_contains and self.name_contains.lower() in lowered:
            return True
        if self.name_exact and lowered == self.name_exact.lower():
            return True
        if self.account_type and account_type == self.account_type:
            return True
        return False


@dataclass(frozen=True)
class MasterAccountTemplate:
    """A consolidated account definition, evaluated in declared order."""

    account_number: str
    name: str
    classification: str  # Asset, Liability, Equity, Revenue, Expense
    account_type: str
    normal_balance: str = "debit"
    display_order: int = 0
    mapping_rules: tuple[MappingRule, ...] = ()
    id: str | None = None  # persisted master account id, when loaded from storage

    def matches(
        self,
        account_number: str | None,
        name: str,
        account_type: str | None = None,
    ) -> bool:
        return any(
            rule.matches(account_number, name, account_type)
            for rule in self.mapping_rules
        )


# ---------------------------------------------------------------------------
# Statement layouts
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StatementSectionConfig:
    """Accounts with this classification and one of these types roll in."""

    id: str
    title: str
    account_types: tuple[str, ...]
    classification: str


@dataclass(frozen=True)
class FormulaTerm:
    """Signed reference to a section subtotal."""

    section_id: str
    sign: int


@dataclass(frozen=True)
class ComputedLineConfig:
    """
    A derived line: signed sum of section subtotals, placed right after
    ``after_section``.  When ``margin_label`` is set the builder also emits a
    percentage-of-revenue line with that label.
    """

    id: str
    label: str
    after_section: str
    formula: tuple[FormulaTerm, ...]
    is_grand_total: bool = False
    margin_label: str | None = None


@dataclass(frozen=True)
class StatementLayout:
    """Complete declarative definition of one statement."""

    id: str
    title: str
    sections: tuple[StatementSectionConfig, ...]
    computed_lines: tuple[ComputedLineConfig, ...] = ()
    use_net_change: bool = False
    consolidated_title: str | None = None
    revenue_section_id: str | None = None
    net_income_line_id: str | None = None

    def __post_init__(self) -> None:
        section_ids = [s.id for s in self.sections]
        if len(set(section_ids)) != len(section_ids):
            raise InvalidLayoutError(self.id, "duplicate section id")

        known = set(section_ids)
        line_ids: set[str] = set()
        for comp in self.computed_lines:
            if comp.id in line_ids or comp.id in known:
                raise InvalidLayoutError(self.id, f"duplicate line id {comp.id!r}")
            line_ids.add(comp.id)
            if comp.after_section not in known:
                raise InvalidLayoutError(
                    self.id,
                    f"computed line {comp.id!r} placed after unknown section "
                    f"{comp.after_section!r}",
                )
            for term in comp.formula:
                if term.section_id not in known:
                    raise InvalidLayoutError(
                        self.id,
                        f"computed line {comp.id!r} references unknown section "
                        f"{term.section_id!r}",
                    )
                if term.sign not in (1, -1):
                    raise InvalidLayoutError(
                        self.id,
                        f"computed line {comp.id!r} has sign {term.sign}; "
                        "expected 1 or -1",
                    )

        if self.revenue_section_id is not None and self.revenue_section_id not in known:
            raise InvalidLayoutError(
                self.id, f"unknown revenue section {self.revenue_section_id!r}"
            )
        if self.net_income_line_id is not None and self.net_income_line_id not in line_ids:
            raise InvalidLayoutError(
                self.id, f"unknown net income line {self.net_income_line_id!r}"
            )

    def display_title(self, consolidated: bool = False) -> str:
        if consolidated and self.consolidated_title:
            return self.consolidated_title
        return self.title
