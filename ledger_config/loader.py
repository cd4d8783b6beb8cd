"""
Configuration Loader (``ledger_config.loader``).

Responsibility
--------------
Loads statement layouts and the master GL template from YAML and parses
them into typed ``ledger_config.schema`` dataclass instances.  The bundled
defaults live in ``ledger_config/data``; callers may point at their own
files.

Architecture position
---------------------
**Config layer**.  Depends only on ``ledger_config.schema`` (and, through it,
``ledger_kernel.exceptions``).  The reporting and consolidation modules
consume the parsed objects; they never read YAML themselves.

Invariants enforced
-------------------
* All parse errors raise ``ValueError`` or ``KeyError`` with descriptive
  messages; no silent defaults for required fields.
* Layout cross-references (``after_section``, formula sections) are checked
  when the ``StatementLayout`` is constructed (``InvalidLayoutError``, a
  ``ValueError``).

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys in parsed dict  -> ``KeyError`` propagates.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from ledger_config.schema import (
    ComputedLineConfig,
    FormulaTerm,
    MappingRule,
    MasterAccountTemplate,
    StatementLayout,
    StatementSectionConfig,
)

DATA_DIR = Path(__file__).parent / "data"
DEFAULT_LAYOUTS_PATH = DATA_DIR / "statement_layouts.yaml"
DEFAULT_MASTER_GL_PATH = DATA_DIR / "master_gl_template.yaml"

_RULE_KEYS = frozenset(
    {"account_number", "account_number_prefix", "name_contains", "name_exact", "account_type"}
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _str_or_none(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def parse_mapping_rule(data: dict[str, Any]) -> MappingRule:
    """
    Parse a ``MappingRule`` from a dict.

    Raises:
        ValueError: on unknown keys or a rule with no criteria.
    """
    unknown = set(data) - _RULE_KEYS
    if unknown:
        raise ValueError(f"Unknown mapping rule keys: {sorted(unknown)}")
    rule = MappingRule(**{k: _str_or_none(v) for k, v in data.items()})
    if not any(getattr(rule, k) for k in _RULE_KEYS):
        raise ValueError("Mapping rule has no matching criteria")
    return rule


def parse_master_account_template(data: dict[str, Any]) -> MasterAccountTemplate:
    """Parse a ``MasterAccountTemplate`` from a dict."""
    return MasterAccountTemplate(
        account_number=str(data["account_number"]),
        name=data["name"],
        classification=data["classification"],
        account_type=data["account_type"],
        normal_balance=data.get("normal_balance", "debit"),
        display_order=int(data.get("display_order", 0)),
        mapping_rules=tuple(
            parse_mapping_rule(r) for r in data.get("mapping_rules", [])
        ),
        id=_str_or_none(data.get("id")),
    )


def parse_section(data: dict[str, Any]) -> StatementSectionConfig:
    """Parse a ``StatementSectionConfig`` from a dict."""
    account_types = data["account_types"]
    if not account_types:
        raise ValueError(f"Section {data['id']!r} has no account types")
    return StatementSectionConfig(
        id=data["id"],
        title=data.get("title") or "",
        account_types=tuple(account_types),
        classification=data["classification"],
    )


def parse_computed_line(data: dict[str, Any]) -> ComputedLineConfig:
    """Parse a ``ComputedLineConfig`` from a dict."""
    return ComputedLineConfig(
        id=data["id"],
        label=data["label"],
        after_section=data["after_section"],
        formula=tuple(
            FormulaTerm(section_id=t["section"], sign=int(t["sign"]))
            for t in data["formula"]
        ),
        is_grand_total=bool(data.get("is_grand_total", False)),
        margin_label=data.get("margin_label"),
    )


def parse_layout(layout_id: str, data: dict[str, Any]) -> StatementLayout:
    """
    Parse a ``StatementLayout`` from a dict.

    Raises:
        KeyError: missing title / sections.
        InvalidLayoutError: dangling section references.
    """
    return StatementLayout(
        id=layout_id,
        title=data["title"],
        consolidated_title=data.get("consolidated_title"),
        use_net_change=bool(data.get("use_net_change", False)),
        sections=tuple(parse_section(s) for s in data["sections"]),
        computed_lines=tuple(
            parse_computed_line(c) for c in data.get("computed_lines", [])
        ),
        revenue_section_id=data.get("revenue_section_id"),
        net_income_line_id=data.get("net_income_line_id"),
    )


def parse_layouts(data: dict[str, Any]) -> dict[str, StatementLayout]:
    """Parse the ``layouts`` mapping of a layouts document."""
    layouts = data["layouts"]
    return {layout_id: parse_layout(layout_id, body) for layout_id, body in layouts.items()}


def load_statement_layouts(path: Path | None = None) -> dict[str, StatementLayout]:
    """Load statement layouts keyed by layout id (defaults to the bundled file)."""
    return parse_layouts(load_yaml_file(path or DEFAULT_LAYOUTS_PATH))


def load_master_gl_template(path: Path | None = None) -> tuple[MasterAccountTemplate, ...]:
    """
    Load the master GL template, ordered by ``display_order`` (stable).

    Declared order breaks ties, so first-match evaluation is deterministic.
    """
    data = load_yaml_file(path or DEFAULT_MASTER_GL_PATH)
    templates = [parse_master_account_template(t) for t in data["master_accounts"]]
    numbers = [t.account_number for t in templates]
    if len(set(numbers)) != len(numbers):
        raise ValueError("Duplicate account_number in master GL template")
    return tuple(sorted(templates, key=lambda t: t.display_order))
