"""
Excel workbook export for a financial statements report.

One worksheet per statement (Income Statement, Balance Sheet, Cash Flows).
Row 1 holds the statement title, row 2 the period labels, then one row per
statement line: section titles, account lines, subtotals and computed lines,
in statement order.  Percentage lines are written as ratios with a percent
number format; all other amounts use ``#,##0``.

Amounts are written as floats because that is what a worksheet cell holds;
the report itself stays Decimal.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import IO

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, Side
from openpyxl.utils import get_column_letter

from ledger_kernel.logging_config import get_logger
from ledger_modules.reporting.models import (
    FinancialStatementsReport,
    LineItem,
    Period,
    StatementData,
)

logger = get_logger("modules.reporting.export")

AMOUNT_FORMAT = "#,##0"
CURRENCY_FORMAT = '"$"#,##0'
PERCENT_FORMAT = "0.0%"

_SHEET_TITLES = (
    ("income_statement", "Income Statement"),
    ("balance_sheet", "Balance Sheet"),
    ("cash_flow_statement", "Cash Flows"),
)

_BOLD = Font(bold=True)
_TITLE = Font(bold=True, size=14)
_TOP_RULE = Border(top=Side(style="thin"))
_DOUBLE_RULE = Border(top=Side(style="thin"), bottom=Side(style="double"))


def _write_line(ws, row: int, line: LineItem, periods: Sequence[Period]) -> None:
    label = ws.cell(row=row, column=1, value=line.label)
    label.alignment = Alignment(indent=line.indent * 2)
    if line.is_total or line.is_grand_total or line.is_header:
        label.font = _BOLD
    if line.is_header or line.is_separator:
        return

    for col, period in enumerate(periods, start=2):
        amount = line.amounts.get(period.key)
        if amount is None:
            continue
        cell = ws.cell(row=row, column=col, value=float(amount))
        if line.is_percentage:
            cell.number_format = PERCENT_FORMAT
        elif line.show_dollar_sign:
            cell.number_format = CURRENCY_FORMAT
        else:
            cell.number_format = AMOUNT_FORMAT
        if line.is_grand_total:
            cell.font = _BOLD
            cell.border = _DOUBLE_RULE
        elif line.is_total:
            cell.font = _BOLD
            cell.border = _TOP_RULE


def write_statement_sheet(
    ws,
    statement: StatementData,
    periods: Sequence[Period],
) -> int:
    """Fill ``ws`` with one statement.  Returns the last row written."""
    ws.cell(row=1, column=1, value=statement.title).font = _TITLE
    for col, period in enumerate(periods, start=2):
        header = ws.cell(row=2, column=col, value=period.label)
        header.font = _BOLD
        header.alignment = Alignment(horizontal="right")

    row = 3
    for section in statement.sections:
        if section.title:
            row += 1
            ws.cell(row=row, column=1, value=section.title).font = _BOLD
        for line in section.lines:
            row += 1
            _write_line(ws, row, line, periods)
        if section.subtotal_line is not None:
            row += 1
            _write_line(ws, row, section.subtotal_line, periods)

    ws.column_dimensions["A"].width = 52
    for col in range(2, len(periods) + 2):
        ws.column_dimensions[get_column_letter(col)].width = 14
    ws.freeze_panes = "B3"
    return row


def build_workbook(report: FinancialStatementsReport) -> Workbook:
    """Create an in-memory workbook with one sheet per statement."""
    wb = Workbook()
    wb.remove(wb.active)
    for attr, sheet_title in _SHEET_TITLES:
        ws = wb.create_sheet(title=sheet_title)
        write_statement_sheet(ws, getattr(report, attr), report.periods)
    return wb


def export_workbook(
    report: FinancialStatementsReport,
    destination: str | Path | IO[bytes],
) -> None:
    """Write ``report`` as an .xlsx file (path or binary stream)."""
    wb = build_workbook(report)
    wb.save(destination)
    logger.info(
        "financial_statements_exported",
        extra={
            "period_count": len(report.periods),
            "destination": str(destination) if isinstance(destination, (str, Path)) else "<stream>",
        },
    )
