"""Export assembled report sheets to Excel (XLSX) and deliver the file."""

import logging
import os
import tempfile
from datetime import date, datetime, time
from decimal import Decimal
from io import BytesIO
from pathlib import Path
from typing import Any, Sequence

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from src.core.exceptions import WriteError
from src.modules.reports.sheets import Money, Sheet

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _cell_value(v: Any) -> Any:
    """Convert value for Excel (Decimal -> float, tz dropped, unknown types -> str)."""
    if isinstance(v, Money):
        return int(v)
    if isinstance(v, str):
        return _clean_text(v)
    if v is None or isinstance(v, (bool, int, float)):
        return v
    if isinstance(v, Decimal):
        return float(v)
    if isinstance(v, (datetime, time)):
        return v.replace(tzinfo=None)
    if isinstance(v, date):
        return v
    return _clean_text(str(v))


def _clean_text(v: str) -> str:
    """Drop control characters the XLSX format cannot store."""
    cleaned = ILLEGAL_CHARACTERS_RE.sub("", v)
    if cleaned != v:
        logger.warning("Removed control characters from cell text %r", cleaned)
    return cleaned


def _number_format(v: Any, money_format: str) -> str | None:
    if isinstance(v, Money):
        return money_format
    if isinstance(v, time):
        return "hh:mm:ss"
    if isinstance(v, datetime):
        return "yyyy-mm-dd hh:mm:ss"
    if isinstance(v, date):
        return "yyyy-mm-dd"
    return None


def _write_table(ws: Any, rows: list[list[Any]], money_format: str, start_row: int = 1) -> None:
    """Write list of rows to sheet starting at start_row."""
    for i, row in enumerate(rows, start=start_row):
        for j, val in enumerate(row, start=1):
            cell = ws.cell(row=i, column=j, value=_cell_value(val))
            if isinstance(cell.value, str):
                # upstream text is data, never a formula
                cell.data_type = "s"
            fmt = _number_format(val, money_format)
            if fmt:
                cell.number_format = fmt


def _write_sheet(ws: Any, sheet: Sheet, money_format: str) -> None:
    ws.title = sheet.name
    _write_table(ws, sheet.rows, money_format)
    for r in sheet.title_rows:
        ws.cell(r + 1, 1).font = Font(bold=True, size=14)
    for r in sheet.section_rows:
        ws.cell(r + 1, 1).font = Font(bold=True, size=12)
    for r in sheet.header_rows:
        for c in range(1, len(sheet.rows[r]) + 1):
            ws.cell(r + 1, c).font = Font(bold=True)
    for c, width in enumerate(sheet.column_widths, start=1):
        ws.column_dimensions[get_column_letter(c)].width = width


def currency_format(symbol: str) -> str:
    """Whole-number format with the currency symbol as a literal prefix."""
    if not symbol:
        return "#,##0"
    return f'"{symbol}"#,##0'


def build_workbook_xlsx(sheets: Sequence[Sheet], currency_symbol: str = "") -> bytes:
    """Build XLSX bytes with one worksheet per sheet, in the given order."""
    if not sheets:
        raise WriteError("Report has no sheets")
    money_format = currency_format(currency_symbol)
    try:
        wb = Workbook()
        wb.remove(wb.active)
        for sheet in sheets:
            _write_sheet(wb.create_sheet(), sheet, money_format)
        buf = BytesIO()
        wb.save(buf)
    except MemoryError as e:
        raise WriteError("Not enough memory to build the report") from e
    except (ValueError, TypeError) as e:
        raise WriteError(f"Failed to build report workbook: {e}") from e
    return buf.getvalue()


def report_filename(prefix: str, day: date) -> str:
    """E.g. FMC_Analytics_Report_2026-10-19.xlsx"""
    return f"{prefix}_Analytics_Report_{day.isoformat()}.xlsx"


def save_report(content: bytes, filename: str, directory: str | Path) -> Path:
    """
    Write the workbook into directory under filename.

    The bytes go to a temp file in the same directory which is then renamed,
    so a file under the final name is always complete.
    """
    target_dir = Path(directory)
    target = target_dir / filename
    tmp_name = None
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=target_dir, prefix=".", suffix=".xlsx.part")
        with os.fdopen(fd, "wb") as f:
            f.write(content)
        os.replace(tmp_name, target)
    except OSError as e:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise WriteError(f"Failed to save report {filename}: {e.strerror or e}") from e
    logger.info("Saved report %s (%d bytes)", target, len(content))
    return target
