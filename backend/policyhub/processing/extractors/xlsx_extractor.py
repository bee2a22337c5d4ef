"""
Spreadsheet extractor — first sheet, first row as header.

Supports both .xls (via xlrd) and .xlsx (via openpyxl) formats behind a
small adapter so the row-walking logic is shared.
"""

from __future__ import annotations

import zipfile
from typing import Any, BinaryIO, Iterator
from xml.etree.ElementTree import ParseError as XmlParseError

import xlrd
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from policyhub.core.constants import FileFormat
from policyhub.core.logging import get_logger
from policyhub.pipeline.errors import ParseError
from policyhub.processing.extractors.base import BaseExtractor

logger = get_logger(__name__)


# ═══════════════════════════════════════════════════════════
#  Sheet Adapters — uniform interface over xlrd / openpyxl
# ═══════════════════════════════════════════════════════════

class XlrdSheetAdapter:
    """Adapter for xlrd sheets.  Date cells come back as datetimes."""

    def __init__(self, sheet, datemode: int) -> None:
        self._s = sheet
        self._datemode = datemode

    def _cell(self, r: int, c: int) -> Any:
        cell = self._s.cell(r, c)
        if cell.ctype == xlrd.XL_CELL_DATE:
            return xlrd.xldate.xldate_as_datetime(cell.value, self._datemode)
        if cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
            return None
        if cell.ctype == xlrd.XL_CELL_BOOLEAN:
            return bool(cell.value)
        return cell.value if cell.value != "" else None

    def rows(self) -> Iterator[tuple[Any, ...]]:
        for r in range(self._s.nrows):
            yield tuple(self._cell(r, c) for c in range(self._s.ncols))


class OpenpyxlSheetAdapter:
    """Adapter for openpyxl worksheets (read-only, cached values)."""

    def __init__(self, ws) -> None:
        self._ws = ws

    def rows(self) -> Iterator[tuple[Any, ...]]:
        yield from self._ws.iter_rows(values_only=True)


# Legacy .xls workbooks are OLE2 compound documents
OLE2_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"


def _load_sheet(fh: BinaryIO):
    """Load the first sheet from an open XLS or XLSX file."""
    is_legacy_xls = fh.read(len(OLE2_MAGIC)) == OLE2_MAGIC
    fh.seek(0)

    if is_legacy_xls:
        workbook = xlrd.open_workbook(file_contents=fh.read())
        return XlrdSheetAdapter(workbook.sheet_by_index(0), workbook.datemode)

    workbook = load_workbook(fh, read_only=True, data_only=True)
    return OpenpyxlSheetAdapter(workbook.worksheets[0])


def _header_name(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


# ═══════════════════════════════════════════════════════════
#  Extractor
# ═══════════════════════════════════════════════════════════

class XlsxExtractor(BaseExtractor):
    def extract(self, filepath: str) -> list[dict[str, Any]]:
        try:
            # openpyxl checks the extension only when given a path
            with open(filepath, "rb") as fh:
                raw_rows = list(_load_sheet(fh).rows())
        except (
            InvalidFileException,
            zipfile.BadZipFile,
            xlrd.XLRDError,
            XmlParseError,
            KeyError,
            ValueError,
            OSError,
        ) as exc:
            raise ParseError(
                f"Malformed spreadsheet: {exc}",
                details={"filepath": filepath},
            ) from exc

        if not raw_rows:
            return []

        headers = [_header_name(value) for value in raw_rows[0]]
        rows: list[dict[str, Any]] = []

        for values in raw_rows[1:]:
            row = {
                header: value
                for header, value in zip(headers, values)
                if header is not None and not _is_empty(value)
            }
            if row:
                rows.append(row)

        logger.debug("Spreadsheet decoded", filepath=filepath, rows=len(rows))
        return rows

    def supports_format(self, format_type):
        return format_type in (FileFormat.STRUCTURED_XLSX, FileFormat.STRUCTURED_XLS)
