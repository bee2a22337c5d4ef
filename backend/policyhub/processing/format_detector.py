"""
Format Detector — maps a declared file type or filename to a FileFormat.
"""

from __future__ import annotations

import os

from policyhub.core.constants import FileFormat
from policyhub.pipeline.errors import UnsupportedFileTypeError

# Extension → format mapping
EXTENSION_MAP: dict[str, FileFormat] = {
    ".csv": FileFormat.STRUCTURED_CSV,
    ".xlsx": FileFormat.STRUCTURED_XLSX,
    ".xls": FileFormat.STRUCTURED_XLS,
}


def _as_extension(value: str) -> str:
    value = value.strip().lower()
    if "/" in value or os.sep in value or value.count(".") > 1:
        return os.path.splitext(value)[1]
    if not value.startswith("."):
        value = os.path.splitext(value)[1] or f".{value}"
    return value


def detect_format(file_type: str | None, filepath: str | None = None) -> FileFormat:
    """
    Resolve the tabular format of an input file.

    The declared type wins ("csv", ".xlsx", "report.xls" are all accepted);
    the path's extension is used when no type is declared.
    Raises UnsupportedFileTypeError for anything else.
    """
    candidates = [c for c in (file_type, filepath) if c]
    if not candidates:
        raise UnsupportedFileTypeError("No file type or path to detect format from")

    extension = _as_extension(candidates[0])
    try:
        return EXTENSION_MAP[extension]
    except KeyError:
        raise UnsupportedFileTypeError(
            f"Unsupported file type: {candidates[0]}",
            details={"extension": extension, "supported": sorted(EXTENSION_MAP)},
        ) from None
