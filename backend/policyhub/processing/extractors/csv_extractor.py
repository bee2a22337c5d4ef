"""CSV extractor — header row becomes the dict keys."""

from __future__ import annotations

import csv
from typing import Any

from policyhub.core.constants import FileFormat
from policyhub.core.logging import get_logger
from policyhub.pipeline.errors import ParseError
from policyhub.processing.extractors.base import BaseExtractor

logger = get_logger(__name__)


class CsvExtractor(BaseExtractor):
    def extract(self, filepath: str) -> list[dict[str, Any]]:
        rows: list[dict[str, Any]] = []
        try:
            with open(filepath, newline="", encoding="utf-8-sig") as fh:
                reader = csv.DictReader(fh, strict=True)
                if not reader.fieldnames:
                    return rows
                for record in reader:
                    # Extra trailing cells land under the None key
                    row = {
                        key.strip(): value
                        for key, value in record.items()
                        if key and key.strip() and value not in (None, "")
                    }
                    if any(str(v).strip() for v in row.values()):
                        rows.append(row)
        except (csv.Error, UnicodeDecodeError) as exc:
            raise ParseError(
                f"Malformed CSV file: {exc}",
                details={"filepath": filepath},
            ) from exc
        except OSError as exc:
            raise ParseError(
                f"Could not read file: {exc}",
                details={"filepath": filepath},
            ) from exc

        logger.debug("CSV decoded", filepath=filepath, rows=len(rows))
        return rows

    def supports_format(self, format_type):
        return format_type == FileFormat.STRUCTURED_CSV
