"""Row extractors keyed by detected file format."""

from policyhub.pipeline.errors import UnsupportedFileTypeError
from policyhub.processing.extractors.base import BaseExtractor
from policyhub.processing.extractors.csv_extractor import CsvExtractor
from policyhub.processing.extractors.xlsx_extractor import XlsxExtractor

EXTRACTORS: list[BaseExtractor] = [CsvExtractor(), XlsxExtractor()]


def get_extractor(format_type: str) -> BaseExtractor:
    for extractor in EXTRACTORS:
        if extractor.supports_format(format_type):
            return extractor
    raise UnsupportedFileTypeError(f"No extractor for format: {format_type}")


__all__ = ["BaseExtractor", "CsvExtractor", "XlsxExtractor", "get_extractor"]
