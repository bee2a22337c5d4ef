"""CSV / spreadsheet extractors and format detection."""

import zipfile
from datetime import datetime

import pytest

from policyhub.core.constants import FileFormat
from policyhub.pipeline.errors import ParseError, UnsupportedFileTypeError
from policyhub.processing.extractors import CsvExtractor, XlsxExtractor, get_extractor
from policyhub.processing.format_detector import detect_format

from conftest import write_csv, write_xlsx


class TestDetectFormat:
    @pytest.mark.parametrize(
        "declared, expected",
        [
            ("csv", FileFormat.STRUCTURED_CSV),
            ("XLSX", FileFormat.STRUCTURED_XLSX),
            (".xls", FileFormat.STRUCTURED_XLS),
            ("report.xlsx", FileFormat.STRUCTURED_XLSX),
        ],
    )
    def test_declared_type(self, declared, expected):
        assert detect_format(declared) == expected

    def test_falls_back_to_path_extension(self):
        assert detect_format(None, "/tmp/upload-1.csv") == FileFormat.STRUCTURED_CSV

    @pytest.mark.parametrize("declared", ["pdf", "docx", ".txt"])
    def test_unsupported(self, declared):
        with pytest.raises(UnsupportedFileTypeError):
            detect_format(declared)

    def test_nothing_to_detect_from(self):
        with pytest.raises(UnsupportedFileTypeError):
            detect_format(None, None)

    def test_extractor_lookup(self):
        assert isinstance(get_extractor(FileFormat.STRUCTURED_CSV), CsvExtractor)
        assert isinstance(get_extractor(FileFormat.STRUCTURED_XLS), XlsxExtractor)


class TestCsvExtractor:
    def test_header_row_becomes_keys(self, tmp_path):
        path = write_csv(
            tmp_path / "a.csv",
            ["Policy Number", "Email"],
            [["P-1", "a@example.com"], ["", ""], ["P-2", ""]],
        )
        rows = CsvExtractor().extract(str(path))
        assert rows == [
            {"Policy Number": "P-1", "Email": "a@example.com"},
            {"Policy Number": "P-2"},
        ]

    def test_utf8_bom_is_stripped(self, tmp_path):
        path = tmp_path / "bom.csv"
        path.write_bytes("\ufeffPolicy Number\nP-1\n".encode("utf-8"))
        assert CsvExtractor().extract(str(path)) == [{"Policy Number": "P-1"}]

    def test_header_only_file(self, tmp_path):
        path = write_csv(tmp_path / "empty.csv", ["Policy Number"], [])
        assert CsvExtractor().extract(str(path)) == []

    def test_undecodable_bytes_raise_parse_error(self, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_bytes(b"Policy Number\n\xff\xfe\xfa\n")
        with pytest.raises(ParseError):
            CsvExtractor().extract(str(path))

    def test_unterminated_quote_raises_parse_error(self, tmp_path):
        path = tmp_path / "quote.csv"
        path.write_text('Policy Number,Email\n"P-1,a@example.com\n', encoding="utf-8")
        with pytest.raises(ParseError):
            CsvExtractor().extract(str(path))


class TestXlsxExtractor:
    def test_first_sheet_rows(self, tmp_path):
        path = write_xlsx(
            tmp_path / "a.xlsx",
            ["Policy Number", "Policy Start Date", "Premium Amount"],
            [
                ["P-1", datetime(2024, 1, 1), 1200.5],
                [None, None, None],
                ["P-2", None, 300],
            ],
        )
        rows = XlsxExtractor().extract(str(path))
        assert rows == [
            {"Policy Number": "P-1", "Policy Start Date": datetime(2024, 1, 1), "Premium Amount": 1200.5},
            {"Policy Number": "P-2", "Premium Amount": 300},
        ]

    def test_extension_less_upload_name(self, tmp_path):
        source = write_xlsx(tmp_path / "a.xlsx", ["Policy Number"], [["P-1"]])
        upload = tmp_path / "file-1712345"
        upload.write_bytes(source.read_bytes())
        assert XlsxExtractor().extract(str(upload)) == [{"Policy Number": "P-1"}]

    def test_corrupt_workbook_raises_parse_error(self, tmp_path):
        path = tmp_path / "broken.xlsx"
        path.write_bytes(b"this is not a zip archive")
        with pytest.raises(ParseError):
            XlsxExtractor().extract(str(path))

    def test_missing_file_raises_parse_error(self, tmp_path):
        with pytest.raises(ParseError):
            XlsxExtractor().extract(str(tmp_path / "nope.xlsx"))

    def test_malformed_workbook_xml_raises_parse_error(self, tmp_path):
        source = write_xlsx(tmp_path / "good.xlsx", ["Policy Number"], [["P-1"]])
        path = tmp_path / "bad-xml.xlsx"
        with zipfile.ZipFile(source) as src, zipfile.ZipFile(path, "w") as dst:
            for item in src.infolist():
                payload = src.read(item.filename)
                if item.filename == "xl/workbook.xml":
                    payload = b"<workbook><sheets><sheet name='x'"
                dst.writestr(item, payload)

        with pytest.raises(ParseError, match="Malformed spreadsheet"):
            XlsxExtractor().extract(str(path))
