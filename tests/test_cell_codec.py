"""Tests for cell value sentinels."""

import pytest
from datetime import date, datetime
from json_workbook.cell_codec import (
    MISSING,
    decode_cell,
    decode_header,
    encode_header,
    encode_scalar,
    exact_number_text,
    is_lossy_number,
    needs_quoting,
    placeholder_kind,
)
from json_workbook.types import ValueKind


class TestEncodeScalar:
    """Tests for encode_scalar."""

    def test_plain_values(self):
        """Test that plain scalars pass through."""
        assert encode_scalar("hello") == "hello"
        assert encode_scalar(42) == 42
        assert encode_scalar(1.5) == 1.5
        assert encode_scalar(True) is True
        assert encode_scalar(False) is False

    def test_sentinels(self):
        """Test null, empty string and empty containers."""
        assert encode_scalar(None) == "null"
        assert encode_scalar("") == '""'
        assert encode_scalar([]) == "[]"
        assert encode_scalar({}) == "{}"

    @pytest.mark.parametrize("text", [
        "null", "NULL", "true", "False", "[]", "{}", '""', '"x"',
        "[Array(3)]", "[Object]", "=A1+1", "bell\x07", "line1\r\nline2", "\r",
        "1.0", "0.30000000000000004",
    ])
    def test_colliding_strings_are_quoted(self, text):
        """Test that strings that would read as sentinels get quoted."""
        encoded = encode_scalar(text)

        assert encoded != text
        assert encoded.startswith('"') and encoded.endswith('"')
        assert decode_cell(encoded) == text

    def test_non_empty_container_rejected(self):
        """Test that non-empty containers cannot go into one cell."""
        with pytest.raises(ValueError):
            encode_scalar([1])
        with pytest.raises(ValueError):
            encode_scalar({"a": 1})


class TestDecodeCell:
    """Tests for decode_cell."""

    def test_empty_cells_are_missing(self):
        """Test that blank cells carry no value."""
        assert decode_cell(None) is MISSING
        assert decode_cell("") is MISSING
        assert not MISSING

    def test_sentinels(self):
        """Test decoding of each sentinel."""
        assert decode_cell("null") is None
        assert decode_cell('""') == ""
        assert decode_cell("[]") == []
        assert decode_cell("{}") == {}

    def test_booleans_case_insensitive(self):
        """Test TRUE/FALSE typed by hand."""
        assert decode_cell("TRUE") is True
        assert decode_cell("false") is False
        assert decode_cell(True) is True

    def test_numbers_pass_through(self):
        """Test numeric cells."""
        assert decode_cell(7) == 7
        assert decode_cell(2.5) == 2.5

    def test_plain_strings(self):
        """Test that ordinary text, including numeric-looking text, stays a string."""
        assert decode_cell("hello") == "hello"
        assert decode_cell("123") == "123"
        assert decode_cell("  padded  ") == "  padded  "

    def test_dates_become_iso_strings(self):
        """Test dates typed into a spreadsheet."""
        assert decode_cell(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02T03:04:05"
        assert decode_cell(date(2024, 1, 2)) == "2024-01-02"

    def test_unbalanced_quote_kept(self):
        """Test that invalid quoted text is read verbatim."""
        assert decode_cell('"abc') == '"abc'

    @pytest.mark.parametrize("value", [
        None, True, False, 0, -3, 2.75, 1.0, -0.0, 0.1 + 0.2, 1000000000.3203125,
        12345678901234567, "", "text", "null", "TRUE", "[]", "{}",
        '"', '""', "[Array(0)]", "=formula", [], {},
    ])
    def test_encode_decode_identity(self, value):
        """Test that every encodable value decodes to itself."""
        decoded = decode_cell(encode_scalar(value))

        assert type(decoded) is type(value)
        assert decoded == value


class TestHeadersAndPlaceholders:
    """Tests for header and placeholder helpers."""

    def test_needs_quoting(self):
        """Test sentinel collision detection."""
        assert needs_quoting(" null ")
        assert needs_quoting("[Object]")
        assert not needs_quoting("nullable")
        assert not needs_quoting("[Array]")

    def test_encode_header(self):
        """Test that header names stay visible and literal."""
        assert encode_header("name") == "name"
        assert encode_header("") == '""'
        assert encode_header("=x") == '"=x"'
        assert decode_header(encode_header("")) == ""
        assert decode_header(encode_header('"q"')) == '"q"'
        assert encode_header("a\rb") == '"a\\rb"'
        assert decode_header(encode_header("a\rb")) == "a\rb"

    def test_decode_header(self):
        """Test decoding header cells."""
        assert decode_header(None) is None
        assert decode_header("") is None
        assert decode_header("age") == "age"
        assert decode_header(3.0) == "3"
        assert decode_header(7) == "7"

    def test_placeholder_kind(self):
        """Test placeholder recognition."""
        assert placeholder_kind("[Array(12)]") == ValueKind.ARRAY
        assert placeholder_kind("[Object]") == ValueKind.OBJECT
        assert placeholder_kind("[Array]") is None
        assert placeholder_kind(5) is None


class TestExactNumbers:
    """Tests for numbers that a numeric cell cannot hold exactly."""

    @pytest.mark.parametrize("value", [0.1 + 0.2, 1000000000.3203125, 1.0, -0.0, 12345678901234567])
    def test_lossy_numbers_written_as_text(self, value):
        """Test that numbers changed by a numeric cell are written as exact text."""
        encoded = encode_scalar(value)

        assert is_lossy_number(value)
        assert isinstance(encoded, str)
        decoded = decode_cell(encoded)
        assert type(decoded) is type(value)
        assert decoded == value

    @pytest.mark.parametrize("value", [0, 42, 1.5, 0.25, 1e+20, -7.125])
    def test_exact_numbers_stay_numeric(self, value):
        """Test that numbers a cell holds exactly are written as numbers."""
        assert not is_lossy_number(value)
        assert encode_scalar(value) == value

    def test_exact_number_text(self):
        """Test which text spells out a number."""
        assert exact_number_text("0.30000000000000004") == 0.1 + 0.2
        assert exact_number_text("2.0") == 2.0
        assert exact_number_text("123") is None
        assert exact_number_text("0.3") is None
        assert exact_number_text("2.00") is None
        assert exact_number_text("abc") is None

    def test_number_like_strings_keep_their_type(self):
        """Test that strings spelling exact numbers are quoted."""
        assert encode_scalar("1.0") == '"1.0"'
        assert decode_cell(encode_scalar(" 1.0")) == " 1.0"
        assert decode_cell("123") == "123"
