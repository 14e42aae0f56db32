"""Pytest configuration and fixtures."""

import pytest
import tempfile
import zipfile
from io import BytesIO
from pathlib import Path

from openpyxl import Workbook, load_workbook


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture
def sample_document():
    """Small document with a scalar, a list and a nested object."""
    return {
        "title": "Report",
        "tags": ["a", "b"],
        "author": {"name": "Ann"}
    }


@pytest.fixture
def sample_table_json():
    """Object holding an array of flat objects."""
    return {
        "people": [
            {"name": "Alice", "age": 30},
            {"name": "Bob", "age": 25}
        ]
    }


@pytest.fixture
def sample_list_json():
    """Root array of flat objects."""
    return [
        {"id": 1, "name": "Item 1", "value": 100},
        {"id": 2, "name": "Item 2", "value": 200},
        {"id": 3, "name": "Item 3", "value": 300},
    ]


@pytest.fixture
def sample_mixed_json():
    """Mixed structure covering every value kind and awkward keys."""
    return {
        "metadata": {
            "version": "1.0",
            "created": "2024-01-01"
        },
        "data": [
            {"type": "A", "values": [1, 2, 3]},
            {"type": "B", "values": [4, 5, 6]},
        ],
        "config": {
            "enabled": True,
            "ratio": 0.25,
            "settings": {
                "timeout": 30,
                "retries": 3
            }
        },
        "": "empty key",
        "dotted.key": "dots",
        "[0]": "bracket key",
        "nothing": None,
        "empty_list": [],
        "empty_object": {},
        "sentinels": ["null", "", "true", "FALSE", "[]", "{}", '"quoted"', "[Array(2)]", "[Object]"],
        "formula": "=SUM(A1:A2)",
        "matrix": [[1, 2], [3]],
        "precision": {"sum": 0.1 + 0.2, "large": 1000000000.3203125, "whole": 2.0, "count": 2, "flag": True},
        "crlf": "line1\r\nline2",
        "readings": [
            {"label": "a\rb", "value": 0.1 + 0.2, "\r": None},
            {"label": "c", "value": 1.0, "\r": 1},
        ]
    }


def workbook_bytes(workbook: Workbook) -> bytes:
    """Serialize an openpyxl workbook."""
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def open_workbook(data: bytes) -> Workbook:
    """Load workbook bytes for editing."""
    return load_workbook(BytesIO(data))


def find_row(worksheet, metadata: str) -> int:
    """Get the 1-based row number whose column A holds the given metadata."""
    for row_index, (value,) in enumerate(worksheet.iter_rows(min_col=1, max_col=1, values_only=True), start=1):
        if value == metadata:
            return row_index
    raise AssertionError(f"No row with metadata {metadata!r}")


def assert_same_tree(actual, expected, path="$"):
    """Assert two value trees match, including scalar types and key order."""
    assert type(actual) is type(expected), f"{path}: {type(actual).__name__} != {type(expected).__name__}"
    if isinstance(expected, dict):
        assert list(actual) == list(expected), f"{path}: keys {list(actual)} != {list(expected)}"
        for key, value in expected.items():
            assert_same_tree(actual[key], value, f"{path}.{key!r}")
    elif isinstance(expected, list):
        assert len(actual) == len(expected), f"{path}: length {len(actual)} != {len(expected)}"
        for index, value in enumerate(expected):
            assert_same_tree(actual[index], value, f"{path}[{index}]")
    else:
        assert actual == expected, f"{path}: {actual!r} != {expected!r}"


def truncate_entry(data: bytes, name: str) -> bytes:
    """Rewrite workbook bytes with one zip entry cut in half."""
    source = zipfile.ZipFile(BytesIO(data))
    buffer = BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as target:
        for info in source.infolist():
            content = source.read(info.filename)
            if info.filename == name:
                content = content[:len(content) // 2]
            target.writestr(info, content)
    return buffer.getvalue()
