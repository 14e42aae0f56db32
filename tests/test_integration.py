"""Integration tests for the JSON Workbook codec."""

import pytest
from openpyxl import Workbook

from conftest import assert_same_tree, find_row, open_workbook, truncate_entry, workbook_bytes
from json_workbook import CodecConfig, WorkbookTransformer
from json_workbook.types import DocumentFormat


class TestWorkbookTransformerIntegration:
    """Integration tests for the complete export/import cycle."""

    def setup_method(self):
        """Set up test fixtures."""
        self.transformer = WorkbookTransformer()
        self.visible_only = WorkbookTransformer(CodecConfig(use_side_channel=False))

    def edit(self, data, change):
        """Apply an openpyxl edit to workbook bytes and return the new bytes."""
        workbook = open_workbook(data)
        change(workbook["Hierarchy"])
        return workbook_bytes(workbook)

    def test_round_trip_with_side_channel(self, sample_mixed_json):
        """Test that export then import gives the same tree."""
        exported = self.transformer.export_bytes(sample_mixed_json)
        imported = self.transformer.import_bytes(exported.data)

        assert exported.success
        assert imported.success
        assert imported.used_side_channel
        assert_same_tree(imported.value, sample_mixed_json)

    def test_round_trip_from_visible_rows(self, sample_mixed_json, sample_table_json, sample_list_json):
        """Test that the visible rows alone carry the whole tree."""
        for value in (sample_mixed_json, sample_table_json, sample_list_json):
            data = self.transformer.export_bytes(value).data
            imported = self.visible_only.import_bytes(data)

            assert imported.success
            assert not imported.used_side_channel
            assert_same_tree(imported.value, value)

    @pytest.mark.parametrize("value", [
        {"sum": 0.1 + 0.2, "large": 1000000000.3203125, "whole": 2.0, "big": 12345678901234567},
        {"rows": [{"n": 0.1 + 0.2, "m": 1.0}, {"n": -0.0, "m": 1000000000.3203125}]},
    ])
    def test_float_precision_round_trip(self, value):
        """Test that floats needing 17 digits keep them in both import modes."""
        data = self.transformer.export_bytes(value).data

        assert_same_tree(self.transformer.import_bytes(data).value, value)
        assert_same_tree(self.visible_only.import_bytes(data).value, value)

    def test_carriage_return_round_trip(self):
        """Test CR characters in field values, table cells and column keys."""
        value = {"note": "line1\r\nline2", "t": [{"k": "a\rb", "\r": None}], "\r": "cr key"}
        data = self.transformer.export_bytes(value).data

        with_side_channel = self.transformer.import_bytes(data)
        assert with_side_channel.used_side_channel
        assert_same_tree(with_side_channel.value, value)
        assert_same_tree(self.visible_only.import_bytes(data).value, value)

    def test_number_like_strings_round_trip(self):
        """Test that text spelling an exact number stays text."""
        value = {"version": "1.0", "id": "0.30000000000000004", "zip": "02134"}
        data = self.transformer.export_bytes(value).data

        assert_same_tree(self.visible_only.import_bytes(data).value, value)

    def test_title_edit(self, sample_document):
        """Test that an edited value cell is picked up."""
        data = self.transformer.export_bytes(sample_document).data

        def change(worksheet):
            worksheet.cell(row=find_row(worksheet, "field|title"), column=3).value = "New title"

        imported = self.transformer.import_bytes(self.edit(data, change))

        assert imported.value == {"title": "New title", "tags": ["a", "b"], "author": {"name": "Ann"}}

    def test_deleted_row(self, sample_document):
        """Test deleting a list row with and without the side channel."""
        data = self.transformer.export_bytes(sample_document).data
        edited = self.edit(data, lambda ws: ws.delete_rows(find_row(ws, "field|tags.[0]")))

        assert self.transformer.import_bytes(edited).value["tags"] == ["a", "b"]
        assert self.visible_only.import_bytes(edited).value["tags"] == ["b"]

    def test_table_cell_edit(self, sample_table_json):
        """Test editing a table cell and typing a boolean by hand."""
        data = self.transformer.export_bytes(sample_table_json).data

        def change(worksheet):
            row = find_row(worksheet, "table-row|people.[1]")
            worksheet.cell(row=row, column=4).value = 26
            worksheet.cell(row=find_row(worksheet, "table-col-headers|people.[1]"), column=5).value = "admin"
            worksheet.cell(row=row, column=5).value = "true"

        imported = self.transformer.import_bytes(self.edit(data, change))

        assert imported.value["people"][1] == {"name": "Bob", "age": 26, "admin": True}
        assert imported.value["people"][0] == {"name": "Alice", "age": 30}

    def test_sentinel_edits(self, sample_document):
        """Test typing sentinels into value cells."""
        data = self.transformer.export_bytes(sample_document).data

        def change(worksheet):
            worksheet.cell(row=find_row(worksheet, "field|title"), column=3).value = "null"
            worksheet.cell(row=find_row(worksheet, "field|author.name"), column=4).value = '""'

        imported = self.visible_only.import_bytes(self.edit(data, change))

        assert imported.value["title"] is None
        assert imported.value["author"]["name"] == ""

    def test_malformed_path_is_skipped(self, sample_document):
        """Test that a corrupted metadata cell skips only that row."""
        data = self.transformer.export_bytes(sample_document).data
        edited = self.edit(data, lambda ws: ws.cell(row=find_row(ws, "field|title"), column=1,
                                                    value="field|ti..tle"))

        imported = self.visible_only.import_bytes(edited)

        assert imported.success
        assert imported.skipped_rows == 1
        assert imported.warnings
        assert imported.value == {"tags": ["a", "b"], "author": {"name": "Ann"}}

    def test_corrupted_side_channel_degrades(self, sample_document):
        """Test that a broken hidden sheet falls back to visible rows."""
        data = self.transformer.export_bytes(sample_document).data
        workbook = open_workbook(data)
        workbook["_schema"]["A1"] = "{broken"
        imported = self.transformer.import_bytes(workbook_bytes(workbook))

        assert imported.success
        assert not imported.used_side_channel
        assert imported.value == sample_document
        assert any("valid JSON" in warning for warning in imported.warnings)

    def test_empty_root(self):
        """Test that empty roots need the side channel."""
        data = self.transformer.export_bytes({}).data

        assert self.transformer.import_bytes(data).value == {}

        imported = self.visible_only.import_bytes(data)
        assert not imported.success
        assert imported.value is None
        assert "No data found" in imported.errors[0]

    def test_legacy_hierarchy_workbook(self):
        """Test importing a workbook without the metadata column."""
        workbook = Workbook()
        worksheet = workbook.active
        for cells in (["Structure", "Value", "Type"],
                      ["name", "Alice", "string"],
                      ["tags", None, "array"],
                      ["    [0]", "x", "string"]):
            worksheet.append(cells)

        imported = self.transformer.import_bytes(workbook_bytes(workbook))

        assert imported.success
        assert imported.legacy
        assert imported.value == {"name": "Alice", "tags": ["x"]}

    def test_legacy_reject_policy(self):
        """Test that the reject policy fails the import."""
        workbook = Workbook()
        for cells in (["people", "[Array(2)]"], [None, "name", "age"], [None, "Alice", 30], [None, "Bob", 25]):
            workbook.active.append(cells)
        data = workbook_bytes(workbook)

        guessed = self.transformer.import_bytes(data)
        rejected = WorkbookTransformer(CodecConfig(legacy_ambiguity="reject")).import_bytes(data)

        assert guessed.success
        assert any("ambiguous" in warning for warning in guessed.warnings)
        assert not rejected.success
        assert rejected.value is None

    def test_export_invalid_value(self):
        """Test that unsupported trees fail validation."""
        result = self.transformer.export_bytes({"n": float("nan")})

        assert not result.success
        assert result.errors

    def test_export_text_yaml(self):
        """Test exporting a YAML document."""
        result = self.transformer.export_text("a: 1\nb: [x, y]\n", DocumentFormat.YAML)

        assert result.success
        assert self.transformer.import_bytes(result.data).value == {"a": 1, "b": ["x", "y"]}

    def test_import_damaged_sheet_xml(self, sample_document):
        """Test that broken sheet XML inside a valid zip fails cleanly."""
        data = self.transformer.export_bytes(sample_document).data

        result = self.transformer.import_bytes(truncate_entry(data, "xl/worksheets/sheet1.xml"))

        assert not result.success
        assert result.value is None
        assert "Not a readable .xlsx workbook" in result.errors[0]

    def test_import_garbage(self):
        """Test that non-workbook bytes fail cleanly."""
        result = self.transformer.import_bytes(b"not a workbook")

        assert not result.success
        assert result.errors

    @pytest.mark.asyncio
    async def test_file_round_trip(self, temp_dir, sample_mixed_json):
        """Test async export to and import from disk."""
        output = temp_dir / "nested" / "out.xlsx"

        exported = await self.transformer.export_file(sample_mixed_json, str(output))
        imported = await self.transformer.import_file(str(output))

        assert exported.success
        assert output.exists()
        assert exported.output_path == str(output.absolute())
        assert imported.success
        assert_same_tree(imported.value, sample_mixed_json)

    @pytest.mark.asyncio
    async def test_import_missing_file(self, temp_dir):
        """Test importing a file that does not exist."""
        result = await self.transformer.import_file(str(temp_dir / "missing.xlsx"))

        assert not result.success
        assert "Failed to read" in result.errors[0]

    @pytest.mark.asyncio
    async def test_export_to_unwritable_path(self, temp_dir):
        """Test exporting onto a path whose parent is a file."""
        blocker = temp_dir / "blocker"
        blocker.write_text("x")

        result = await self.transformer.export_file({"a": 1}, str(blocker / "out.xlsx"))

        assert not result.success
        assert "Failed to write" in result.errors[0]

    def test_profiler_records_operations(self, sample_document):
        """Test that export and import are profiled."""
        data = self.transformer.export_bytes(sample_document).data
        self.transformer.import_bytes(data)

        summary = self.transformer.profiler.get_performance_summary()
        assert [op["name"] for op in summary["operations"]] == ["export", "import"]
        assert summary["operations"][0]["rows"] == 6
