#!/usr/bin/env python3
"""
Example usage of the JSON Workbook codec.

This script exports a JSON structure to an outlined .xlsx workbook,
edits one cell the way a person would in a spreadsheet tool, and
imports the workbook back into JSON.
"""

import asyncio
import json
import tempfile
from pathlib import Path

from openpyxl import load_workbook

from json_workbook import WorkbookTransformer


async def main():
    """Main example function."""
    print("JSON Workbook Example")
    print("=" * 50)

    sample_data = {
        "title": "Quarterly report",
        "tags": ["finance", "q3"],
        "author": {
            "name": "Alice Johnson",
            "email": "alice@example.com"
        },
        "line_items": [
            {"sku": "A-100", "qty": 3, "price": 9.5},
            {"sku": "B-200", "qty": 1, "price": 120.0},
            {"sku": "C-300", "qty": 12, "price": 0.75, "note": "bulk"}
        ],
        "approved": False,
        "reviewer": None
    }

    print(f"Sample of original JSON:\n{json.dumps(sample_data, indent=2)[:200]}...\n")

    transformer = WorkbookTransformer()

    print("Flattened rows:")
    for row in transformer.flatten(sample_data):
        print(f"   {'  ' * row.level}{row.metadata()}")

    with tempfile.TemporaryDirectory() as temp_dir:
        workbook_path = Path(temp_dir) / "report.xlsx"

        result = await transformer.export_file(sample_data, str(workbook_path))
        if not result.success:
            print("❌ Export failed")
            for error in result.errors or []:
                print(f"   Error: {error}")
            return

        print(f"\n✅ Exported {result.row_count} rows to {result.output_path}")

        # Edit the title the way a spreadsheet user would
        workbook = load_workbook(workbook_path)
        worksheet = workbook[transformer.config.sheet_name]
        for cells in worksheet.iter_rows(min_col=1, max_col=3):
            if cells[0].value == "field|title":
                cells[2].value = "Quarterly report (reviewed)"
        workbook.save(workbook_path)
        print("Edited the title cell")

        imported = await transformer.import_file(str(workbook_path))
        if imported.success:
            print(f"✅ Imported {imported.row_count} rows "
                  f"(side channel used: {imported.used_side_channel})")
            print(json.dumps(imported.value, indent=2)[:500])
            for warning in imported.warnings:
                print(f"   ⚠️  {warning}")
        else:
            print("❌ Import failed")
            for error in imported.errors or []:
                print(f"   Error: {error}")

    print(f"\nPerformance: {transformer.profiler.get_performance_summary()}")


if __name__ == "__main__":
    asyncio.run(main())
