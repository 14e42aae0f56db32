"""Command-line interface for the JSON Workbook codec."""

import asyncio
import logging
from pathlib import Path

import click

from .config import CodecConfig
from .parser import DocumentParser
from .types import DocumentFormat
from .workbook_transformer import WorkbookTransformer


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s"
    )


@click.group()
@click.version_option(version="1.0.0")
def main():
    """JSON Workbook - Convert between JSON/YAML documents and outlined spreadsheets."""
    pass


@main.command(name="export")
@click.argument('input_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--output', '-o', type=click.Path(dir_okay=False, path_type=Path),
              help='Output workbook path (default: INPUT with .xlsx suffix)')
@click.option('--loose-tables', is_flag=True, help='Lay out arrays of objects with nested values as tables')
@click.option('--no-side-channel', is_flag=True, help='Do not store the full tree in a hidden sheet')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
def export_command(input_file: Path, output: Path, loose_tables: bool, no_side_channel: bool, verbose: bool):
    """Export a JSON or YAML document to an .xlsx workbook."""
    _configure_logging(verbose)
    output = output or input_file.with_suffix(".xlsx")
    click.echo(f"Exporting {input_file} to {output}...")

    config = CodecConfig(strict_tables=not loose_tables, write_side_channel=not no_side_channel)
    transformer = WorkbookTransformer(config)
    fmt = DocumentParser.detect_format(str(input_file))

    try:
        value = transformer.parser.parse(input_file.read_text(encoding='utf-8'), fmt)
    except (OSError, ValueError) as e:
        click.echo(f"❌ Error: {e}")
        raise SystemExit(1)

    result = asyncio.run(transformer.export_file(value, str(output)))

    if result.success:
        click.echo(f"✅ Wrote {result.row_count} rows to {result.output_path}")
    else:
        click.echo("❌ Export failed:")
        for error in result.errors or []:
            click.echo(f"   • {error}")
        raise SystemExit(1)


@main.command(name="import")
@click.argument('input_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--output', '-o', type=click.Path(dir_okay=False, path_type=Path),
              help='Output document path (default: print to stdout)')
@click.option('--format', '-f', 'output_format', type=click.Choice(['json', 'yaml']),
              help='Output format (default: from output suffix, else json)')
@click.option('--ignore-side-channel', is_flag=True, help='Rebuild from visible rows only')
@click.option('--strict-legacy', is_flag=True, help='Reject ambiguous rows in sheets without metadata')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
def import_command(input_file: Path, output: Path, output_format: str, ignore_side_channel: bool,
                   strict_legacy: bool, verbose: bool):
    """Import an .xlsx workbook back into JSON or YAML."""
    _configure_logging(verbose)

    config = CodecConfig(
        use_side_channel=not ignore_side_channel,
        legacy_ambiguity="reject" if strict_legacy else "guess"
    )
    transformer = WorkbookTransformer(config)
    result = asyncio.run(transformer.import_file(str(input_file)))

    if not result.success:
        click.echo("❌ Import failed:")
        for error in result.errors or []:
            click.echo(f"   • {error}")
        raise SystemExit(1)

    if output_format:
        fmt = DocumentFormat(output_format)
    elif output:
        fmt = DocumentParser.detect_format(str(output))
    else:
        fmt = DocumentFormat.JSON
    text = transformer.parser.dump(result.value, fmt)

    for warning in result.warnings:
        click.echo(f"⚠️  {warning}", err=True)

    if output:
        output.write_text(text, encoding='utf-8')
        click.echo(f"✅ Successfully wrote {fmt.value.upper()} to {output}")
    else:
        click.echo(text, nl=False)


@main.command(name="inspect")
@click.argument('input_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--loose-tables', is_flag=True, help='Lay out arrays of objects with nested values as tables')
def inspect_command(input_file: Path, loose_tables: bool):
    """Print the rows a JSON or YAML document flattens into."""
    transformer = WorkbookTransformer(CodecConfig(strict_tables=not loose_tables))
    fmt = DocumentParser.detect_format(str(input_file))

    try:
        value = transformer.parser.parse(input_file.read_text(encoding='utf-8'), fmt)
    except (OSError, ValueError) as e:
        click.echo(f"❌ Error: {e}")
        raise SystemExit(1)

    stats = transformer.parser.get_structure_statistics(value)
    click.echo(f"📊 {stats['root_kind']} root, depth {stats['max_depth']}, "
               f"{stats['object_count']} objects, {stats['array_count']} arrays, "
               f"{stats['scalar_count']} scalars")

    for row in transformer.flatten(value):
        payload = " | ".join("" if cell is None else str(cell) for cell in row.payload())
        click.echo(f"{'  ' * row.level}{row.metadata()}  {payload}")


if __name__ == '__main__':
    main()
