import argparse
import json
from pathlib import Path

from rich.console import Console
from rich.table import Table

from .common.logging_config import setup_logging
from .common.settings import Settings
from .parsing.config.registry import FormatRegistry
from .parsing.exceptions import StatementEngineError
from .parsing.pipeline import ExtractionPipeline


def _print_banks(console: Console, registry: FormatRegistry, country: str = None) -> None:
    table = Table(title="Supported bank formats")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Country")
    for fmt in registry.list_formats(country=country):
        table.add_row(fmt['bank_id'], fmt['bank_name'], fmt['country'])
    console.print(table)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Bank statement transaction extractor")
    parser.add_argument("file", nargs="?", help="Statement text file (already extracted from the PDF)")
    parser.add_argument("--bank", default="", help="Bank format id (skips detection)")
    parser.add_argument("--formats", default="", help="Format configuration file or directory")
    parser.add_argument("--out", default="", help="JSON output path (optional)")
    parser.add_argument("--list-banks", action="store_true", help="List supported bank formats and exit")
    parser.add_argument("--country", default=None, help="Country filter for --list-banks")
    args = parser.parse_args(argv)

    settings = Settings.from_env()
    setup_logging(log_level=settings.log_level, log_file=None)

    console = Console(stderr=True)
    registry = FormatRegistry(source=args.formats or None, settings=settings)

    if args.list_banks:
        _print_banks(console, registry, args.country)
        return 0

    if not args.file:
        parser.error("a statement file is required unless --list-banks is given")

    path = Path(args.file)
    if not path.exists():
        raise SystemExit(f"File not found: {path}")

    console.print(f"Processing: {path}", style="bold")

    pipeline = ExtractionPipeline(registry, settings)
    try:
        if args.bank:
            result = pipeline.extract_by_format_id(path.read_text(encoding="utf-8"), args.bank)
        else:
            result = pipeline.extract(path.read_text(encoding="utf-8"))
    except StatementEngineError as e:
        console.print(str(e), style="bold red")
        return 2

    payload = json.dumps(result.to_dict(settings.decimal_places), ensure_ascii=False, indent=2)

    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(payload, encoding="utf-8")
        console.print(f"OK -> {out_path}", style="bold green")
    else:
        print(payload)

    style = "bold cyan" if result.success else "bold yellow"
    console.print(
        f"Format: {result.metadata.get('bank_format')} | "
        f"Transactions: {result.total_transactions} "
        f"(valid {result.valid_transactions}, invalid {result.invalid_transactions}) | "
        f"Warnings: {len(result.warnings)}",
        style=style,
    )
    return 0 if result.success else 1


if __name__ == "__main__":
    raise SystemExit(main())
