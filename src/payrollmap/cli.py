"""Command-line interface for payrollmap."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

import uvicorn

from .config import settings
from .structure import ReconciliationError, ReconciliationService, render_structure
from .workbook import WorkbookDecodeError


def main(argv=None):
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="payrollmap - reconcile payroll history uploads against a canonical structure"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Server command
    server_parser = subparsers.add_parser("serve", help="Start the web server")
    server_parser.add_argument(
        "--host", default=settings.host, help=f"Host to bind to (default: {settings.host})"
    )
    server_parser.add_argument(
        "--port", type=int, default=settings.port, help=f"Port to bind to (default: {settings.port})"
    )
    server_parser.add_argument(
        "--reload", action="store_true", help="Enable auto-reload for development"
    )

    # Structure command
    subparsers.add_parser("structure", help="Print the canonical structure as JSON")

    # Process command
    process_parser = subparsers.add_parser(
        "process", help="Reconcile a local workbook against the structure"
    )
    process_parser.add_argument("file", type=Path, help="Workbook with a 'Payroll History' sheet")
    process_parser.add_argument(
        "--output", "-o", type=Path, help="Also copy the processed workbook to this path"
    )

    # Add-column command
    add_parser = subparsers.add_parser("add-column", help="Add a canonical column")
    add_parser.add_argument("name", help="Main header of the new column")

    args = parser.parse_args(argv)

    if args.command == "serve":
        run_server(args.host, args.port, args.reload)
        return

    if args.command not in ("structure", "process", "add-column"):
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    service = ReconciliationService()
    try:
        if args.command == "structure":
            _print_json({"structure": render_structure(service.get_structure())})
        elif args.command == "process":
            asyncio.run(run_process(service, args.file, args.output))
        else:
            structure = asyncio.run(service.add_column(args.name))
            _print_json({"structure": render_structure(structure)})
    except (ReconciliationError, WorkbookDecodeError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def run_server(host: str, port: int, reload: bool):
    """Run the web server."""
    uvicorn.run(
        "payrollmap.api:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
        log_level=settings.log_level,
    )


async def run_process(service: ReconciliationService, file: Path, output: Path = None):
    """Reconcile a workbook from disk and print the summary."""
    result = await service.process_upload(file.name, file.read_bytes())

    output_path = service.store.resolve(result.output_file_name)
    if output is not None:
        output.write_bytes(service.read_output(result.output_file_name))
        output_path = output

    _print_json(
        {
            "summary": result.summary.to_dict(),
            "output": str(output_path),
            "new_columns": [
                column.main_header
                for column, meta in zip(result.structure, result.meta)
                if meta.is_new_column
            ],
        }
    )


def _print_json(payload: dict):
    print(json.dumps(payload, indent=2, default=str))


if __name__ == "__main__":
    main()
