"""Operator command line.

Run with: python -m daysplit.cli <command> ...

Commands:
    split PDF CSV MODEL        split a PDF into <models_dir>/MODEL/day-<N>.pdf
    qr MODEL [--base-url URL]  (re)build MODEL's QR sheet from its tokens
    upload PDF CSV MODEL       full upload flow (split, tokens, QR sheet)
    serve                      run the HTTP API
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from daysplit.config import settings


def _cmd_split(args: argparse.Namespace) -> int:
    from daysplit.services.csv_ranges import parse_day_ranges_file
    from daysplit.services.pdf_splitter import split_pdf
    from daysplit.storage import local as storage

    ranges = parse_day_ranges_file(args.csv)
    if not ranges:
        print(f"No valid day rows found in {args.csv}", file=sys.stderr)
        return 1

    output_dir = storage.model_dir(args.model)
    result = split_pdf(Path(args.pdf), ranges, output_dir)
    print(f"Created {result.created_count} day PDFs in {output_dir}")
    for day, error in sorted(result.errors.items()):
        print(f"  day {day} failed: {error}", file=sys.stderr)
    return 0 if result.created_count else 1


def _cmd_qr(args: argparse.Namespace) -> int:
    from daysplit.services.qr_sheet import generate_qr_sheet
    from daysplit.storage import local as storage
    from daysplit.storage.token_store import read_tokens

    tokens_file = read_tokens(args.model)
    if tokens_file is None:
        print(
            f"No tokens for '{args.model}', rendering {settings.default_qr_days} placeholder codes",
            file=sys.stderr,
        )
    base_url = (args.base_url or settings.base_url).rstrip("/")
    path = storage.save_qr_sheet(args.model, generate_qr_sheet(args.model, base_url, tokens_file))
    print(f"QR sheet written to {path}")
    return 0


def _cmd_upload(args: argparse.Namespace) -> int:
    from daysplit.services.errors import ModelError
    from daysplit.services.model_lifecycle import create_model

    pdf_path = Path(args.pdf)
    csv_path = Path(args.csv)
    try:
        response = create_model(
            args.model,
            pdf_path.name,
            pdf_path.read_bytes(),
            csv_path.name,
            csv_path.read_bytes(),
            base_url=args.base_url,
        )
    except ModelError as exc:
        print(f"Upload failed: {exc}", file=sys.stderr)
        return 1
    print(response.message)
    return 0


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run(
        "daysplit.main:app",
        host=args.host or settings.api_host,
        port=args.port or settings.api_port,
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="daysplit", description="Calendar PDF splitter and QR sheet tool")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("split", help="Split a PDF into day files using a CSV schedule")
    p.add_argument("pdf")
    p.add_argument("csv")
    p.add_argument("model")
    p.set_defaults(func=_cmd_split)

    p = sub.add_parser("qr", help="Generate the QR sheet for a model")
    p.add_argument("model")
    p.add_argument("--base-url", default=None)
    p.set_defaults(func=_cmd_qr)

    p = sub.add_parser("upload", help="Create a model: split, issue tokens, render QR sheet")
    p.add_argument("pdf")
    p.add_argument("csv")
    p.add_argument("model")
    p.add_argument("--base-url", default=None)
    p.set_defaults(func=_cmd_upload)

    p = sub.add_parser("serve", help="Run the HTTP API")
    p.add_argument("--host", default=None)
    p.add_argument("--port", type=int, default=None)
    p.set_defaults(func=_cmd_serve)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except ValueError as exc:
        # bad model names and page ranges outside the source PDF
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
