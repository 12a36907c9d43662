"""Command-line interface for account_status.

Runs the same pipeline as the upload endpoint against a local file:
- reads the accounts CSV from a path (or '-' for stdin)
- looks up each account's status
- writes the enriched CSV to a file or stdout
"""

from __future__ import annotations
import argparse
import sys

from .lookup import StatusClient
from .pipeline import StatusPipeline
from .settings import default_config
from .setup_logging import setup_logging


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="account-status", description="Append account statuses to a CSV.")
    p.add_argument("path", help="Input CSV path or '-' for stdin")
    p.add_argument("-o", "--output", default="-", help="Output path or '-' for stdout")
    p.add_argument("--api-url", default=None, help="Status service base URL")
    p.add_argument("--workers", type=int, default=None, help="Concurrent lookups")
    p.add_argument("--on-lookup-error", choices=["blank", "drop", "fail"], default=None)
    p.add_argument("--on-unmatched", choices=["fail", "skip"], default=None)
    p.add_argument("--log-level", default="WARNING")
    args = p.parse_args(argv)

    setup_logging(args.log_level, stream=sys.stderr)  # stdout may carry the CSV
    config = default_config(
        api_url=args.api_url,
        workers=args.workers,
        on_lookup_error=args.on_lookup_error,
        on_unmatched=args.on_unmatched,
    )

    source = sys.stdin.buffer if args.path == "-" else args.path
    client = StatusClient(config.api_url, timeout=config.timeout)
    try:
        result = StatusPipeline(client, config).run(source)
    finally:
        client.close()

    for err in result.errors:
        where = f"line {err.line}" if err.line else f"key {err.key!r}"
        sys.stderr.write(f"{err.kind}: {where}: {err.error}\n")
    if not result.ok:
        return 2

    if args.output == "-":
        sys.stdout.buffer.write(result.content)
        sys.stdout.flush()
    else:
        with open(args.output, "wb") as fh:
            fh.write(result.content)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
