"""Command-line entry point: load a seat-usage CSV export."""

from __future__ import annotations

import argparse
from collections.abc import Sequence

from seat_usage.config import LoaderConfig
from seat_usage.errors import SeatUsageError
from seat_usage.ingest.pipeline import run
from seat_usage.logger import LOGGER
from seat_usage.runtime import get_spark


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="seat-usage-load",
        description="Load a seat-usage CSV export into versioned warehouse tables.",
    )
    parser.add_argument(
        "--config",
        help="YAML config file. Without it, SEAT_USAGE_* environment variables are used.",
    )
    parser.add_argument("--csv", dest="csv_path", help="Path to the CSV export.")
    parser.add_argument("--schema", dest="schema_name", help="Target schema.")
    parser.add_argument("--catalog", dest="catalog_name", help="Target catalog (optional).")
    return parser


def load_config(args: argparse.Namespace) -> LoaderConfig:
    """Build the config from --config or the environment, then apply CLI overrides."""
    overrides = {
        "csv_path": args.csv_path,
        "schema_name": args.schema_name,
        "catalog_name": args.catalog_name,
    }
    if args.config:
        return LoaderConfig.from_yaml(args.config).with_overrides(**overrides)
    return LoaderConfig.from_env(**overrides)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = load_config(args)
        result = run(config, get_spark(config.app_name))
    except SeatUsageError as error:
        LOGGER.error("Load failed: %s", error)
        return 1
    LOGGER.info(
        "Loaded %d user(s) into %s and %d metric row(s) into %s",
        result.users_upserted,
        result.users_table,
        result.metrics_upserted,
        result.metrics_table,
    )
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
