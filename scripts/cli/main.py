"""CLI main: parse arguments, run the ledger, print the result."""

import argparse
import sys
from pathlib import Path

from ledger_config import SettingsError, load_settings
from ledger_ingestion.services.run_service import LedgerRunService
from ledger_kernel.exceptions import LedgerKernelError
from ledger_kernel.logging_config import configure_logging, get_logger
from scripts.cli.report import show_balances, show_journal, show_rejected
from scripts.cli.util import log_level_for

logger = get_logger("cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ledger",
        description="Post batch files against a chart of accounts and print balances.",
    )
    parser.add_argument(
        "-i", "--input", dest="input_dir", type=Path,
        help="Input directory holding kontoplan.csv, regnskab.csv and posteringer*.csv.",
    )
    parser.add_argument(
        "--regnskab", dest="period_file",
        help="Name of the period file in the input directory (default: regnskab.csv).",
    )
    parser.add_argument(
        "--kontoplan", dest="chart_file",
        help="Name of the chart-of-accounts file (default: kontoplan.csv).",
    )
    parser.add_argument(
        "--config", type=Path,
        help="YAML settings file; LEDGER_* environment variables and arguments override it.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", default=None,
        help="Debug logging and a full posting journal.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = load_settings(
            args.config,
            overrides={
                "input_dir": args.input_dir,
                "period_file": args.period_file,
                "chart_file": args.chart_file,
                "verbose": args.verbose,
            },
        )
    except SettingsError as exc:
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 1

    configure_logging(level=log_level_for(settings.log_level, settings.verbose))
    logger.debug("cli_settings_loaded", extra={"input_dir": str(settings.input_dir)})

    try:
        run = LedgerRunService(settings).run()
    except LedgerKernelError as exc:
        logger.error("ledger_run_failed", extra={"error_code": exc.code})
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 1

    if not run.is_success:
        show_rejected(run.rejected)
        return 1

    print(f"\n  {run.period.describe()}")
    show_balances(run.registry, run.posting_set)
    if settings.verbose:
        show_journal(run.posting_set)
    return 0


if __name__ == "__main__":
    sys.exit(main())
