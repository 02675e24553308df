"""Command line interface for running a contact enrichment batch."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config import EnrichmentSettings, load_configuration
from .factory import build_orchestrator
from .ingestion import export_json, export_records, load_subjects
from .models import SEARCH_STRATEGIES, summarize
from .orchestrator import BatchRunner

LOGGER = logging.getLogger(__name__)


def build_parser(prog: str | None = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=prog,
        description="Enrich a contact list with email, phone and address data from the identity API",
    )
    parser.add_argument("input", help="Path to the input spreadsheet (CSV or XLSX)")
    parser.add_argument("output", help="Path where the enriched spreadsheet should be written")
    parser.add_argument(
        "--config",
        required=True,
        help="Path to the enrichment configuration file (YAML or JSON)",
    )
    parser.add_argument(
        "--strategy",
        choices=SEARCH_STRATEGIES,
        default=None,
        help="Search strategy; overrides the configuration file",
    )
    parser.add_argument(
        "--threshold",
        type=float,
        default=None,
        help="Identity score below which combination search escalates to person search (0-100)",
    )
    parser.add_argument(
        "--api-key",
        default=None,
        help='API credentials as "profileName:password"; overrides the configuration file',
    )
    parser.add_argument(
        "--json-output",
        default=None,
        help="Optional path for a JSON export including every raw API response",
    )
    parser.add_argument(
        "--include-search-metadata",
        action="store_true",
        help="Add strategy, cost and identity score columns to the spreadsheet output",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (e.g. DEBUG, INFO, WARNING)",
    )
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    settings = EnrichmentSettings.from_mapping(
        load_configuration(args.config),
        strategy=args.strategy,
        identity_score_threshold=args.threshold,
        api_key=args.api_key,
    )
    orchestrator = build_orchestrator(settings)

    subjects = load_subjects(args.input)
    if not subjects:
        LOGGER.warning("No subjects with a name or city were found in %s - nothing to do", args.input)

    def log_progress(percent: float) -> None:
        LOGGER.info("%.0f%% complete", percent)

    runner = BatchRunner(orchestrator, progress_callback=log_progress)
    records = runner.run_all(subjects, settings.strategy)

    export_records(records, args.output, include_search_metadata=args.include_search_metadata)
    LOGGER.info("Enriched records written to %s", Path(args.output).resolve())
    if args.json_output:
        export_json(records, args.json_output)
        LOGGER.info("JSON export written to %s", Path(args.json_output).resolve())

    LOGGER.info("%s", summarize(records).describe())
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
