"""
LeadMiner CLI
=============

Command-line interface for the LeadMiner pipeline.

Commands:
    run     - Scrape (or generate) leads and run the full pipeline
    demo    - Run the full pipeline on synthetic leads
    score   - Run the pipeline on a saved raw JSON file
    digest  - Print the digest of a scored-leads.json file

Usage:
    leadminer run --query "dentists" --location "Austin, TX"
    leadminer run --demo
    leadminer demo --count 20 --seed 7
    leadminer score --input output/scraped-leads.json
    leadminer digest --input output/scored-leads.json --top 10
"""

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from .logging_config import setup_logging
from .pipeline import LeadPipeline, PipelineResult, PipelineStatus
from ..data.apify_client import ApifyReviewClient
from ..data.config import get_settings
from ..data.demo_generator import generate_demo_leads
from ..data.lead_store import load_payloads, load_records, save_json
from ..errors import LeadMinerError, NoLeadsError
from ..export.digest import generate_digest, summaries_from_dicts

logger = logging.getLogger(__name__)

SCRAPED_FILE = "scraped-leads.json"


def non_negative_int(value):
    """argparse type for counts where 0 is meaningful."""
    count = int(value)
    if count < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {count}")
    return count


def build_settings(args):
    """Settings from the environment, with CLI overrides applied."""
    settings = get_settings()
    if getattr(args, "output_dir", None):
        settings = replace(settings, output=replace(settings.output, output_dir=Path(args.output_dir)))
    return settings


def print_result(result: PipelineResult) -> None:
    print()
    print("=" * 60)
    print("LEADMINER PIPELINE COMPLETE")
    print("=" * 60)
    print(f"Status: {result.status.value}")
    print(f"Duration: {result.duration_seconds:.2f} seconds")
    print(f"Leads scored: {len(result.scored)}")
    counts = result.priority_counts
    print(
        f"Critical: {counts['critical']} | High: {counts['high']} | "
        f"Medium: {counts['medium']} | Low: {counts['low']}"
    )
    print()

    print("Stage Results:")
    for stage, stage_result in result.stages.items():
        status_icon = "+" if stage_result.status == PipelineStatus.COMPLETED else "x"
        duration = f"{stage_result.duration_seconds:.2f}s" if stage_result.duration_seconds is not None else "N/A"
        print(f"  {status_icon} {stage.value}: {stage_result.status.value} ({duration})")

    print()
    print("Artifacts:")
    for name, path in result.artifacts.items():
        print(f"  {name}: {path}")

    if result.delivery is not None:
        if result.delivery.sent:
            print("\nDigest sent")
        else:
            print(f"\nDigest not sent ({result.delivery.reason}). Saved locally instead.")


def run_pipeline(settings, records) -> int:
    if not records:
        raise NoLeadsError("Acquisition returned no businesses; nothing to score")

    output_dir = Path(settings.output.output_dir)
    save_json([r.to_dict() for r in records], output_dir / SCRAPED_FILE)

    pipeline = LeadPipeline(settings=settings)
    result = pipeline.run(records)
    print_result(result)
    return 0


def cmd_run(args):
    """Scrape leads (or generate demo leads) and run the pipeline."""
    settings = build_settings(args)

    if args.demo or settings.demo_mode:
        logger.info("Demo mode: using synthetic leads")
        records = generate_demo_leads()
    else:
        client = ApifyReviewClient(config=settings.apify)
        records = client.scrape_all(
            query=args.query,
            location=args.location,
            max_results=args.max_results,
        )

    return run_pipeline(settings, records)


def cmd_demo(args):
    """Run the pipeline on synthetic leads."""
    settings = build_settings(args)
    records = generate_demo_leads(count=args.count, seed=args.seed)
    return run_pipeline(settings, records)


def cmd_score(args):
    """Run the pipeline on a saved raw JSON file."""
    settings = build_settings(args)
    records = load_records(args.input)
    pipeline = LeadPipeline(settings=settings)
    result = pipeline.run(records)
    print_result(result)
    return 0


def cmd_digest(args):
    """Print the digest of a scored-leads file."""
    settings = build_settings(args)
    try:
        leads = summaries_from_dicts(load_payloads(args.input))
    except (KeyError, ValueError, TypeError, AttributeError) as e:
        print(f"ERROR: {args.input} is not a scored-leads file: {e}", file=sys.stderr)
        return 1

    top = args.top if args.top is not None else settings.output.digest_top_count
    print(generate_digest(leads, top_count=top))
    return 0


def main(argv=None):
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="leadminer",
        description="LeadMiner - find businesses with reputation problems worth pitching",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit logs as JSON lines",
    )
    parser.add_argument(
        "--output-dir",
        help="Directory for generated artifacts (default: LEADMINER_OUTPUT_DIR or output)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # run command
    run_parser = subparsers.add_parser("run", help="Scrape leads and run the full pipeline")
    run_parser.add_argument("--query", help="Business search query (default: SEARCH_QUERY)")
    run_parser.add_argument("--location", help="Search location (default: SEARCH_LOCATION)")
    run_parser.add_argument(
        "--max-results",
        type=int,
        help="Max places per provider (default: MAX_RESULTS)",
    )
    run_parser.add_argument(
        "--demo",
        action="store_true",
        help="Use synthetic leads instead of scraping",
    )

    # demo command
    demo_parser = subparsers.add_parser("demo", help="Run the pipeline on synthetic leads")
    demo_parser.add_argument(
        "--count",
        type=int,
        default=50,
        help="Number of synthetic businesses (default: 50)",
    )
    demo_parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Random seed (default: 42)",
    )

    # score command
    score_parser = subparsers.add_parser("score", help="Run the pipeline on a raw JSON file")
    score_parser.add_argument(
        "--input",
        required=True,
        help="JSON array of raw business records",
    )

    # digest command
    digest_parser = subparsers.add_parser("digest", help="Print the digest of scored leads")
    digest_parser.add_argument(
        "--input",
        required=True,
        help="scored-leads.json produced by a previous run",
    )
    digest_parser.add_argument(
        "--top",
        type=non_negative_int,
        help="Leads to list (default: DIGEST_TOP_COUNT)",
    )

    args = parser.parse_args(argv)

    try:
        log_config = get_settings().logging
    except ValueError as e:
        print(f"ERROR: Invalid configuration: {e}", file=sys.stderr)
        return 1

    setup_logging(
        level="DEBUG" if args.verbose else log_config.level,
        json_output=args.json_logs or log_config.json_logs,
        log_file=log_config.log_file,
    )

    if args.command is None:
        parser.print_help()
        return 1

    commands = {
        "run": cmd_run,
        "demo": cmd_demo,
        "score": cmd_score,
        "digest": cmd_digest,
    }

    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    try:
        return handler(args)
    except LeadMinerError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        logger.debug("Command failed", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
