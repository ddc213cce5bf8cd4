"""
ReviewLens - Review Insights and Release Regression Analysis

CLI entry point for running the analysis pipeline.
"""

import argparse
import logging
import sys
from datetime import datetime

from reviewlens.orchestrator import PipelineOrchestrator
import config.settings as settings


def setup_logging(log_level: str = "INFO"):
    """Configure logging for the entire application."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format=settings.LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(settings.LOG_FILE)
        ]
    )


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="ReviewLens - Review insights, regressions and fix priorities",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Analyze a file of already classified reviews
  python main.py --input data/analyzed_reviews.json

  # Analyze the stored reviews of a competitor, pinning the recency date
  python main.py --scope competitor_123 --as-of 2024-07-01

Note: Set GOOGLE_API_KEY when the input contains unclassified reviews.
        """
    )

    parser.add_argument(
        "--scope",
        default="main",
        help="Review scope: 'main' or a competitor identifier (default: main)"
    )

    parser.add_argument(
        "--input",
        help="JSON file with analyzed or raw reviews (overrides the review store)"
    )

    parser.add_argument(
        "--as-of",
        help="Reference date for recency scoring (YYYY-MM-DD). Defaults to today"
    )

    parser.add_argument(
        "--data-root",
        default=str(settings.DATA_ROOT),
        help=f"Data directory (default: {settings.DATA_ROOT})"
    )

    parser.add_argument(
        "--output-dir",
        default=str(settings.OUTPUT_ROOT),
        help=f"Report directory (default: {settings.OUTPUT_ROOT})"
    )

    parser.add_argument(
        "--no-export",
        action="store_true",
        help="Skip CSV report export"
    )

    parser.add_argument(
        "--log-level",
        default=settings.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"Logging level (default: {settings.LOG_LEVEL})"
    )

    args = parser.parse_args()

    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    as_of = None
    if args.as_of:
        try:
            as_of = datetime.strptime(args.as_of, "%Y-%m-%d").date()
        except ValueError:
            logger.error(f"Invalid --as-of date: {args.as_of}. Expected YYYY-MM-DD")
            sys.exit(1)

    print("=" * 60)
    print("ReviewLens - Review Insights and Release Regressions")
    print("=" * 60)
    print(f"Scope: {args.scope}")
    if args.input:
        print(f"Input: {args.input}")
    print(f"As of: {as_of or 'today'}")
    print("=" * 60)
    print()

    try:
        logger.info("Initializing ReviewLens pipeline...")
        orchestrator = PipelineOrchestrator(
            data_root=args.data_root,
            output_dir=args.output_dir,
            api_key=settings.GOOGLE_API_KEY
        )

        artifacts = orchestrator.run(
            scope=args.scope,
            input_path=args.input,
            as_of=as_of,
            export=not args.no_export
        )

        impact = artifacts["impact_model"]["summary"]
        timeline = artifacts["release_timeline"]["summary"]

        print()
        print("=" * 60)
        print("✅ Analysis completed successfully!")
        print("=" * 60)
        print(f"Reviews: {artifacts['insights']['summary']['totalReviews']}")
        print(f"Top priority: {impact['top_priority']}")
        print(f"High risk issues: {', '.join(impact['high_risk_issues']) or '-'}")
        print(f"Expected rating lift: {impact['expected_rating_lift']}")
        print(f"Worst release: {timeline['worst_release']}")
        if "competitors" in artifacts:
            competitors = artifacts["competitors"]["summary"]
            print(f"Competitors: {', '.join(competitors['competitors'])}")
            print(
                f"Gaps: {competitors['feature_gaps']} feature, "
                f"{competitors['demand_gaps']} demand, {competitors['catchup_gaps']} catch-up"
            )
        for name, path in artifacts.get("reports", {}).items():
            print(f"{name}: {path}")
        print("=" * 60)

        logger.info("ReviewLens completed successfully")
        sys.exit(0)

    except KeyboardInterrupt:
        logger.warning("Pipeline interrupted by user")
        print("\n⚠️  Pipeline interrupted")
        sys.exit(1)

    except Exception as e:
        logger.error(f"Pipeline failed: {e}", exc_info=True)
        print(f"\n❌ Pipeline failed: {e}")
        print(f"Check {settings.LOG_FILE} for details")
        sys.exit(1)


if __name__ == "__main__":
    main()


# Design Notes:
#
# 1. Exit code is 0 only when every artifact was computed and saved; any
#    exception, including an invalid --as-of or --scope, exits with 1.
#
# 2. Logging is configured once here; modules only call
#    logging.getLogger(__name__).
