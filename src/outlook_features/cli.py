"""Command-line interface (CLI) entrypoint.

Objective:
    Provide a human-friendly CLI wrapper around
    :class:`src.outlook_features.orchestrator.FeatureOrchestrator`.

Responsibilities:
    - Parse arguments (mailbox source, output directory, prediction options,
      verbosity).
    - Configure logging (including redaction of bearer tokens).
    - Invoke the orchestrator and print a readable summary.

High-level call tree:
    - :func:`main`
        - :func:`setup_logging`
            - installs :class:`_AuthorizationRedactingFilter`
        - instantiate :class:`FeatureOrchestrator`
        - (optional) :func:`save_snapshot`
        - :meth:`FeatureOrchestrator.run`
        - :func:`print_summary`

Operational notes:
    - This module supports being run both as a package module
      (``python -m src.outlook_features.cli``) and as a script
      (``python src/outlook_features/cli.py``). The import fallback handles
      the script case.
"""

import argparse
import logging
import re
import sys
from pathlib import Path
from typing import Optional

try:
    from .config import get_settings
    from .mailbox import save_snapshot
    from .orchestrator import FeatureOrchestrator
except ImportError:  # pragma: no cover
    src_root = Path(__file__).resolve().parents[1]
    if str(src_root) not in sys.path:
        sys.path.insert(0, str(src_root))

    from outlook_features.config import get_settings
    from outlook_features.mailbox import save_snapshot
    from outlook_features.orchestrator import FeatureOrchestrator


class _AuthorizationRedactingFilter(logging.Filter):
    """Filter that masks bearer tokens in log messages.

    Error responses and debug output can echo request headers; the scoring key
    and Graph token must never reach the log stream.
    """

    _BEARER_RE = re.compile(r"(Bearer\s+)[^\s'\",}]+", re.IGNORECASE)

    def filter(self, record: logging.LogRecord) -> bool:
        """Rewrite the record message with tokens masked.

        Args:
            record: Log record emitted by the logging framework.

        Returns:
            bool: Always True (records are rewritten, never dropped).
        """
        msg = record.getMessage()
        redacted = self._BEARER_RE.sub(r"\1***", msg)
        if redacted != msg:
            record.msg = redacted
            record.args = None
        return True


def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the application.

    This sets the root logger level and installs the
    :class:`_AuthorizationRedactingFilter` on all root handlers.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR).
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )

    root_logger = logging.getLogger()
    redacting_filter = _AuthorizationRedactingFilter()
    for handler in root_logger.handlers:
        handler.addFilter(redacting_filter)


def print_summary(summary, verbose: bool = False) -> None:
    """
    Print a run summary to console.

    Args:
        summary: RunSummary returned by the orchestrator.
        verbose: If True, list every prediction.
    """
    stats = summary.walk_stats

    print(f"\n{'='*60}")
    print(f"FEATURE EXTRACTION: {summary.records} records")
    print(f"{'='*60}\n")
    print(f"  Folders visited:   {stats.folders}")
    print(f"  Non-mail skipped:  {stats.skipped}")
    print(f"  Failed messages:   {stats.failed}")
    if summary.dataset_path:
        print(f"  Dataset:           {summary.dataset_path}")
    else:
        print("  Dataset:           (not written, no records)")

    if summary.predictions or summary.predictions_path:
        scored = sum(1 for r in summary.predictions if r.get("Result") is not None)
        print(f"\n  Predictions:       {len(summary.predictions)} ({scored} scored)")
        if summary.predictions_path:
            print(f"  Predictions table: {summary.predictions_path}")

        if verbose:
            for row in summary.predictions:
                subject = row.get("Subject") or ""
                subject = subject[:50] + "..." if len(subject) > 50 else subject
                print(f"    [{row.get('FolderName')}] {subject} -> {row.get('Result')}")

    print(f"\n{'='*60}\n")


def main(args: Optional[list[str]] = None) -> int:
    """
    Main CLI entry point.

    This function is structured to be testable: pass an explicit ``args`` list
    instead of relying on ``sys.argv``.

    Args:
        args: Command line arguments (uses sys.argv if None).

    Returns:
        int: Exit code (0 for success, 1 for error).
    """
    parser = argparse.ArgumentParser(
        description="Outlook Feature Extractor - mailbox to ML feature table",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                              Extract features from the configured mailbox
  %(prog)s --snapshot mailbox.json      Extract from a saved snapshot
  %(prog)s --predict --days 2           Also score the last 2 days
  %(prog)s --save-snapshot mailbox.json Save the mailbox for offline runs
        """,
    )

    parser.add_argument(
        "--snapshot",
        type=Path,
        default=None,
        help="Mailbox snapshot (JSON) to read instead of Microsoft Graph",
    )

    parser.add_argument(
        "--output-dir",
        "-o",
        type=Path,
        default=None,
        help="Directory for the output tables",
    )

    parser.add_argument(
        "--predict",
        "-p",
        action="store_true",
        help="Score selected records and write the prediction table",
    )

    parser.add_argument(
        "--folders",
        type=str,
        default=None,
        help="Comma-separated folder names to score (e.g. 'Inbox,Whereabouts')",
    )

    parser.add_argument(
        "--days",
        type=float,
        default=None,
        help="Only score messages received within this many days",
    )

    parser.add_argument(
        "--save-snapshot",
        type=Path,
        default=None,
        help="Write the mailbox to this JSON file before extracting",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (defaults to LOG_LEVEL)",
    )

    parsed_args = parser.parse_args(args)

    logger = logging.getLogger(__name__)

    try:
        settings = get_settings()

        # Setup logging
        log_level = "DEBUG" if parsed_args.verbose else (parsed_args.log_level or settings.log_level)
        setup_logging(log_level)

        if parsed_args.snapshot:
            settings.mailbox_snapshot_path = parsed_args.snapshot
        if parsed_args.output_dir:
            settings.output_dir = parsed_args.output_dir
        if parsed_args.folders:
            settings.prediction_folders = parsed_args.folders
        if parsed_args.days is not None:
            settings.prediction_window_days = parsed_args.days

        print("\n🚀 Starting Outlook Feature Extractor...\n")

        orchestrator = FeatureOrchestrator(settings=settings)

        if parsed_args.save_snapshot:
            save_snapshot(orchestrator.mailbox, parsed_args.save_snapshot)

        summary = orchestrator.run(predict=parsed_args.predict)

        print_summary(summary, verbose=parsed_args.verbose)
        return 0

    except Exception as e:
        logger.exception("Fatal error")
        print(f"\n❌ Error: {e}\n")
        return 1


if __name__ == "__main__":
    sys.exit(main())
