"""Command-line interface for remtool.

Runs the analysis pipeline on a PDF, prints the score and issue summary and
optionally writes a session snapshot for a later export step.
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from remtool.config import AnalysisConfiguration
from remtool.document import DocumentLoadError, PyMuPDFDocument
from remtool.llm import create_capability
from remtool.llm.provider_registry import available_providers
from remtool.pipeline import AnalysisResult, create_analyzer, run_analysis, start_session
from remtool.session import RemediationSession, SessionSnapshot, save_snapshot


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="remtool",
        description="Analyse PDF documents for accessibility issues",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Analyse with rule-based checks only
  remtool analyse report.pdf --no-ai

  # Use Mistral and keep the session for export
  remtool analyse report.pdf --provider mistral --output report.session.json

Environment Variables:
  GEMINI_API_KEY / GOOGLE_API_KEY  Gemini credentials
  MISTRAL_API_KEY                  Mistral credentials
  LLM_PRIMARY                      Primary LLM provider (default: gemini)
  LLM_FALLBACK                     Fallback providers (comma-separated)
  REMTOOL_BATCH_SIZE               Suggestion batch size (default: 5)
  REMTOOL_AI_PAGE_SAMPLE           Pages sent for AI review (default: 5)
  REMTOOL_DISABLE_AI               Set to 1 to skip all AI calls
        """,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyse = subparsers.add_parser("analyse", help="Analyse a PDF document")
    analyse.add_argument("pdf", type=Path, help="Path to the PDF to analyse")
    analyse.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the session snapshot (issues, suggestions, score) to this JSON file",
    )
    analyse.add_argument(
        "--no-ai",
        action="store_true",
        help="Disable AI page review and AI suggestions",
    )
    analyse.add_argument(
        "--provider",
        choices=available_providers(),
        default=None,
        help="Primary LLM provider (overrides LLM_PRIMARY)",
    )
    analyse.add_argument(
        "--batch-size",
        type=int,
        default=None,
        help="Number of suggestion requests sent concurrently (default: 5)",
    )
    analyse.add_argument(
        "--dotenv",
        type=Path,
        default=None,
        help="Path to a .env file with provider credentials",
    )
    analyse.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity (default: WARNING)",
    )
    return parser


def build_configuration(args: argparse.Namespace) -> AnalysisConfiguration:
    config = AnalysisConfiguration.from_env(args.dotenv)
    if args.no_ai:
        config = replace(config, ai_enabled=False)
    if args.provider:
        config = replace(config, llm_primary=args.provider)
    if args.batch_size is not None:
        config = replace(config, batch_size=args.batch_size)
    return config


def print_summary(result: AnalysisResult, session: RemediationSession) -> None:
    score = result.score
    categories = score.category_scores
    print(f"Accessibility score: {score.overall}/100 (grade {score.grade})")
    print(
        f"  Structural: {categories.structural}  "
        f"Content: {categories.content}  Forms: {categories.forms}"
    )

    stats = session.store.statistics()
    print(f"\n{stats.total} issue(s) across {result.page_count} page(s)")
    for severity, count in sorted(stats.by_severity.items()):
        print(f"  {severity}: {count}")
    for issue_type, count in sorted(stats.by_type.items()):
        print(f"  {issue_type}: {count}")

    suggested = [issue for issue in session.store.issues if issue.suggestion]
    if suggested:
        print(f"\nSuggestions prepared for {len(suggested)} issue(s)")
        for issue in suggested:
            source = issue.ai_service or "unknown"
            print(f"  [{issue.id}] p{issue.page} {issue.type.value}: {issue.suggestion} ({source}, {issue.confidence}%)")


def run_analyse(args: argparse.Namespace) -> int:
    if args.batch_size is not None and args.batch_size < 1:
        print("Error: --batch-size must be at least 1", file=sys.stderr)
        return 2

    config = build_configuration(args)
    capability = create_capability(config)
    if capability is None and config.ai_enabled:
        print("No LLM provider configured; using rule-based checks and suggestions.")

    try:
        with PyMuPDFDocument.open(args.pdf) as document:
            result = run_analysis(document, create_analyzer(config, capability))
    except DocumentLoadError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    session = start_session(result, capability, config=config)
    print_summary(result, session)

    if args.output is not None:
        snapshot = SessionSnapshot.from_store(
            session.store,
            score=result.score,
            document=args.pdf.name,
            page_count=result.page_count,
        )
        save_snapshot(snapshot, args.output)
        print(f"\nSession written to {args.output}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level))

    try:
        if args.command == "analyse":
            return run_analyse(args)
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 130
    parser.error(f"Unknown command {args.command}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
