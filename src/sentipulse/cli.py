"""Command-line interface for Sentipulse."""

import argparse
import logging
import sys

from .core.comparison import compare
from .core.config import settings
from .core.constants import ComparisonConstants, FileConstants
from .core.exceptions import SentipulseError
from .core.models import AnalysisStats, ExportedAnalysis
from .core.scheduler import SentimentPipeline
from .core.scoring import (
    brand_sentiment,
    net_sentiment_score,
    share,
    smooth,
    verified_brand_sentiment,
)
from .services.classifier import ClassifierFactory
from .services.ingestion import build_records, default_columns, load_file
from .services.project_store import ProjectStore, describe_project
from .utils.data_prep import export_comments_csv, export_to_json, load_exported_analysis

logger = logging.getLogger(__name__)

PROJECT_PREFIX = "project:"
TREND_SAMPLES = 20


def setup_logging():
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format=FileConstants.LOG_FORMAT,
    )


def _print_progress(stats: AnalysisStats):
    current = stats.current_comment.text[:60].replace("\n", " ") if stats.current_comment else ""
    print(
        f"\r{stats.processed}/{stats.total} ({stats.progress_percent:5.1f}%) "
        f"| net score {stats.current_score:7.3f} | {current:<60}",
        end="",
        flush=True,
    )


def print_summary(analysis: ExportedAnalysis):
    """Print the final results of an analysis."""
    stats = analysis.stats
    meta = analysis.metadata
    polar = stats.positive + stats.negative

    print(f"\nResults for column '{meta.column_analyzed}'")
    print(f"  Total comments:      {stats.total}")
    print(f"  Verified users:      {stats.verified_total}")
    print(f"  Brand sentiment:     {brand_sentiment(stats):.1f}%")
    print(f"  Net sentiment score: {net_sentiment_score(stats):.1f}")
    print(f"  Avg engagement:      {stats.average_engagement:.1f}")
    print(f"  Total engagement:    {stats.total_engagement:.0f}")
    print(f"  Positive:            {stats.positive} ({share(stats.positive, stats.total):.1f}%)")
    print(f"  Negative:            {stats.negative} ({share(stats.negative, stats.total):.1f}%)")
    print(f"  Neutral:             {stats.neutral} ({share(stats.neutral, stats.total):.1f}%)")
    print(f"  Pos/Neg split:       {share(stats.positive, polar):.1f}% / {share(stats.negative, polar):.1f}%")
    if stats.verified_total > 0:
        print(
            f"  Verified:            +{stats.verified_positive} / -{stats.verified_negative} "
            f"/ ={stats.verified_neutral} (brand {verified_brand_sentiment(stats):.1f}%)"
        )
    print(f"  Evaluation time:     {meta.evaluation_time:.2f} s")
    print(f"  Processing speed:    {meta.processing_speed} comments/s")

    trend = smooth(stats.score_history)
    if trend:
        print(f"  Final rolling score: {trend[-1]:.1f}")


def _load_source(source: str, store: ProjectStore = None) -> ExportedAnalysis:
    if source.startswith(PROJECT_PREFIX):
        store = store or ProjectStore()
        return store.get(source[len(PROJECT_PREFIX):]).data
    return load_exported_analysis(source)


def _column_arg(value, default):
    """None keeps the detected default, 'none' disables the column."""
    if value is None:
        return default
    if value.lower() == "none":
        return None
    return value


def cmd_analyze(args):
    """Analyze command."""
    loaded = load_file(args.file)

    if isinstance(loaded, ExportedAnalysis):
        print(f"{args.file} is an exported analysis; showing stored results")
        analysis = loaded
    else:
        defaults = default_columns(loaded.columns)
        text_column = args.column or defaults["text"]
        if not text_column:
            raise SentipulseError(f"{args.file} has no columns to analyze")
        verified_column = _column_arg(args.verified_column, defaults["verified"])
        engagement_column = _column_arg(args.engagement_column, defaults["engagement"])

        records = build_records(loaded, text_column, verified_column, engagement_column)
        print(
            f"Analyzing {len(records)} comments from column '{text_column}' "
            f"(verified: {verified_column or '-'}, engagement: {engagement_column or '-'})"
        )

        pipeline = SentimentPipeline(
            ClassifierFactory.create(),
            batch_size=args.batch_size,
            delay_ms=args.delay_ms,
        )
        pipeline.run(records, text_column, on_update=_print_progress)
        print()
        analysis = pipeline.export()

    print_summary(analysis)

    column = analysis.metadata.column_analyzed
    if args.out:
        out = FileConstants.JSON_EXPORT_TEMPLATE.format(column=column) if args.out == "-" else args.out
        export_to_json(analysis, out)
        print(f"Results exported to {out}")
    if args.csv:
        out = FileConstants.CSV_EXPORT_TEMPLATE.format(column=column) if args.csv == "-" else args.csv
        export_comments_csv(analysis.comments, out)
        print(f"Comments exported to {out}")
    if args.save is not None:
        project = ProjectStore().save(analysis, args.save or None)
        print(f"Project saved as {project.id} ({project.name})")


def cmd_compare(args):
    """Compare command."""
    store = ProjectStore() if any(s.startswith(PROJECT_PREFIX) for s in (args.first, args.second)) else None
    first = _load_source(args.first, store)
    second = _load_source(args.second, store)
    result = compare(first, second, labels=tuple(args.labels))
    label_a, label_b = result.labels

    width = max(len(label_a), len(label_b), 12)
    print(f"\n{'Metric':<22}{label_a:>{width}}{label_b:>{width}}")
    for row in result.metrics + result.sentiment_counts:
        print(f"{row.metric:<22}{row.first:>{width}.1f}{row.second:>{width}.1f}")

    if result.trend:
        print(f"\nRolling sentiment trend ({len(result.trend)} points)")
        step = max(1, len(result.trend) // TREND_SAMPLES)
        for point in result.trend[::step]:
            a = "-" if point.first is None else f"{point.first:.1f}"
            b = "-" if point.second is None else f"{point.second:.1f}"
            print(f"{point.index:>6}{a:>{width}}{b:>{width}}")


def cmd_projects(args):
    """Saved project management."""
    store = ProjectStore()
    if args.action == "list":
        projects = store.list()
        if not projects:
            print("No saved projects")
        for project in projects:
            print(describe_project(project))
    elif args.action == "show":
        print_summary(store.get(args.id).data)
    elif args.action == "delete":
        store.delete(args.id)
        print(f"Deleted project {args.id}")


def cmd_export(args):
    """Export a saved project."""
    project = ProjectStore().get(args.id)
    column = project.data.metadata.column_analyzed
    out = args.out or FileConstants.JSON_EXPORT_TEMPLATE.format(column=column)
    export_to_json(project.data, out)
    print(f"Exported to {out}")
    if args.csv:
        export_comments_csv(project.data.comments, args.csv)
        print(f"Comments exported to {args.csv}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Sentipulse - batch sentiment analysis of comments")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    analyze_parser = subparsers.add_parser("analyze", help="Analyze a CSV, Excel or JSON file")
    analyze_parser.add_argument("file", help="Input file (.csv, .xlsx, .xls, .json)")
    analyze_parser.add_argument("--column", help="Text column (auto-detected by default)")
    analyze_parser.add_argument("--verified-column", help="Verified flag column, or 'none'")
    analyze_parser.add_argument("--engagement-column", help="Engagement column, or 'none'")
    analyze_parser.add_argument("--batch-size", type=int, default=settings.batch_size,
                                help="Comments per classifier request")
    analyze_parser.add_argument("--delay-ms", type=int, default=settings.delay_ms,
                                help="Delay between batches in milliseconds")
    analyze_parser.add_argument("--out", help="Write JSON export ('-' for the default name)")
    analyze_parser.add_argument("--csv", help="Write comments CSV ('-' for the default name)")
    analyze_parser.add_argument("--save", nargs="?", const="", help="Save as a project (optional name)")

    compare_parser = subparsers.add_parser("compare", help="Compare two exported analyses")
    compare_parser.add_argument("first", help="Exported JSON file or project:<id>")
    compare_parser.add_argument("second", help="Exported JSON file or project:<id>")
    compare_parser.add_argument("--labels", nargs=2, default=[ComparisonConstants.FIRST_LABEL, ComparisonConstants.SECOND_LABEL],
                                metavar=("FIRST", "SECOND"), help="Column labels")

    projects_parser = subparsers.add_parser("projects", help="Manage saved projects")
    projects_parser.add_argument("action", choices=["list", "show", "delete"])
    projects_parser.add_argument("id", nargs="?", help="Project id (show/delete)")

    export_parser = subparsers.add_parser("export", help="Export a saved project")
    export_parser.add_argument("id", help="Project id")
    export_parser.add_argument("--out", help="Output JSON file")
    export_parser.add_argument("--csv", help="Also write comments CSV")

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return
    if args.command == "projects" and args.action != "list" and not args.id:
        parser.error(f"projects {args.action} requires an id")

    setup_logging()

    try:
        if args.command == "analyze":
            cmd_analyze(args)
        elif args.command == "compare":
            cmd_compare(args)
        elif args.command == "projects":
            cmd_projects(args)
        elif args.command == "export":
            cmd_export(args)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
    except (SentipulseError, FileNotFoundError, ValueError) as e:
        logger.error(f"Command failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
