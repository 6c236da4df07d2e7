"""Command-line interface for commit-stats."""
import argparse
import csv
import json
import sys
from typing import Any, Dict, List, Optional

from colorama import Fore, Style, just_fix_windows_console

from . import __version__
from .discovery import discover_commits
from .github import GhCommandError, check_gh_auth
from .progress import ProgressPrinter
from .stats import RepoAggregate, StatsReport, aggregate_commit_stats, sorted_repositories
from .validation import StatsConfig, ValidationError, build_config, sanitize

GENERIC_ERROR = (
    "Failed to collect commit statistics. "
    "Check your connection and GitHub CLI authentication."
)


def paint(text: str, color: str, enabled: bool) -> str:
    """Wrap text in a colorama color when styling is enabled."""
    if not enabled:
        return text
    return f"{color}{text}{Style.RESET_ALL}"


def format_number(num: int) -> str:
    """Format a number with thousands separators.

    Args:
        num: Integer to format

    Returns:
        Formatted string with comma separators
    """
    return f"{num:,}"


def print_header(text: str, color: bool = False) -> None:
    """Print a formatted section header.

    Args:
        text: Header text to display
        color: Whether to apply terminal colors
    """
    rule = paint("=" * 80, Style.DIM, color)
    print(f"\n{rule}\n{paint(text, Style.BRIGHT, color)}\n{rule}")


def _table_row(name: str, agg: RepoAggregate) -> str:
    return (
        f"{name:<50} {agg.commit_count:<10} "
        f"{'+' + format_number(agg.additions):<15} "
        f"{'-' + format_number(agg.deletions):<15} "
        f"{format_number(agg.total):<15}"
    )


def print_visual_report(report: StatsReport, config: StatsConfig, color: bool = False) -> None:
    """Print the summary block and per-repository table.

    Repositories are ordered by total changed lines, highest first.

    Args:
        report: Aggregated statistics from aggregate_commit_stats()
        config: The validated run configuration
        color: Whether to apply terminal colors
    """
    totals = report.totals
    print_header(f"COMMIT STATISTICS - {sanitize(config.user)} ({config.since} to {config.until})", color)

    print("\n  Overall")
    print(f"    {'Commits':<24} {format_number(totals.commit_count)}")
    print(f"    {'Lines added':<24} {paint('+' + format_number(totals.additions), Fore.GREEN, color)}")
    print(f"    {'Lines removed':<24} {paint('-' + format_number(totals.deletions), Fore.RED, color)}")
    print(f"    {'Total lines changed':<24} {format_number(totals.total)}")

    if not report.repositories:
        print("\n  No commits found for the specified period.")
    else:
        print("\n  By repository")
        print("-" * 80)
        print(f"{'Repository':<50} {'Commits':<10} {'Additions':<15} {'Deletions':<15} {'Total':<15}")
        print("-" * 80)
        for repo, agg in sorted_repositories(report):
            print(_table_row(sanitize(repo), agg))
        print("-" * 80)
        print(_table_row("TOTAL", totals))
    print("=" * 80)


def aggregate_to_dict(agg: RepoAggregate) -> Dict[str, int]:
    return {
        "commits": agg.commit_count,
        "additions": agg.additions,
        "deletions": agg.deletions,
        "total": agg.total,
    }


def report_to_dict(report: StatsReport, config: StatsConfig) -> Dict[str, Any]:
    """Convert a report into a JSON-serializable dictionary."""
    return {
        "user": config.user,
        "since": config.since,
        "until": config.until,
        "org": config.org,
        "date_kind": config.date_kind,
        "repositories": {
            repo: aggregate_to_dict(agg) for repo, agg in sorted_repositories(report)
        },
        "totals": aggregate_to_dict(report.totals),
    }


def print_csv_output(report: StatsReport) -> None:
    """Print one CSV row per repository followed by a TOTAL row."""
    writer = csv.writer(sys.stdout)
    writer.writerow(["Repository", "Commits", "Additions", "Deletions", "Total"])
    for repo, agg in sorted_repositories(report):
        writer.writerow([repo, agg.commit_count, agg.additions, agg.deletions, agg.total])
    totals = report.totals
    writer.writerow(["TOTAL", totals.commit_count, totals.additions, totals.deletions, totals.total])


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="commit-stats",
        description="Report lines added/removed by a GitHub user over a date range.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""Examples:
  commit-stats alice --since 2026-01-01
  commit-stats alice --since 2026-01-01 --until 2026-01-31
  commit-stats alice --since 2026-01-01 --org my-org
  commit-stats alice --since 2026-01-01 --date-kind author --json""",
    )
    parser.add_argument("user", help="GitHub user name")
    parser.add_argument("-s", "--since", required=True, help="Start date (YYYY-MM-DD)")
    parser.add_argument("-u", "--until", help="End date (YYYY-MM-DD, default: today)")
    parser.add_argument("-o", "--org", help="Only count commits in this organization's repositories")
    parser.add_argument(
        "-t",
        "--date-kind",
        default="committer",
        help="Date to filter on: 'author' (when the commit was created) or "
             "'committer' (when it was applied to the branch). Default: committer",
    )
    output = parser.add_mutually_exclusive_group()
    output.add_argument("--json", action="store_true", help="Output as JSON")
    output.add_argument("--csv", action="store_true", help="Output as CSV")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    parser.add_argument("--quiet", action="store_true", help="Hide progress and status messages")
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def print_error(message: str, color: bool = False) -> None:
    print(paint(f"Error: {message}", Fore.RED, color), file=sys.stderr)


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the commit-stats CLI.

    Validates arguments, discovers the user's commits, sums their line
    statistics and prints the report.

    Exits with code 1 on error, 130 on keyboard interrupt.
    """
    args = build_parser().parse_args(argv)

    color = not args.no_color and sys.stdout.isatty()
    err_color = not args.no_color and sys.stderr.isatty()
    if color or err_color:
        just_fix_windows_console()

    def status(message: str) -> None:
        if not args.quiet:
            print(message, file=sys.stderr)

    def warn(message: str) -> None:
        print(paint(f"Warning: {message}", Fore.YELLOW, err_color), file=sys.stderr)

    try:
        config = build_config(
            args.user,
            args.since,
            until=args.until,
            org=args.org,
            date_kind=args.date_kind,
        )
    except ValidationError as e:
        print_error(str(e), err_color)
        sys.exit(1)

    progress = None if args.quiet else ProgressPrinter()

    try:
        check_gh_auth()

        status(f"Fetching commits of {config.user}...")
        status(f"Period: {config.since} to {config.until}")
        status(f"Date kind: {config.date_kind}-date")
        if config.org:
            status(f"Organization: {config.org}")

        commits = discover_commits(config, on_progress=progress, warn=warn)
        if progress is not None:
            progress.close(f"Total: {len(commits)} commits")

        if commits:
            status(f"\nProcessing {len(commits)} commits...\n")
        report = aggregate_commit_stats(commits, on_progress=progress)
        if progress is not None:
            progress.close()

        if args.json:
            print(json.dumps(report_to_dict(report, config), indent=2))
        elif args.csv:
            print_csv_output(report)
        else:
            print_visual_report(report, config, color=color)

    except GhCommandError:
        print_error(GENERIC_ERROR, err_color)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(130)
    except Exception:
        print_error(GENERIC_ERROR, err_color)
        sys.exit(1)


if __name__ == "__main__":
    main()
