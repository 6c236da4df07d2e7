"""commit-stats: Lines added and removed by a GitHub user over a date range.

A Python package and CLI tool that discovers a user's commits through the
GitHub CLI (`gh`), either with the commit search API or by walking every
repository and branch of an organization, and sums their line statistics
per repository.

Example:
    >>> from commit_stats import build_config, discover_commits, aggregate_commit_stats
    >>> config = build_config("alice", "2026-01-01", "2026-01-31")
    >>> report = aggregate_commit_stats(discover_commits(config))
    >>> print(report.totals.total)

Or using the CLI:
    $ commit-stats alice --since 2026-01-01 --org my-org
"""
__version__ = "1.0.0"
__all__ = [
    "build_config",
    "build_search_query",
    "discover_commits",
    "aggregate_commit_stats",
    "get_commit_stats",
    "sanitize",
    "CommitRef",
    "StatsConfig",
    "StatsEntry",
    "RepoAggregate",
    "StatsReport",
    "ValidationError",
    "GhCommandError",
]

from .discovery import CommitRef, discover_commits
from .github import GhCommandError
from .query import build_search_query
from .stats import (
    RepoAggregate,
    StatsEntry,
    StatsReport,
    aggregate_commit_stats,
    get_commit_stats,
)
from .validation import StatsConfig, ValidationError, build_config, sanitize
