"""Per-commit line statistics and their aggregation by repository."""
import json
from typing import Callable, Dict, Iterable, List, NamedTuple, Optional

from .discovery import CommitRef, ProgressCallback
from .github import GhCommandError, run_gh_api

PHASE_STATS = "Fetching stats"


class StatsEntry(NamedTuple):
    """Lines added and removed by a single commit."""
    additions: int = 0
    deletions: int = 0


ZERO_STATS = StatsEntry(0, 0)


class RepoAggregate(NamedTuple):
    """Summed statistics for a group of commits."""
    commit_count: int = 0
    additions: int = 0
    deletions: int = 0

    @property
    def total(self) -> int:
        return self.additions + self.deletions

    def add(self, entry: StatsEntry) -> "RepoAggregate":
        return RepoAggregate(
            self.commit_count + 1,
            self.additions + entry.additions,
            self.deletions + entry.deletions,
        )

    def merge(self, other: "RepoAggregate") -> "RepoAggregate":
        return RepoAggregate(
            self.commit_count + other.commit_count,
            self.additions + other.additions,
            self.deletions + other.deletions,
        )


class StatsReport(NamedTuple):
    """Aggregated results: one row per repository plus grand totals."""
    repositories: Dict[str, RepoAggregate]
    totals: RepoAggregate


def _as_count(value) -> int:
    # bool is an int subclass; floats and strings are not counts
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return 0
    return value


def fetch_commit_stats(repo: str, sha: str) -> StatsEntry:
    """Fetch additions and deletions for one commit.

    Missing or non-numeric fields count as zero.

    Raises:
        GhCommandError: If the API call fails
        ValueError: If the response is not a JSON object
    """
    output = run_gh_api(
        f"repos/{repo}/commits/{sha}",
        jq="{additions: .stats.additions, deletions: .stats.deletions}",
    )
    parsed = json.loads(output)
    if not isinstance(parsed, dict):
        raise ValueError(f"Unexpected stats payload for {repo}@{sha}")
    return StatsEntry(_as_count(parsed.get("additions")), _as_count(parsed.get("deletions")))


def get_commit_stats(repo: str, sha: str) -> StatsEntry:
    """Best-effort variant of fetch_commit_stats returning zeros on failure."""
    try:
        return fetch_commit_stats(repo, sha)
    except (GhCommandError, ValueError):
        return ZERO_STATS


def group_by_repository(commits: Iterable[CommitRef]) -> Dict[str, List[str]]:
    """Map each repository to its unique commit shas, in first-seen order."""
    grouped: Dict[str, Dict[str, None]] = {}
    for commit in commits:
        grouped.setdefault(commit.repository, {})[commit.sha] = None
    return {repo: list(shas) for repo, shas in grouped.items()}


def aggregate_commit_stats(
    commits: Iterable[CommitRef],
    fetch: Callable[[str, str], StatsEntry] = get_commit_stats,
    on_progress: Optional[ProgressCallback] = None,
) -> StatsReport:
    """Sum per-commit statistics by repository and overall.

    Args:
        commits: Discovered commits; repeated (repository, sha) pairs are
            counted once
        fetch: Per-commit stats lookup, called once per unique commit
        on_progress: Optional callback invoked after each repository

    Returns:
        StatsReport with a row for every repository, including all-zero rows
    """
    grouped = group_by_repository(commits)
    repositories: Dict[str, RepoAggregate] = {}
    totals = RepoAggregate()

    for index, (repo, shas) in enumerate(grouped.items(), 1):
        aggregate = RepoAggregate()
        for sha in shas:
            aggregate = aggregate.add(fetch(repo, sha))
        repositories[repo] = aggregate
        totals = totals.merge(aggregate)
        if on_progress is not None:
            on_progress(PHASE_STATS, index, len(grouped), repo)

    return StatsReport(repositories=repositories, totals=totals)


def sorted_repositories(report: StatsReport) -> List[tuple]:
    """Return (repository, aggregate) pairs ordered by total changed lines, descending."""
    return sorted(report.repositories.items(), key=lambda item: item[1].total, reverse=True)
