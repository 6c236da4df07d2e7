"""Commit discovery: global search or organization-wide iteration.

Two strategies produce a deduplicated list of :class:`CommitRef`:

* :func:`search_commits` queries the commit search index. It is fast but
  capped at 1000 results and does not index every organization repository.
* :func:`collect_org_commits` walks every repository and branch of an
  organization and pages through each branch's history.

Neither strategy writes to the terminal. Progress is reported through an
``on_progress(phase, done, total, info)`` callback and non-fatal problems
through a ``warn(message)`` callback.
"""
import json
import math
import sys
from datetime import datetime, timezone
from typing import Callable, List, NamedTuple, Optional, Set, Tuple
from urllib.parse import quote

from .github import (
    BULK_TIMEOUT,
    MAX_OUTPUT_BYTES,
    GhCommandError,
    run_gh_api,
    split_lines,
)
from .query import build_search_query
from .validation import StatsConfig, is_commit_sha, sanitize

PAGE_SIZE = 100
MAX_SEARCH_PAGES = 10
MAX_SEARCH_RESULTS = 1000
MAX_REPOS_PER_ORG = 1000
MAX_BRANCHES_PER_REPO = 100
MAX_PAGES_PER_BRANCH = 10

PRIMARY_BRANCH_PATTERNS = (
    "main", "master",
    "develop", "development", "dev",
    "staging", "stage", "stg",
    "production", "prod",
    "release", "hotfix",
    "test", "testing", "qa",
)

PHASE_SEARCH = "Fetching pages"
PHASE_REPOSITORIES = "Scanning repos"

ProgressCallback = Callable[[str, int, int, str], None]
WarningCallback = Callable[[str], None]


class CommitRef(NamedTuple):
    """A commit discovered for the user, identified by (repository, sha)."""
    repository: str
    sha: str
    date: Optional[datetime] = None


def print_warning(message: str) -> None:
    print(f"Warning: {message}", file=sys.stderr)


def _notify(on_progress: Optional[ProgressCallback], phase: str, done: int, total: int, info: str) -> None:
    if on_progress is not None:
        on_progress(phase, done, total, info)


def parse_timestamp(value) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp as returned by the API (``...Z`` suffix)."""
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_json_line(line: str) -> Optional[dict]:
    try:
        record = json.loads(line)
    except ValueError:
        return None
    return record if isinstance(record, dict) else None


# Strategy A: commit search index

def fetch_search_total(query: str) -> int:
    """Return the search API's ``total_count`` estimate for a query.

    Raises:
        GhCommandError: If the call fails
        ValueError: If the response is not an integer
    """
    output = run_gh_api(f"search/commits?q={query}&per_page=1", jq=".total_count")
    return int(output.strip())


def fetch_search_page(query: str, page: int) -> List[CommitRef]:
    """Fetch one page of search results, keeping only well-formed records."""
    output = run_gh_api(
        f"search/commits?q={query}&per_page={PAGE_SIZE}&page={page}",
        jq=".items | map({repo: .repository.full_name, sha: .sha}) | .[]",
        timeout=BULK_TIMEOUT,
        max_output_bytes=MAX_OUTPUT_BYTES,
    )
    commits = []
    for line in split_lines(output):
        record = _parse_json_line(line)
        if record is None:
            continue
        repo = sanitize(record.get("repo"))
        sha = sanitize(record.get("sha"))
        if repo and is_commit_sha(sha):
            commits.append(CommitRef(repo, sha))
    return commits


def search_commits(
    config: StatsConfig,
    on_progress: Optional[ProgressCallback] = None,
    warn: Optional[WarningCallback] = None,
) -> List[CommitRef]:
    """Discover commits through the commit search API.

    Pages are requested until one comes back without valid records, the
    accumulated count reaches the reported total, or the ten-page API limit
    is hit. A failed page ends pagination and keeps what was collected.

    Returns:
        Commits in search order (newest first by the selected date kind)
    """
    warn = warn or print_warning
    query = build_search_query(config)

    total_count: Optional[int] = None
    try:
        total_count = fetch_search_total(query)
    except (GhCommandError, ValueError):
        warn("Could not retrieve the total commit count.")

    if total_count is None:
        expected_pages = MAX_SEARCH_PAGES
    else:
        expected_pages = min(MAX_SEARCH_PAGES, math.ceil(total_count / PAGE_SIZE) or 1)

    commits: List[CommitRef] = []
    seen: Set[Tuple[str, str]] = set()
    for page in range(1, MAX_SEARCH_PAGES + 1):
        try:
            page_commits = fetch_search_page(query, page)
        except GhCommandError:
            warn(f"Search request failed on page {page}. Keeping {len(commits)} commit(s) found so far.")
            break

        for commit in page_commits:
            key = (commit.repository, commit.sha)
            if key not in seen:
                seen.add(key)
                commits.append(commit)

        _notify(on_progress, PHASE_SEARCH, page, max(expected_pages, page),
                f"Page {page} | +{len(page_commits)} commits")

        if not page_commits:
            break
        if total_count is not None and len(commits) >= total_count:
            break

    if len(commits) >= MAX_SEARCH_RESULTS:
        warn(f"The GitHub search API returns at most {MAX_SEARCH_RESULTS} results; "
             "the report may be incomplete.")
        warn("For longer periods, split the search into smaller date ranges.")

    return commits


# Strategy B: organization repositories and branches

def list_org_repositories(org: str, warn: Optional[WarningCallback] = None) -> List[str]:
    """List ``owner/name`` for every repository of an organization.

    Stops at MAX_REPOS_PER_ORG repositories or at the first failing page.
    """
    warn = warn or print_warning
    repos: List[str] = []
    page = 1
    while len(repos) < MAX_REPOS_PER_ORG:
        try:
            output = run_gh_api(
                f"orgs/{org}/repos?per_page={PAGE_SIZE}&type=all&page={page}",
                jq=".[].full_name",
            )
        except GhCommandError:
            warn(f"Failed to list repositories (page {page}). Continuing...")
            break

        lines = split_lines(output)
        for line in lines:
            repo = sanitize(line.strip())
            if repo:
                repos.append(repo)
        if len(lines) < PAGE_SIZE:
            break
        page += 1

    return repos[:MAX_REPOS_PER_ORG]


def is_primary_branch(name: str) -> bool:
    """Return True for trunk/release/staging/QA style branch names."""
    lower = name.lower()
    return any(
        lower == pattern or lower.startswith(pattern + "-") or lower.endswith("-" + pattern)
        for pattern in PRIMARY_BRANCH_PATTERNS
    )


def prioritize_branches(names: List[str]) -> List[str]:
    """Order primary branches before the rest, keeping listing order in each group."""
    primary = [name for name in names if is_primary_branch(name)]
    others = [name for name in names if not is_primary_branch(name)]
    return primary + others


def get_default_branch(repo: str) -> str:
    output = run_gh_api(f"repos/{repo}", jq=".default_branch")
    return sanitize(output.strip())


def list_branches(repo: str, warn: Optional[WarningCallback] = None) -> List[str]:
    """Return the branches to scan for a repository.

    The default branch comes first, followed by up to MAX_BRANCHES_PER_REPO
    further branches with primary names ordered ahead of the others.
    """
    warn = warn or print_warning
    seen: Set[str] = set()

    default_branch = ""
    try:
        default_branch = get_default_branch(repo)
    except GhCommandError:
        warn(f"Could not determine the default branch of {repo}.")
    if default_branch:
        seen.add(default_branch)

    listed: List[str] = []
    page = 1
    while len(listed) < MAX_BRANCHES_PER_REPO:
        try:
            output = run_gh_api(
                f"repos/{repo}/branches?per_page={PAGE_SIZE}&page={page}",
                jq=".[].name",
            )
        except GhCommandError:
            warn(f"Failed to list branches (page {page}) of {repo}. Continuing...")
            break

        lines = split_lines(output)
        for line in lines:
            name = sanitize(line.strip())
            if name and name not in seen:
                seen.add(name)
                listed.append(name)
        if len(lines) < PAGE_SIZE:
            break
        page += 1

    branches = [default_branch] if default_branch else []
    branches.extend(prioritize_branches(listed[:MAX_BRANCHES_PER_REPO]))
    return branches


def fetch_branch_commits(repo: str, branch: str, config: StatsConfig, page: int) -> List[dict]:
    """Fetch one page of a branch's history as ``{sha, date}`` records.

    The date is taken from ``commit.author.date`` or ``commit.committer.date``
    according to ``config.date_kind``.
    """
    path = (
        f"repos/{repo}/commits?author={config.user}&sha={quote(branch, safe='')}"
        f"&since={config.since}T00:00:00Z&until={config.until}T23:59:59Z"
        f"&per_page={PAGE_SIZE}&page={page}"
    )
    output = run_gh_api(
        path,
        jq=f".[] | {{sha: .sha, date: .commit.{config.date_kind}.date}}",
        timeout=BULK_TIMEOUT,
        max_output_bytes=MAX_OUTPUT_BYTES,
    )
    return [r for r in (_parse_json_line(line) for line in split_lines(output)) if r is not None]


def collect_repository_commits(
    repo: str,
    config: StatsConfig,
    warn: Optional[WarningCallback] = None,
) -> List[CommitRef]:
    """Collect the user's commits across all scanned branches of one repository.

    A commit reachable from several branches is kept once, from the first
    branch it was found on.
    """
    warn = warn or print_warning
    commits: List[CommitRef] = []
    seen_shas: Set[str] = set()

    for branch in list_branches(repo, warn=warn):
        for page in range(1, MAX_PAGES_PER_BRANCH + 1):
            try:
                records = fetch_branch_commits(repo, branch, config, page)
            except GhCommandError:
                warn(f"Failed to fetch commits of {repo}@{branch} (page {page}).")
                break

            for record in records:
                sha = sanitize(record.get("sha"))
                commit_date = parse_timestamp(record.get("date"))
                if is_commit_sha(sha) and commit_date is not None and sha not in seen_shas:
                    seen_shas.add(sha)
                    commits.append(CommitRef(repo, sha, commit_date))

            if len(records) < PAGE_SIZE:
                break

    return commits


def collect_org_commits(
    config: StatsConfig,
    on_progress: Optional[ProgressCallback] = None,
    warn: Optional[WarningCallback] = None,
) -> List[CommitRef]:
    """Discover commits by iterating every repository of ``config.org``.

    Returns:
        Commits deduplicated by sha across the organization, newest first
    """
    warn = warn or print_warning
    repos = list_org_repositories(config.org, warn=warn)

    merged: List[CommitRef] = []
    seen_shas: Set[str] = set()
    for index, repo in enumerate(repos, 1):
        repo_commits = collect_repository_commits(repo, config, warn=warn)
        for commit in repo_commits:
            if commit.sha not in seen_shas:
                seen_shas.add(commit.sha)
                merged.append(commit)
        _notify(on_progress, PHASE_REPOSITORIES, index, len(repos),
                f"{repo} | +{len(repo_commits)} commits")

    merged.sort(key=lambda c: c.date, reverse=True)
    return merged


def discover_commits(
    config: StatsConfig,
    on_progress: Optional[ProgressCallback] = None,
    warn: Optional[WarningCallback] = None,
) -> List[CommitRef]:
    """Pick the discovery strategy for a config and run it.

    Organization-scoped runs iterate repositories because the search index
    does not cover every organization repository.
    """
    if config.org:
        return collect_org_commits(config, on_progress=on_progress, warn=warn)
    return search_commits(config, on_progress=on_progress, warn=warn)

