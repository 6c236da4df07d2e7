"""Test fixtures for commit-stats tests."""
import json
import pytest

from commit_stats.discovery import CommitRef
from commit_stats.stats import RepoAggregate, StatsReport
from commit_stats.validation import StatsConfig

SHA_A = "a" * 40
SHA_B = "b" * 40
SHA_C = "c" * 40
SHA_D = "d" * 40


def make_sha(n: int) -> str:
    """Return a distinct 40-character hex sha for an integer."""
    return f"{n:040x}"


def json_lines(records) -> str:
    """Render records the way `gh api --jq '.[]'` prints them."""
    return "".join(json.dumps(r) + "\n" for r in records)


class FakeGh:
    """Stand-in for run_gh_api that answers by path prefix.

    Responses are matched against the longest registered prefix. A response
    that is an Exception instance is raised instead of returned.
    """

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []

    def __call__(self, path, jq=None, timeout=30, max_output_bytes=None):
        self.calls.append(path)
        matches = [p for p in self.responses if path.startswith(p)]
        if not matches:
            return ""
        response = self.responses[max(matches, key=len)]
        if isinstance(response, Exception):
            raise response
        return response

    def paths(self, prefix):
        return [p for p in self.calls if p.startswith(prefix)]


@pytest.fixture
def search_config():
    """Provide a config without organization (search strategy)."""
    return StatsConfig(user="alice", since="2026-01-01", until="2026-01-31", org=None, date_kind="committer")


@pytest.fixture
def org_config():
    """Provide an organization-scoped config (iteration strategy)."""
    return StatsConfig(user="alice", since="2026-01-01", until="2026-01-31", org="acme", date_kind="committer")


@pytest.fixture
def sample_commits():
    """Provide discovered commits spanning two repositories."""
    return [
        CommitRef("acme/api", SHA_A),
        CommitRef("acme/web", SHA_B),
        CommitRef("acme/api", SHA_C),
    ]


@pytest.fixture
def sample_report():
    """Provide an aggregated report."""
    return StatsReport(
        repositories={
            "acme/api": RepoAggregate(2, 100, 20),
            "acme/web": RepoAggregate(1, 1500, 500),
        },
        totals=RepoAggregate(3, 1600, 520),
    )
