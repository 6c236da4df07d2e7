"""Tests for commit_stats validation module."""
import pytest

from commit_stats.validation import (
    InvalidDateError,
    InvalidDateKindError,
    InvalidOrganizationError,
    InvalidUserError,
    ValidationError,
    build_config,
    is_commit_sha,
    sanitize,
    validate_date,
    validate_date_kind,
    validate_organization,
    validate_user,
)

ALLOWED = set("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789/._@:+-")


class TestValidateUser:
    """Tests for validate_user function."""

    @pytest.mark.parametrize("name", ["a", "alice", "Alice-Smith", "bob_99", "_lead", "trail_", "a" * 39, "a-b_c"])
    def test_accepts_valid_names(self, name):
        """Test that well-formed user names pass through unchanged."""
        assert validate_user(name) == name

    @pytest.mark.parametrize(
        "name",
        ["", "-alice", "alice-", "a" * 40, "al ice", "alice!", "ali.ce", "al;rm", "ålice", "alice\n"],
    )
    def test_rejects_invalid_names(self, name):
        """Test that each broken rule raises InvalidUserError."""
        with pytest.raises(InvalidUserError):
            validate_user(name)

    def test_rejects_none(self):
        """Test that a missing user name is rejected."""
        with pytest.raises(InvalidUserError):
            validate_user(None)

    def test_message_names_value(self):
        """Test that the error message includes the offending value."""
        with pytest.raises(InvalidUserError) as exc_info:
            validate_user("bad name")
        assert "bad name" in str(exc_info.value)


class TestValidateOrganization:
    """Tests for validate_organization function."""

    def test_absent_org_is_no_filter(self):
        """Test that empty values mean no organization filter."""
        assert validate_organization(None) is None
        assert validate_organization("") is None

    @pytest.mark.parametrize("org", ["acme", "acme-corp", "A1", "x" * 39])
    def test_accepts_valid_orgs(self, org):
        """Test valid organization names."""
        assert validate_organization(org) == org

    @pytest.mark.parametrize("org", ["acme_corp", "-acme", "acme-", "x" * 40, "ac me"])
    def test_rejects_invalid_orgs(self, org):
        """Test that underscores and bad hyphens are rejected."""
        with pytest.raises(InvalidOrganizationError):
            validate_organization(org)


class TestValidateDate:
    """Tests for validate_date function."""

    def test_accepts_valid_date(self):
        """Test a real calendar date."""
        assert validate_date("2026-01-31") == "2026-01-31"

    def test_accepts_leap_day(self):
        """Test February 29th in a leap year."""
        assert validate_date("2024-02-29") == "2024-02-29"

    @pytest.mark.parametrize("value", ["2026-1-31", "31/01/2026", "2026-01-31T00:00", "20260131", ""])
    def test_rejects_bad_format(self, value):
        """Test strings that do not match YYYY-MM-DD."""
        with pytest.raises(InvalidDateError):
            validate_date(value)

    @pytest.mark.parametrize("value", ["2026-02-30", "2025-02-29", "2026-13-01", "2026-00-10"])
    def test_rejects_nonexistent_date(self, value):
        """Test well-formatted strings that are not calendar dates."""
        with pytest.raises(InvalidDateError) as exc_info:
            validate_date(value)
        assert value in str(exc_info.value)


class TestValidateDateKind:
    """Tests for validate_date_kind function."""

    def test_defaults_to_committer(self):
        """Test the default date kind."""
        assert validate_date_kind(None) == "committer"

    @pytest.mark.parametrize("kind", ["author", "committer"])
    def test_accepts_known_kinds(self, kind):
        """Test both supported kinds."""
        assert validate_date_kind(kind) == kind

    def test_rejects_unknown_kind(self):
        """Test an unsupported value."""
        with pytest.raises(InvalidDateKindError):
            validate_date_kind("merged")


class TestSanitize:
    """Tests for sanitize function."""

    def test_keeps_repository_names(self):
        """Test that ordinary repo and branch names survive."""
        assert sanitize("acme/web-app.v2") == "acme/web-app.v2"
        assert sanitize("feature/user@host:1+2_x") == "feature/user@host:1+2_x"

    def test_strips_shell_metacharacters(self):
        """Test removal of injection characters."""
        assert sanitize('acme/web"; rm -rf / #') == "acme/webrm-rf/"
        assert sanitize("$(whoami)`id`|&<>") == "whoamiid"

    def test_non_string_is_empty(self):
        """Test non-string input."""
        assert sanitize(None) == ""
        assert sanitize(42) == ""

    @pytest.mark.parametrize("value", ["", "plain", "a b\tc\n", "ünïcode/ok", "x';DROP--", "\x00\x1b[31m"])
    def test_output_is_allow_listed_and_idempotent(self, value):
        """Test that output is within the allow-list and stable."""
        once = sanitize(value)
        assert set(once) <= ALLOWED
        assert sanitize(once) == once


class TestIsCommitSha:
    """Tests for is_commit_sha function."""

    def test_full_sha(self):
        """Test 40 hex characters in either case."""
        assert is_commit_sha("0123456789abcdef0123456789abcdef01234567")
        assert is_commit_sha("0123456789ABCDEF0123456789ABCDEF01234567")

    @pytest.mark.parametrize("value", ["", "abc123", "g" * 40, "a" * 39, "a" * 41])
    def test_rejects_malformed(self, value):
        """Test short, long and non-hex ids."""
        assert not is_commit_sha(value)


class TestBuildConfig:
    """Tests for build_config function."""

    def test_builds_config(self):
        """Test a fully specified configuration."""
        config = build_config("alice", "2026-01-01", "2026-01-31", "acme", "author")
        assert config.user == "alice"
        assert config.since == "2026-01-01"
        assert config.until == "2026-01-31"
        assert config.org == "acme"
        assert config.date_kind == "author"

    def test_until_defaults_to_today(self):
        """Test the default end date."""
        config = build_config("alice", "2026-01-01", today="2026-10-18")
        assert config.until == "2026-10-18"
        assert config.org is None
        assert config.date_kind == "committer"

    def test_reversed_range_is_kept(self):
        """Test that an end date before the start date is not swapped."""
        config = build_config("alice", "2026-02-01", "2026-01-01")
        assert (config.since, config.until) == ("2026-02-01", "2026-01-01")

    def test_errors_share_base_class(self):
        """Test that every validation error is a ValidationError."""
        for kwargs in (
            {"user": "-x", "since": "2026-01-01"},
            {"user": "x", "since": "nope"},
            {"user": "x", "since": "2026-01-01", "org": "a_b"},
            {"user": "x", "since": "2026-01-01", "date_kind": "push"},
        ):
            with pytest.raises(ValidationError):
                build_config(**kwargs)
