"""Input validation, sanitizing and the validated run configuration."""
import re
from datetime import date, datetime, timezone
from typing import NamedTuple, Optional

DATE_KINDS = ("author", "committer")
DEFAULT_DATE_KIND = "committer"

_USER_RE = re.compile(r"(?!-)[A-Za-z0-9_-]{1,39}(?<!-)")
_ORG_RE = re.compile(r"[A-Za-z0-9](?:[A-Za-z0-9-]{0,37}[A-Za-z0-9])?")
_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
_UNSAFE_RE = re.compile(r"[^A-Za-z0-9/._@:+\-]")
SHA_RE = re.compile(r"[a-f0-9]{40}", re.IGNORECASE)


class ValidationError(ValueError):
    """Raised when user input does not pass validation."""
    pass


class InvalidUserError(ValidationError):
    """Raised for a malformed GitHub user name."""
    pass


class InvalidOrganizationError(ValidationError):
    """Raised for a malformed GitHub organization name."""
    pass


class InvalidDateError(ValidationError):
    """Raised for a date that is not a real YYYY-MM-DD calendar date."""
    pass


class InvalidDateKindError(ValidationError):
    """Raised for a date kind other than 'author' or 'committer'."""
    pass


class StatsConfig(NamedTuple):
    """Validated parameters for one reporting run."""
    user: str
    since: str
    until: str
    org: Optional[str]
    date_kind: str


def sanitize(value) -> str:
    """Strip every character outside ``[A-Za-z0-9/._@:+-]``.

    Applied to anything read from a gh response before it is placed into
    another gh call. Non-string input yields an empty string.
    """
    if not isinstance(value, str):
        return ""
    return _UNSAFE_RE.sub("", value)


def is_commit_sha(value: str) -> bool:
    """Return True for a full 40-character hexadecimal commit id."""
    return bool(value) and SHA_RE.fullmatch(value) is not None


def validate_user(user: Optional[str]) -> str:
    """Validate a GitHub user name.

    Args:
        user: Raw user name from the command line

    Returns:
        The unchanged user name

    Raises:
        InvalidUserError: If the name is empty, longer than 39 characters,
            contains characters other than letters, digits, ``_`` and ``-``,
            or starts or ends with ``-``
    """
    if not user or not isinstance(user, str):
        raise InvalidUserError("User name is required")
    if not _USER_RE.fullmatch(user):
        raise InvalidUserError(
            f'Invalid user name: "{user}". Use only letters, digits, _ and - '
            "(max 39 characters, not starting or ending with -)"
        )
    return user


def validate_organization(org: Optional[str]) -> Optional[str]:
    """Validate an optional organization name; empty means no filter."""
    if not org:
        return None
    if not isinstance(org, str) or not _ORG_RE.fullmatch(org):
        raise InvalidOrganizationError(
            f'Invalid organization name: "{org}". Use only letters, digits and - '
            "(max 39 characters)"
        )
    return org


def validate_date(value: Optional[str]) -> str:
    """Validate a YYYY-MM-DD date string and return it unchanged."""
    if not value or not isinstance(value, str):
        raise InvalidDateError("Date is required")
    if not _DATE_RE.fullmatch(value):
        raise InvalidDateError(f'Invalid date format: "{value}". Use YYYY-MM-DD.')
    try:
        date.fromisoformat(value)
    except ValueError:
        raise InvalidDateError(f'Invalid date: "{value}"') from None
    return value


def validate_date_kind(kind: Optional[str]) -> str:
    value = kind or DEFAULT_DATE_KIND
    if value not in DATE_KINDS:
        raise InvalidDateKindError(
            f"Invalid date kind: \"{value}\". Use 'author' or 'committer'."
        )
    return value


def today_utc() -> str:
    return datetime.now(timezone.utc).date().isoformat()


def build_config(
    user: Optional[str],
    since: Optional[str],
    until: Optional[str] = None,
    org: Optional[str] = None,
    date_kind: Optional[str] = None,
    today: Optional[str] = None,
) -> StatsConfig:
    """Validate raw inputs and bundle them into a StatsConfig.

    ``until`` defaults to the current UTC date. A range whose end precedes
    its start is passed through as-is.
    """
    valid_user = validate_user(user)
    valid_since = validate_date(since)
    valid_until = validate_date(until or today or today_utc())
    valid_org = validate_organization(org)
    valid_kind = validate_date_kind(date_kind)
    return StatsConfig(
        user=valid_user,
        since=valid_since,
        until=valid_until,
        org=valid_org,
        date_kind=valid_kind,
    )
