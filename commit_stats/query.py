"""Search expression construction for the commit search API."""
from .validation import StatsConfig


def date_field(date_kind: str) -> str:
    """Return the search qualifier name for a date kind (e.g. 'committer-date')."""
    return f"{date_kind}-date"


def build_search_query(config: StatsConfig) -> str:
    """Build the ``q`` expression for ``search/commits``.

    Example:
        author:alice+committer-date:2026-01-01..2026-01-31+sort:committer-date-desc
    """
    field = date_field(config.date_kind)
    query = f"author:{config.user}+{field}:{config.since}..{config.until}"
    if config.org:
        query += f"+org:{config.org}"
    query += f"+sort:{field}-desc"
    return query
