"""Bucketing and percentage conversion of per-value counts.

Fine grained values are grouped into coarser buckets before they leave the
server: version categories collapse to their ``major.minor`` branch and server
operating systems to their family name. Every other category keeps one bucket
per raw value.
"""
import logging
from typing import Callable, Iterable

from stats_server.services.records import Bucket, Category, NameCount

logger = logging.getLogger(__name__)


def minor_version(name: str) -> str:
    parts = name.split(".")
    minor = parts[1] if len(parts) > 1 else "0"
    return f"{parts[0]}.{minor}"


def os_family(name: str) -> str:
    tokens = name.split(None, 1)
    return tokens[0] if tokens else name


def _identity(name: str) -> str:
    return name


BUCKET_RULES: dict[Category, Callable[[str], str]] = {
    Category.php_version: minor_version,
    Category.db_version: minor_version,
    Category.cms_version: minor_version,
    Category.server_os: os_family,
    Category.db_type: _identity,
}


def drop_unnamed(name_counts: Iterable[NameCount]) -> list[NameCount]:
    return [row for row in name_counts if row.name]


def percentage(count: int, total: int) -> float:
    if total == 0:
        return 0.0
    return round(count / total * 100, 2)


def bucket_counts(category: Category, name_counts: Iterable[NameCount]) -> dict[str, int]:
    """Sum counts per bucket label, keeping first-seen label order."""
    rule = BUCKET_RULES.get(category, _identity)
    counts: dict[str, int] = {}
    for row in drop_unnamed(name_counts):
        label = rule(row.name)
        counts[label] = counts.get(label, 0) + row.count
    return counts


def sanitize(category: Category, name_counts: Iterable[NameCount], total: int) -> list[Bucket]:
    counts = bucket_counts(category, name_counts)
    if total == 0 and counts:
        logger.debug("Grand total is zero; reporting 0%% for %d %s buckets", len(counts), category.value)
    return [Bucket(label=label, percentage=percentage(count, total)) for label, count in counts.items()]
