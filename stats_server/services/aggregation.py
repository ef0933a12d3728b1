import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from stats_server.services.records import (
    CATEGORIES,
    Category,
    CombinedRecord,
    CountRecord,
    NameCount,
)

logger = logging.getLogger(__name__)

UNKNOWN_SERVER_OS = "unknown"


@dataclass
class Aggregation:
    """Per-category value counts plus the grand total used as denominator."""

    values: dict[Category, dict[str, int]] = field(default_factory=dict)
    total: int = 0

    @classmethod
    def with_categories(cls, categories: Iterable[Category]) -> "Aggregation":
        return cls(values={category: {} for category in categories})

    def name_counts(self, category: Category) -> list[NameCount]:
        counts = self.values.get(category, {})
        return [NameCount(name=name, count=count) for name, count in counts.items()]


@dataclass
class CombinedAggregation:
    values: dict[str, dict[str, int]] = field(default_factory=dict)
    total: int = 0


def _normalize_value(category: Category, value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    if category is Category.server_os and not value.strip():
        return UNKNOWN_SERVER_OS
    return value


def _fold(
    records: Iterable[CountRecord],
    categories: Sequence[Category],
    values: dict[Category, dict[str, int]],
) -> int:
    """Add each record's count into ``values``; return the counts folded in."""
    total = 0
    for record in records:
        for category in categories:
            value = _normalize_value(category, record.category_values.get(category))
            if not value:
                continue
            counts = values.setdefault(category, {})
            counts[value] = counts.get(value, 0) + record.count
            total += record.count
    return total


def aggregate(
    records: Iterable[CountRecord],
    categories: Optional[Sequence[Category]] = None,
) -> Aggregation:
    """Single pass over one record sequence.

    When ``categories`` is given only those are considered and each of them is
    present in the result even if no record carries a value for it. Otherwise
    every category seen on a record is reported.
    """
    aggregation = Aggregation.with_categories(categories or ())
    aggregation.total = _fold(records, categories or CATEGORIES, aggregation.values)
    return aggregation


def aggregate_groups(
    groups: Iterable[Iterable[CountRecord]],
    cumulative_total: bool = False,
) -> Aggregation:
    """Fold a grouped full data set across all categories.

    Value counts keep growing across groups. The grand total restarts at zero
    for every group, so the reported total is that of the last group, unless
    ``cumulative_total`` asks for the sum over all groups.
    """
    aggregation = Aggregation.with_categories(CATEGORIES)
    group_count = 0
    for group in groups:
        if not cumulative_total:
            aggregation.total = 0
        aggregation.total += _fold(group, CATEGORIES, aggregation.values)
        group_count += 1

    logger.debug(
        "Aggregated %d groups, total=%d (cumulative=%s)",
        group_count, aggregation.total, cumulative_total,
    )
    return aggregation


def aggregate_combined(records: Iterable[CombinedRecord]) -> CombinedAggregation:
    """Cross-tabulate counts by CMS version, then PHP version.

    Every record counts towards the total; records missing either version are
    left out of the table.
    """
    aggregation = CombinedAggregation()
    for record in records:
        aggregation.total += record.count
        if not record.cms_version or not record.php_version:
            continue
        php_counts = aggregation.values.setdefault(record.cms_version, {})
        php_counts[record.php_version] = php_counts.get(record.php_version, 0) + record.count
    return aggregation
