import enum
import logging
from typing import Any, Protocol, Sequence, Union

from stats_server.services.aggregation import (
    Aggregation,
    aggregate,
    aggregate_combined,
    aggregate_groups,
)
from stats_server.services.records import (
    COMBINED_SOURCE,
    Category,
    CombinedRecord,
    CountRecord,
    InvalidSourceError,
)
from stats_server.services.sanitizer import drop_unnamed, sanitize

logger = logging.getLogger(__name__)

VALID_SOURCES: tuple[str, ...] = tuple(c.value for c in Category) + (COMBINED_SOURCE,)


class ReportMode(str, enum.Enum):
    single = "single"
    combined = "combined"
    full = "full"
    recent = "recent"


class RecordSource(Protocol):
    def fetch_items(self, source: str) -> Sequence[Union[CountRecord, CombinedRecord]]: ...

    def fetch_recently_updated(self) -> Sequence[CountRecord]: ...

    def fetch_full_dataset(self) -> Sequence[Sequence[CountRecord]]: ...


def select_mode(source: str, recent: bool) -> ReportMode:
    if source and source not in VALID_SOURCES:
        raise InvalidSourceError(source)
    if recent:
        return ReportMode.recent
    if source == COMBINED_SOURCE:
        return ReportMode.combined
    if source:
        return ReportMode.single
    return ReportMode.full


def assemble(aggregation: Aggregation, authorized_raw: bool) -> dict[str, Any]:
    """Render every aggregated category, raw or sanitized, plus the total."""
    data: dict[str, Any] = {}
    for category in aggregation.values:
        rows = drop_unnamed(aggregation.name_counts(category))
        if authorized_raw:
            data[category.value] = [{"name": row.name, "count": row.count} for row in rows]
        else:
            buckets = sanitize(category, rows, aggregation.total)
            data[category.value] = {bucket.label: bucket.percentage for bucket in buckets}
    data["total"] = aggregation.total
    return data


def build_report(
    record_source: RecordSource,
    source: str = "",
    recent: bool = False,
    authorized_raw: bool = False,
    cumulative_total: bool = False,
) -> dict[str, Any]:
    """Produce the ``{"data": ...}`` payload for one stats request.

    ``authorized_raw`` returns unbucketed integer counts instead of
    percentages. The combined ``cms_php`` report is always raw.
    """
    mode = select_mode(source, recent)

    if mode is ReportMode.combined:
        items = record_source.fetch_items(source)
        combined = aggregate_combined(items)
        del items
        data: dict[str, Any] = dict(combined.values)
        data["total"] = combined.total
        _log_report(source, mode, combined.total)
        return {"data": data}

    if mode is ReportMode.recent:
        items = record_source.fetch_recently_updated()
        aggregation = aggregate(items)
    elif mode is ReportMode.single:
        items = record_source.fetch_items(source)
        aggregation = aggregate(items, (Category(source),))
    else:
        items = record_source.fetch_full_dataset()
        aggregation = aggregate_groups(items, cumulative_total=cumulative_total)

    # Raw rows are no longer needed once folded
    del items

    data = assemble(aggregation, authorized_raw)
    _log_report(source, mode, aggregation.total)
    return {"data": data}


def _log_report(source: str, mode: ReportMode, total: int) -> None:
    logger.info(
        "Built %s stats report for source '%s' (total=%d)",
        mode.value, source, total,
        extra={"source": source, "mode": mode.value, "total": total},
    )
