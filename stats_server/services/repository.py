import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from stats_server.core.config import settings
from stats_server.models.submission import Submission
from stats_server.services.records import (
    CATEGORIES,
    COMBINED_SOURCE,
    Category,
    CombinedRecord,
    CountRecord,
    InvalidSourceError,
)

logger = logging.getLogger(__name__)

CATEGORY_COLUMNS = {
    Category.php_version: Submission.php_version,
    Category.db_type: Submission.db_type,
    Category.db_version: Submission.db_version,
    Category.cms_version: Submission.cms_version,
    Category.server_os: Submission.server_os,
}


class StatsRepository:
    """Grouped submission counts read from the database."""

    def __init__(self, db: Session, recent_days: Optional[int] = None):
        self.db = db
        self.recent_days = settings.RECENT_DAYS if recent_days is None else recent_days

    def _grouped_counts(self, category: Category, since: Optional[datetime] = None) -> list[CountRecord]:
        column = CATEGORY_COLUMNS[category]
        query = select(column, func.count(Submission.id)).group_by(column).order_by(column)
        if since is not None:
            query = query.where(Submission.modified >= since)

        rows = self.db.execute(query).all()
        return [
            CountRecord(category_values={category: row[0]}, count=int(row[1]))
            for row in rows
        ]

    def _combined_counts(self) -> list[CombinedRecord]:
        query = (
            select(Submission.cms_version, Submission.php_version, func.count(Submission.id))
            .group_by(Submission.cms_version, Submission.php_version)
            .order_by(Submission.cms_version, Submission.php_version)
        )
        rows = self.db.execute(query).all()
        return [
            CombinedRecord(cms_version=row[0], php_version=row[1], count=int(row[2]))
            for row in rows
        ]

    def fetch_items(self, source: str) -> list:
        if source == COMBINED_SOURCE:
            return self._combined_counts()
        try:
            category = Category(source)
        except ValueError:
            raise InvalidSourceError(source) from None
        return self._grouped_counts(category)

    def fetch_recently_updated(self) -> list[CountRecord]:
        since = datetime.utcnow() - timedelta(days=self.recent_days)
        logger.debug("Fetching CMS versions updated since %s", since.isoformat())
        return self._grouped_counts(Category.cms_version, since=since)

    def fetch_full_dataset(self) -> list[list[CountRecord]]:
        return [self._grouped_counts(category) for category in CATEGORIES]
