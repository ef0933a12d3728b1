import enum
from dataclasses import dataclass, field
from typing import Mapping, Optional


COMBINED_SOURCE = "cms_php"


class Category(str, enum.Enum):
    php_version = "php_version"
    db_type = "db_type"
    db_version = "db_version"
    cms_version = "cms_version"
    server_os = "server_os"


# Declaration order of the enum is the reporting order
CATEGORIES: tuple[Category, ...] = tuple(Category)


class StatsError(Exception):
    """Base class for errors raised while building a stats report."""


class InvalidSourceError(StatsError):
    def __init__(self, source: str):
        self.source = source
        super().__init__(f"Unknown data source '{source}'")


@dataclass(frozen=True)
class CountRecord:
    """One grouped row of raw telemetry."""

    category_values: Mapping[Category, Optional[str]] = field(default_factory=dict)
    count: int = 0


@dataclass(frozen=True)
class CombinedRecord:
    cms_version: Optional[str]
    php_version: Optional[str]
    count: int = 0


@dataclass
class NameCount:
    name: str
    count: int


@dataclass(frozen=True)
class Bucket:
    label: str
    percentage: float
