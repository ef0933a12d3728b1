"""Mode selection and report assembly against an in-memory record source."""
import pytest

from stats_server.services.records import (
    Category,
    CombinedRecord,
    CountRecord,
    InvalidSourceError,
)
from stats_server.services.report import ReportMode, build_report, select_mode


class FakeSource:
    def __init__(self, items=None, recent=None, groups=None):
        self.items = items or []
        self.recent = recent or []
        self.groups = groups or []
        self.calls = []

    def fetch_items(self, source):
        self.calls.append(("items", source))
        return self.items

    def fetch_recently_updated(self):
        self.calls.append(("recent",))
        return self.recent

    def fetch_full_dataset(self):
        self.calls.append(("full",))
        return self.groups


def _rec(category, value, count):
    return CountRecord(category_values={category: value}, count=count)


class TestSelectMode:
    @pytest.mark.parametrize("source,recent,expected", [
        ("", False, ReportMode.full),
        ("", True, ReportMode.recent),
        ("php_version", False, ReportMode.single),
        ("server_os", False, ReportMode.single),
        ("cms_php", False, ReportMode.combined),
        ("db_type", True, ReportMode.recent),
    ])
    def test_modes(self, source, recent, expected):
        assert select_mode(source, recent) is expected

    def test_unknown_source(self):
        with pytest.raises(InvalidSourceError) as exc_info:
            select_mode("browser", False)
        assert exc_info.value.source == "browser"

    def test_unknown_source_rejected_before_fetch(self):
        source = FakeSource()
        with pytest.raises(InvalidSourceError):
            build_report(source, source="nope", recent=True)
        assert source.calls == []


class TestSingleSource:
    def test_php_version_sanitized(self):
        source = FakeSource(items=[
            _rec(Category.php_version, "7.4.1", 10),
            _rec(Category.php_version, "7.4.9", 5),
            _rec(Category.php_version, "8.0.0", 5),
        ])
        report = build_report(source, source="php_version")
        assert report == {"data": {"php_version": {"7.4": 75.0, "8.0": 25.0}, "total": 20}}
        assert source.calls == [("items", "php_version")]

    def test_server_os_unknown_bucket(self):
        source = FakeSource(items=[
            _rec(Category.server_os, "", 3),
            _rec(Category.server_os, "Linux 5.4", 7),
        ])
        report = build_report(source, source="server_os")
        assert report["data"]["server_os"] == {"unknown": 30.0, "Linux": 70.0}
        assert report["data"]["total"] == 10

    def test_raw_db_type(self):
        source = FakeSource(items=[_rec(Category.db_type, "mysql", 9)])
        report = build_report(source, source="db_type", authorized_raw=True)
        assert report == {"data": {"db_type": [{"name": "mysql", "count": 9}], "total": 9}}

    def test_raw_keeps_fine_grained_versions(self):
        source = FakeSource(items=[
            _rec(Category.php_version, "7.4.1", 1),
            _rec(Category.php_version, "7.4.9", 2),
        ])
        data = build_report(source, source="php_version", authorized_raw=True)["data"]
        assert data["php_version"] == [
            {"name": "7.4.1", "count": 1},
            {"name": "7.4.9", "count": 2},
        ]

    def test_empty_source(self):
        report = build_report(FakeSource(), source="db_version")
        assert report == {"data": {"db_version": {}, "total": 0}}


class TestCombined:
    def test_never_sanitized(self):
        source = FakeSource(items=[
            CombinedRecord(cms_version="3.9", php_version="7.2", count=4),
            CombinedRecord(cms_version="3.9", php_version="7.4", count=6),
        ])
        expected = {"data": {"3.9": {"7.2": 4, "7.4": 6}, "total": 10}}
        assert build_report(source, source="cms_php") == expected
        assert build_report(source, source="cms_php", authorized_raw=True) == expected


class TestRecent:
    def test_uses_recent_records(self):
        source = FakeSource(recent=[
            _rec(Category.cms_version, "3.9.1", 3),
            _rec(Category.cms_version, "4.0.0", 1),
        ])
        report = build_report(source, recent=True)
        assert report == {"data": {"cms_version": {"3.9": 75.0, "4.0": 25.0}, "total": 4}}
        assert source.calls == [("recent",)]


class TestFull:
    def _source(self):
        return FakeSource(groups=[
            [_rec(Category.php_version, "7.4.1", 3), _rec(Category.php_version, "8.0.1", 1)],
            [_rec(Category.db_type, "mysql", 4)],
            [_rec(Category.server_os, "Linux 5.4", 2), _rec(Category.server_os, " ", 2)],
        ])

    def test_all_categories_nested(self):
        data = build_report(self._source())["data"]
        assert list(data) == [c.value for c in Category] + ["total"]
        assert data["db_version"] == {}
        assert data["cms_version"] == {}

    def test_total_from_last_group(self):
        data = build_report(self._source())["data"]
        assert data["total"] == 4
        assert data["php_version"] == {"7.4": 75.0, "8.0": 25.0}
        assert data["server_os"] == {"Linux": 50.0, "unknown": 50.0}

    def test_cumulative_total(self):
        data = build_report(self._source(), cumulative_total=True)["data"]
        assert data["total"] == 12
        assert data["db_type"] == {"mysql": 33.33}

    def test_raw_full(self):
        data = build_report(self._source(), authorized_raw=True)["data"]
        assert data["db_type"] == [{"name": "mysql", "count": 4}]
        assert data["db_version"] == []
        assert data["total"] == 4
