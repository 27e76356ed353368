"""
Tests for the install log — append-only SQLite record of installs.
"""

import sqlite3
from datetime import UTC, datetime, timedelta, timezone
from pathlib import Path

from mcfg.core.persistence.install_log import InstallLog, InstallLogEntry


def _entry(package: str, minutes: int = 0) -> InstallLogEntry:
    return InstallLogEntry(
        timestamp=datetime(2026, 1, 1, tzinfo=UTC) + timedelta(minutes=minutes),
        group="productivity",
        package_set="tools",
        package=package,
        installer="homebrew",
    )


class TestInstallLog:
    def test_missing_file_reads_empty(self, tmp_path: Path):
        log = InstallLog(tmp_path / "install-log.sql")
        assert log.read() == []
        assert not log.path.exists()

    def test_create(self, tmp_path: Path):
        log = InstallLog(tmp_path / "log" / "install-log.sql")
        log.create()
        assert log.path.is_file()
        assert log.read() == []

    def test_append_and_read(self, tmp_path: Path):
        log = InstallLog(tmp_path / "install-log.sql")
        log.append(_entry("wget"))

        entries = log.read()
        assert len(entries) == 1
        assert entries[0] == _entry("wget")

    def test_most_recent_first(self, tmp_path: Path):
        log = InstallLog(tmp_path / "install-log.sql")
        log.append(_entry("old", minutes=0))
        log.append(_entry("new", minutes=5))
        log.append(_entry("middle", minutes=2))

        assert [e.package for e in log.read()] == ["new", "middle", "old"]

    def test_most_recent_first_across_offsets(self, tmp_path: Path):
        log = InstallLog(tmp_path / "install-log.sql")
        log.append(_entry("old"))
        later = datetime(2026, 1, 1, 1, 0, tzinfo=UTC).astimezone(timezone(timedelta(hours=-5)))
        log.append(_entry("new").model_copy(update={"timestamp": later}))
        log.append(InstallLogEntry(
            timestamp=later.astimezone(timezone(timedelta(hours=3))) - timedelta(minutes=30),
            group="productivity", package_set="tools", package="middle", installer="homebrew",
        ))

        assert [e.package for e in log.read()] == ["new", "middle", "old"]

    def test_timestamps_stored_in_utc(self, tmp_path: Path):
        log = InstallLog(tmp_path / "install-log.sql")
        log.append(InstallLogEntry(
            timestamp=datetime(2026, 1, 1, 7, 0, tzinfo=timezone(timedelta(hours=2))),
            group="g", package_set="s", package="p", installer="i",
        ))
        log.append(InstallLogEntry(
            timestamp=datetime(2026, 1, 1, 6, 0),
            group="g", package_set="s", package="naive", installer="i",
        ))

        conn = sqlite3.connect(log.path)
        try:
            stored = [row[0] for row in conn.execute("SELECT date_time FROM installed")]
        finally:
            conn.close()
        assert stored == ["2026-01-01T05:00:00+00:00", "2026-01-01T06:00:00+00:00"]
        assert [e.package for e in log.read()] == ["naive", "p"]

    def test_same_timestamp_keeps_insertion_order(self, tmp_path: Path):
        log = InstallLog(tmp_path / "install-log.sql")
        log.append(_entry("first"))
        log.append(_entry("second"))

        assert [e.package for e in log.read()] == ["second", "first"]

    def test_limit(self, tmp_path: Path):
        log = InstallLog(tmp_path / "install-log.sql")
        for i in range(5):
            log.append(_entry(f"p{i}", minutes=i))

        assert [e.package for e in log.read(limit=2)] == ["p4", "p3"]
        assert len(log.read(limit=0)) == 5

    def test_table_layout(self, tmp_path: Path):
        log = InstallLog(tmp_path / "install-log.sql")
        log.append(_entry("wget"))

        conn = sqlite3.connect(log.path)
        try:
            row = conn.execute(
                "SELECT package_set_group, package_set, package, installer FROM installed"
            ).fetchone()
        finally:
            conn.close()
        assert row == ("productivity", "tools", "wget", "homebrew")

    def test_default_timestamp_is_utc(self):
        entry = InstallLogEntry(group="g", package_set="s", package="p", installer="i")
        assert entry.timestamp.tzinfo is not None
