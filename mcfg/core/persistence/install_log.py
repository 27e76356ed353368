"""
Install log — append-only record of successful installs.

One row per package successfully installed, in a local SQLite file
(``install-log.sql``). The executor appends; ``mcfg history`` reads.
Rows are never updated or deleted. A single writer is assumed.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import closing
from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS installed (
    date_time TEXT NOT NULL,
    package_set_group TEXT NOT NULL,
    package_set TEXT NOT NULL,
    package TEXT NOT NULL,
    installer TEXT NOT NULL
)
"""

_INSERT = (
    "INSERT INTO installed (date_time, package_set_group, package_set, package, installer) "
    "VALUES (?, ?, ?, ?, ?)"
)

_SELECT = (
    "SELECT date_time, package_set_group, package_set, package, installer "
    "FROM installed ORDER BY date_time DESC, rowid DESC"
)


def _utc(value: datetime) -> datetime:
    # Rows are ordered as text, so every stored time must share one offset.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class InstallLogEntry(BaseModel):
    """One successful install.

    Timestamps are kept in UTC; naive values are taken to be UTC already.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    group: str
    package_set: str
    package: str
    installer: str

    @field_validator("timestamp")
    @classmethod
    def timestamp_in_utc(cls, value: datetime) -> datetime:
        return _utc(value)


class InstallLog:
    """Reader/writer for the install log database.

    The table is created on first use, so an empty log and a missing
    file read the same.
    """

    def __init__(self, path: Path):
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def _connect(self) -> sqlite3.Connection:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self._path)
        conn.execute(_CREATE_TABLE)
        return conn

    def create(self) -> None:
        """Create the database file and table if missing."""
        with closing(self._connect()) as conn:
            conn.commit()
        logger.debug("Install log ready at %s", self._path)

    def append(self, entry: InstallLogEntry) -> None:
        with closing(self._connect()) as conn, conn:
            conn.execute(
                _INSERT,
                (
                    _utc(entry.timestamp).isoformat(),
                    entry.group,
                    entry.package_set,
                    entry.package,
                    entry.installer,
                ),
            )
        logger.debug(
            "Logged install: %s/%s/%s via %s",
            entry.group,
            entry.package_set,
            entry.package,
            entry.installer,
        )

    def read(self, limit: int | None = None) -> list[InstallLogEntry]:
        """Entries, most recent first.

        Args:
            limit: Maximum number of rows; None or 0 returns everything.
        """
        if not self._path.is_file():
            return []

        query = _SELECT
        params: tuple[int, ...] = ()
        if limit:
            query += " LIMIT ?"
            params = (limit,)

        with closing(self._connect()) as conn:
            rows = conn.execute(query, params).fetchall()

        return [
            InstallLogEntry(
                timestamp=datetime.fromisoformat(row[0]),
                group=row[1],
                package_set=row[2],
                package=row[3],
                installer=row[4],
            )
            for row in rows
        ]

