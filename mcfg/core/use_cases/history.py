"""
History use case — recent entries from the install log.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from mcfg.core.config.environment import Environment
from mcfg.core.errors import McfgError
from mcfg.core.persistence.install_log import InstallLog, InstallLogEntry


@dataclass
class HistoryResult:
    entries: list[InstallLogEntry] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        return {"entries": [e.model_dump(mode="json") for e in self.entries]}


def get_history(environment: Environment, limit: int | None = None) -> HistoryResult:
    """Most recent installs first; ``limit`` of None or 0 means all."""
    result = HistoryResult()
    try:
        environment.require_initialized()
    except McfgError as e:
        result.error = str(e)
        return result

    result.entries = InstallLog(environment.log_file_path).read(limit=limit)
    return result
