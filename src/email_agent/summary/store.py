"""Persist one summary per day so later runs can resolve reply commands."""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path

from email_agent.core.dates import summary_file_name
from email_agent.exceptions import StorageError
from email_agent.summary.models import StoredSummary, Summary

logger = logging.getLogger(__name__)


class SummaryStore:
    """JSON files named ``YYYY-MM-DD.json`` in a single directory.

    The latest summary is the lexicographically greatest file name, which for
    ISO dates is also the most recent day. A second run on the same day
    overwrites that day's file.
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def save(
        self,
        summary: Summary,
        thread_id: str | None = None,
        message_id: str | None = None,
        day: date | None = None,
    ) -> Path:
        stored = StoredSummary.from_summary(summary, thread_id=thread_id, message_id=message_id)
        path = self.directory / summary_file_name(day)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(stored.to_dict(), indent=2), encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to write summary to {path}: {e}") from e

        logger.info(f"Stored summary to {path}")
        return path

    def latest_path(self) -> Path | None:
        if not self.directory.is_dir():
            return None
        files = sorted(
            (p for p in self.directory.glob("*.json") if p.is_file()),
            key=lambda p: p.name,
            reverse=True,
        )
        return files[0] if files else None

    def load_latest(self) -> StoredSummary | None:
        """The most recent stored summary, or None when there is none yet.

        Raises:
            StorageError: the latest file exists but cannot be read or parsed.
        """
        path = self.latest_path()
        if path is None:
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return StoredSummary.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise StorageError(f"Failed to load summary from {path}: {e}") from e
