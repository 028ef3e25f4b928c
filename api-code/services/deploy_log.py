from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional


logger = logging.getLogger("commit-deploy.log")

LOG_FILE_PREFIX = "deploy-"
LOG_FILE_SUFFIX = ".log"


def _iso_timestamp(moment: datetime) -> str:
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class DeployLogStore:
    """Owns the directory of daily deploy transcripts."""

    def __init__(self, log_dir: Path | str):
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)

    def log_file_path(self, moment: Optional[datetime] = None) -> Path:
        moment = moment or datetime.now(timezone.utc)
        return self.log_dir / f"{LOG_FILE_PREFIX}{moment.date().isoformat()}{LOG_FILE_SUFFIX}"

    def append_line(self, line: str, moment: Optional[datetime] = None) -> None:
        try:
            with self.log_file_path(moment).open("a", encoding="utf-8") as handle:
                handle.write(line + "\n")
        except OSError as exc:
            logger.warning("Failed to write deploy log line: %s", exc)

    def list_log_files(self) -> List[str]:
        try:
            names = [
                entry.name
                for entry in self.log_dir.iterdir()
                if entry.is_file()
                and entry.name.startswith(LOG_FILE_PREFIX)
                and entry.name.endswith(LOG_FILE_SUFFIX)
            ]
        except OSError as exc:
            logger.warning("Unable to list deploy logs in %s: %s", self.log_dir, exc)
            return []
        return sorted(names, reverse=True)

    def read_log_file(self, filename: str) -> str:
        candidate = (self.log_dir / filename).resolve()
        if candidate.parent != self.log_dir.resolve():
            raise ValueError(f"log file outside log directory: {filename}")
        if not candidate.is_file():
            raise FileNotFoundError(f"log file not found: {filename}")
        return candidate.read_text(encoding="utf-8")

    def open_transcript(self, logs: Optional[List[str]] = None) -> "DeployLog":
        return DeployLog(self, logs if logs is not None else [])


class DeployLog:
    """In-memory transcript of one deploy, mirrored to the daily log file."""

    def __init__(self, store: Optional[DeployLogStore], lines: List[str]):
        self.store = store
        self.lines = lines

    def write(self, message: str) -> str:
        moment = datetime.now(timezone.utc)
        line = f"[{_iso_timestamp(moment)}] {message}"
        self.lines.append(line)
        if self.store is not None:
            self.store.append_line(line, moment)
        return line

    def __call__(self, message: str) -> str:
        return self.write(message)
