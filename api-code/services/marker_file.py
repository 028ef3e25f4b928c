from __future__ import annotations

import logging
import re
from pathlib import Path

from models import MergeAction, MergeOutcome
from services.errors import MarkerFileMissingError


logger = logging.getLogger("commit-deploy.marker")

DEFAULT_MARKER_FILE = "CICD.txt"

_LINE_BREAK = re.compile(r"\r?\n")
_TRAILING_PLUSES = re.compile(r"\s*\++\s*$")


def strip_counter(line: str) -> str:
    """Return ``line`` without its trailing run of '+' characters, trimmed."""
    return _TRAILING_PLUSES.sub("", line).strip()


def merge_marker_content(existing: str, record: str, smart_append: bool) -> MergeOutcome:
    """Fold ``record`` into the marker file text ``existing``.

    The anchor is the last line, or the one before it when the last line is
    blank. A new record goes directly below the anchor. With ``smart_append``
    a record equal to the anchor (ignoring its '+' counter) bumps the counter
    instead of adding a line.
    """
    lines = _LINE_BREAK.split(existing)
    if lines == [""]:
        return MergeOutcome(content=record, action=MergeAction.INITIALIZED, after=record)

    anchor = len(lines) - 2 if lines[-1].strip() == "" else len(lines) - 1
    if anchor >= 0 and smart_append and strip_counter(lines[anchor]) == record.strip():
        before = lines[anchor]
        lines[anchor] = before + "+"
        return MergeOutcome(
            content="\n".join(lines),
            action=MergeAction.INCREMENTED,
            before=before,
            after=lines[anchor],
        )

    lines.insert(anchor + 1, record)
    return MergeOutcome(content="\n".join(lines), action=MergeAction.APPENDED, after=record)


def update_marker_file(
    repo_path: Path | str,
    record: str,
    smart_append: bool,
    file_name: str = DEFAULT_MARKER_FILE,
) -> MergeOutcome:
    path = Path(repo_path) / file_name
    if not path.is_file():
        raise MarkerFileMissingError(path)

    with path.open("r", encoding="utf-8", newline="") as handle:
        existing = handle.read()
    outcome = merge_marker_content(existing, record, smart_append)
    with path.open("w", encoding="utf-8", newline="") as handle:
        handle.write(outcome.content)
    logger.debug("Marker file %s updated (%s)", path, outcome.action.value)
    return outcome
