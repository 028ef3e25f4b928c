from __future__ import annotations

import logging
import os
from pathlib import Path


logger = logging.getLogger("commit-deploy.env")


def load_local_env(env_path: Path | str = Path(".env"), *, override: bool = False) -> int:
    """Populate os.environ from a local .env file.

    Existing variables win unless ``override`` is set. Returns the number of
    keys applied.
    """
    path = Path(env_path)
    if not path.is_file():
        return 0

    applied = 0
    for number, raw_line in enumerate(path.read_text(encoding="utf-8").splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        if "=" not in line:
            logger.warning("Skipping malformed .env line %d in %s", number, path)
            continue

        key, value = line.split("=", 1)
        key = key.strip()
        if not key:
            continue
        if key in os.environ and not override:
            continue
        os.environ[key] = value.strip().strip('"').strip("'")
        applied += 1
    return applied
