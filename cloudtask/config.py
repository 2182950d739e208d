from __future__ import annotations

import logging
import os
from pathlib import Path


def default_store_path() -> Path:
    """
    Default per-user store:
      ~/.cloudtask/store.json

    Override with CLOUDTASK_STORE env var or --store CLI option.
    """
    env = os.getenv("CLOUDTASK_STORE")
    if env:
        return Path(env).expanduser().resolve()

    return (Path.home() / ".cloudtask" / "store.json").resolve()


def log_level(verbosity: int = 0) -> int:
    """
    -v -> INFO, -vv -> DEBUG; otherwise CLOUDTASK_LOG_LEVEL, default WARNING.
    """
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    name = os.getenv("CLOUDTASK_LOG_LEVEL", "").strip().upper()
    level = logging.getLevelName(name) if name else logging.WARNING
    return level if isinstance(level, int) else logging.WARNING
