from __future__ import annotations

import logging
import sys


def setup_logging(level: int = logging.WARNING) -> None:
    """
    Send cloudtask logs to stderr. Safe to call more than once: earlier
    handlers on the package logger are replaced, not stacked.
    """
    pkg = logging.getLogger("cloudtask")
    pkg.setLevel(level)

    for h in list(pkg.handlers):
        pkg.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    pkg.addHandler(handler)
