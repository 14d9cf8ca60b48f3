# goldwatch/config/logging_config.py

"""Logging for a job that cron starts every few minutes.

Every invocation writes its own ``run_YYYYMMDD_HHMMSS.log`` so that one
poll (scrape, decision, delivery) can be read in isolation. Only the
newest ``Settings.LOG_RETENTION`` run logs are kept; older ones are
deleted when the next run starts. Warnings and errors also go to
stderr, which is what cron mails out.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from goldwatch.config.settings import Settings

LOG_GLOB = "run_*.log"

_FILE_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | "
    "%(message)s"
)
_STDERR_FORMAT = "goldwatch: %(levelname)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger("goldwatch.logging")


def prune_run_logs(logs_dir: Path, keep: int) -> list[Path]:
    """Delete all but the newest *keep* run logs; return what was removed.

    File names embed the launch timestamp, so name order is age order.
    ``keep <= 0`` disables pruning.
    """
    if keep <= 0:
        return []
    logs = sorted(logs_dir.glob(LOG_GLOB))
    stale = logs[:-keep] if len(logs) > keep else []
    removed: list[Path] = []
    for path in stale:
        try:
            path.unlink()
        except OSError as exc:
            logger.warning("Could not remove old log %s: %s", path, exc)
            continue
        removed.append(path)
    return removed


def setup_logging(
    logs_dir: Path | None = None, keep: int | None = None,
) -> Path:
    """Attach the per-run file and stderr handlers to ``goldwatch``.

    Returns the log file for this run. Raises ``OSError`` when the log
    directory cannot be created or written.
    """
    logs_dir = logs_dir or Settings.LOGS_DIR
    keep = Settings.LOG_RETENTION if keep is None else keep
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_file = logs_dir / f"run_{datetime.now():%Y%m%d_%H%M%S}.log"

    root_logger = logging.getLogger("goldwatch")
    root_logger.setLevel(logging.DEBUG)
    if root_logger.handlers:
        return log_file

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(_FILE_FORMAT, datefmt=_DATE_FORMAT)
    )
    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.WARNING)
    stderr_handler.setFormatter(logging.Formatter(_STDERR_FORMAT))
    root_logger.addHandler(file_handler)
    root_logger.addHandler(stderr_handler)

    removed = prune_run_logs(logs_dir, keep)
    root_logger.info(
        "Logging to %s (pruned %d old run logs)", log_file, len(removed),
    )
    return log_file
