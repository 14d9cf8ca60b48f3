# goldwatch/storage/state_store.py

"""Last-known price and heartbeat marker, rewritten whole each run."""

import logging
from pathlib import Path

from goldwatch.config.settings import Settings
from goldwatch.models.price_record import RunState
from goldwatch.storage.file_manager import read_json, write_json_atomic

logger = logging.getLogger("goldwatch.state")


class StateStore:
    """File-backed :class:`RunState`."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or Settings.STATE_PATH

    def load(self) -> RunState:
        """Return the stored state, or an empty one on first run."""
        raw = read_json(self.path)
        if not isinstance(raw, dict):
            if raw is not None:
                logger.warning(
                    "State file %s is not a JSON object, ignoring",
                    self.path,
                )
            return RunState()
        state = RunState.from_dict(raw)
        logger.debug("Loaded state %s", state)
        return state

    def save(self, state: RunState) -> None:
        """Atomically overwrite the state file."""
        write_json_atomic(self.path, state.to_dict())
        logger.debug("Saved state %s", state)
