"""
File-backed state store.

Keeps the recorded state of one component instance as a JSON document, so
consecutive CLI invocations see the result of the previous deploy.
"""

import json
import logging
import os
from pathlib import Path

from synthetics_canary.models import CanaryState

logger = logging.getLogger(__name__)


class JsonStateStore:
    """
    Reads and writes CanaryState as JSON.

    Usage:
        store = JsonStateStore(".canary/my-canary.json")
        state = store.load()
        store.save(new_state)
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> CanaryState:
        """Return the recorded state, or an empty state if none was saved."""
        if not self.path.exists():
            logger.debug(f"No state file at {self.path}")
            return CanaryState()

        with open(self.path, encoding="utf-8") as f:
            data = json.load(f)
        return CanaryState.from_dict(data)

    def save(self, state: CanaryState) -> None:
        """Persist state, replacing the file atomically."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(state.to_dict(), f, indent=2, sort_keys=True)
        os.replace(tmp_path, self.path)
        logger.debug(f"Saved state to {self.path}")

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
            logger.debug(f"Removed state file {self.path}")
