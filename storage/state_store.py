"""JSON persistence of the sampler state with debounced writes."""
import json
import os
import time
from pathlib import Path
from typing import Callable, Optional

from config import INTERVALS, STORAGE, LogContext, get_logger
from config.exceptions import StorageError
from monitor.state import SampleState

logger = get_logger(__name__)


class StateStore:
    """Loads and saves the full SampleState as a single JSON record.

    Writes are debounced: mutating events only mark the store dirty, and
    save_if_due() writes at most once per save interval. flush() writes
    unconditionally and is used for reset, suspend and shutdown.
    """

    DEFAULT_DATA_DIR = Path.home() / STORAGE.DATA_DIR_NAME
    DEFAULT_DATA_FILE = STORAGE.STATE_FILE

    def __init__(
        self,
        data_dir: Optional[Path] = None,
        save_interval: float = INTERVALS.SAVE_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.data_dir = data_dir or self.DEFAULT_DATA_DIR
        self.data_file = self.data_dir / self.DEFAULT_DATA_FILE
        self._clock = clock
        self._save_interval = save_interval
        self._dirty = False  # Track if state needs saving
        self._last_save_time: float = clock()
        self._ensure_data_dir()
        logger.info(f"StateStore initialized at {self.data_file}")

    def _ensure_data_dir(self) -> None:
        """Create data directory if it doesn't exist."""
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            # Saves will fail and be retried; loading still falls back cleanly
            logger.error(f"Could not create data directory {self.data_dir}: {e}")

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    def mark_dirty(self) -> None:
        self._dirty = True

    def load(self) -> Optional[SampleState]:
        """Load the saved state.

        Returns:
            The saved SampleState, or None if there is no usable record.
        """
        if not self.data_file.exists():
            logger.debug("No existing state file, starting fresh")
            return None

        try:
            with open(self.data_file, encoding='utf-8') as f:
                data = json.load(f)
            state = SampleState.from_dict(data)
        except (OSError, ValueError, OverflowError) as e:
            # json.JSONDecodeError is a ValueError
            logger.warning(f"Could not load state file, starting fresh: {e}")
            return None

        version = data.get("schema_version", STORAGE.SCHEMA_VERSION)
        if version != STORAGE.SCHEMA_VERSION:
            logger.warning(
                f"State file schema version {version} differs from "
                f"{STORAGE.SCHEMA_VERSION}; loaded known fields only"
            )
        logger.debug(f"Loaded state with {len(state.history)} history points")
        return state

    def save(self, state: SampleState) -> None:
        """Write the state atomically.

        Raises:
            StorageError: If the write fails. The dirty flag is left set.
        """
        temp_file = self.data_file.with_suffix('.tmp')
        try:
            with LogContext(logger, "State save"):
                # Atomic write: write to temp file then rename
                with open(temp_file, 'w', encoding='utf-8') as f:
                    json.dump(state.to_dict(), f, indent=2)
                os.replace(temp_file, self.data_file)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error saving state: {e}")
            raise StorageError(f"Failed to save state: {e}", {"path": str(self.data_file)}) from e

        self._dirty = False
        self._last_save_time = self._clock()

    def save_if_due(self, state: SampleState) -> bool:
        """Save only if dirty and the save interval has passed.

        Returns:
            True if a write happened.
        """
        if not self._dirty:
            return False
        if self._clock() - self._last_save_time < self._save_interval:
            return False
        self.save(state)
        return True

    def flush(self, state: SampleState) -> None:
        """Save immediately, regardless of dirty flag or interval."""
        self.save(state)
        logger.debug("State flushed")

    def get_data_file_path(self) -> str:
        """Get the path to the state file."""
        return str(self.data_file)
