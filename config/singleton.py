"""Single-instance lock for the tracker process.

Two trackers writing the same state file would each overwrite the
other's totals, so the runner refuses to start when the lock is held.
Uses fcntl file locking, which the OS releases when the process exits,
even on crash.

Usage:
    from config.singleton import SingletonLock

    lock = SingletonLock()
    if not lock.acquire():
        sys.exit(1)
"""
import fcntl
import os
import tempfile
from pathlib import Path
from typing import IO, Optional

from config.constants import STORAGE
from config.logging_config import get_logger

logger = get_logger(__name__)


class SingletonLock:
    """Ensures only one tracker runs against a data directory at a time.

    Attributes:
        lock_name: Base name for the lock and pid files.
    """

    def __init__(self, lock_name: str = STORAGE.LOCK_NAME, lock_dir: Optional[Path] = None):
        self.lock_name = lock_name
        lock_dir = lock_dir or Path(tempfile.gettempdir())
        self._lock_file = lock_dir / f"{lock_name}.lock"
        self._pid_file = self._lock_file.with_suffix('.pid')
        self._lock_fd: Optional[IO[str]] = None

    @property
    def is_held(self) -> bool:
        return self._lock_fd is not None

    def get_running_pid(self) -> Optional[int]:
        """Get the PID recorded by the instance holding the lock, if alive."""
        try:
            pid = int(self._pid_file.read_text().strip())
            os.kill(pid, 0)  # Signal 0 = existence check
            return pid
        except (ValueError, ProcessLookupError, PermissionError, OSError):
            return None

    def acquire(self) -> bool:
        """Try to acquire the lock without blocking.

        Returns:
            True if acquired, False if another instance holds it.
        """
        if self._lock_fd is not None:
            return True
        fd = open(self._lock_file, 'w')
        try:
            fcntl.flock(fd.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError:
            fd.close()
            return False

        self._lock_fd = fd
        try:
            # Lock file is truncated on open, so the PID lives in its own file
            self._pid_file.write_text(str(os.getpid()))
        except OSError as e:
            logger.debug(f"Could not write pid file: {e}")
        logger.debug(f"Singleton lock acquired: {self._lock_file}")
        return True

    def release(self) -> None:
        """Release the lock if held."""
        if self._lock_fd is None:
            return
        self._pid_file.unlink(missing_ok=True)
        fcntl.flock(self._lock_fd.fileno(), fcntl.LOCK_UN)
        self._lock_fd.close()
        self._lock_fd = None
        logger.debug("Singleton lock released")
