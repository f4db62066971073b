"""Lock manager for single-instance job execution.

Provides a named, non-blocking, exclusive lock so the same logical job
cannot run twice at once. The default backend takes an advisory
``flock`` on a file in the temp directory; the kernel drops it when the
holding process exits, including on crashes and kill signals.

The lock only works on a single host. If several hosts run the same
job, this lock must not be relied on.
"""

import contextlib
import fcntl
import hashlib
import logging
import os
import re
import sys
import tempfile
from pathlib import Path
from typing import IO, Protocol

from ..constants import EXIT_LOCK_HELD
from ..models import Lock

logger = logging.getLogger(__name__)


class LockError(Exception):
    """Error acquiring or managing lock."""


class LockBackend(Protocol):
    """Capability to take and drop named exclusive locks."""

    def try_acquire(self, name: str) -> bool: ...

    def release(self, name: str) -> None: ...


def lock_name(command: str, suffix: str = "") -> str:
    """Build a lock name from a command identifier and optional suffix."""
    return f"{command}{suffix}"


def lock_path(name: str, lock_dir: Path | None = None) -> Path:
    """Get path of the lock file for a lock name.

    The file name keeps a readable slug of the name plus a hash of the
    full name, so distinct names never share a file.
    """
    directory = lock_dir if lock_dir is not None else Path(tempfile.gettempdir())
    slug = re.sub(r"[^A-Za-z0-9_.-]+", "-", name).strip("-")[:50] or "lock"
    digest = hashlib.sha256(name.encode()).hexdigest()[:12]
    return directory / f"cmdpool.{slug}.{digest}.lock"


def get_lock_holder(name: str, lock_dir: Path | None = None) -> Lock | None:
    """Read the record left by the current or last holder of a lock.

    Returns:
        Lock record, or None if there is no readable record
    """
    path = lock_path(name, lock_dir)
    try:
        content = path.read_text()
    except OSError:
        return None
    if not content.strip():
        return None
    try:
        return Lock.model_validate_json(content)
    except ValueError:
        # Half-written or foreign file
        return None


# Open lock files by resolved path. Entries leave only through release(),
# so a lock outlives the guard and backend that took it.
_held_files: dict[Path, IO[str]] = {}


class FileLockBackend:
    """Locks backed by ``flock`` on files in a lock directory."""

    def __init__(self, lock_dir: Path | None = None) -> None:
        self.lock_dir = lock_dir
        self._owned: set[Path] = set()

    def _path(self, name: str) -> Path:
        path = lock_path(name, self.lock_dir)
        path.parent.mkdir(parents=True, exist_ok=True)
        return path.resolve()

    def try_acquire(self, name: str) -> bool:
        path = self._path(name)
        if path in self._owned:
            return True
        if path in _held_files:
            return False

        handle = path.open("a+")
        try:
            fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError:
            handle.close()
            return False

        record = Lock(name=name, pid=os.getpid(), command=" ".join(sys.argv))
        handle.seek(0)
        handle.truncate()
        handle.write(record.model_dump_json(indent=2))
        handle.flush()
        _held_files[path] = handle
        self._owned.add(path)
        return True

    def release(self, name: str) -> None:
        path = self._path(name)
        if path not in self._owned:
            return
        self._owned.discard(path)
        handle = _held_files.pop(path, None)
        if handle is None:
            return
        try:
            handle.seek(0)
            handle.truncate()
            fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
        finally:
            handle.close()


class MemoryLockBackend:
    """In-process lock table, for tests and embedding."""

    def __init__(self) -> None:
        self.held: set[str] = set()

    def try_acquire(self, name: str) -> bool:
        if name in self.held:
            return False
        self.held.add(name)
        return True

    def release(self, name: str) -> None:
        self.held.discard(name)


class LockGuard:
    """Exclusive right to run the job called ``name``.

    Usable directly (``acquire()`` / ``release()``) or as a context
    manager, which raises LockError when the lock is taken.
    """

    def __init__(self, name: str, backend: LockBackend | None = None) -> None:
        self.name = name
        self.backend = backend if backend is not None else FileLockBackend()
        self._acquired = False

    @property
    def acquired(self) -> bool:
        return self._acquired

    def acquire(self) -> bool:
        """Try once to take the lock without blocking.

        Returns:
            True if this guard now holds the lock
        """
        if not self._acquired:
            self._acquired = self.backend.try_acquire(self.name)
        return self._acquired

    def release(self) -> None:
        """Release the lock if this guard holds it."""
        if self._acquired:
            self.backend.release(self.name)
            self._acquired = False

    def __enter__(self) -> "LockGuard":
        if not self.acquire():
            raise LockError(f"Lock '{self.name}' is held by another process")
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()


def lock(command: str, suffix: str = "", backend: LockBackend | None = None) -> LockGuard:
    """Acquire the lock for a job or end the host process.

    Args:
        command: Command identifier the lock is named after
        suffix: Optional suffix to separate variants of the same command
        backend: Lock backend (defaults to file locks in the temp directory)

    Returns:
        Held LockGuard; it is released by release() or at process exit

    Raises:
        SystemExit: With EXIT_LOCK_HELD if another process holds the lock
    """
    guard = LockGuard(lock_name(command, suffix), backend)
    if not guard.acquire():
        holder = None
        if isinstance(guard.backend, FileLockBackend):
            holder = get_lock_holder(guard.name, guard.backend.lock_dir)
        if holder is not None:
            logger.error(
                f"This command is already running in another process (PID {holder.pid})."
            )
        else:
            logger.error("This command is already running in another process.")
        raise SystemExit(EXIT_LOCK_HELD)
    return guard


@contextlib.contextmanager
def locked(command: str, suffix: str = "", backend: LockBackend | None = None):
    """Hold the job lock for the duration of a with-block, or end the process."""
    guard = lock(command, suffix, backend)
    try:
        yield guard
    finally:
        guard.release()
