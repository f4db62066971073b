"""Core scheduling logic for cmdpool.

This package contains the scheduler and its collaborators:
- pool: ProcessPool, the bounded-concurrency poll loop
- rewrite: command rewrite hooks applied at admission
- progress: ProgressSink protocol and its implementations
- lock_manager: single-instance job locks
"""

from .lock_manager import (
    FileLockBackend,
    LockBackend,
    LockError,
    LockGuard,
    MemoryLockBackend,
    get_lock_holder,
    lock,
    lock_name,
    locked,
)
from .pool import PoolStateError, ProcessPool
from .progress import LoggingProgressSink, NullProgressSink, ProgressSink, RichProgressSink
from .rewrite import CommandRewrite, identity_rewrite, prefix_rewrite

__all__ = [
    "CommandRewrite",
    "FileLockBackend",
    "LockBackend",
    "LockError",
    "LockGuard",
    "LoggingProgressSink",
    "MemoryLockBackend",
    "NullProgressSink",
    "PoolStateError",
    "ProcessPool",
    "ProgressSink",
    "RichProgressSink",
    "get_lock_holder",
    "identity_rewrite",
    "lock",
    "lock_name",
    "locked",
    "prefix_rewrite",
]
