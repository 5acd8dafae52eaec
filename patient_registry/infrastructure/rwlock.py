"""Readers-writer lock.

Many readers may hold the lock at once; a writer holds it alone. Writers are
preferred: once a writer is waiting, new readers queue behind it so a steady
stream of searches cannot starve mutations.

The lock is not re-entrant in either mode.
"""

import threading
from contextlib import contextmanager
from typing import Iterator


class ReadWriteLock:
    """Writer-preferring shared/exclusive lock built on threading.Condition."""

    def __init__(self):
        self._condition = threading.Condition(threading.Lock())
        self._active_readers = 0
        self._waiting_writers = 0
        self._writer_active = False

    def acquire_read(self) -> None:
        with self._condition:
            while self._writer_active or self._waiting_writers:
                self._condition.wait()
            self._active_readers += 1

    def release_read(self) -> None:
        with self._condition:
            if self._active_readers <= 0:
                raise RuntimeError("release_read() called without a matching acquire_read()")
            self._active_readers -= 1
            if self._active_readers == 0:
                self._condition.notify_all()

    def acquire_write(self) -> None:
        with self._condition:
            self._waiting_writers += 1
            try:
                while self._writer_active or self._active_readers:
                    self._condition.wait()
            finally:
                self._waiting_writers -= 1
            self._writer_active = True

    def release_write(self) -> None:
        with self._condition:
            if not self._writer_active:
                raise RuntimeError("release_write() called without a matching acquire_write()")
            self._writer_active = False
            self._condition.notify_all()

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        """Hold the lock in shared mode for the duration of the block."""
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        """Hold the lock in exclusive mode for the duration of the block."""
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()

    @property
    def readers(self) -> int:
        """Number of threads currently holding the lock in shared mode."""
        with self._condition:
            return self._active_readers

    @property
    def write_held(self) -> bool:
        """True while a writer holds the lock."""
        with self._condition:
            return self._writer_active
