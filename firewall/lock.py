"""
Serialization of mutating commands.

setup, refresh, add, remove, disable and schedule changes share the registry
file and the live kernel state, so only one of them may run at a time. The
lock is an exclusive flock on a lock file, released when the process exits.
"""
import fcntl
import logging
import os
from contextlib import contextmanager
from typing import Iterator

from .constants import LOCK_FILE

logger = logging.getLogger(__name__)


@contextmanager
def command_lock(path: str = LOCK_FILE) -> Iterator[None]:
    """Hold an exclusive lock for the duration of a mutating command, waiting if another one runs."""
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(path, "a") as lock:
        try:
            fcntl.flock(lock.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            logger.info(f"Another firewall command is running, waiting for {path}...")
            fcntl.flock(lock.fileno(), fcntl.LOCK_EX)
        try:
            yield
        finally:
            fcntl.flock(lock.fileno(), fcntl.LOCK_UN)
