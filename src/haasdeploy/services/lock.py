"""Filesystem deploy locks keyed by deployment name."""

import os
import socket
import time
from pathlib import Path
from typing import Callable, Dict, Optional

from haasdeploy.constants import DEFAULT_LOCK_POLL_SECONDS
from haasdeploy.errors import LockError, LockHeldError
from haasdeploy.errors_catalog import actionable_error
from haasdeploy.models import DeploymentTarget


class DeploymentLockRegistry:
    """Serializes deploys of the same name across processes.

    Each name maps to one marker file inside ``lock_dir``. The marker is
    created with ``O_CREAT | O_EXCL`` so two processes can never both own it.
    Deploys of different names use different markers and never wait on each
    other.
    """

    def __init__(
        self,
        logger,
        lock_dir: Optional[str] = None,
        poll_interval: float = DEFAULT_LOCK_POLL_SECONDS,
        strict_release: bool = False,
    ):
        self.logger = logger
        self.lock_dir = Path(lock_dir) if lock_dir else Path.home()
        self.poll_interval = poll_interval
        self.strict_release = strict_release
        self._held: Dict[str, Path] = {}

    def lock_path(self, name: str) -> Path:
        return self.lock_dir / DeploymentTarget(name).lock_file_name

    def is_locked(self, name: str) -> bool:
        return self.lock_path(name).exists()

    def held_by_us(self, name: str) -> bool:
        return name in self._held

    def acquire(self, name: str):
        path = self.lock_path(name)
        try:
            fd = os.open(str(path), os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError as exc:
            raise LockHeldError(f"Deployment '{name}' is locked by {path}") from exc
        except OSError as exc:
            raise LockError(
                actionable_error("lock_unwritable", path=str(path), detail=str(exc))
            ) from exc

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as file_obj:
                file_obj.write(f"pid={os.getpid()}\nhost={socket.gethostname()}\n")
        except OSError as exc:
            try:
                os.remove(path)
            except OSError:
                pass
            raise LockError(
                actionable_error("lock_unwritable", path=str(path), detail=str(exc))
            ) from exc

        self._held[name] = path
        self.logger.debug("Acquired deploy lock %s", path)

    def try_acquire(self, name: str) -> bool:
        try:
            self.acquire(name)
        except LockHeldError:
            return False
        return True

    def wait_and_acquire(self, name: str, on_wait: Optional[Callable[[int], None]] = None):
        """Blocks until the lock for ``name`` is ours. There is no timeout."""
        attempts = 0
        while not self.try_acquire(name):
            attempts += 1
            self.logger.debug("Deploy lock for '%s' is held, attempt %s", name, attempts)
            if on_wait:
                on_wait(attempts)
            time.sleep(self.poll_interval)

    def release(self, name: str):
        path = self.lock_path(name)
        self._held.pop(name, None)
        try:
            os.remove(path)
        except FileNotFoundError as exc:
            if self.strict_release:
                raise LockError(f"Error releasing deploy lock: {path} does not exist") from exc
            self.logger.warning("Deploy lock %s was already released", path)
            return
        except OSError as exc:
            raise LockError(f"Error releasing deploy lock {path}: {exc}") from exc

        self.logger.debug("Released deploy lock %s", path)

