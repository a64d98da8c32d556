"""Per-session scratch directories under the shared storage root."""

from __future__ import annotations

import logging
import shutil
import uuid
from pathlib import Path
from typing import Optional

LOGGER = logging.getLogger(__name__)


class SessionStorage:
    """Own a session-unique directory below ``base`` for backend working files."""

    def __init__(self, base: Path, backend: str) -> None:
        self._base = base
        self._backend = backend
        self._path: Optional[Path] = None

    @property
    def path(self) -> Optional[Path]:
        """The session directory, or a leftover one whose removal failed."""

        return self._path

    def acquire(self) -> Path:
        if self._path is None:
            path = self._base / self._backend / f"session-{uuid.uuid4().hex}"
            path.mkdir(parents=True, exist_ok=False)
            LOGGER.debug("Created session storage %s", path)
            self._path = path
        return self._path

    def release(self) -> None:
        path = self._path
        if path is None:
            return
        LOGGER.debug("Removing session storage %s", path)
        try:
            shutil.rmtree(path)
        except FileNotFoundError:
            pass
        except OSError as exc:
            LOGGER.warning("Could not remove session storage %s: %s", path, exc)
            return
        self._path = None
