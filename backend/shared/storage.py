"""Storage abstraction for persisting the court state document.

The whole state (players, courts, live sessions, history) is stored as one
JSON document in a single file. Writes are atomic via temp-file-then-rename
so a crash mid-write never leaves a truncated document behind. The file is
written with owner-only permissions (0o600) as a filesystem hygiene measure.
"""

import contextlib
import os
import tempfile
from pathlib import Path
from typing import Protocol

import structlog

logger = structlog.get_logger()

_STATE_FILE_MODE = 0o600


class StateStorageError(OSError):
    """Stored state could not be read or written."""


class StateStorage(Protocol):
    """Protocol for durably storing the serialized state document."""

    def load(self) -> str | None: ...

    def save(self, content: str) -> None: ...


class InMemoryStateStorage:
    """Keeps the last saved document in memory; for hosts without durable storage."""

    def __init__(self, content: str | None = None) -> None:
        self.content = content

    def load(self) -> str | None:
        return self.content

    def save(self, content: str) -> None:
        self.content = content


class LocalStateStorage:
    """Stores the state document in a local file."""

    def __init__(self, file_path: str | Path) -> None:
        self._file_path = Path(file_path)

    @property
    def file_path(self) -> Path:
        return self._file_path

    def load(self) -> str | None:
        """Return the stored document, or None when nothing was saved yet.

        Raises StateStorageError when an existing file cannot be read, so that
        a later save never overwrites data we failed to load.
        """
        if not self._file_path.exists():
            return None
        try:
            return self._file_path.read_text(encoding="utf-8")
        except OSError as exc:
            msg = f"Failed to read state from {self._file_path}"
            raise StateStorageError(msg) from exc

    def save(self, content: str) -> None:
        """Atomically replace the stored document.

        Creates the parent directory lazily on first write.
        """
        self._file_path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(dir=str(self._file_path.parent), suffix=".tmp", prefix=".state_")
        fd_owned = True
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                fd_owned = False  # os.fdopen took ownership; it will close fd
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_path, _STATE_FILE_MODE)  # noqa: PTH101
            Path(tmp_path).replace(self._file_path)
        except BaseException:
            if fd_owned:
                with contextlib.suppress(OSError):
                    os.close(fd)
            with contextlib.suppress(OSError):
                Path(tmp_path).unlink()
            raise
        logger.debug("saved court state", path=str(self._file_path), size=len(content))
