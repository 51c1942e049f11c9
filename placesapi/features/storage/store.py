"""
JSON record store.

Named JSON documents under a fixed root directory:
- users.json / pending_users.json under DATA_DIR
- one <country>.json per country under DATA_DIR/countries

Reads tolerate a missing document (caller-supplied fallback), writes
overwrite the whole document. Read-modify-write cycles are serialized
per document with `locked()`, a file lock on `<name>.lock` beside the
document, so uvicorn workers and one-off scripts queue on the same lock.
"""
import json
import logging
import os
import tempfile
from contextlib import contextmanager, ExitStack
from pathlib import Path
from typing import Any, Iterator, List, Optional

from filelock import FileLock, Timeout

from placesapi.core.config import settings
from placesapi.core.errors import StoreBusyError, ValidationError

logger = logging.getLogger("placesapi")

RECORD_SUFFIX = ".json"
LOCK_SUFFIX = ".lock"


def _document_lock(path: Path, timeout: float) -> FileLock:
    lock_path = path.parent / f"{path.name}{LOCK_SUFFIX}"
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    return FileLock(str(lock_path), timeout=timeout)


class RecordStore:
    """Path-confined access to the JSON documents of one directory."""

    def __init__(self, root, lock_timeout: Optional[float] = None):
        self.root = Path(root).resolve()
        self.lock_timeout = lock_timeout if lock_timeout is not None else settings.STORE_LOCK_TIMEOUT_SECONDS

    def __repr__(self) -> str:
        return f"RecordStore({str(self.root)!r})"

    def resolve(self, name: str) -> Path:
        """
        Map a record name to its absolute path.

        Raises:
            ValidationError: wrong extension, or the path escapes the root
        """
        if not name or not isinstance(name, str) or not name.endswith(RECORD_SUFFIX):
            raise ValidationError("Invalid file name.")
        if "\x00" in name:
            raise ValidationError("Invalid file name.")

        resolved = (self.root / name).resolve()
        if resolved == self.root or self.root not in resolved.parents:
            raise ValidationError("Invalid file path.")
        return resolved

    def exists(self, name: str) -> bool:
        return self.resolve(name).is_file()

    def read(self, name: str, fallback: Any = None) -> Any:
        """Parsed document, or `fallback` when it does not exist yet."""
        path = self.resolve(name)
        try:
            with open(path, "r", encoding="utf-8") as fh:
                return json.load(fh)
        except FileNotFoundError:
            return fallback

    def write(self, name: str, document: Any) -> None:
        """Overwrite the whole document (temp file + atomic replace)."""
        path = self.resolve(name)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(document, fh, indent=2, ensure_ascii=False)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def list_names(self) -> List[str]:
        """Record names directly under the root, sorted."""
        if not self.root.is_dir():
            return []
        return sorted(
            entry.name
            for entry in self.root.iterdir()
            if entry.is_file() and entry.name.endswith(RECORD_SUFFIX)
        )

    @contextmanager
    def locked(self, *names: str) -> Iterator[None]:
        """
        Hold the file lock of each named document.

        Acquired in sorted path order. Not reentrant: a second `locked()`
        on the same document inside the block waits until the timeout.

        Raises:
            StoreBusyError: a lock was not acquired within `lock_timeout`
        """
        paths = sorted({self.resolve(name) for name in names}, key=str)
        with ExitStack() as stack:
            for path in paths:
                lock = _document_lock(path, self.lock_timeout)
                try:
                    lock.acquire()
                except Timeout as exc:
                    logger.warning("store.lock_timeout", extra={"file": path.name})
                    raise StoreBusyError("Resource is busy, try again.") from exc
                stack.callback(lock.release)
            yield
