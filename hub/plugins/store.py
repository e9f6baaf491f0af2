"""Filesystem store helpers - atomic writes and the plugin directory transaction."""

import json
import logging
import os
import shutil
import tempfile
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from hub.errors import PersistenceError

logger = logging.getLogger(__name__)

FILE_MODE = 0o644


class WriteStage(str, Enum):
    CREATE = "create"
    WRITE = "write"


class StoreWriteError(OSError):
    """A file write failed; ``stage`` tells whether the file could be created at all."""

    def __init__(self, stage: WriteStage, path: Path, cause: OSError):
        super().__init__(f"{stage.value} {path}: {cause}")
        self.stage = stage
        self.path = path
        self.cause = cause


def atomic_write_text(path: Path, text: str) -> None:
    """Write ``text`` to ``path`` via a temp file and ``os.replace``.

    The parent directory must already exist. Readers see either the old
    content or the new content, never a partial file.

    Raises:
        StoreWriteError: stage CREATE if the temp file cannot be created,
            stage WRITE if writing or the final rename fails
    """
    tmp_fd = None
    tmp_path: Optional[Path] = None
    try:
        try:
            tmp_fd, tmp_name = tempfile.mkstemp(
                prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent)
            )
        except OSError as e:
            raise StoreWriteError(WriteStage.CREATE, path, e) from e
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(tmp_fd, "w", encoding="utf-8") as f:
                tmp_fd = None
                f.write(text)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_path, FILE_MODE)
            os.replace(tmp_path, path)
        except OSError as e:
            raise StoreWriteError(WriteStage.WRITE, path, e) from e
        tmp_path = None
    finally:
        if tmp_fd is not None:
            os.close(tmp_fd)
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()


def read_json(path: Path) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def remove_tree(path: Path) -> None:
    """Delete a directory and everything below it."""
    shutil.rmtree(path)


class PluginTransaction:
    """Owns a freshly created plugin directory until ``commit()``.

    Any exception leaving the ``with`` block deletes the directory, so a
    failed add never leaves a half-populated plugin behind::

        with PluginTransaction(plugin_dir) as tx:
            tx.write("meta.json", raw_meta)
            tx.write("script.js", script)
            tx.commit()
    """

    def __init__(self, path: Path):
        self.path = path
        self.committed = False

    def __enter__(self) -> "PluginTransaction":
        try:
            self.path.mkdir(parents=True)
        except OSError as e:
            logger.error(f"[Store] Cannot create {self.path}: {e}")
            raise PersistenceError("Failed to create plugin directory.") from e
        return self

    def write(self, filename: str, text: str) -> Path:
        target = self.path / filename
        atomic_write_text(target, text)
        return target

    def commit(self) -> None:
        self.committed = True

    def rollback(self) -> None:
        try:
            remove_tree(self.path)
            logger.info(f"[Store] Rolled back {self.path}")
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"[Store] Rollback of {self.path} failed: {e}")

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is not None or not self.committed:
            self.rollback()
        return False
