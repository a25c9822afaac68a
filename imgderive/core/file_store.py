"""
File Store - the only memoization store for derived artifacts.

The naming protocol talks to the filesystem through this small capability so
it can run against real disk (LocalFileStore) or a dict (InMemoryFileStore).
"""

import io
import logging
import os
import posixpath
import shutil
import tempfile
from typing import BinaryIO, Dict, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class FileStore(Protocol):
    """Filesystem operations needed by the derivation protocol."""

    def exists(self, path: str) -> bool: ...

    def is_readable(self, path: str) -> bool: ...

    def open(self, path: str) -> BinaryIO: ...

    def write_bytes(self, path: str, data: bytes) -> None: ...

    def copy(self, src: str, dst: str) -> None: ...


class LocalFileStore:
    """FileStore backed by the local filesystem."""

    def exists(self, path: str) -> bool:
        return os.path.isfile(path)

    def is_readable(self, path: str) -> bool:
        return os.path.isfile(path) and os.access(path, os.R_OK)

    def open(self, path: str) -> BinaryIO:
        return open(path, "rb")

    def write_bytes(self, path: str, data: bytes) -> None:
        """
        Write bytes, creating parent directories as needed.

        Data goes to a temporary file in the target directory which is then
        renamed over the destination, so readers never see a partial file.
        """
        directory = os.path.dirname(path) or "."
        os.makedirs(directory, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".tmp-", suffix=".part")
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

        logger.debug(f"Wrote {len(data)} bytes to {path}")

    def copy(self, src: str, dst: str) -> None:
        """Copy src to dst through a temporary file, like write_bytes."""
        directory = os.path.dirname(dst) or "."
        os.makedirs(directory, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".tmp-", suffix=".part")
        try:
            with os.fdopen(fd, "wb") as target, open(src, "rb") as source:
                shutil.copyfileobj(source, target)
            os.replace(tmp_path, dst)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

        logger.debug(f"Copied {src} to {dst}")


class InMemoryFileStore:
    """FileStore keeping files in a dictionary keyed by normalized path."""

    def __init__(self, files: Dict[str, bytes] = None):
        self.files: Dict[str, bytes] = {}
        self.writes = 0
        for path, data in (files or {}).items():
            self.files[self._key(path)] = data

    @staticmethod
    def _key(path: str) -> str:
        return posixpath.normpath(path)

    def exists(self, path: str) -> bool:
        return self._key(path) in self.files

    def is_readable(self, path: str) -> bool:
        return self.exists(path)

    def open(self, path: str) -> BinaryIO:
        try:
            return io.BytesIO(self.files[self._key(path)])
        except KeyError:
            raise FileNotFoundError(path) from None

    def read_bytes(self, path: str) -> bytes:
        with self.open(path) as fh:
            return fh.read()

    def write_bytes(self, path: str, data: bytes) -> None:
        self.files[self._key(path)] = bytes(data)
        self.writes += 1

    def copy(self, src: str, dst: str) -> None:
        self.write_bytes(dst, self.read_bytes(src))

    def __contains__(self, path: str) -> bool:
        return self.exists(path)
