"""Storage backends used to read and write annotation sidecar files."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class StorageError(Exception):
    """Raised when an annotation file cannot be written or removed."""

    def __init__(self, path: PathLike, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = str(path)
        self.reason = reason


class AnnotationStorage(ABC):
    """
    Abstract text storage for annotation files.

    The annotation core never touches the filesystem directly; it goes
    through one of these so hosts can substitute their own I/O layer.
    """

    @abstractmethod
    def read_text(self, path: PathLike) -> Optional[str]:
        """
        Read a text file.

        Args:
            path: File to read

        Returns:
            File contents, or None if the file does not exist

        Raises:
            StorageError: If the file exists but cannot be read
        """
        pass

    @abstractmethod
    def write_text(self, path: PathLike, text: str) -> None:
        """
        Write a text file, replacing any previous contents.

        Args:
            path: File to write
            text: Contents

        Raises:
            StorageError: If the file cannot be written
        """
        pass

    @abstractmethod
    def delete(self, path: PathLike) -> None:
        """
        Delete a file if it exists.

        Raises:
            StorageError: If the file exists but cannot be removed
        """
        pass


class FileStorage(AnnotationStorage):
    """UTF-8 text storage on the local filesystem."""

    def read_text(self, path: PathLike) -> Optional[str]:
        path = Path(path)
        if not path.exists():
            logger.debug(f"File not found: {path}")
            return None

        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(path, str(e)) from e

    def write_text(self, path: PathLike, text: str) -> None:
        path = Path(path)
        try:
            path.write_text(text, encoding="utf-8")
        except OSError as e:
            raise StorageError(path, str(e)) from e

    def delete(self, path: PathLike) -> None:
        path = Path(path)
        if not path.exists():
            return

        try:
            path.unlink()
            logger.info(f"Deleted file: {path}")
        except OSError as e:
            raise StorageError(path, str(e)) from e
