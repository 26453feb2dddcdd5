"""Ordered class names with stable integer ids."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Union

from .config import YOLODataConfigManager

logger = logging.getLogger(__name__)

YAML_SUFFIXES = {".yaml", ".yml"}


class ClassRegistry:
    """
    Registry of class names.

    The position of a name is its class id in YOLO files. The registry
    also remembers which class new rectangles are created with.
    """

    def __init__(self, names: Iterable[str] = ()) -> None:
        self._names: List[str] = [str(name) for name in names]
        self._selected_index = 0

    @property
    def names(self) -> List[str]:
        return list(self._names)

    @property
    def selected_index(self) -> int:
        """Class id assigned to newly drawn rectangles."""
        return self._selected_index

    def load(self, names: Iterable[str]) -> None:
        """
        Replace all class names.

        Rectangles already placed keep their ids; the selection resets to 0.
        """
        self._names = [str(name) for name in names]
        self._selected_index = 0
        logger.info(f"Loaded {len(self._names)} classes")

    def select(self, index: int) -> None:
        """
        Select the class for new rectangles.

        Raises:
            ValueError: If the index is negative or beyond a non-empty registry
        """
        if index < 0 or (self._names and index >= len(self._names)):
            raise ValueError(f"Class index out of range: {index}")
        self._selected_index = index

    def name_for(self, class_id: int) -> str:
        """
        Get the display name of a class id.

        Args:
            class_id: Numeric class id

        Returns:
            Class name, or the id as text if the registry has no such entry
        """
        if 0 <= class_id < len(self._names):
            return self._names[class_id]
        return str(class_id)

    def load_file(self, path: Union[str, Path]) -> bool:
        """
        Load class names from a file.

        YAML files are read as YOLO data.yaml ("names" list or dict);
        anything else is read as one class name per line.

        Args:
            path: data.yaml, classes.txt or similar

        Returns:
            True if the file was read
        """
        path = Path(path)
        if not path.exists():
            logger.warning(f"Class file not found: {path}")
            return False

        if path.suffix.lower() in YAML_SUFFIXES:
            names = YOLODataConfigManager.from_file(path).get_class_names()
        else:
            try:
                text = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.error(f"Error reading class file {path}: {e}")
                return False
            names = [line.strip() for line in text.splitlines() if line.strip()]

        self.load(names)
        return True

    def save_data_yaml(self, directory: Union[str, Path]) -> bool:
        """Write the class names to data.yaml in a directory."""
        return YOLODataConfigManager(Path(directory)).update_classes(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self):
        return iter(self._names)
