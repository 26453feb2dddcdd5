"""In-memory per-image annotation store."""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from .models import Rectangle

logger = logging.getLogger(__name__)


class AnnotationStore:
    """
    Mapping from image identifier to its rectangles (image space).

    Entries are created on first edit and dropped when they become empty,
    so an absent image and an image without rectangles look the same.
    Insertion order of images is kept for stable export ordering.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, List[Rectangle]] = {}

    def get(self, image_id: str) -> List[Rectangle]:
        """Get a copy of the rectangles of an image (empty if none)."""
        return list(self._entries.get(image_id, ()))

    def set(self, image_id: str, rectangles: Sequence[Rectangle]) -> None:
        """Replace all rectangles of an image."""
        if rectangles:
            self._entries[image_id] = list(rectangles)
        else:
            self._entries.pop(image_id, None)

    def clear(self, image_id: str) -> None:
        """Remove all rectangles of one image."""
        self._entries.pop(image_id, None)

    def clear_all(self) -> None:
        """Remove all rectangles of every image."""
        self._entries.clear()

    def load_bulk(self, entries: Mapping[str, Sequence[Rectangle]]) -> None:
        """
        Replace the whole store at once.

        Args:
            entries: Mapping of image id to rectangles; empty sequences are dropped
        """
        self._entries = {
            image_id: list(rectangles)
            for image_id, rectangles in entries.items()
            if rectangles
        }
        logger.info(
            f"Loaded annotations for {len(self._entries)} images "
            f"({self.total_rectangles} rectangles)"
        )

    def find(self, image_id: str, rect_id: str) -> Optional[Rectangle]:
        """Find a rectangle of an image by id."""
        for rect in self._entries.get(image_id, ()):
            if rect.id == rect_id:
                return rect
        return None

    def items(self) -> Iterator[Tuple[str, List[Rectangle]]]:
        """Iterate over (image id, rectangles) for all annotated images."""
        for image_id, rectangles in self._entries.items():
            yield image_id, list(rectangles)

    @property
    def total_rectangles(self) -> int:
        return sum(len(rectangles) for rectangles in self._entries.values())

    def __contains__(self, image_id: object) -> bool:
        return image_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
