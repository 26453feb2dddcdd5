"""Annotation session: the state a rendering layer drives through events."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

from PyQt6.QtGui import QColor

from .class_registry import ClassRegistry
from .config import AppConfig
from .exporter import AnnotationExporter, ProgressCallback
from .geometry import (
    CoordinateTransform,
    DisplayPoint,
    DisplayRect,
    ImagePoint,
    ImageRect,
    clamp_size,
    is_drawable,
    normalize_drag,
)
from .models import BatchExportResult, ExportRequest, ExportResult, ImageEntry, Rectangle
from .storage import AnnotationStorage, FileStorage
from .store import AnnotationStore
from .yolo_format import YOLOAnnotationReader

logger = logging.getLogger(__name__)

# Class files picked up when a directory is opened, in order of preference
CLASS_FILE_NAMES = ("data.yaml", "classes.txt")


class AnnotationSession:
    """
    One interactive annotation session.

    Owns the annotation store, the class registry, the loaded images and
    the coordinate transform of the image currently on screen. The
    rendering layer reports gestures in display space and reads back
    image-space rectangles plus the active transform.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        storage: Optional[AnnotationStorage] = None
    ) -> None:
        """
        Initialize the session.

        Args:
            config: Application configuration, defaults if omitted
            storage: Storage backend, defaults to the local filesystem
        """
        self.config = config or AppConfig()
        storage = storage or FileStorage()

        self.store = AnnotationStore()
        self.registry = ClassRegistry()
        self.reader = YOLOAnnotationReader(storage)
        self.exporter = AnnotationExporter(
            storage,
            precision=self.config.coordinate_precision,
            max_workers=self.config.export_workers,
        )

        self._images: Dict[str, ImageEntry] = {}
        self._current_image_id: Optional[str] = None
        self._display_size: Optional[Tuple[float, float]] = None
        self.transform = CoordinateTransform()

    # === Images ===

    @property
    def images(self) -> List[ImageEntry]:
        return list(self._images.values())

    @property
    def current_image(self) -> Optional[ImageEntry]:
        if self._current_image_id is None:
            return None
        return self._images.get(self._current_image_id)

    def load_images(
        self,
        entries: Iterable[ImageEntry],
        directory: Optional[Union[str, Path]] = None
    ) -> int:
        """
        Replace the loaded images and read their existing annotations.

        Args:
            entries: Images discovered by the host
            directory: Folder the images came from; its data.yaml or
                classes.txt is loaded into the class registry

        Returns:
            Number of rectangles loaded
        """
        self._images = {entry.path: entry for entry in entries}
        self.store.load_bulk({
            entry.path: self.reader.read(entry.path, entry.width, entry.height)
            for entry in self._images.values()
        })

        if directory is not None:
            self.config.add_recent_path(str(directory))
            for name in CLASS_FILE_NAMES:
                class_file = Path(directory) / name
                if class_file.exists() and self.registry.load_file(class_file):
                    break

        first = next(iter(self._images), None)
        self._current_image_id = None
        if first is not None:
            self.select_image(first)

        logger.info(
            f"Loaded {len(self._images)} images with {self.store.total_rectangles} annotations"
        )
        return self.store.total_rectangles

    def select_image(self, image_id: str) -> bool:
        """Make an image the one on screen."""
        if image_id not in self._images:
            logger.warning(f"Unknown image: {image_id}")
            return False

        self._current_image_id = image_id
        self._update_transform()
        return True

    def set_display_size(self, width: float, height: float) -> None:
        """Record the size of the rendering surface and refresh the transform."""
        if width <= 0 or height <= 0:
            logger.warning(f"Ignoring invalid display size {width}x{height}")
            return
        self._display_size = (width, height)
        self._update_transform()

    def _update_transform(self) -> None:
        image = self.current_image
        if image is None or self._display_size is None:
            self.transform = CoordinateTransform()
            return

        try:
            self.transform = CoordinateTransform.from_sizes(
                self._display_size[0], self._display_size[1], image.width, image.height
            )
        except ValueError as e:
            logger.warning(f"Cannot compute transform for {image.path}: {e}")
            self.transform = CoordinateTransform()
            return

        if not self.transform.is_uniform:
            logger.debug(
                f"Non-uniform scale for {image.name}: "
                f"{self.transform.scale_x:.4f} x {self.transform.scale_y:.4f}"
            )

    # === Classes ===

    def load_classes(self, names: Iterable[str]) -> None:
        self.registry.load(names)

    def load_classes_file(self, path: Union[str, Path]) -> bool:
        return self.registry.load_file(path)

    def save_classes(self, directory: Union[str, Path]) -> bool:
        return self.registry.save_data_yaml(directory)

    def select_class(self, index: int) -> None:
        self.registry.select(index)

    def label_for(self, rect: Rectangle) -> str:
        return self.registry.name_for(rect.class_id)

    # === Rectangles of the current image ===

    def current_rectangles(self) -> List[Rectangle]:
        """Image-space rectangles of the image on screen."""
        if self._current_image_id is None:
            return []
        return self.store.get(self._current_image_id)

    def display_rect(self, rect: Rectangle) -> DisplayRect:
        """Where a rectangle is drawn on the rendering surface."""
        return self.transform.rect_to_display_space(rect.geometry)

    def display_items(self) -> List[Tuple[Rectangle, DisplayRect, str]]:
        """Rectangle, display geometry and label for everything on screen."""
        return [
            (rect, self.display_rect(rect), self.label_for(rect))
            for rect in self.current_rectangles()
        ]

    def _new_rectangle(self, geometry: ImageRect) -> Rectangle:
        fill = QColor(self.config.box_color)
        fill.setAlpha(self.config.fill_alpha)
        return Rectangle.from_image_rect(
            geometry,
            class_id=self.registry.selected_index,
            fill=fill,
            stroke=QColor(self.config.box_color),
            stroke_width=self.config.stroke_width,
        )

    def add_drawn_rectangle(
        self,
        start: DisplayPoint,
        end: DisplayPoint
    ) -> Optional[Rectangle]:
        """
        Handle a finished draw gesture.

        Args:
            start: Where the drag began (display space)
            end: Where the drag ended (display space)

        Returns:
            The new rectangle, or None if the gesture was too small
            or no image is selected
        """
        if self._current_image_id is None:
            logger.warning("Cannot add rectangle: no image selected")
            return None

        drawn = normalize_drag(start, end)
        if not is_drawable(drawn, self.config.min_box_size):
            logger.debug(f"Rectangle too small, ignoring: {drawn}")
            return None

        rect = self._new_rectangle(self.transform.rect_to_image_space(drawn))
        self.store.set(self._current_image_id, self.current_rectangles() + [rect])
        logger.debug(f"Created rectangle {rect.id} at {rect.geometry}")
        return rect

    def _replace(self, rect_id: str, update: Callable[[Rectangle], Optional[Rectangle]]) -> bool:
        """Apply an update to one rectangle; returning None from update deletes it."""
        if self._current_image_id is None:
            return False

        rectangles = self.current_rectangles()
        for index, rect in enumerate(rectangles):
            if rect.id == rect_id:
                updated = update(rect)
                if updated is None:
                    del rectangles[index]
                else:
                    rectangles[index] = updated
                self.store.set(self._current_image_id, rectangles)
                return True

        logger.warning(f"Rectangle not found: {rect_id}")
        return False

    def move_rectangle(
        self,
        rect_id: str,
        position: Union[ImagePoint, DisplayPoint]
    ) -> bool:
        """
        Move a rectangle to a new top-left position, keeping its size.

        Image-space positions are applied as given, display-space positions
        are converted first.
        """
        if isinstance(position, DisplayPoint):
            position = self.transform.to_image_space(position)

        return self._replace(
            rect_id,
            lambda rect: rect.with_geometry(
                ImageRect(position.x, position.y, rect.width, rect.height)
            ),
        )

    def resize_rectangle(self, rect_id: str, display_rect: DisplayRect) -> bool:
        """
        Apply a resize gesture reported in display space.

        Sizes below the minimum are clamped rather than rejected.
        """
        clamped = clamp_size(display_rect, self.config.min_box_size)
        geometry = self.transform.rect_to_image_space(clamped)
        return self._replace(rect_id, lambda rect: rect.with_geometry(geometry))

    def delete_rectangle(self, rect_id: str) -> bool:
        return self._replace(rect_id, lambda rect: None)

    def set_rectangle_class(self, rect_id: str, class_id: int) -> bool:
        """Assign a rectangle to another class."""
        if class_id < 0:
            raise ValueError(f"class_id must be non-negative, got {class_id}")
        return self._replace(rect_id, lambda rect: rect.with_class(class_id))

    def clear_current(self) -> None:
        if self._current_image_id is not None:
            self.store.clear(self._current_image_id)

    def clear_all(self) -> None:
        self.store.clear_all()

    # === Export ===

    def export_requests(self) -> List[ExportRequest]:
        """Build export requests for every image that has rectangles."""
        requests = []
        for image_id, rectangles in self.store.items():
            image = self._images.get(image_id)
            if image is None:
                logger.warning(f"Skipping annotations of unknown image: {image_id}")
                continue
            requests.append(ExportRequest(image.path, rectangles, image.width, image.height))
        return requests

    def export_current(self) -> ExportResult:
        """Export the annotations of the image on screen."""
        image = self.current_image
        if image is None:
            return ExportResult(
                success=False,
                message="No image selected",
                errors=["No image selected"],
            )

        return self.exporter.export_image(
            ExportRequest(image.path, self.current_rectangles(), image.width, image.height)
        )

    def export_all(
        self,
        progress_callback: Optional[ProgressCallback] = None
    ) -> BatchExportResult:
        """Export every annotated image."""
        return self.exporter.export_batch(self.export_requests(), progress_callback)
