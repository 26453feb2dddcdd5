"""Data models for Boxmark annotations and export results."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import List, Optional

from PyQt6.QtGui import QColor

from .geometry import ImageRect

# Default box presentation
DEFAULT_BOX_COLOR = "#007bff"
DEFAULT_FILL_ALPHA = 51
DEFAULT_STROKE_WIDTH = 2.0


def generate_rect_id() -> str:
    """Generate a unique identifier for a new rectangle."""
    return f"rect_{uuid.uuid4().hex}"


def _default_fill() -> QColor:
    color = QColor(DEFAULT_BOX_COLOR)
    color.setAlpha(DEFAULT_FILL_ALPHA)
    return color


@dataclass
class Rectangle:
    """
    A bounding box annotation in image space.

    Coordinates are pixels in the original image with a top-left origin.
    The fill/stroke attributes are cosmetic and are never exported.
    """

    x: float
    y: float
    width: float
    height: float
    class_id: int = 0
    id: str = field(default_factory=generate_rect_id)
    fill: QColor = field(default_factory=_default_fill)
    stroke: QColor = field(default_factory=lambda: QColor(DEFAULT_BOX_COLOR))
    stroke_width: float = DEFAULT_STROKE_WIDTH

    def __post_init__(self) -> None:
        if self.class_id < 0:
            raise ValueError(f"class_id must be non-negative, got {self.class_id}")

    @classmethod
    def from_image_rect(cls, rect: ImageRect, class_id: int = 0, **kwargs) -> Rectangle:
        """Create a new rectangle (with a fresh id) from image-space geometry."""
        return cls(
            x=rect.x,
            y=rect.y,
            width=rect.width,
            height=rect.height,
            class_id=class_id,
            **kwargs
        )

    @property
    def geometry(self) -> ImageRect:
        """The image-space geometry of this rectangle."""
        return ImageRect(self.x, self.y, self.width, self.height)

    def with_geometry(self, rect: ImageRect) -> Rectangle:
        """Return a copy with new geometry, keeping id, class and colors."""
        return replace(self, x=rect.x, y=rect.y, width=rect.width, height=rect.height)

    def with_class(self, class_id: int) -> Rectangle:
        """Return a copy assigned to another class."""
        return replace(self, class_id=class_id)


@dataclass(frozen=True)
class ImageEntry:
    """
    A loaded image as seen by the annotation core.

    The path doubles as the store key and as the basis of the sidecar
    annotation path. Pixel data stays with the rendering layer.
    """

    path: str
    width: int
    height: int

    @property
    def name(self) -> str:
        return Path(self.path).name


@dataclass
class ExportRequest:
    """Everything needed to export the annotations of one image."""

    image_path: str
    rectangles: List[Rectangle]
    image_width: int
    image_height: int


@dataclass
class ExportResult:
    """Outcome of exporting one image's annotations."""

    success: bool
    message: str
    file_path: Optional[str] = None
    rectangles_processed: int = 0
    errors: List[str] = field(default_factory=list)


@dataclass
class BatchExportResult:
    """
    Aggregate outcome of a batch export.

    Results are kept in the same order as the export requests.
    """

    total_images: int
    successful_exports: int
    failed_exports: int
    results: List[ExportResult] = field(default_factory=list)
    summary: str = ""

    @property
    def status(self) -> str:
        """
        Classify the batch for user notification.

        Returns:
            "empty", "success", "partial" or "failure"
        """
        if self.total_images == 0:
            return "empty"
        if self.failed_exports == 0:
            return "success"
        if self.successful_exports == 0:
            return "failure"
        return "partial"

    @property
    def errors(self) -> List[str]:
        """All error strings of all images, in order."""
        return [error for result in self.results for error in result.errors]
