"""Coordinate spaces and transforms between the drawing surface and the image."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from PyQt6.QtCore import QPointF, QRectF

logger = logging.getLogger(__name__)

# Smallest width/height (in the space being edited) a box may have
MIN_BOX_SIZE = 5.0


@dataclass(frozen=True)
class DisplayPoint:
    """A point on the rendering surface."""

    x: float
    y: float

    @classmethod
    def from_qpointf(cls, point: QPointF) -> DisplayPoint:
        """Create from a Qt widget position."""
        return cls(point.x(), point.y())

    def to_qpointf(self) -> QPointF:
        return QPointF(self.x, self.y)


@dataclass(frozen=True)
class ImagePoint:
    """A point in the original image's pixel grid."""

    x: float
    y: float


@dataclass(frozen=True)
class DisplayRect:
    """
    A rectangle on the rendering surface.

    Width and height may be negative while a drag gesture is in progress;
    use normalize_drag() to get a proper rectangle.
    """

    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_qrectf(cls, rect: QRectF) -> DisplayRect:
        """Create from a Qt rectangle reported by the drawing surface."""
        return cls(rect.x(), rect.y(), rect.width(), rect.height())

    def to_qrectf(self) -> QRectF:
        """Convert to a Qt rectangle for painting."""
        return QRectF(self.x, self.y, self.width, self.height)

    @property
    def origin(self) -> DisplayPoint:
        return DisplayPoint(self.x, self.y)


@dataclass(frozen=True)
class ImageRect:
    """A rectangle in image pixel coordinates (top-left origin)."""

    x: float
    y: float
    width: float
    height: float

    @property
    def origin(self) -> ImagePoint:
        return ImagePoint(self.x, self.y)

    @property
    def center(self) -> ImagePoint:
        return ImagePoint(self.x + self.width / 2, self.y + self.height / 2)

    def is_within(self, img_width: float, img_height: float) -> bool:
        """Check whether the rectangle lies fully inside the image bounds."""
        return (
            self.x >= 0 and
            self.y >= 0 and
            self.x + self.width <= img_width and
            self.y + self.height <= img_height
        )


@dataclass(frozen=True)
class CoordinateTransform:
    """
    Mapping between display space and image space.

    Holds one independent scale factor per axis:
    scale_x = image_width / display_width and
    scale_y = image_height / display_height.
    """

    scale_x: float = 1.0
    scale_y: float = 1.0

    @classmethod
    def from_sizes(
        cls,
        display_width: float,
        display_height: float,
        image_width: float,
        image_height: float
    ) -> CoordinateTransform:
        """
        Compute the transform for a display surface showing an image.

        Args:
            display_width: Width of the rendering surface
            display_height: Height of the rendering surface
            image_width: Original image width in pixels
            image_height: Original image height in pixels

        Returns:
            New CoordinateTransform

        Raises:
            ValueError: If any size is not positive
        """
        if min(display_width, display_height, image_width, image_height) <= 0:
            raise ValueError(
                f"Sizes must be positive: display {display_width}x{display_height}, "
                f"image {image_width}x{image_height}"
            )

        return cls(
            scale_x=image_width / display_width,
            scale_y=image_height / display_height,
        )

    @property
    def is_uniform(self) -> bool:
        """True if both axes are scaled by the same factor."""
        return abs(self.scale_x - self.scale_y) < 1e-9

    def to_image_space(self, point: DisplayPoint) -> ImagePoint:
        return ImagePoint(point.x * self.scale_x, point.y * self.scale_y)

    def to_display_space(self, point: ImagePoint) -> DisplayPoint:
        return DisplayPoint(point.x / self.scale_x, point.y / self.scale_y)

    def rect_to_image_space(self, rect: DisplayRect) -> ImageRect:
        """Scale origin and size of a display rectangle into image space."""
        return ImageRect(
            x=rect.x * self.scale_x,
            y=rect.y * self.scale_y,
            width=rect.width * self.scale_x,
            height=rect.height * self.scale_y,
        )

    def rect_to_display_space(self, rect: ImageRect) -> DisplayRect:
        """Scale origin and size of an image rectangle onto the display."""
        return DisplayRect(
            x=rect.x / self.scale_x,
            y=rect.y / self.scale_y,
            width=rect.width / self.scale_x,
            height=rect.height / self.scale_y,
        )


def normalize_drag(start: DisplayPoint, end: DisplayPoint) -> DisplayRect:
    """
    Build a rectangle from a drag gesture in any direction.

    The origin is the per-axis minimum of the two points and the
    size is the absolute distance between them.

    Args:
        start: Where the gesture began
        end: Where the gesture ended

    Returns:
        DisplayRect with non-negative width and height
    """
    return DisplayRect(
        x=min(start.x, end.x),
        y=min(start.y, end.y),
        width=abs(end.x - start.x),
        height=abs(end.y - start.y),
    )


def is_drawable(rect: DisplayRect, min_size: float = MIN_BOX_SIZE) -> bool:
    """
    Check whether a drawn gesture is large enough to become a box.

    Anything not strictly larger than min_size on both axes is
    treated as an accidental click.
    """
    return abs(rect.width) > min_size and abs(rect.height) > min_size


def clamp_size(rect: DisplayRect, min_size: float = MIN_BOX_SIZE) -> DisplayRect:
    """Raise width and height to at least min_size, keeping the origin."""
    width = max(min_size, rect.width)
    height = max(min_size, rect.height)
    if width != rect.width or height != rect.height:
        logger.debug(
            f"Clamped rectangle size {rect.width}x{rect.height} to {width}x{height}"
        )
    return DisplayRect(rect.x, rect.y, width, height)
