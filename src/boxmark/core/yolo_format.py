"""YOLO annotation format encoding, decoding and sidecar file handling."""

from __future__ import annotations

import logging
import math
import re
from pathlib import Path
from typing import Iterable, List, Optional, Union

from .models import Rectangle
from .storage import AnnotationStorage, FileStorage, StorageError

logger = logging.getLogger(__name__)

# Image extensions that have a YOLO sidecar
SUPPORTED_IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png")

# Decimal places written for normalized coordinates, None keeps full float
# precision so that decoding restores pixel coordinates at any image size
DEFAULT_PRECISION: Optional[int] = None

_IMAGE_SUFFIX_RE = re.compile(r"\.(jpe?g|png)$", re.IGNORECASE)


def get_annotation_path(image_path: Union[str, Path]) -> str:
    """
    Get the annotation file path for an image.

    Only the trailing image extension is replaced with ".txt"; the rest of
    the path is returned exactly as given.

    Args:
        image_path: Path to the image file

    Returns:
        Path string of the corresponding annotation file

    Raises:
        ValueError: If the image extension is not supported
    """
    image_str = str(image_path)
    txt_str, count = _IMAGE_SUFFIX_RE.subn(".txt", image_str)
    if count == 0:
        raise ValueError(f"Unsupported image format: {image_str}")
    return txt_str


def _check_dimensions(img_width: float, img_height: float) -> None:
    if img_width <= 0 or img_height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {img_width}x{img_height}")


def _format_value(value: float, precision: Optional[int]) -> str:
    if precision is None:
        return repr(float(value))
    return f"{value:.{precision}f}"


def encode_rectangle(
    rect: Rectangle,
    img_width: float,
    img_height: float,
    precision: Optional[int] = DEFAULT_PRECISION
) -> str:
    """
    Format a single rectangle as a YOLO annotation line.

    Args:
        rect: Image-space rectangle
        img_width: Image width in pixels
        img_height: Image height in pixels
        precision: Decimal places, or None for full float precision

    Returns:
        "class_id x_center y_center width height"
    """
    x_center = (rect.x + rect.width / 2) / img_width
    y_center = (rect.y + rect.height / 2) / img_height
    width = rect.width / img_width
    height = rect.height / img_height

    coords = " ".join(
        _format_value(v, precision) for v in (x_center, y_center, width, height)
    )
    return f"{rect.class_id} {coords}"


def encode(
    rectangles: Iterable[Rectangle],
    img_width: float,
    img_height: float,
    precision: Optional[int] = DEFAULT_PRECISION
) -> str:
    """
    Encode rectangles as YOLO annotation text.

    Each rectangle keeps its own class id.

    Args:
        rectangles: Image-space rectangles
        img_width: Image width in pixels
        img_height: Image height in pixels
        precision: Decimal places, or None for full float precision

    Returns:
        One line per rectangle, newline separated

    Raises:
        ValueError: If the image dimensions are not positive
    """
    _check_dimensions(img_width, img_height)
    return "\n".join(
        encode_rectangle(rect, img_width, img_height, precision)
        for rect in rectangles
    )


def _parse_class_id(token: str) -> int:
    """Parse a class id, accepting integral floats such as "2.0"."""
    try:
        class_id = int(token)
    except ValueError:
        value = float(token)
        if not value.is_integer():
            raise ValueError(f"class id is not an integer: {token}")
        class_id = int(value)

    if class_id < 0:
        raise ValueError(f"class id is negative: {token}")
    return class_id


def decode_line(line: str, img_width: float, img_height: float) -> Rectangle:
    """
    Parse one YOLO annotation line into an image-space rectangle.

    Raises:
        ValueError: If the line does not hold five finite numeric fields
    """
    data = line.split()
    if len(data) != 5:
        raise ValueError(f"expected 5 fields, got {len(data)}")

    class_id = _parse_class_id(data[0])
    x_center, y_center, width, height = map(float, data[1:])
    if not all(math.isfinite(v) for v in (x_center, y_center, width, height)):
        raise ValueError(f"non-finite coordinate in: {line}")

    return Rectangle(
        x=(x_center - width / 2) * img_width,
        y=(y_center - height / 2) * img_height,
        width=width * img_width,
        height=height * img_height,
        class_id=class_id,
    )


def decode(text: str, img_width: float, img_height: float) -> List[Rectangle]:
    """
    Decode YOLO annotation text into image-space rectangles.

    Parsing is best-effort: blank lines are ignored and malformed lines
    are logged and skipped. Every rectangle gets a fresh id.

    Args:
        text: Annotation file contents
        img_width: Image width in pixels
        img_height: Image height in pixels

    Returns:
        Rectangles for all valid lines, in file order
    """
    _check_dimensions(img_width, img_height)
    rectangles: List[Rectangle] = []

    for line_num, line in enumerate(text.splitlines(), 1):
        line = line.strip()
        if not line:
            continue

        try:
            rectangles.append(decode_line(line, img_width, img_height))
        except ValueError as e:
            logger.warning(f"Skipping invalid annotation line {line_num}: {e}")

    return rectangles


class YOLOAnnotationReader:
    """
    Reader for YOLO sidecar annotation files.

    A missing or unreadable file means "no annotations yet" and yields
    an empty list rather than an error.
    """

    def __init__(self, storage: Optional[AnnotationStorage] = None) -> None:
        """
        Initialize the reader.

        Args:
            storage: Storage backend, defaults to the local filesystem
        """
        self.storage = storage or FileStorage()

    def read(
        self,
        image_path: Union[str, Path],
        img_width: int,
        img_height: int
    ) -> List[Rectangle]:
        """
        Read the annotations belonging to an image.

        Args:
            image_path: Path to the image file
            img_width: Image width in pixels
            img_height: Image height in pixels

        Returns:
            List of Rectangle objects
        """
        try:
            txt_path = get_annotation_path(image_path)
        except ValueError as e:
            logger.warning(str(e))
            return []

        try:
            text = self.storage.read_text(txt_path)
        except StorageError as e:
            logger.error(f"Error reading annotation file {txt_path}: {e.reason}")
            return []

        if text is None:
            logger.debug(f"Annotation file not found: {txt_path}")
            return []

        try:
            rectangles = decode(text, img_width, img_height)
        except ValueError as e:
            logger.error(f"Cannot decode {txt_path}: {e}")
            return []

        logger.info(f"Loaded {len(rectangles)} annotations from {txt_path}")
        return rectangles


class YOLOAnnotationWriter:
    """Writer for YOLO sidecar annotation files."""

    def __init__(
        self,
        storage: Optional[AnnotationStorage] = None,
        precision: Optional[int] = DEFAULT_PRECISION
    ) -> None:
        """
        Initialize the writer.

        Args:
            storage: Storage backend, defaults to the local filesystem
            precision: Decimal places for normalized coordinates
        """
        self.storage = storage or FileStorage()
        self.precision = precision

    def write(
        self,
        image_path: Union[str, Path],
        rectangles: List[Rectangle],
        img_width: int,
        img_height: int
    ) -> str:
        """
        Write the annotations of an image to its sidecar file.

        An empty rectangle list removes any existing sidecar.

        Args:
            image_path: Path to the image file
            rectangles: Rectangles to write
            img_width: Image width in pixels
            img_height: Image height in pixels

        Returns:
            Path string of the annotation file

        Raises:
            ValueError: If the image format or dimensions are invalid
            StorageError: If the file cannot be written
        """
        txt_path = get_annotation_path(image_path)

        if not rectangles:
            self.storage.delete(txt_path)
            return txt_path

        text = encode(rectangles, img_width, img_height, self.precision)
        self.storage.write_text(txt_path, text + "\n")
        logger.info(f"Saved {len(rectangles)} annotations to {txt_path}")
        return txt_path


def has_annotation(
    image_path: Union[str, Path],
    storage: Optional[AnnotationStorage] = None
) -> bool:
    """
    Check if an image has a valid annotation file.

    Args:
        image_path: Path to the image file
        storage: Storage backend, defaults to the local filesystem

    Returns:
        True if the sidecar exists and holds at least one valid line
    """
    storage = storage or FileStorage()
    try:
        text = storage.read_text(get_annotation_path(image_path))
    except (ValueError, StorageError):
        return False

    if not text:
        return False

    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            decode_line(line, 1, 1)
            return True
        except ValueError:
            continue
    return False
