"""Single-image and batch export of annotations to YOLO sidecar files."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, List, Optional, Sequence

from .models import BatchExportResult, ExportRequest, ExportResult, Rectangle
from .storage import AnnotationStorage, FileStorage, StorageError
from .yolo_format import DEFAULT_PRECISION, YOLOAnnotationWriter, get_annotation_path

logger = logging.getLogger(__name__)

# Called with (completed, total) as per-image exports finish
ProgressCallback = Callable[[int, int], None]


class AnnotationExporter:
    """
    Writes YOLO annotation files for one or many images.

    Each image is exported independently: a failure is recorded in that
    image's ExportResult and never stops the other images.
    """

    def __init__(
        self,
        storage: Optional[AnnotationStorage] = None,
        precision: Optional[int] = DEFAULT_PRECISION,
        max_workers: int = 4
    ) -> None:
        """
        Initialize the exporter.

        Args:
            storage: Storage backend, defaults to the local filesystem
            precision: Decimal places for normalized coordinates
            max_workers: Number of images written in parallel during a batch
        """
        self.writer = YOLOAnnotationWriter(storage or FileStorage(), precision)
        self.max_workers = max(1, max_workers)

    @staticmethod
    def _check_bounds(
        rectangles: Sequence[Rectangle],
        img_width: int,
        img_height: int
    ) -> List[str]:
        """Collect rectangles that reach outside the image."""
        return [
            f"Rectangle {rect.id} extends outside the {img_width}x{img_height} image"
            for rect in rectangles
            if not rect.geometry.is_within(img_width, img_height)
        ]

    def export_image(self, request: ExportRequest) -> ExportResult:
        """
        Export the annotations of one image.

        Args:
            request: Image path, rectangles and image dimensions

        Returns:
            ExportResult describing the outcome; never raises
        """
        try:
            txt_path = get_annotation_path(request.image_path)
        except ValueError as e:
            logger.error(f"Cannot export {request.image_path}: {e}")
            return ExportResult(
                success=False,
                message="Unsupported image format",
                errors=[str(e)],
            )

        if request.image_width <= 0 or request.image_height <= 0:
            message = (
                f"Invalid image dimensions {request.image_width}x{request.image_height}"
            )
            logger.error(f"Cannot export {request.image_path}: {message}")
            return ExportResult(success=False, message=message, errors=[message])

        valid = []
        errors = []
        for rect in request.rectangles:
            if rect.width <= 0 or rect.height <= 0:
                errors.append(f"Skipped rectangle {rect.id}: non-positive size")
            else:
                valid.append(rect)
        errors.extend(
            self._check_bounds(valid, request.image_width, request.image_height)
        )

        try:
            self.writer.write(
                request.image_path, valid, request.image_width, request.image_height
            )
        except StorageError as e:
            logger.error(f"Failed to export {txt_path}: {e.reason}")
            return ExportResult(
                success=False,
                message=f"Failed to write file: {e.reason}",
                errors=errors + [e.reason],
            )

        for error in errors:
            logger.warning(f"{request.image_path}: {error}")

        if not valid:
            return ExportResult(
                success=True,
                message="No annotations to write, removed annotation file",
                errors=errors,
            )

        return ExportResult(
            success=True,
            message="YOLO annotations exported successfully",
            file_path=txt_path,
            rectangles_processed=len(valid),
            errors=errors,
        )

    def export_batch(
        self,
        requests: Sequence[ExportRequest],
        progress_callback: Optional[ProgressCallback] = None
    ) -> BatchExportResult:
        """
        Export many images in parallel.

        All per-image exports are awaited before returning, and results
        keep the order of the requests.

        Args:
            requests: One request per image with at least one rectangle
            progress_callback: Called with (completed, total) after each image

        Returns:
            BatchExportResult with per-image results and a summary
        """
        total = len(requests)
        logger.info(f"Starting batch export of {total} images")
        results: List[Optional[ExportResult]] = [None] * total

        if total:
            with ThreadPoolExecutor(max_workers=min(self.max_workers, total)) as executor:
                futures = {
                    executor.submit(self.export_image, request): index
                    for index, request in enumerate(requests)
                }
                for completed, future in enumerate(as_completed(futures), 1):
                    index = futures[future]
                    try:
                        results[index] = future.result()
                    except Exception as e:
                        logger.error(
                            f"Unexpected error exporting {requests[index].image_path}: {e}",
                            exc_info=True
                        )
                        results[index] = ExportResult(
                            success=False,
                            message=f"Unexpected error: {e}",
                            errors=[str(e)],
                        )
                    if progress_callback:
                        progress_callback(completed, total)

        ordered = [result for result in results if result is not None]
        successful = sum(1 for result in ordered if result.success)
        batch = BatchExportResult(
            total_images=total,
            successful_exports=successful,
            failed_exports=total - successful,
            results=ordered,
        )
        batch.summary = summarize(batch)
        logger.info(batch.summary)
        return batch


def summarize(batch: BatchExportResult) -> str:
    """Build the user-facing summary line for a batch export."""
    if batch.total_images == 0:
        return "No annotations to export"

    if batch.failed_exports == 0:
        return f"Exported {batch.successful_exports}/{batch.total_images} annotation files"

    if batch.successful_exports > 0:
        return (
            f"Exported {batch.successful_exports}/{batch.total_images} annotation files "
            f"({batch.failed_exports} failed)"
        )

    messages = [result.message for result in batch.results if not result.success]
    return (
        f"Failed to export any of {batch.total_images} annotation files: "
        f"{', '.join(messages)}"
    )
