"""Background batch export worker thread."""

from __future__ import annotations

import logging
from typing import List

from PyQt6.QtCore import QThread, pyqtSignal

from ..core.exporter import AnnotationExporter
from ..core.models import ExportRequest

logger = logging.getLogger(__name__)


class ExportWorker(QThread):
    """
    Runs a batch export off the UI thread.

    Emits progress while images are written and the BatchExportResult
    once every image has been processed.
    """

    # Signal for progress updates (completed, total)
    progress = pyqtSignal(int, int)

    # Signal emitted with the BatchExportResult
    export_finished = pyqtSignal(object)

    def __init__(self, exporter: AnnotationExporter, requests: List[ExportRequest]) -> None:
        """
        Initialize the export worker.

        Args:
            exporter: Exporter used to write the files
            requests: One request per annotated image
        """
        super().__init__()
        self.exporter = exporter
        self.requests = list(requests)

    def run(self) -> None:
        """Export all requests and report the result."""
        logger.info(f"Export worker started for {len(self.requests)} images")
        result = self.exporter.export_batch(self.requests, self.progress.emit)
        self.export_finished.emit(result)
