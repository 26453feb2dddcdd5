"""Background workers for Boxmark."""

from .export_worker import ExportWorker

__all__ = ["ExportWorker"]
