"""Core business logic modules for Boxmark."""

from .models import BatchExportResult, ExportRequest, ExportResult, ImageEntry, Rectangle
from .geometry import CoordinateTransform, DisplayPoint, DisplayRect, ImagePoint, ImageRect
from .config import AppConfig, ConfigManager
from .yolo_format import YOLOAnnotationReader, YOLOAnnotationWriter, get_annotation_path
from .store import AnnotationStore
from .class_registry import ClassRegistry
from .exporter import AnnotationExporter
from .session import AnnotationSession

__all__ = [
    "Rectangle",
    "ImageEntry",
    "ExportRequest",
    "ExportResult",
    "BatchExportResult",
    "CoordinateTransform",
    "DisplayPoint",
    "DisplayRect",
    "ImagePoint",
    "ImageRect",
    "AppConfig",
    "ConfigManager",
    "YOLOAnnotationReader",
    "YOLOAnnotationWriter",
    "get_annotation_path",
    "AnnotationStore",
    "ClassRegistry",
    "AnnotationExporter",
    "AnnotationSession",
]
