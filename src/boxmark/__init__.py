"""
Boxmark - bounding box annotation core for YOLO datasets.

Maps boxes drawn on a scaled display surface into image pixels, keeps
per-image annotations in memory and reads/writes YOLO sidecar files.
"""

__version__ = "1.0.0"
__author__ = "Boxmark Team"
