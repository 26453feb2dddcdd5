"""Application bootstrap for Boxmark."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from .core.config import DEFAULT_CONFIG_PATH, ConfigManager
from .core.session import AnnotationSession

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: int = logging.INFO) -> None:
    """
    Configure application-wide logging to stdout.

    Args:
        level: Root log level
    """
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout),
        ]
    )


def create_session(config_path: Path = DEFAULT_CONFIG_PATH) -> AnnotationSession:
    """
    Create an annotation session from the saved configuration.

    Loads the configured class file, if any, into the class registry.

    Args:
        config_path: Path to the configuration file

    Returns:
        New AnnotationSession
    """
    config = ConfigManager(Path(config_path)).config
    session = AnnotationSession(config)

    if config.classes_file:
        if session.load_classes_file(config.classes_file):
            logger.info(f"Loaded classes from {config.classes_file}")
        else:
            logger.warning(f"Could not load classes from {config.classes_file}")

    logger.info("Annotation session created")
    return session
