"""Configuration management for Boxmark."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .geometry import MIN_BOX_SIZE
from .models import DEFAULT_BOX_COLOR, DEFAULT_FILL_ALPHA, DEFAULT_STROKE_WIDTH
from .yolo_format import DEFAULT_PRECISION

logger = logging.getLogger(__name__)

# Default configuration file path
DEFAULT_CONFIG_PATH = Path("config.yaml")


@dataclass
class AppConfig:
    """
    Application configuration settings.

    Stores user preferences and the annotation/export defaults.
    """

    default_directory: str = ""
    classes_file: str = ""  # data.yaml or classes.txt loaded on startup
    min_box_size: float = MIN_BOX_SIZE  # Smallest drawable box in display units
    coordinate_precision: Optional[int] = DEFAULT_PRECISION  # None = full float precision
    export_workers: int = 4  # Parallel writers during batch export
    box_color: str = DEFAULT_BOX_COLOR
    fill_alpha: int = DEFAULT_FILL_ALPHA  # 0-255
    stroke_width: float = DEFAULT_STROKE_WIDTH
    max_recent_paths: int = 10  # Number of recent paths to remember (0 = disabled)
    recent_paths: list[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary for serialization."""
        return {
            "defaultDirectory": self.default_directory,
            "classesFile": self.classes_file,
            "minBoxSize": self.min_box_size,
            "coordinatePrecision": self.coordinate_precision,
            "exportWorkers": self.export_workers,
            "boxColor": self.box_color,
            "fillAlpha": self.fill_alpha,
            "strokeWidth": self.stroke_width,
            "maxRecentPaths": self.max_recent_paths,
            "recentPaths": self.recent_paths,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> AppConfig:
        """Create config from dictionary."""
        if not isinstance(data, dict):
            logger.warning(f"Ignoring config of type {type(data).__name__}, using defaults")
            return cls()

        export_workers = data.get("exportWorkers")
        if export_workers is None:
            export_workers = 4

        return cls(
            default_directory=data.get("defaultDirectory", ""),
            classes_file=data.get("classesFile", ""),
            min_box_size=data.get("minBoxSize", MIN_BOX_SIZE),
            coordinate_precision=data.get("coordinatePrecision", DEFAULT_PRECISION),
            export_workers=max(1, int(export_workers)),
            box_color=data.get("boxColor", DEFAULT_BOX_COLOR),
            fill_alpha=data.get("fillAlpha", DEFAULT_FILL_ALPHA),
            stroke_width=data.get("strokeWidth", DEFAULT_STROKE_WIDTH),
            max_recent_paths=data.get("maxRecentPaths", 10),
            recent_paths=data.get("recentPaths", []),
        )

    def add_recent_path(self, path: str) -> None:
        """Move a path to the front of the recent list, trimming to the limit."""
        if self.max_recent_paths <= 0:
            self.recent_paths = []
            return
        paths = [p for p in self.recent_paths if p != path]
        paths.insert(0, path)
        self.recent_paths = paths[:self.max_recent_paths]


def _names_from_mapping(mapping: Dict[Any, Any]) -> List[str]:
    """
    Convert an {id: name} mapping to a list indexed by class id.

    Missing ids are filled with the id itself so that every name stays at
    the position of its id. Keys that are not non-negative integers are
    skipped.
    """
    by_id: Dict[int, str] = {}
    for key, name in mapping.items():
        if isinstance(key, str) and key.strip().isdigit():
            key = int(key)
        if isinstance(key, bool) or not isinstance(key, int) or key < 0:
            logger.warning(f"Skipping class name with invalid id: {key!r}")
            continue
        by_id[key] = str(name)

    if not by_id:
        return []
    return [by_id.get(i, str(i)) for i in range(max(by_id) + 1)]


@dataclass
class YOLODataConfig:
    """
    YOLO dataset configuration (data.yaml).

    Stores paths and class information for YOLO training.
    """

    train_path: str = "/path/to/train/images"
    val_path: str = "/path/to/valid/images"
    test_path: str = "/path/to/test/images"
    num_classes: int = 0
    class_names: list[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for YAML serialization."""
        return {
            "train": self.train_path,
            "val": self.val_path,
            "test": self.test_path,
            "nc": self.num_classes,
            "names": self.class_names,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> YOLODataConfig:
        """Create config from dictionary."""
        if not isinstance(data, dict):
            logger.warning(f"Ignoring data.yaml of type {type(data).__name__}, using defaults")
            return cls()

        names = data.get("names", [])
        if isinstance(names, str):
            names = [n.strip() for n in names.split(",")]
        elif isinstance(names, dict):
            # Some data.yaml files use {0: 'cat', 1: 'dog'}
            names = _names_from_mapping(names)
        elif not isinstance(names, list):
            logger.warning(f"Ignoring names of type {type(names).__name__}")
            names = []

        return cls(
            train_path=data.get("train", "/path/to/train/images"),
            val_path=data.get("val", "/path/to/valid/images"),
            test_path=data.get("test", "/path/to/test/images"),
            num_classes=data.get("nc", len(names)),
            class_names=[str(name) for name in names],
        )


class ConfigManager:
    """
    Manager for loading and saving application configuration.

    Handles YAML serialization and provides a clean interface
    for configuration access.
    """

    def __init__(self, config_path: Path = DEFAULT_CONFIG_PATH) -> None:
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the configuration file
        """
        self.config_path = Path(config_path)
        self._config: Optional[AppConfig] = None

    @property
    def config(self) -> AppConfig:
        """Get the current configuration, loading if necessary."""
        if self._config is None:
            self._config = self.load()
        return self._config

    def load(self) -> AppConfig:
        """
        Load configuration from file.

        Returns:
            AppConfig instance with loaded or default values
        """
        if not self.config_path.exists():
            logger.info(f"Config file not found at {self.config_path}, using defaults")
            return AppConfig()

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            logger.info(f"Loaded configuration from {self.config_path}")
            return AppConfig.from_dict(data)
        except yaml.YAMLError as e:
            logger.error(f"Error parsing config file: {e}")
            return AppConfig()
        except (OSError, ValueError, TypeError) as e:
            logger.error(f"Error loading config: {e}")
            return AppConfig()

    def save(self, config: Optional[AppConfig] = None) -> bool:
        """
        Save configuration to file.

        Args:
            config: Configuration to save, or use current config

        Returns:
            True if save was successful
        """
        if config is not None:
            self._config = config

        if self._config is None:
            logger.warning("No configuration to save")
            return False

        try:
            with open(self.config_path, "w", encoding="utf-8") as f:
                yaml.dump(self._config.to_dict(), f, default_flow_style=False)
            logger.info(f"Saved configuration to {self.config_path}")
            return True
        except OSError as e:
            logger.error(f"Error saving config: {e}")
            return False

    def update(self, **kwargs: Any) -> None:
        """
        Update configuration with new values.

        Args:
            **kwargs: Key-value pairs to update
        """
        config = self.config
        for key, value in kwargs.items():
            if hasattr(config, key):
                setattr(config, key, value)
            else:
                logger.warning(f"Unknown config key: {key}")
        self.save()


class YOLODataConfigManager:
    """Manager for YOLO data.yaml configuration files."""

    def __init__(self, directory: Path) -> None:
        """
        Initialize with a directory path.

        Args:
            directory: Directory containing data.yaml
        """
        self.directory = Path(directory)
        self.config_path = self.directory / "data.yaml"
        self._config: Optional[YOLODataConfig] = None

    @classmethod
    def from_file(cls, config_path: Path) -> YOLODataConfigManager:
        """Create a manager for a yaml file with an arbitrary name."""
        manager = cls(Path(config_path).parent)
        manager.config_path = Path(config_path)
        return manager

    @property
    def config(self) -> YOLODataConfig:
        """Get the current configuration, loading if necessary."""
        if self._config is None:
            self._config = self.load()
        return self._config

    def load(self) -> YOLODataConfig:
        """Load YOLO data configuration from file."""
        if not self.config_path.exists():
            logger.info(f"data.yaml not found at {self.config_path}, using defaults")
            return YOLODataConfig()

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            return YOLODataConfig.from_dict(data)
        except (OSError, yaml.YAMLError, ValueError, TypeError, AttributeError) as e:
            logger.error(f"Error loading data.yaml: {e}")
            return YOLODataConfig()

    def save(self, config: Optional[YOLODataConfig] = None) -> bool:
        """Save YOLO data configuration to file."""
        if config is not None:
            self._config = config

        if self._config is None:
            return False

        try:
            with open(self.config_path, "w", encoding="utf-8") as f:
                f.write("# This config is for running YOLO training locally.\n")
                yaml.safe_dump(self._config.to_dict(), f, default_flow_style=False, sort_keys=False)
            return True
        except OSError as e:
            logger.error(f"Error saving data.yaml: {e}")
            return False

    def get_class_names(self) -> List[str]:
        """Get class names ordered by their id."""
        return list(self.config.class_names)

    def update_classes(self, class_names: List[str]) -> bool:
        """
        Replace the class names, keeping the dataset paths.

        Args:
            class_names: Class names ordered by id

        Returns:
            True if the file was written
        """
        self._config = YOLODataConfig(
            train_path=self.config.train_path,
            val_path=self.config.val_path,
            test_path=self.config.test_path,
            num_classes=len(class_names),
            class_names=list(class_names),
        )
        return self.save()
