"""Tests for configuration management."""

from pathlib import Path
import tempfile

from boxmark.core.config import (
    AppConfig,
    ConfigManager,
    YOLODataConfig,
    YOLODataConfigManager
)


class TestAppConfig:
    """Tests for AppConfig."""

    def test_default_config(self):
        """Test creating config with defaults."""
        config = AppConfig()

        assert config.default_directory == ""
        assert config.min_box_size == 5.0
        assert config.coordinate_precision is None
        assert config.export_workers == 4
        assert config.box_color == "#007bff"

    def test_to_dict(self):
        """Test converting config to dictionary."""
        config = AppConfig(
            default_directory="/path/to/dir",
            coordinate_precision=None
        )

        data = config.to_dict()

        assert data["defaultDirectory"] == "/path/to/dir"
        assert data["coordinatePrecision"] is None
        assert "minBoxSize" in data

    def test_from_dict(self):
        """Test creating config from dictionary."""
        data = {
            "defaultDirectory": "/test/path",
            "classesFile": "/test/path/data.yaml",
            "minBoxSize": 8,
            "coordinatePrecision": 4,
            "exportWorkers": 2,
            "strokeWidth": 1.5,
        }

        config = AppConfig.from_dict(data)

        assert config.default_directory == "/test/path"
        assert config.classes_file == "/test/path/data.yaml"
        assert config.min_box_size == 8
        assert config.coordinate_precision == 4
        assert config.export_workers == 2
        assert config.stroke_width == 1.5

    def test_from_dict_with_defaults(self):
        """Test creating config from partial dictionary."""
        config = AppConfig.from_dict({"defaultDirectory": "/test/path"})

        assert config.default_directory == "/test/path"
        assert config.min_box_size == 5.0  # default
        assert config.fill_alpha == 51  # default

    def test_from_dict_invalid_workers(self):
        """Test that at least one export worker is used."""
        assert AppConfig.from_dict({"exportWorkers": 0}).export_workers == 1

    def test_from_dict_null_workers(self):
        """Test that a null worker count falls back to the default."""
        assert AppConfig.from_dict({"exportWorkers": None}).export_workers == 4

    def test_from_dict_not_a_mapping(self):
        """Test that a config file holding a list gives the defaults."""
        config = AppConfig.from_dict(["a", "b"])

        assert config == AppConfig()

    def test_add_recent_path(self):
        """Test remembering recently opened folders."""
        config = AppConfig(max_recent_paths=2)

        config.add_recent_path("/a")
        config.add_recent_path("/b")
        config.add_recent_path("/a")
        config.add_recent_path("/c")

        assert config.recent_paths == ["/c", "/a"]

    def test_recent_paths_disabled(self):
        """Test that a zero limit keeps no history."""
        config = AppConfig(max_recent_paths=0)

        config.add_recent_path("/a")

        assert config.recent_paths == []


class TestConfigManager:
    """Tests for ConfigManager."""

    def test_load_nonexistent_file(self):
        """Test loading config when file doesn't exist."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "nonexistent.yaml"
            manager = ConfigManager(config_path)

            config = manager.load()

            # Should return default config
            assert config.default_directory == ""
            assert config.min_box_size == 5.0

    def test_load_invalid_yaml(self, tmp_path):
        """Test that a broken config file falls back to defaults."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text("defaultDirectory: [unclosed\n")

        config = ConfigManager(config_path).load()

        assert config.default_directory == ""

    def test_save_and_load(self):
        """Test saving and loading config."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "config.yaml"
            manager = ConfigManager(config_path)

            # Create and save config
            config = AppConfig(
                default_directory="/test/dir",
                export_workers=8,
                recent_paths=["/x", "/y"]
            )
            manager.save(config)

            # Load it back
            loaded = manager.load()

            assert loaded.default_directory == "/test/dir"
            assert loaded.export_workers == 8
            assert loaded.recent_paths == ["/x", "/y"]

    def test_update(self):
        """Test updating config values."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "config.yaml"
            manager = ConfigManager(config_path)

            manager.update(default_directory="/new/path", min_box_size=3.0, unknown=1)

            assert manager.config.default_directory == "/new/path"
            assert manager.config.min_box_size == 3.0
            assert config_path.exists()

    def test_config_property(self):
        """Test config property lazy loading."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "config.yaml"
            manager = ConfigManager(config_path)

            # First access loads config
            config1 = manager.config
            config2 = manager.config

            # Should return same instance
            assert config1 is config2


class TestYOLODataConfig:
    """Tests for YOLODataConfig."""

    def test_default_config(self):
        """Test creating config with defaults."""
        config = YOLODataConfig()

        assert config.num_classes == 0
        assert config.class_names == []

    def test_to_dict(self):
        """Test converting to dictionary."""
        config = YOLODataConfig(
            num_classes=2,
            class_names=["a", "b"]
        )

        data = config.to_dict()

        assert data["nc"] == 2
        assert data["names"] == ["a", "b"]

    def test_from_dict(self):
        """Test creating from dictionary."""
        data = {
            "train": "/train/path",
            "val": "/val/path",
            "nc": 2,
            "names": ["cat", "dog"]
        }

        config = YOLODataConfig.from_dict(data)

        assert config.train_path == "/train/path"
        assert config.num_classes == 2
        assert config.class_names == ["cat", "dog"]

    def test_from_dict_with_string_names(self):
        """Test parsing comma-separated names."""
        config = YOLODataConfig.from_dict({"names": "cat, dog, bird"})

        assert config.class_names == ["cat", "dog", "bird"]
        assert config.num_classes == 3

    def test_from_dict_with_mapping_names(self):
        """Test parsing names stored as {id: name}."""
        config = YOLODataConfig.from_dict({"names": {2: "bird", 0: "cat", 1: "dog"}})

        assert config.class_names == ["cat", "dog", "bird"]

    def test_from_dict_with_sparse_mapping_names(self):
        """Test that missing ids keep every name at the position of its id."""
        config = YOLODataConfig.from_dict({"names": {0: "cat", 2: "dog"}})

        assert config.class_names == ["cat", "1", "dog"]

    def test_from_dict_skips_non_integer_ids(self):
        """Test that a mapping with invalid ids keeps only the integer ones."""
        config = YOLODataConfig.from_dict({"names": {"cat": 0, "1": "dog", -2: "bird"}})

        assert config.class_names == ["0", "dog"]

    def test_from_dict_not_a_mapping(self):
        """Test that a top-level list gives the defaults."""
        config = YOLODataConfig.from_dict(["cat", "dog"])

        assert config.class_names == []
        assert config.num_classes == 0

class TestYOLODataConfigManager:
    """Tests for YOLODataConfigManager."""

    def test_get_class_names(self, sample_data_yaml):
        """Test reading class names from data.yaml."""
        manager = YOLODataConfigManager(sample_data_yaml.parent)

        assert manager.get_class_names() == ["cat", "dog"]

    def test_from_file(self, tmp_path):
        """Test reading a yaml file with another name."""
        yaml_path = tmp_path / "dataset.yml"
        yaml_path.write_text("names: [a, b, c]\n")

        manager = YOLODataConfigManager.from_file(yaml_path)

        assert manager.get_class_names() == ["a", "b", "c"]

    def test_update_classes(self, sample_data_yaml):
        """Test updating classes keeps the dataset paths."""
        manager = YOLODataConfigManager(sample_data_yaml.parent)

        assert manager.update_classes(["bird", "fish", "cat"]) is True

        reloaded = YOLODataConfigManager(sample_data_yaml.parent)
        assert reloaded.config.num_classes == 3
        assert reloaded.config.class_names == ["bird", "fish", "cat"]
        assert reloaded.config.train_path == "/path/to/train"

    def test_load_top_level_list(self, tmp_path):
        """Test loading a data.yaml that is a bare list."""
        (tmp_path / "data.yaml").write_text("- cat\n- dog\n")

        manager = YOLODataConfigManager(tmp_path)

        assert manager.get_class_names() == []

    def test_load_name_keyed_mapping(self, tmp_path):
        """Test loading names whose keys are the names themselves."""
        (tmp_path / "data.yaml").write_text("names: {cat: 0, dog: 1}\n")

        manager = YOLODataConfigManager(tmp_path)

        assert manager.get_class_names() == []
