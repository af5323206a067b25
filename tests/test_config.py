"""Test configuration management."""

import pytest
import yaml

from iobench.core.config import (
    RunConfig,
    ConfigLoader,
    DEFAULT_SIZE,
    DEFAULT_ITERATIONS,
    DEFAULT_PROGRESS_CADENCE,
    default_threads,
    load_env_config
)
from iobench.core.errors import ConfigurationError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ("DIR", "SIZE", "LOOPS", "THREADS", "PROGRESS_EVERY"):
        monkeypatch.delenv(f"IOBENCH_{key}", raising=False)


class TestRunConfig:
    """Test run configuration."""

    def test_defaults(self, tmp_path):
        """Only the directory is mandatory."""
        config = RunConfig(directory=tmp_path)

        assert config.directory == tmp_path
        assert config.size == DEFAULT_SIZE == 104857600
        assert config.iterations == DEFAULT_ITERATIONS == 300
        assert config.threads == default_threads()
        assert config.progress_cadence == DEFAULT_PROGRESS_CADENCE == 5

    def test_aliases(self, tmp_path):
        """Command line style names are accepted."""
        config = RunConfig(**{"dir": str(tmp_path), "loops": 7, "progressCadence": 2})

        assert config.directory == tmp_path
        assert config.iterations == 7
        assert config.progress_cadence == 2

    def test_expected_bytes(self, tmp_path):
        """Peak disk usage is size times iterations."""
        assert RunConfig(directory=tmp_path, size=1024, iterations=10).expected_bytes == 10240

    def test_immutable(self, tmp_path):
        """A configuration cannot change during a run."""
        config = RunConfig(directory=tmp_path)

        with pytest.raises(Exception):
            config.size = 1

    @pytest.mark.parametrize("field", ["size", "iterations", "threads", "progress_cadence"])
    def test_non_positive_values(self, tmp_path, field):
        """Counts and sizes must be positive."""
        with pytest.raises(ValueError):
            RunConfig(directory=tmp_path, **{field: 0})

    def test_missing_directory(self, tmp_path):
        """The directory must exist."""
        with pytest.raises(ValueError, match="does not exist or is not a directory"):
            RunConfig(directory=tmp_path / "missing")

    def test_file_is_not_a_directory(self, tmp_path):
        """A regular file is not a valid target."""
        target = tmp_path / "plain.txt"
        target.write_text("x")

        with pytest.raises(ValueError, match="not a directory"):
            RunConfig(directory=target)


class TestConfigLoader:
    """Test configuration loading and merging."""

    def test_build_wraps_validation_errors(self, tmp_path):
        """Validation problems surface as configuration errors."""
        with pytest.raises(ConfigurationError, match="does not exist"):
            ConfigLoader.build(directory=str(tmp_path / "nope"))

    def test_build_requires_directory(self):
        """Leaving out the directory is a configuration error."""
        with pytest.raises(ConfigurationError, match="dir"):
            ConfigLoader.build(size=10)

    def test_load_run(self, tmp_path):
        """A YAML file holds a complete run."""
        path = tmp_path / "run.yaml"
        path.write_text(yaml.dump({"dir": str(tmp_path), "size": 2048, "loops": 12, "threads": 3}))

        config = ConfigLoader.load_run(path)
        assert config.directory == tmp_path
        assert config.size == 2048
        assert config.iterations == 12
        assert config.threads == 3

    def test_save_and_load(self, tmp_path):
        """Saved configurations load back unchanged."""
        config = RunConfig(directory=tmp_path, size=4096, iterations=9, threads=2, progress_cadence=3)
        path = tmp_path / "saved.yaml"

        ConfigLoader.save_config(config, path)
        assert ConfigLoader.load_run(path) == config

    def test_bad_yaml(self, tmp_path):
        """Files that are not a mapping are rejected."""
        path = tmp_path / "bad.yaml"
        path.write_text("- just\n- a list\n")

        with pytest.raises(ConfigurationError, match="mapping"):
            ConfigLoader.load_file(path)

    def test_unreadable_file(self, tmp_path):
        """A missing config file is a configuration error."""
        with pytest.raises(ConfigurationError):
            ConfigLoader.load_file(tmp_path / "absent.yaml")

    def test_resolve_precedence(self, tmp_path, monkeypatch):
        """Overrides beat the file, which beats the environment."""
        monkeypatch.setenv("IOBENCH_SIZE", "111")
        monkeypatch.setenv("IOBENCH_THREADS", "5")
        monkeypatch.setenv("IOBENCH_LOOPS", "6")
        path = tmp_path / "run.yaml"
        path.write_text(yaml.dump({"dir": str(tmp_path), "size": 222, "loops": 7}))

        config = ConfigLoader.resolve({"iterations": 8, "threads": None}, config_file=path)
        assert config.size == 222
        assert config.iterations == 8
        assert config.threads == 5

    def test_env_config(self, tmp_path, monkeypatch):
        """Environment variables provide defaults, bad values are ignored."""
        monkeypatch.setenv("IOBENCH_DIR", str(tmp_path))
        monkeypatch.setenv("IOBENCH_LOOPS", "42")
        monkeypatch.setenv("IOBENCH_THREADS", "many")

        assert load_env_config() == {"directory": str(tmp_path), "iterations": 42}
        assert ConfigLoader.resolve({}).iterations == 42
