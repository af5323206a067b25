"""Test host inspection helpers."""

from collections import namedtuple
import pytest

from iobench.core import system
from iobench.core.errors import ConfigurationError, InsufficientDiskSpaceError

DiskUsage = namedtuple("DiskUsage", ["total", "used", "free", "percent"])


class TestAvailableSpace:
    """Test the pre-flight disk space check."""

    def test_enough_space(self, tmp_path):
        """A tiny run fits on any test file system."""
        system.check_available_space(tmp_path, 1)

    def test_not_enough_space(self, tmp_path, monkeypatch):
        """Requiring more than is free fails before the run."""
        monkeypatch.setattr(system.psutil, "disk_usage", lambda path: DiskUsage(100, 90, 10, 90.0))

        with pytest.raises(InsufficientDiskSpaceError) as exc_info:
            system.check_available_space(tmp_path, 11)

        error = exc_info.value
        assert isinstance(error, ConfigurationError)
        assert error.required_bytes == 11
        assert error.available_bytes == 10
        assert "reduce your -s (size) or -l (loops)" in str(error)

    def test_exact_fit(self, tmp_path, monkeypatch):
        """Free space equal to the requirement is enough."""
        monkeypatch.setattr(system.psutil, "disk_usage", lambda path: DiskUsage(100, 90, 10, 90.0))

        system.check_available_space(tmp_path, 10)


class TestSystemSpecs:
    """Test system spec collection."""

    def test_collect(self, tmp_path):
        """Specs describe the running machine."""
        specs = system.collect_system_specs(tmp_path)

        assert specs.cpu_cores >= 1
        assert specs.memory_total_bytes > 0
        assert specs.disk_total_bytes > 0
        assert specs.disk_available_gb >= 0
        assert specs.file_store.mountpoint
        assert specs.to_dict()["cpu_cores"] == specs.cpu_cores

    def test_file_store_prefers_longest_mount(self, tmp_path, monkeypatch):
        """The deepest mount point containing the directory wins."""
        Partition = namedtuple("Partition", ["device", "mountpoint", "fstype", "opts"])
        root = system.os.path.realpath(tmp_path.parent)
        partitions = [
            Partition("/dev/root", "/", "ext4", "rw"),
            Partition("/dev/fast", root, "xfs", "rw"),
            Partition("/dev/other", root + "-other", "tmpfs", "rw"),
        ]
        monkeypatch.setattr(system.psutil, "disk_partitions", lambda all=False: partitions)

        store = system.find_file_store(tmp_path)
        assert store.device == "/dev/fast"
        assert store.fstype == "xfs"
