"""Host inspection: pre-flight disk space check and system specs."""

import logging
import os
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, Optional, Union

import psutil

from .errors import InsufficientDiskSpaceError

logger = logging.getLogger(__name__)

GB = 1024 ** 3


@dataclass
class FileStoreInfo:
    """Mounted file system holding a directory."""
    device: str
    mountpoint: str
    fstype: str


@dataclass
class SystemSpecs:
    """Snapshot of the machine a run executed on."""
    cpu_cores: int
    memory_total_bytes: int
    memory_free_bytes: int
    file_store: FileStoreInfo
    disk_total_bytes: int
    disk_available_bytes: int

    @property
    def memory_total_gb(self) -> float:
        return self.memory_total_bytes / GB

    @property
    def memory_free_gb(self) -> float:
        return self.memory_free_bytes / GB

    @property
    def disk_total_gb(self) -> float:
        return self.disk_total_bytes / GB

    @property
    def disk_available_gb(self) -> float:
        return self.disk_available_bytes / GB

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def find_file_store(directory: Union[str, Path]) -> FileStoreInfo:
    """Return the partition whose mount point is the longest prefix of ``directory``."""
    path = os.path.realpath(directory)
    best: Optional[Any] = None
    for partition in psutil.disk_partitions(all=True):
        mountpoint = partition.mountpoint
        if path == mountpoint or path.startswith(mountpoint.rstrip(os.sep) + os.sep):
            if best is None or len(mountpoint) > len(best.mountpoint):
                best = partition

    if best is None:
        return FileStoreInfo(device="unknown", mountpoint=path, fstype="unknown")
    return FileStoreInfo(device=best.device, mountpoint=best.mountpoint, fstype=best.fstype)


def check_available_space(directory: Union[str, Path], expected_bytes: int) -> None:
    """Fail fast when ``directory`` cannot hold ``expected_bytes`` more data."""
    usage = psutil.disk_usage(str(directory))
    logger.debug(f"'{directory}': {usage.free} bytes free, {expected_bytes} bytes required")
    if usage.free < expected_bytes:
        store = find_file_store(directory)
        raise InsufficientDiskSpaceError(store.device, expected_bytes, usage.free)


def collect_system_specs(directory: Union[str, Path]) -> SystemSpecs:
    memory = psutil.virtual_memory()
    usage = psutil.disk_usage(str(directory))
    return SystemSpecs(
        cpu_cores=psutil.cpu_count(logical=True) or os.cpu_count() or 1,
        memory_total_bytes=memory.total,
        memory_free_bytes=memory.available,
        file_store=find_file_store(directory),
        disk_total_bytes=usage.total,
        disk_available_bytes=usage.free,
    )
