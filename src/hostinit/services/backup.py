"""Backup snapshots taken before any system file is mutated."""

import os
import shutil
import tempfile
import time
from datetime import datetime
from typing import Dict, List, Tuple

from hostinit.constants import NO_ACCESS_MODE, PRIVATE_DIR_MODE, PUBLIC_FILE_MODE
from hostinit.errors import InitializerError
from hostinit.errors_catalog import actionable_error
from hostinit.models import BackupSnapshot, HostPaths
from hostinit.services.filesystem import FileSystemService


class BackupService:
    """Creates timestamped snapshots under a private backup root.

    A snapshot is assembled in a staging directory and only renamed to its
    final ``backup_<timestamp>`` name once every copy succeeded, so a
    directory carrying that name is always complete.
    """

    SNAPSHOT_PREFIX = "backup_"
    STAGING_PREFIX = ".staging-"

    def __init__(self, filesystem_service: FileSystemService, logger):
        self.filesystem_service = filesystem_service
        self.logger = logger

    @staticmethod
    def tracked_files(paths: HostPaths) -> List[Tuple[str, str, int]]:
        return [
            (paths.hosts_file, "hosts.bak", PUBLIC_FILE_MODE),
            (paths.hostname_file, "hostname.bak", PUBLIC_FILE_MODE),
            (paths.shadow_file, "shadow.bak", NO_ACCESS_MODE),
            (paths.sysctl_conf_file, "sysctl.conf.bak", PUBLIC_FILE_MODE),
            (paths.sysctl_file, f"{os.path.basename(paths.sysctl_file)}.bak", PUBLIC_FILE_MODE),
            (paths.limits_file, "limits.conf.bak", PUBLIC_FILE_MODE),
        ]

    def create_snapshot(self, paths: HostPaths) -> BackupSnapshot:
        backup_root = paths.backup_dir
        staging_dir = None
        try:
            self.filesystem_service.ensure_private_dir(backup_root)
            staging_dir = tempfile.mkdtemp(prefix=self.STAGING_PREFIX, dir=backup_root)
            os.chmod(staging_dir, PRIVATE_DIR_MODE)

            copied: Dict[str, str] = {}
            for source, name, mode in self.tracked_files(paths):
                if not os.path.isfile(source):
                    self.logger.debug("Skipping backup of missing file %s", source)
                    continue
                destination = os.path.join(staging_dir, name)
                self.copy_with_mode(source, destination, mode)
                copied[source] = name
                self.logger.info("Backed up %s", source)

            created_at = datetime.now()
            final_dir = self._unique_snapshot_path(backup_root, created_at)
            os.rename(staging_dir, final_dir)
            staging_dir = None
        except OSError as exc:
            raise InitializerError(
                actionable_error("snapshot_failed", path=backup_root, reason=str(exc))
            ) from exc
        finally:
            if staging_dir and os.path.isdir(staging_dir):
                shutil.rmtree(staging_dir, ignore_errors=True)

        snapshot = BackupSnapshot(
            path=final_dir,
            created_at=created_at.isoformat(timespec="seconds"),
            files={source: os.path.join(final_dir, name) for source, name in copied.items()},
        )
        self.logger.info("Backup directory: %s", snapshot.path)
        return snapshot

    def backup_single(self, source: str, backup_root: str, prefix: str) -> str:
        """Secondary copy named ``<prefix>.<epoch>.bak`` next to the snapshots."""
        self.filesystem_service.ensure_private_dir(backup_root)
        destination = os.path.join(backup_root, f"{prefix}.{int(time.time())}.bak")
        counter = 1
        while os.path.exists(destination):
            destination = os.path.join(backup_root, f"{prefix}.{int(time.time())}-{counter}.bak")
            counter += 1
        self.copy_with_mode(source, destination, PUBLIC_FILE_MODE)
        return destination

    @staticmethod
    def copy_with_mode(source: str, destination: str, mode: int):
        """Copy into a file created with ``mode`` from the start.

        The descriptor is opened before the permission bits matter, so even
        a ``0o000`` copy is written without ever being more accessible.
        """
        fd = os.open(destination, os.O_WRONLY | os.O_CREAT | os.O_EXCL, mode)
        with os.fdopen(fd, "wb") as dst, open(source, "rb") as src:
            shutil.copyfileobj(src, dst)
        # O_CREAT honours the umask; pin the exact bits afterwards
        os.chmod(destination, mode)

    def _unique_snapshot_path(self, backup_root: str, created_at: datetime) -> str:
        base = os.path.join(backup_root, f"{self.SNAPSHOT_PREFIX}{created_at.strftime('%Y%m%d_%H%M%S')}")
        candidate = base
        counter = 1
        while os.path.exists(candidate):
            candidate = f"{base}_{counter}"
            counter += 1
        return candidate
