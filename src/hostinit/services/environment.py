"""Execution environment detection for hostinit."""

import logging
import os
import platform
import shutil
import socket
from typing import Callable, Dict, Iterable, List, Tuple

from hostinit.constants import (
    APT_DISTRIBUTIONS,
    CONTAINER_CGROUP_MARKERS,
    YUM_DISTRIBUTIONS,
)
from hostinit.errors import EnvironmentCheckError
from hostinit.errors_catalog import actionable_error
from hostinit.models import HostPaths

NOT_AVAILABLE = "N/A"


class EnvironmentService:
    """Answers where we run: distribution, container, privileges."""

    def __init__(
        self,
        paths: HostPaths,
        logger: logging.Logger,
        geteuid: Callable[[], int] = os.geteuid,
        which: Callable[[str], object] = shutil.which,
    ):
        self.paths = paths
        self.logger = logger
        self.geteuid = geteuid
        self.which = which

    def require_root(self):
        if self.geteuid() != 0:
            raise EnvironmentCheckError(actionable_error("not_root"))

    def detect_container(self) -> bool:
        if os.path.exists(self.paths.dockerenv_file):
            return True
        try:
            with open(self.paths.init_cgroup_file, "r", encoding="utf-8") as file_obj:
                cgroups = file_obj.read()
        except OSError:
            return False
        return any(marker in cgroups for marker in CONTAINER_CGROUP_MARKERS)

    def read_os_release(self) -> Dict[str, str]:
        if not os.path.isfile(self.paths.os_release_file):
            raise EnvironmentCheckError(
                actionable_error("os_release_missing", path=self.paths.os_release_file)
            )

        values = {}
        with open(self.paths.os_release_file, "r", encoding="utf-8") as file_obj:
            for line in file_obj:
                line = line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                key, value = line.split("=", 1)
                values[key.strip()] = value.strip().strip('"').strip("'")
        return values

    def detect_distribution(self) -> Tuple[str, str]:
        distribution = self.read_os_release().get("ID", "unknown").lower() or "unknown"

        if distribution in APT_DISTRIBUTIONS:
            return distribution, "apt"
        if distribution in YUM_DISTRIBUTIONS:
            return distribution, "yum"

        self.logger.warning(
            "Distribution %s not officially supported; attempting with APT package manager.",
            distribution,
        )
        return distribution, "apt"

    def missing_commands(self, names: Iterable[str], in_container: bool = False) -> List[str]:
        missing = []
        for name in names:
            if self.which(name):
                continue
            # containers routinely ship without systemd tooling
            if name == "hostnamectl" and in_container:
                continue
            missing.append(name)
        if missing:
            self.logger.warning("Missing recommended commands: %s", " ".join(missing))
        return missing

    def system_facts(self) -> Dict[str, str]:
        return {
            "kernel": platform.release() or NOT_AVAILABLE,
            "current_hostname": socket.gethostname() or NOT_AVAILABLE,
            "configured_hostname": self._configured_hostname(),
            "ipv4": self._primary_ipv4(),
            "disk_usage": self._disk_usage(),
            "memory_usage": self._memory_usage(),
            "uptime": self._uptime(),
        }

    def _configured_hostname(self) -> str:
        try:
            with open(self.paths.hostname_file, "r", encoding="utf-8") as file_obj:
                return file_obj.read().strip() or NOT_AVAILABLE
        except OSError:
            return NOT_AVAILABLE

    @staticmethod
    def _primary_ipv4() -> str:
        try:
            addresses = socket.getaddrinfo(socket.gethostname(), None, socket.AF_INET)
        except OSError:
            return NOT_AVAILABLE
        for _family, _type, _proto, _canon, sockaddr in addresses:
            if not sockaddr[0].startswith("127."):
                return sockaddr[0]
        return addresses[0][4][0] if addresses else NOT_AVAILABLE

    @staticmethod
    def _disk_usage() -> str:
        try:
            usage = shutil.disk_usage("/")
        except OSError:
            return NOT_AVAILABLE
        return f"{usage.used * 100 // usage.total}%"

    @staticmethod
    def _memory_usage() -> str:
        try:
            with open("/proc/meminfo", "r", encoding="utf-8") as file_obj:
                meminfo = dict(
                    (key, int(value.split()[0]))
                    for key, value in (line.split(":", 1) for line in file_obj if ":" in line)
                )
        except (OSError, ValueError, IndexError):
            return NOT_AVAILABLE
        total = meminfo.get("MemTotal")
        available = meminfo.get("MemAvailable")
        if not total or available is None:
            return NOT_AVAILABLE
        return f"{(total - available) // 1024}Mi/{total // 1024}Mi"

    @staticmethod
    def _uptime() -> str:
        try:
            with open("/proc/uptime", "r", encoding="utf-8") as file_obj:
                seconds = int(float(file_obj.read().split()[0]))
        except (OSError, ValueError, IndexError):
            return NOT_AVAILABLE
        days, remainder = divmod(seconds, 86400)
        hours, remainder = divmod(remainder, 3600)
        minutes = remainder // 60
        return f"up {days} days, {hours} hours, {minutes} minutes"
