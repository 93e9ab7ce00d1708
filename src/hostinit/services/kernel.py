"""Kernel tunable profile: write the sysctl drop-in and load it."""

import logging
import platform
import re
from datetime import datetime
from typing import Callable, List

from packaging import version

from hostinit.constants import BBR_MIN_KERNEL, PUBLIC_FILE_MODE
from hostinit.errors import MutationError
from hostinit.errors_catalog import actionable_error
from hostinit.models import HostPaths, StepResult
from hostinit.services.command_runner import CommandRunner
from hostinit.services.filesystem import FileSystemService
from hostinit.templates import KERNEL_PROFILE, PROFILE_VERSION, render_template

_SETTING_KEY_RE = re.compile(r'setting key "([^"]+)"')
_PROC_SYS_RE = re.compile(r"/proc/sys/([\w./-]+?)(?::|\s|$)")
_KERNEL_VERSION_RE = re.compile(r"^(\d+)\.(\d+)")


def render_kernel_profile(generated_at: str) -> str:
    return render_template(KERNEL_PROFILE, profile_version=PROFILE_VERSION, generated_at=generated_at)


def rejected_sysctl_keys(output: str) -> List[str]:
    keys = []
    for key in _SETTING_KEY_RE.findall(output):
        if key not in keys:
            keys.append(key)
    for path in _PROC_SYS_RE.findall(output):
        key = path.replace("/", ".")
        if key not in keys:
            keys.append(key)
    return keys


def kernel_supports_bbr(release: str) -> bool:
    match = _KERNEL_VERSION_RE.match(release)
    if not match:
        # unknown format: let sysctl be the judge
        return True
    return version.parse(f"{match.group(1)}.{match.group(2)}") >= version.parse(BBR_MIN_KERNEL)


class KernelTuningService:
    def __init__(
        self,
        paths: HostPaths,
        command_runner: CommandRunner,
        filesystem_service: FileSystemService,
        logger: logging.Logger,
        kernel_release: Callable[[], str] = platform.release,
    ):
        self.paths = paths
        self.command_runner = command_runner
        self.filesystem_service = filesystem_service
        self.logger = logger
        self.kernel_release = kernel_release

    def apply_kernel_profile(self, in_container: bool = False) -> StepResult:
        if in_container:
            return StepResult.skipped(
                "Running in container: skipping sysctl kernel modifications "
                "(read-only filesystem/permissions)."
            )

        content = render_kernel_profile(datetime.now().strftime("%Y-%m-%d %H:%M:%S"))
        try:
            self.filesystem_service.atomic_write(self.paths.sysctl_file, content, PUBLIC_FILE_MODE)
        except OSError as exc:
            raise MutationError(
                actionable_error("kernel_profile_write_failed", path=self.paths.sysctl_file, reason=str(exc))
            ) from exc
        self.logger.info("Security & performance configuration written to %s", self.paths.sysctl_file)

        warnings = []
        release = self.kernel_release()
        if not kernel_supports_bbr(release):
            warnings.append(f"Kernel {release} predates {BBR_MIN_KERNEL}; BBR congestion control is likely unavailable.")

        if not self.command_runner.available("sysctl"):
            warnings.append("sysctl command not found; profile will load on next boot.")
        else:
            result = self.command_runner.run(
                ["sysctl", "-p", self.paths.sysctl_file],
                check=False,
                capture_output=True,
            )
            if result.returncode != 0:
                rejected = rejected_sysctl_keys(f"{result.stdout or ''}\n{result.stderr or ''}")
                detail = f" Rejected: {', '.join(rejected)}." if rejected else ""
                warnings.append(
                    "Some sysctl settings may not be supported on this system "
                    f"(e.g., BBR on old kernels).{detail}"
                )

        if warnings:
            return StepResult.warning(" ".join(warnings), profile=self.paths.sysctl_file)
        return StepResult.ok("Security & performance hardening applied", profile=self.paths.sysctl_file)
