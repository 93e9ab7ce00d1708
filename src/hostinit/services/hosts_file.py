"""Maintains the loopback-alias mapping in the system hosts table."""

import logging
import os
import re
from typing import List

from hostinit.constants import LOCALHOST_ADDRESS, LOOPBACK_ALIAS_ADDRESS
from hostinit.errors import MutationError
from hostinit.errors_catalog import actionable_error
from hostinit.models import HostPaths, StepResult
from hostinit.services.backup import BackupService
from hostinit.services.command_runner import CommandRunner
from hostinit.services.filesystem import FileSystemService

_LOOPBACK_ALIAS_RE = re.compile(r"^" + re.escape(LOOPBACK_ALIAS_ADDRESS) + r"[ \t]")
_LOCALHOST_RE = re.compile(r"^" + re.escape(LOCALHOST_ADDRESS) + r"[ \t]+(?:\S+[ \t]+)*localhost(?:\s|$)")
_HOSTS_LINE_RE = re.compile(r"^\s*[0-9A-Fa-f:.%a-z]+\s+[A-Za-z0-9._-]+(\s+[A-Za-z0-9._-]+)*\s*(#.*)?$")


def render_hosts(text: str, name: str) -> str:
    """Return ``text`` with exactly one loopback-alias line mapping to ``name``.

    Lines unrelated to the loopback alias are kept verbatim and in order. A
    localhost line is appended when none exists.
    """
    kept = [line for line in text.splitlines(keepends=True) if not _LOOPBACK_ALIAS_RE.match(line)]
    if kept and not kept[-1].endswith("\n"):
        kept[-1] += "\n"

    if not any(_LOCALHOST_RE.match(line) for line in kept):
        kept.append("\n")
        kept.append(f"{LOCALHOST_ADDRESS}\tlocalhost\n")

    kept.append(f"{LOOPBACK_ALIAS_ADDRESS}\t{name}\n")
    return "".join(kept)


def find_syntax_warnings(text: str) -> List[str]:
    warnings = []
    for number, line in enumerate(text.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if not _HOSTS_LINE_RE.match(line):
            warnings.append(f"line {number}: potentially malformed entry: {stripped}")
    return warnings


class HostsFileService:
    def __init__(
        self,
        paths: HostPaths,
        backup_service: BackupService,
        filesystem_service: FileSystemService,
        command_runner: CommandRunner,
        logger: logging.Logger,
    ):
        self.paths = paths
        self.backup_service = backup_service
        self.filesystem_service = filesystem_service
        self.command_runner = command_runner
        self.logger = logger

    def update_hosts_mapping(self, name: str) -> StepResult:
        hosts_file = self.paths.hosts_file
        original = self._read(hosts_file)

        backup_path = None
        if os.path.isfile(hosts_file):
            try:
                backup_path = self.backup_service.backup_single(hosts_file, self.paths.backup_dir, "hosts")
            except OSError as exc:
                raise MutationError(
                    actionable_error("hosts_write_failed", path=hosts_file, reason=f"backup failed: {exc}")
                ) from exc
            self.logger.info("Hosts table backed up to %s", backup_path)

        self.logger.info("Cleaning up old %s entries...", LOOPBACK_ALIAS_ADDRESS)
        updated = render_hosts(original, name)
        if not any(_LOCALHOST_RE.match(line) for line in original.splitlines()):
            self.logger.warning("No localhost entry found, adding one.")

        if updated != original:
            try:
                self.filesystem_service.atomic_write(hosts_file, updated, self._mode_of(hosts_file))
            except OSError as exc:
                raise MutationError(
                    actionable_error("hosts_write_failed", path=hosts_file, reason=str(exc))
                ) from exc

        return StepResult.ok(
            f"Added {hosts_file} entry: {LOOPBACK_ALIAS_ADDRESS} {name}",
            backup=backup_path,
        )

    def validate_hosts_syntax(self) -> StepResult:
        warnings = find_syntax_warnings(self._read(self.paths.hosts_file, must_exist=True))
        if warnings:
            for warning in warnings:
                self.logger.warning("%s %s", self.paths.hosts_file, warning)
            return StepResult.warning(
                f"{self.paths.hosts_file} has {len(warnings)} unusual line(s)",
                lines=warnings,
            )
        return StepResult.ok(f"{self.paths.hosts_file} validation successful")

    def test_resolution(self, name: str) -> StepResult:
        if not self.command_runner.available("getent"):
            return StepResult.warning("getent command not found, skipping resolution test")

        result = self.command_runner.run(["getent", "hosts", name], check=False, capture_output=True)
        output = (result.stdout or "").strip()
        if result.returncode != 0 or not output:
            return StepResult.warning(
                f"Could not resolve {name}; this may be normal for loopback-only configuration"
            )
        resolved_ip = output.split()[0]
        return StepResult.ok(f"Hostname resolves correctly to {resolved_ip}", address=resolved_ip)

    def _read(self, path: str, must_exist: bool = False) -> str:
        try:
            content = self.filesystem_service.read_text_if_exists(path)
        except (OSError, UnicodeDecodeError) as exc:
            raise MutationError(actionable_error("hosts_unreadable", path=path, reason=str(exc))) from exc
        if content is None:
            if must_exist:
                raise MutationError(actionable_error("hosts_unreadable", path=path, reason="file not found"))
            return ""
        return content

    @staticmethod
    def _mode_of(path: str) -> int:
        try:
            return os.stat(path).st_mode & 0o7777
        except OSError:
            return 0o644
