"""Applies the accepted hostname to the running system and to disk."""

import logging

from hostinit.constants import PUBLIC_FILE_MODE
from hostinit.errors import InitializerError, MutationError
from hostinit.errors_catalog import actionable_error
from hostinit.models import HostPaths, StepResult
from hostinit.services.command_runner import CommandRunner
from hostinit.services.filesystem import FileSystemService


class HostnameService:
    def __init__(
        self,
        paths: HostPaths,
        command_runner: CommandRunner,
        filesystem_service: FileSystemService,
        logger: logging.Logger,
    ):
        self.paths = paths
        self.command_runner = command_runner
        self.filesystem_service = filesystem_service
        self.logger = logger

    def apply_hostname(self, name: str, in_container: bool = False) -> StepResult:
        warnings = []
        if in_container:
            self._warn(warnings, "Running in container: hostname change might not persist or be allowed.")

        applied_live = False
        if self.command_runner.available("hostnamectl"):
            result = self.command_runner.run(
                ["hostnamectl", "set-hostname", name],
                check=False,
                capture_output=True,
            )
            applied_live = result.returncode == 0
            if not applied_live:
                self._warn(warnings, "hostnamectl failed (likely container or privileges); using manual method.")
        else:
            self.logger.info("hostnamectl not available; writing %s directly.", self.paths.hostname_file)

        self._persist(name)

        if not applied_live:
            live_error = self._apply_live(name)
            if live_error is not None:
                if not in_container:
                    raise MutationError(actionable_error("hostname_live_failed", name=name)) from live_error
                self._warn(warnings, f"Could not apply hostname to the running kernel inside a container: {live_error}")

        if warnings:
            return StepResult.warning(" ".join(warnings), hostname=name)
        return StepResult.ok(f"Hostname set to: {name}", hostname=name)

    def _warn(self, warnings, message: str):
        self.logger.warning(message)
        warnings.append(message)

    def _persist(self, name: str):
        expected = f"{name}\n"
        try:
            current = self.filesystem_service.read_text_if_exists(self.paths.hostname_file)
            if current == expected:
                return
            self.filesystem_service.atomic_write(self.paths.hostname_file, expected, PUBLIC_FILE_MODE)
        except OSError as exc:
            raise MutationError(
                actionable_error("hostname_write_failed", path=self.paths.hostname_file, reason=str(exc))
            ) from exc

    def _apply_live(self, name: str):
        try:
            self.command_runner.run(["hostname", name], check=True, capture_output=True)
        except InitializerError as exc:
            return exc
        return None
