"""Thin adapter over the distribution package manager."""

import logging
import os
from typing import List, Tuple

from hostinit.errors import InitializerError, MutationError
from hostinit.errors_catalog import actionable_error
from hostinit.models import StepResult
from hostinit.services.command_runner import CommandRunner

# (command, must succeed, skipped by --skip-packages)
PackageCommand = Tuple[List[str], bool, bool]

PACKAGE_COMMANDS = {
    "apt": [
        (["apt-get", "update", "-qq"], True, False),
        (["apt-get", "upgrade", "-y", "-qq"], True, False),
        (["apt-get", "autoremove", "-y", "-qq"], True, True),
    ],
    "yum": [
        # exits 100 when updates are available
        (["yum", "check-update", "-q"], False, False),
        (["yum", "update", "-y", "-q"], True, False),
        (["yum", "autoremove", "-y", "-q"], True, True),
    ],
}


class PackageService:
    def __init__(self, command_runner: CommandRunner, logger: logging.Logger):
        self.command_runner = command_runner
        self.logger = logger

    def plan(self, package_manager: str, skip_packages: bool) -> List[PackageCommand]:
        if package_manager not in PACKAGE_COMMANDS:
            raise MutationError(actionable_error("unsupported_package_manager", manager=package_manager))
        return [
            command
            for command in PACKAGE_COMMANDS[package_manager]
            if not (skip_packages and command[2])
        ]

    def update(self, package_manager: str, skip_update: bool = False, skip_packages: bool = False) -> StepResult:
        if skip_update:
            return StepResult.skipped("Skipping package updates (--skip-update flag used)")

        env = dict(os.environ)
        if package_manager == "apt":
            env["DEBIAN_FRONTEND"] = "noninteractive"

        for cmd, required, _removal in self.plan(package_manager, skip_packages):
            cmd_str = " ".join(cmd)
            self.logger.info("Running %s", cmd_str)
            try:
                self.command_runner.run(cmd, check=required, env=env)
            except InitializerError as exc:
                raise MutationError(actionable_error("package_command_failed", command=cmd_str)) from exc

        if skip_packages:
            return StepResult.ok("Packages upgraded (obsolete package cleanup skipped)")
        return StepResult.ok("Packages upgraded and obsolete packages removed")
