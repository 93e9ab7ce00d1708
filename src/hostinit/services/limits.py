"""File-descriptor ceiling tuning for all users."""

import logging
import resource

from hostinit.constants import NOFILE_LIMIT
from hostinit.errors import MutationError
from hostinit.errors_catalog import actionable_error
from hostinit.models import HostPaths, StepResult
from hostinit.services.filesystem import FileSystemService
from hostinit.templates import LIMITS_MARKER, LIMITS_STANZA, render_template


def render_limits_stanza(nofile: int = NOFILE_LIMIT) -> str:
    return render_template(LIMITS_STANZA, marker=LIMITS_MARKER, nofile=str(nofile))


class LimitsService:
    def __init__(
        self,
        paths: HostPaths,
        filesystem_service: FileSystemService,
        logger: logging.Logger,
        resource_module=resource,
        nofile: int = NOFILE_LIMIT,
    ):
        self.paths = paths
        self.filesystem_service = filesystem_service
        self.logger = logger
        self.resource = resource_module
        self.nofile = nofile

    def tune_limits(self) -> StepResult:
        limits_file = self.paths.limits_file
        try:
            current = self.filesystem_service.read_text_if_exists(limits_file) or ""
            if f"soft nofile {self.nofile}" in current:
                self.logger.info("Limits already optimized in %s", limits_file)
            else:
                stanza = render_limits_stanza(self.nofile)
                if current and not current.endswith("\n"):
                    stanza = "\n" + stanza
                self.filesystem_service.append(limits_file, stanza)
                self.logger.info("Updated %s", limits_file)
        except OSError as exc:
            raise MutationError(
                actionable_error("limits_write_failed", path=limits_file, reason=str(exc))
            ) from exc

        soft = self.raise_process_limit()
        if soft < self.nofile:
            return StepResult.warning(
                f"Persisted nofile {self.nofile}; current process limited to {soft}",
                current_limit=soft,
            )
        return StepResult.ok(f"Open file limit raised to {soft}", current_limit=soft)

    def raise_process_limit(self) -> int:
        """Raise RLIMIT_NOFILE for this process; return the resulting soft limit."""
        try:
            self.resource.setrlimit(self.resource.RLIMIT_NOFILE, (self.nofile, self.nofile))
        except (ValueError, OSError) as exc:
            self.logger.debug("Cannot raise nofile to %s: %s", self.nofile, exc)
            _soft, hard = self.resource.getrlimit(self.resource.RLIMIT_NOFILE)
            try:
                self.resource.setrlimit(self.resource.RLIMIT_NOFILE, (hard, hard))
            except (ValueError, OSError):
                pass
        soft, _hard = self.resource.getrlimit(self.resource.RLIMIT_NOFILE)
        return soft
