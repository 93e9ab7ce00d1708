import logging
import uuid
from typing import Callable, List, Optional, Tuple

import click
from rich.console import Console

from . import __version__
from .constants import (
    LOOPBACK_ALIAS_ADDRESS,
    MAX_HOSTNAME_ATTEMPTS,
    MAX_PASSWORD_ATTEMPTS,
    MIN_PASSWORD_LENGTH,
    NOFILE_LIMIT,
    RECOMMENDED_COMMANDS,
)
from .errors import InitializerError
from .models import (
    RUN_ABORTED,
    RUN_COMPLETED,
    RUN_RUNNING,
    STEP_FAILED,
    STEP_SKIPPED,
    STEP_SUCCESS,
    HostPaths,
    RunContext,
    StepResult,
)
from .services.audit_log import AuditLog
from .services.backup import BackupService
from .services.command_runner import CommandRunner
from .services.credentials import CredentialService
from .services.environment import EnvironmentService
from .services.filesystem import FileSystemService
from .services.hostname import HostnameService
from .services.hosts_file import HostsFileService
from .services.kernel import KernelTuningService
from .services.limits import LimitsService
from .services.manifest import ManifestService
from .services.packages import PackageService
from .services.prompts import PromptService
from .services.report import ReportService

console = Console()
err_console = Console(stderr=True)
logger = logging.getLogger("hostinit")


class SystemInitializer:
    STEPS = (
        ("detect", "Environment Detection"),
        ("backup", "Backing Up Critical Files"),
        ("update_packages", "System Package Updates"),
        ("prompt_hostname", "Hostname Selection"),
        ("prompt_password", "Root Password Selection"),
        ("apply_hostname", "Setting System Hostname"),
        ("update_hosts", "Updating Hosts Table"),
        ("validate_hosts", "Validating Hosts Table"),
        ("test_resolution", "Testing Hostname Resolution"),
        ("rotate_password", "Changing Root Password"),
        ("apply_kernel_profile", "Applying Security & Performance Hardening"),
        ("tune_limits", "Optimizing System Limits"),
        ("report", "Initialization Complete"),
    )

    def __init__(
        self,
        skip_update: bool = False,
        skip_packages: bool = False,
        verbose: bool = False,
        paths: Optional[HostPaths] = None,
        min_password_length: int = MIN_PASSWORD_LENGTH,
        hostname_attempts: int = MAX_HOSTNAME_ATTEMPTS,
        password_attempts: int = MAX_PASSWORD_ATTEMPTS,
        command_runner: Optional[CommandRunner] = None,
        prompt_func: Optional[Callable] = None,
    ):
        self.verbose = verbose
        self.paths = paths or HostPaths()
        self.min_password_length = min_password_length
        self.hostname_attempts = hostname_attempts
        self.password_attempts = password_attempts
        self.context = RunContext(
            run_id=uuid.uuid4().hex[:10],
            paths=self.paths,
            skip_update=skip_update,
            skip_packages=skip_packages,
        )

        self.command_runner = command_runner or CommandRunner(logger=logger)
        self.filesystem_service = FileSystemService(logger=logger)
        self.audit_log = AuditLog(self.paths.log_file, logger)
        self.manifest_service = ManifestService(self.paths.manifest_file, logger=logger)
        self.environment_service = EnvironmentService(self.paths, logger)
        self.backup_service = BackupService(self.filesystem_service, logger)
        self.package_service = PackageService(self.command_runner, logger)
        self.prompt_service = PromptService(logger, console, prompt_func=prompt_func)
        self.hostname_service = HostnameService(
            self.paths, self.command_runner, self.filesystem_service, logger
        )
        self.hosts_file_service = HostsFileService(
            self.paths, self.backup_service, self.filesystem_service, self.command_runner, logger
        )
        self.credential_service = CredentialService(self.paths, self.command_runner, logger)
        self.kernel_service = KernelTuningService(
            self.paths, self.command_runner, self.filesystem_service, logger
        )
        self.limits_service = LimitsService(self.paths, self.filesystem_service, logger)
        self.report_service = ReportService(logger, console)

    def _pipeline(self) -> List[Tuple[str, str, Callable[[], StepResult]]]:
        callbacks = {
            "detect": self.detect,
            "backup": self.backup,
            "update_packages": self.update_packages,
            "prompt_hostname": self.prompt_hostname,
            "prompt_password": self.prompt_password,
            "apply_hostname": self.apply_hostname,
            "update_hosts": self.update_hosts,
            "validate_hosts": self.validate_hosts,
            "test_resolution": self.test_resolution,
            "rotate_password": self.rotate_password,
            "apply_kernel_profile": self.apply_kernel_profile,
            "tune_limits": self.tune_limits,
            "report": self.report,
        }
        return [(name, title, callbacks[name]) for name, title in self.STEPS]

    def _run_step(self, name: str, title: str, callback: Callable[[], StepResult]) -> StepResult:
        position = self.context.next_step(name)
        console.print(f"\n[bold cyan]=== {title} ===[/bold cyan]\n")
        logger.info("Step %s/%s started: %s", position, len(self.STEPS), name)
        self.manifest_service.step_started(name, position)

        try:
            result = callback()
        except InitializerError as exc:
            result = StepResult.failed(str(exc))
        except Exception as exc:
            self.manifest_service.step_finished(name, STEP_FAILED, str(exc))
            raise

        if result.status == STEP_SUCCESS:
            logger.info("Step %s/%s %s: %s", position, len(self.STEPS), name, result.message or "done")
        elif result.status == STEP_FAILED:
            logger.error("Step %s/%s %s failed: %s", position, len(self.STEPS), name, result.message)
        else:
            logger.warning(
                "Step %s/%s %s %s: %s",
                position,
                len(self.STEPS),
                name,
                "skipped" if result.status == STEP_SKIPPED else "completed with warnings",
                result.message,
            )

        self.manifest_service.step_finished(name, result.status, result.message)
        self.context.current_step = None
        return result

    def detect(self) -> StepResult:
        context = self.context
        context.is_container = self.environment_service.detect_container()
        context.distribution, context.package_manager = self.environment_service.detect_distribution()
        self.audit_log.write_session_banner(context.distribution, context.is_container)
        self.environment_service.missing_commands(RECOMMENDED_COMMANDS, in_container=context.is_container)
        self.report_service.show_system_info(context, self.environment_service.system_facts())
        self.manifest_service.update_metadata(
            distribution=context.distribution,
            package_manager=context.package_manager,
            container=context.is_container,
        )
        environment = "Container (Docker/LXC)" if context.is_container else "Bare Metal / VM"
        return StepResult.ok(
            f"Distribution detected: {context.distribution} ({context.package_manager}); "
            f"execution environment: {environment}"
        )

    def backup(self) -> StepResult:
        snapshot = self.backup_service.create_snapshot(self.paths)
        self.context.snapshot = snapshot
        self.manifest_service.add_artifact("backup_snapshot", snapshot.path)
        return StepResult.ok(f"Backup snapshot created: {snapshot.path}", files=len(snapshot.files))

    def update_packages(self) -> StepResult:
        result = self.package_service.update(
            self.context.package_manager,
            skip_update=self.context.skip_update,
            skip_packages=self.context.skip_packages,
        )
        if result.status == STEP_SUCCESS:
            self.context.applied_changes.append("Package updates applied")
        return result

    def prompt_hostname(self) -> StepResult:
        self.context.hostname = self.prompt_service.ask_hostname(max_attempts=self.hostname_attempts)
        self.manifest_service.update_metadata(hostname=self.context.hostname)
        return StepResult.ok(f"Hostname accepted: {self.context.hostname}")

    def prompt_password(self) -> StepResult:
        secret = self.prompt_service.ask_password(
            min_length=self.min_password_length,
            max_attempts=self.password_attempts,
        )
        self.audit_log.register_secret(secret)
        self.context.password = secret
        return StepResult.ok("Root password validated")

    def apply_hostname(self) -> StepResult:
        result = self.hostname_service.apply_hostname(self.context.hostname, self.context.is_container)
        self.context.applied_changes.append(f"Hostname configured: {self.context.hostname}")
        return result

    def update_hosts(self) -> StepResult:
        result = self.hosts_file_service.update_hosts_mapping(self.context.hostname)
        self.context.hosts_backup = result.details.get("backup")
        self.context.applied_changes.append(
            f"{self.paths.hosts_file} updated with {LOOPBACK_ALIAS_ADDRESS} hostname mapping"
        )
        return result

    def validate_hosts(self) -> StepResult:
        return self.hosts_file_service.validate_hosts_syntax()

    def test_resolution(self) -> StepResult:
        return self.hosts_file_service.test_resolution(self.context.hostname)

    def rotate_password(self) -> StepResult:
        secret, self.context.password = self.context.password, None
        if secret is None:
            raise InitializerError("No validated root password is available.")
        result = self.credential_service.rotate_root_password(secret)
        self.context.applied_changes.append("Root password changed")
        return result

    def apply_kernel_profile(self) -> StepResult:
        result = self.kernel_service.apply_kernel_profile(self.context.is_container)
        if result.status != STEP_SKIPPED:
            self.context.applied_changes.append(
                f"Security & performance sysctl profile applied ({self.paths.sysctl_file})"
            )
        return result

    def tune_limits(self) -> StepResult:
        result = self.limits_service.tune_limits()
        self.context.applied_changes.append(f"Max open files: {NOFILE_LIMIT}")
        return result

    def report(self) -> StepResult:
        facts = self.environment_service.system_facts()
        text = self.report_service.render(self.context, facts, self.min_password_length)
        self.report_service.write(self.paths.report_file, text)
        self.manifest_service.add_artifact("report", self.paths.report_file)
        return StepResult.ok(f"Report generated: {self.paths.report_file}")

    def _abort(self, step: str, reason: str):
        context = self.context
        context.state = RUN_ABORTED
        context.aborted_step = step
        context.abort_reason = reason

        err_console.print(f"[bold red]✗ Error:[/bold red] {reason}")
        logger.error("Initialization aborted at step '%s' (#%s): %s", step, context.step_counter, reason)
        logger.warning("System may be in partial state. Check logs: %s", self.paths.log_file)
        if context.snapshot:
            logger.warning("Recover manually from backup snapshot: %s", context.snapshot.path)
        if context.hosts_backup:
            logger.warning("Hosts table backup: %s", context.hosts_backup)

    def run(self) -> int:
        exit_code = 1
        manifest_status = "failed"
        manifest_error: Optional[str] = None

        console.print(f"\n[bold cyan]=== Linux System Initializer v{__version__} ===[/bold cyan]\n")
        try:
            self.environment_service.require_root()
            self.audit_log.open(verbose=self.verbose)
        except InitializerError as exc:
            err_console.print(f"[bold red]✗ Error:[/bold red] {exc}")
            return exit_code
        except OSError as exc:
            err_console.print(f"[bold red]✗ Error:[/bold red] Cannot open audit log {self.paths.log_file}: {exc}")
            return exit_code

        try:
            logger.info("Starting hostinit %s (run %s)", __version__, self.context.run_id)
            self.manifest_service.start_run(
                run_id=self.context.run_id,
                metadata={
                    "version": __version__,
                    "skip_update": self.context.skip_update,
                    "skip_packages": self.context.skip_packages,
                },
            )
            self.manifest_service.add_artifact("log_file", self.paths.log_file)
            self.context.state = RUN_RUNNING

            for name, title, callback in self._pipeline():
                result = self._run_step(name, title, callback)
                if result.is_failure:
                    self._abort(name, result.message)
                    manifest_error = result.message
                    return exit_code

            self.context.state = RUN_COMPLETED
            manifest_status = "success"
            exit_code = 0
            console.print("\n[bold green]=== Initialization Successful ===[/bold green]\n")
            logger.info("System reboot recommended to apply all changes")
            logger.info("View logs: tail -f %s", self.paths.log_file)
            return exit_code

        except (KeyboardInterrupt, click.exceptions.Abort):
            self._abort(self.context.current_step or "run", "Operation cancelled by user.")
            manifest_status = "aborted"
            manifest_error = "Operation cancelled by user."
            return exit_code
        except Exception as exc:
            logger.exception("Unexpected error")
            self._abort(self.context.current_step or "run", f"Unexpected error: {exc}")
            manifest_error = str(exc)
            return exit_code
        finally:
            self.context.erase_password()
            self.manifest_service.finalize(manifest_status, error=manifest_error)
            self.audit_log.forget_secrets()
            self.audit_log.close()
