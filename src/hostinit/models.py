"""Shared domain models for hostinit."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from . import constants


@dataclass(frozen=True)
class HostPaths:
    """Every file the pipeline reads or mutates."""

    hosts_file: str = constants.HOSTS_FILE
    hostname_file: str = constants.HOSTNAME_FILE
    shadow_file: str = constants.SHADOW_FILE
    sysctl_conf_file: str = constants.SYSCTL_CONF_FILE
    sysctl_file: str = constants.SYSCTL_FILE
    limits_file: str = constants.LIMITS_FILE
    os_release_file: str = constants.OS_RELEASE_FILE
    dockerenv_file: str = constants.DOCKERENV_FILE
    init_cgroup_file: str = constants.INIT_CGROUP_FILE
    log_file: str = constants.LOG_FILE
    report_file: str = constants.REPORT_FILE
    manifest_file: str = constants.MANIFEST_FILE
    backup_dir: str = constants.BACKUP_DIR


class SecretValue:
    """A secret kept in a mutable buffer so it can be wiped after use."""

    def __init__(self, value: str):
        self._buffer = bytearray(value.encode("utf-8"))

    def reveal(self) -> bytes:
        return bytes(self._buffer)

    def clear(self):
        for index in range(len(self._buffer)):
            self._buffer[index] = 0
        del self._buffer[:]

    def redact(self, text: str, placeholder: str) -> str:
        """Return ``text`` with every occurrence of the secret replaced.

        The comparison runs on bytes against the live buffer, so no ``str``
        copy of the secret is ever created.
        """
        if not self._buffer:
            return text
        encoded = text.encode("utf-8", errors="surrogateescape")
        if self._buffer not in encoded:
            return text
        redacted = encoded.replace(self._buffer, placeholder.encode("utf-8"))
        return redacted.decode("utf-8", errors="surrogateescape")

    @property
    def is_cleared(self) -> bool:
        return len(self._buffer) == 0

    def __len__(self) -> int:
        return len(self._buffer)

    def __repr__(self) -> str:
        return "SecretValue(***)"

    __str__ = __repr__


@dataclass(frozen=True)
class HostnameCandidate:
    value: str
    reason: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.reason is None


@dataclass(frozen=True)
class PasswordCandidate:
    failures: List[str]
    confirmed: bool = False

    @property
    def is_acceptable(self) -> bool:
        return not self.failures and self.confirmed


@dataclass(frozen=True)
class BackupSnapshot:
    """One timestamped snapshot directory; immutable once created."""

    path: str
    created_at: str
    files: Dict[str, str] = field(default_factory=dict)


STEP_SUCCESS = "success"
STEP_WARNING = "warning"
STEP_SKIPPED = "skipped"
STEP_FAILED = "failed"


@dataclass(frozen=True)
class StepResult:
    status: str
    message: str = ""
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, message: str = "", **details) -> "StepResult":
        return cls(STEP_SUCCESS, message, details)

    @classmethod
    def warning(cls, message: str, **details) -> "StepResult":
        return cls(STEP_WARNING, message, details)

    @classmethod
    def skipped(cls, message: str, **details) -> "StepResult":
        return cls(STEP_SKIPPED, message, details)

    @classmethod
    def failed(cls, message: str, **details) -> "StepResult":
        return cls(STEP_FAILED, message, details)

    @property
    def is_failure(self) -> bool:
        return self.status == STEP_FAILED


RUN_NOT_STARTED = "not_started"
RUN_RUNNING = "running"
RUN_COMPLETED = "completed"
RUN_ABORTED = "aborted"


@dataclass
class RunContext:
    """Process-wide state for exactly one invocation; never persisted."""

    run_id: str
    paths: HostPaths
    skip_update: bool = False
    skip_packages: bool = False
    distribution: str = ""
    package_manager: str = ""
    is_container: bool = False
    hostname: Optional[str] = None
    password: Optional[SecretValue] = None
    snapshot: Optional[BackupSnapshot] = None
    hosts_backup: Optional[str] = None
    step_counter: int = 0
    current_step: Optional[str] = None
    state: str = RUN_NOT_STARTED
    aborted_step: Optional[str] = None
    abort_reason: Optional[str] = None
    applied_changes: List[str] = field(default_factory=list)

    def next_step(self, name: str) -> int:
        self.step_counter += 1
        self.current_step = name
        return self.step_counter

    def erase_password(self):
        if self.password is not None:
            self.password.clear()
            self.password = None
