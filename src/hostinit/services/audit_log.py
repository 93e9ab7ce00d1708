"""Append-only audit log for hostinit."""

import getpass
import logging
import os
from datetime import datetime
from typing import List

from hostinit import __version__
from hostinit.constants import PRIVATE_FILE_MODE
from hostinit.models import SecretValue

AUDIT_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
AUDIT_DATEFMT = "%Y-%m-%d %H:%M:%S"
REDACTED = "***"

_LEVEL_NAMES = {
    "WARNING": "WARN",
    "CRITICAL": "ERROR",
}


class AuditFormatter(logging.Formatter):
    """Renders ``[timestamp] [LEVEL] message`` with INFO/WARN/ERROR levels."""

    def format(self, record: logging.LogRecord) -> str:
        original = record.levelname
        record.levelname = _LEVEL_NAMES.get(original, original)
        try:
            message = super().format(record)
        finally:
            record.levelname = original
        # one line per event
        return message.replace("\n", " | ")


class SecretRedactionFilter(logging.Filter):
    """Replaces registered secret literals in records with ``***``.

    Secrets are held by reference, so a wiped :class:`SecretValue` stops
    being matched without any copy of it lingering here.
    """

    def __init__(self):
        super().__init__()
        self.secrets: List[SecretValue] = []

    def filter(self, record: logging.LogRecord) -> bool:
        if not self.secrets:
            return True
        message = record.getMessage()
        redacted = message
        for secret in self.secrets:
            redacted = secret.redact(redacted, REDACTED)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


class AuditLog:
    """Owns the audit log file handler attached to the ``hostinit`` logger."""

    def __init__(self, log_file: str, logger: logging.Logger):
        self.log_file = log_file
        self.logger = logger
        self.redaction = SecretRedactionFilter()
        self.handler = None

    def open(self, verbose: bool = False):
        directory = os.path.dirname(self.log_file)
        if directory:
            os.makedirs(directory, exist_ok=True)

        fd = os.open(self.log_file, os.O_WRONLY | os.O_CREAT | os.O_APPEND, PRIVATE_FILE_MODE)
        os.close(fd)
        os.chmod(self.log_file, PRIVATE_FILE_MODE)

        handler = logging.FileHandler(self.log_file, mode="a", encoding="utf-8")
        handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        handler.setFormatter(AuditFormatter(AUDIT_FORMAT, datefmt=AUDIT_DATEFMT))
        handler.addFilter(self.redaction)
        self.logger.addFilter(self.redaction)
        self.logger.addHandler(handler)
        if self.logger.getEffectiveLevel() > handler.level:
            self.logger.setLevel(handler.level)
        self.handler = handler

    def write_session_banner(self, distribution: str, is_container: bool):
        if self.handler is None:
            return
        rule = "=" * 79
        lines = [
            rule,
            "Linux System Initializer - Session Start",
            f"Version: {__version__}",
            f"Timestamp: {datetime.now().strftime(AUDIT_DATEFMT)}",
            f"User: {os.environ.get('SUDO_USER') or self._current_user()}",
            f"Distribution: {distribution or 'unknown'}",
            f"Container: {str(is_container).lower()}",
            rule,
        ]
        for line in lines:
            self.logger.info(line)

    def register_secret(self, secret: SecretValue):
        self.redaction.secrets.append(secret)

    def forget_secrets(self):
        self.redaction.secrets.clear()

    def close(self):
        if self.handler is None:
            return
        self.logger.removeHandler(self.handler)
        self.logger.removeFilter(self.redaction)
        self.handler.close()
        self.handler = None

    @staticmethod
    def _current_user() -> str:
        try:
            return getpass.getuser()
        except (KeyError, OSError):
            return "root"
