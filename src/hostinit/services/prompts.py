"""Interactive acquisition of the hostname and root password."""

import logging
from typing import Callable, Optional, Tuple, TypeVar

import click
from rich.console import Console

from hostinit.constants import MAX_HOSTNAME_ATTEMPTS, MAX_PASSWORD_ATTEMPTS, MIN_PASSWORD_LENGTH
from hostinit.errors import ValidationExhaustedError
from hostinit.errors_catalog import actionable_error
from hostinit.models import HostnameCandidate, PasswordCandidate, SecretValue
from hostinit.services.validation import (
    HOSTNAME_REASON_MESSAGES,
    hostname_rejection_reason,
    password_policy_failures,
)

T = TypeVar("T")


class PromptService:
    """Wraps the validators in bounded prompt-validate-retry loops.

    ``prompt_func`` defaults to :func:`click.prompt` and is replaceable so the
    loops can be driven without a terminal.
    """

    def __init__(self, logger: logging.Logger, console: Console, prompt_func: Optional[Callable] = None):
        self.logger = logger
        self.console = console
        self.prompt = prompt_func or click.prompt

    def prompt_until_valid(
        self,
        label: str,
        acquire: Callable[[], Tuple[Optional[T], Optional[str]]],
        max_attempts: int,
        exhausted_message: str,
    ) -> T:
        for attempt in range(1, max_attempts + 1):
            value, reason = acquire()
            if reason is None:
                return value

            self.logger.warning("%s rejected: %s", label, reason)
            if attempt < max_attempts:
                self.console.print(
                    f"[yellow]⚠[/yellow] Please try again (attempt {attempt + 1}/{max_attempts})"
                )

        raise ValidationExhaustedError(exhausted_message)

    def ask_hostname(self, max_attempts: int = MAX_HOSTNAME_ATTEMPTS) -> str:
        def acquire():
            raw = self.prompt("Enter new hostname", default="", show_default=False)
            candidate = HostnameCandidate(value=raw, reason=hostname_rejection_reason(raw))
            if candidate.is_valid:
                return candidate.value, None
            message = HOSTNAME_REASON_MESSAGES[candidate.reason]
            if candidate.value:
                message = f"Invalid hostname '{candidate.value}': {message}"
            return None, message

        return self.prompt_until_valid(
            "Hostname",
            acquire,
            max_attempts,
            actionable_error("hostname_attempts_exhausted", attempts=str(max_attempts)),
        )

    def ask_password(
        self,
        min_length: int = MIN_PASSWORD_LENGTH,
        max_attempts: int = MAX_PASSWORD_ATTEMPTS,
    ) -> SecretValue:
        def acquire():
            first = self.prompt("New root password", default="", hide_input=True, show_default=False)
            candidate = PasswordCandidate(failures=password_policy_failures(first, min_length))
            if candidate.failures:
                return None, "; ".join(candidate.failures)

            second = self.prompt("Confirm root password", default="", hide_input=True, show_default=False)
            candidate = PasswordCandidate(failures=[], confirmed=first == second)
            if not candidate.is_acceptable:
                return None, "Passwords do not match"
            return SecretValue(first), None

        return self.prompt_until_valid(
            "Root password",
            acquire,
            max_attempts,
            actionable_error(
                "password_attempts_exhausted",
                attempts=str(max_attempts),
                min_length=str(min_length),
            ),
        )
