"""Root credential rotation through chpasswd."""

import logging

from hostinit.errors import InitializerError, MutationError
from hostinit.errors_catalog import actionable_error
from hostinit.models import HostPaths, SecretValue, StepResult
from hostinit.services.command_runner import CommandRunner


class CredentialService:
    ACCOUNT = "root"

    def __init__(self, paths: HostPaths, command_runner: CommandRunner, logger: logging.Logger):
        self.paths = paths
        self.command_runner = command_runner
        self.logger = logger

    def rotate_root_password(self, secret: SecretValue) -> StepResult:
        """Feed ``root:<secret>`` to chpasswd on stdin, then wipe the secret.

        Neither the secret nor chpasswd's stderr reaches an exception message
        or the log.
        """
        payload = bytearray(f"{self.ACCOUNT}:".encode("utf-8"))
        try:
            payload.extend(secret.reveal())
            payload.extend(b"\n")
            try:
                result = self.command_runner.run(
                    ["chpasswd"],
                    check=False,
                    capture_output=True,
                    input_data=bytes(payload),
                )
            except InitializerError as exc:
                raise MutationError(
                    actionable_error("password_rotation_failed", returncode="n/a")
                ) from exc
            if result.returncode != 0:
                raise MutationError(
                    actionable_error("password_rotation_failed", returncode=str(result.returncode))
                )
        finally:
            for index in range(len(payload)):
                payload[index] = 0
            secret.clear()

        self.logger.info("Root password changed successfully")

        if self.verify_credential_store():
            return StepResult.ok("Root password changed; root entry verified in credential store")
        return StepResult.warning("Root password changed; credential store could not be verified")

    def verify_credential_store(self) -> bool:
        """Check that a root entry exists without reading past its name."""
        prefix = f"{self.ACCOUNT}:"
        try:
            with open(self.paths.shadow_file, "r", encoding="utf-8", errors="replace") as file_obj:
                for line in file_obj:
                    if line.startswith(prefix):
                        return True
        except OSError as exc:
            self.logger.warning("Cannot read %s for verification: %s", self.paths.shadow_file, exc.strerror)
            return False
        self.logger.warning("No root entry found in %s", self.paths.shadow_file)
        return False
