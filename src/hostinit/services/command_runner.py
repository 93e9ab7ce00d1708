"""Subprocess execution service for hostinit."""

import shutil
import subprocess
from typing import Dict, List, Optional

from hostinit.errors import InitializerError


class CommandRunner:
    """Runs external commands with consistent error handling."""

    def __init__(self, logger):
        self.logger = logger

    def available(self, name: str) -> bool:
        return shutil.which(name) is not None

    def run(
        self,
        cmd: List[str],
        check: bool = True,
        capture_output: bool = False,
        input_data: Optional[bytes] = None,
        env: Optional[Dict[str, str]] = None,
    ) -> subprocess.CompletedProcess:
        cmd_str = " ".join(cmd)
        # stdin payloads may carry secrets; only the argv is ever logged
        self.logger.debug("Executing: %s", cmd_str)

        try:
            result = subprocess.run(
                cmd,
                input=input_data,
                capture_output=capture_output,
                env=env,
            )
        except FileNotFoundError as exc:
            raise InitializerError(
                f"Required command not found: {cmd[0]}. Please install it and try again."
            ) from exc
        except OSError as exc:
            raise InitializerError(f"Failed to execute command: {cmd_str}. {exc}") from exc

        result = self._decode(result)

        if capture_output and result.stdout:
            self.logger.debug("Command output: %s", result.stdout.strip())

        if result.returncode == 0:
            return result

        stderr = (result.stderr or "").strip() if capture_output else ""
        message = f"Command failed ({result.returncode}): {cmd_str}"
        if stderr:
            message = f"{message}\n{stderr}"

        if check:
            raise InitializerError(message)

        self.logger.warning(message)
        return result

    @staticmethod
    def _decode(result: subprocess.CompletedProcess) -> subprocess.CompletedProcess:
        def as_text(value):
            if isinstance(value, bytes):
                return value.decode("utf-8", errors="replace")
            return value

        return subprocess.CompletedProcess(
            result.args,
            result.returncode,
            stdout=as_text(result.stdout),
            stderr=as_text(result.stderr),
        )
