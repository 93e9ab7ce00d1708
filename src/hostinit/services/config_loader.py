"""Configuration loader for hostinit."""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from hostinit.errors import InitializerError


class ConfigLoader:
    """Loads YAML configuration files for CLI defaults."""

    SUPPORTED_KEYS = {
        "skip_update",
        "skip_packages",
        "verbose",
        "log_file",
        "report_file",
        "manifest_file",
        "backup_dir",
        "min_password_length",
        "hostname_attempts",
        "password_attempts",
    }
    POSITIVE_INT_KEYS = ("min_password_length", "hostname_attempts", "password_attempts")

    def load(self, config_path: Optional[str]) -> Dict[str, Any]:
        if not config_path:
            return {}

        path = Path(config_path)
        if not path.exists():
            raise InitializerError(f"Config file not found: {config_path}")

        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as exc:
            raise InitializerError(f"Invalid config file '{config_path}': {exc}") from exc

        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise InitializerError("Config file must contain a YAML mapping at the root.")

        unknown = sorted(set(parsed.keys()) - self.SUPPORTED_KEYS)
        if unknown:
            unknown_list = ", ".join(unknown)
            raise InitializerError(f"Unknown configuration keys: {unknown_list}")

        for key in self.POSITIVE_INT_KEYS:
            value = parsed.get(key)
            if value is not None and (isinstance(value, bool) or not isinstance(value, int) or value < 1):
                raise InitializerError(f"Configuration key '{key}' must be a positive integer.")

        return parsed
