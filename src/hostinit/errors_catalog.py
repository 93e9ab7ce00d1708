"""Actionable error catalog for hostinit."""

from typing import Dict

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "not_root": {
        "what": "This tool must be run as root.",
        "next": "Re-run it with `sudo hostinit`.",
    },
    "os_release_missing": {
        "what": "Cannot detect the Linux distribution: {path} not found.",
        "next": "Run hostinit on a supported distribution (Ubuntu, Debian, CentOS, RHEL).",
    },
    "hostname_attempts_exhausted": {
        "what": "No valid hostname was entered after {attempts} attempts.",
        "next": "Pick a name of 1-63 letters, digits or inner hyphens and run hostinit again.",
    },
    "password_attempts_exhausted": {
        "what": "No valid root password was confirmed after {attempts} attempts.",
        "next": "Prepare a password of {min_length}+ characters mixing case, digits and symbols.",
    },
    "snapshot_failed": {
        "what": "Could not create backup snapshot under {path}: {reason}",
        "next": "Check free disk space and permissions on the backup directory.",
    },
    "hostname_write_failed": {
        "what": "Failed to write hostname file {path}: {reason}",
        "next": "Check that the root filesystem is writable.",
    },
    "hostname_live_failed": {
        "what": "Failed to apply hostname '{name}' to the running kernel.",
        "next": "Run `hostname {name}` manually and inspect the error.",
    },
    "hosts_unreadable": {
        "what": "Cannot read hosts table {path}: {reason}",
        "next": "Restore it from the latest backup snapshot.",
    },
    "hosts_write_failed": {
        "what": "Failed to update hosts table {path}: {reason}",
        "next": "Restore it from the latest backup snapshot and retry.",
    },
    "password_rotation_failed": {
        "what": "Failed to change the root password (chpasswd exited with {returncode}).",
        "next": "Check PAM policy and /etc/shadow permissions, then retry.",
    },
    "kernel_profile_write_failed": {
        "what": "Failed to write kernel profile {path}: {reason}",
        "next": "Check that the sysctl drop-in directory exists and is writable.",
    },
    "limits_write_failed": {
        "what": "Failed to update resource limits file {path}: {reason}",
        "next": "Check that {path} is writable.",
    },
    "unsupported_package_manager": {
        "what": "Unsupported package manager: {manager}",
        "next": "Re-run with `--skip-update` and update packages manually.",
    },
    "package_command_failed": {
        "what": "Package manager step failed: {command}",
        "next": "Inspect the package manager output, fix it, or re-run with `--skip-update`.",
    },
}


def actionable_error(code: str, **kwargs: str) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} Suggested action: {next_step}"
