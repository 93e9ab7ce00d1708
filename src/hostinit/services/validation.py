"""Hostname and password policy checks for hostinit.

Every function here is pure: it inspects its argument and returns a verdict.
Prompting and logging live in :mod:`hostinit.services.prompts`.
"""

import re
import string
from typing import List, Optional

from hostinit.constants import HOSTNAME_MAX_LENGTH, HOSTNAME_PATTERN, MIN_PASSWORD_LENGTH

_HOSTNAME_RE = re.compile(HOSTNAME_PATTERN)
_HOSTNAME_ALPHABET = frozenset(string.ascii_letters + string.digits + "-")

REASON_EMPTY = "empty"
REASON_TOO_LONG = "too_long"
REASON_BAD_CHARACTER = "bad_character"
REASON_BAD_BOUNDARY = "bad_boundary"

HOSTNAME_REASON_MESSAGES = {
    REASON_EMPTY: "Hostname cannot be empty",
    REASON_TOO_LONG: f"Hostname must be at most {HOSTNAME_MAX_LENGTH} characters long",
    REASON_BAD_CHARACTER: "Hostname may contain only letters, digits and hyphens",
    REASON_BAD_BOUNDARY: "Hostname must start and end with a letter or digit",
}


def validate_hostname(candidate: str) -> bool:
    return _HOSTNAME_RE.fullmatch(candidate) is not None


def hostname_rejection_reason(candidate: str) -> Optional[str]:
    """Name the first hostname rule ``candidate`` breaks, or None if valid."""
    if not candidate:
        return REASON_EMPTY
    if len(candidate) > HOSTNAME_MAX_LENGTH:
        return REASON_TOO_LONG
    if any(char not in _HOSTNAME_ALPHABET for char in candidate):
        return REASON_BAD_CHARACTER
    if not validate_hostname(candidate):
        return REASON_BAD_BOUNDARY
    return None


def password_policy_failures(candidate: str, min_length: int = MIN_PASSWORD_LENGTH) -> List[str]:
    failures = []
    if len(candidate) < min_length:
        failures.append(f"Password too short (minimum {min_length} characters)")
    if not any(char in string.ascii_uppercase for char in candidate):
        failures.append("Password must contain at least one uppercase letter")
    if not any(char in string.ascii_lowercase for char in candidate):
        failures.append("Password must contain at least one lowercase letter")
    if not any(char in string.digits for char in candidate):
        failures.append("Password must contain at least one number")
    if not any(char in string.punctuation for char in candidate):
        failures.append("Password must contain at least one special character")
    return failures


def validate_password_strength(candidate: str, min_length: int = MIN_PASSWORD_LENGTH) -> bool:
    return not password_policy_failures(candidate, min_length)
