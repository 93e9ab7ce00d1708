"""Filesystem helpers for hostinit."""

import errno
import logging
import os
import tempfile
from typing import Optional

from hostinit.constants import PRIVATE_DIR_MODE


class FileSystemService:
    """Encapsulates file and directory side effects."""

    # bind-mounted files (e.g. /etc/hosts in a container) refuse rename
    IN_PLACE_FALLBACK_ERRNOS = (errno.EBUSY, errno.EXDEV, errno.EPERM)

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def ensure_private_dir(self, path: str):
        os.makedirs(path, mode=PRIVATE_DIR_MODE, exist_ok=True)
        os.chmod(path, PRIVATE_DIR_MODE)

    def read_text_if_exists(self, path: str) -> Optional[str]:
        if not os.path.isfile(path):
            return None
        with open(path, "r", encoding="utf-8", newline="") as file_obj:
            return file_obj.read()

    def atomic_write(self, path: str, content: str, mode: int):
        """Replace ``path`` with ``content`` without exposing a half-written file."""
        directory = os.path.dirname(path) or "."
        os.makedirs(directory, exist_ok=True)

        fd, temp_path = tempfile.mkstemp(prefix=".hostinit-", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as file_obj:
                file_obj.write(content)
                file_obj.flush()
                os.fsync(file_obj.fileno())
            os.chmod(temp_path, mode)
            try:
                os.replace(temp_path, path)
            except OSError as exc:
                if exc.errno not in self.IN_PLACE_FALLBACK_ERRNOS:
                    raise
                self.logger.debug("Cannot replace %s (%s); rewriting in place.", path, exc)
                self.write_in_place(path, content)
        finally:
            if os.path.exists(temp_path):
                try:
                    os.remove(temp_path)
                except OSError:
                    pass

    def write_in_place(self, path: str, content: str):
        with open(path, "w", encoding="utf-8", newline="") as file_obj:
            file_obj.write(content)

    def append(self, path: str, content: str):
        with open(path, "a", encoding="utf-8", newline="") as file_obj:
            file_obj.write(content)
