"""
hostinit - validated, auditable first-boot initialization for Linux hosts
"""

__version__ = "1.1.0"

from .core import SystemInitializer
from .errors import InitializerError

__all__ = ["SystemInitializer", "InitializerError"]
