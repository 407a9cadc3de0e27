# Common utilities and shared modules
"""
Shared components used by the request client:
- Project configuration
- Logging configuration
"""

from .config import settings, PROJECT_ROOT, Settings
from .logging import setup_logging

__all__ = [
    "settings",
    "PROJECT_ROOT",
    "Settings",
    "setup_logging",
]
