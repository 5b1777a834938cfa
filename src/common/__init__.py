# Common utilities and shared modules
"""
Shared components used by the corpus, renderer and publisher:
- Project configuration
- Logging configuration
"""

from .config import settings, PROJECT_ROOT, CONFIG_DIR, Settings
from .logging import setup_logging, set_level

__all__ = [
    "settings",
    "PROJECT_ROOT",
    "CONFIG_DIR",
    "Settings",
    "setup_logging",
    "set_level",
]
