# Shortcodes — directive parsing, registry and built-in directives
"""
Shortcode directives embedded in post bodies ({{< name >}} / {{% name %}}).
"""

from .builtins import default_registry
from .models import (
    ShortcodeCall,
    ShortcodeContext,
    ShortcodeDefinition,
    ShortcodeError,
    ShortcodeStyle,
)
from .parser import parse_arguments, parse_shortcodes, unescape_shortcodes
from .registry import ShortcodeRegistry
from .resolver import ResolvedText, ShortcodeResolver

__all__ = [
    "ResolvedText",
    "ShortcodeCall",
    "ShortcodeContext",
    "ShortcodeDefinition",
    "ShortcodeError",
    "ShortcodeRegistry",
    "ShortcodeResolver",
    "ShortcodeStyle",
    "default_registry",
    "parse_arguments",
    "parse_shortcodes",
    "unescape_shortcodes",
]
