"""Shortcode resolution — replaces directives in a body with their output.

RAW ({{< >}}) output is swapped for an opaque placeholder so Markdown
leaves it alone, then restored in the rendered HTML. MARKDOWN ({{% %}})
output is spliced straight into the Markdown source.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from src.common.logging import setup_logging

from .builtins import default_registry
from .models import ShortcodeCall, ShortcodeContext, ShortcodeError, ShortcodeStyle
from .parser import parse_shortcodes, unescape_shortcodes
from .registry import ShortcodeRegistry

logger = setup_logging(module_name="shortcodes.resolver")

PLACEHOLDER_TEMPLATE = "SHORTCODEPLACEHOLDER{:04d}END"


@dataclass
class ResolvedText:
    """Markdown with directives resolved, plus pending raw outputs."""
    text: str
    placeholders: dict[str, str] = field(default_factory=dict)
    calls: list[ShortcodeCall] = field(default_factory=list)

    def restore(self, rendered: str) -> str:
        """Put RAW directive output back into rendered HTML.

        Placeholders are restored newest first, since outer directives are
        resolved after (and may contain) the ones nested in them.
        """
        for key in reversed(list(self.placeholders)):
            value = self.placeholders[key]
            rendered = rendered.replace(f"<p>{key}</p>", value)
            rendered = rendered.replace(key, value)
        return rendered


class ShortcodeResolver:
    """Resolves all directives of a text against a registry.

    Usage:
        resolver = ShortcodeResolver()
        resolved = resolver.resolve(post.body, ShortcodeContext(post=post))
        html = resolved.restore(markdown_to_html(resolved.text))
    """

    def __init__(self, registry: ShortcodeRegistry | None = None):
        self.registry = registry or default_registry()

    def parse(self, text: str, first_line: int = 1) -> list[ShortcodeCall]:
        return parse_shortcodes(text, standalone=self.registry.standalone_names, first_line=first_line)

    def resolve(self, text: str, context: ShortcodeContext, first_line: int = 1) -> ResolvedText:
        """Resolve every directive in text.

        Raises:
            ShortcodeError: On malformed or unknown directives, or when a
                handler fails
        """
        calls = self.parse(text, first_line=first_line)
        placeholders: dict[str, str] = {}
        output = self._resolve_span(text, 0, calls, context, placeholders)
        logger.debug("Resolved %d top-level directives, %d raw outputs", len(calls), len(placeholders))
        return ResolvedText(text=output, placeholders=placeholders, calls=calls)

    def _resolve_span(
        self,
        text: str,
        base: int,
        calls: list[ShortcodeCall],
        context: ShortcodeContext,
        placeholders: dict[str, str],
    ) -> str:
        """Resolve calls whose offsets are relative to base within text."""
        parts: list[str] = []
        cursor = 0
        for call in calls:
            parts.append(unescape_shortcodes(text[cursor:call.start - base]))
            parts.append(self._resolve_call(call, context, placeholders))
            cursor = call.end - base
        parts.append(unescape_shortcodes(text[cursor:]))
        return "".join(parts)

    def _resolve_call(
        self,
        call: ShortcodeCall,
        context: ShortcodeContext,
        placeholders: dict[str, str],
    ) -> str:
        definition = self.registry.check(call)

        inner = None
        if call.inner is not None:
            inner = self._resolve_span(call.inner, call.inner_start, call.children, context, placeholders)

        try:
            output = definition.handler(call, inner, context)
        except ShortcodeError as e:
            if e.line is None:
                e.line = call.line
            raise
        except (ValueError, KeyError, TypeError) as e:
            raise ShortcodeError(f"'{call.name}' failed: {e}", line=call.line, name=call.name) from e

        if call.style == ShortcodeStyle.MARKDOWN:
            return output

        key = PLACEHOLDER_TEMPLATE.format(len(placeholders))
        placeholders[key] = output
        return key
