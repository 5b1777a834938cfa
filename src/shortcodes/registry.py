"""Shortcode registry — maps directive names to their handlers."""

from __future__ import annotations

from typing import Iterator, Optional

from src.common.logging import setup_logging

from .models import ShortcodeCall, ShortcodeDefinition, ShortcodeError, ShortcodeHandler

logger = setup_logging(module_name="shortcodes.registry")


class ShortcodeRegistry:
    """Registered shortcode directives.

    Usage:
        registry = ShortcodeRegistry()
        registry.register("note", handler, paired=True)
        definition = registry.get("note")
    """

    def __init__(self) -> None:
        self._definitions: dict[str, ShortcodeDefinition] = {}

    def register(
        self,
        name: str,
        handler: ShortcodeHandler,
        paired: Optional[bool] = None,
        description: str = "",
    ) -> ShortcodeDefinition:
        """Register (or replace) a directive."""
        if name in self._definitions:
            logger.debug("Replacing shortcode '%s'", name)
        definition = ShortcodeDefinition(
            name=name, handler=handler, paired=paired, description=description
        )
        self._definitions[name] = definition
        return definition

    def shortcode(self, name: str, paired: Optional[bool] = None, description: str = ""):
        """Decorator form of register()."""
        def decorator(handler: ShortcodeHandler) -> ShortcodeHandler:
            self.register(name, handler, paired=paired, description=description)
            return handler
        return decorator

    def get(self, name: str) -> Optional[ShortcodeDefinition]:
        return self._definitions.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._definitions

    def __iter__(self) -> Iterator[ShortcodeDefinition]:
        return iter(self._definitions.values())

    def __len__(self) -> int:
        return len(self._definitions)

    @property
    def standalone_names(self) -> frozenset[str]:
        """Directives that never take inner content."""
        return frozenset(d.name for d in self._definitions.values() if d.paired is False)

    def check(self, call: ShortcodeCall) -> ShortcodeDefinition:
        """Return the definition for a call, enforcing its pairing rule.

        Raises:
            ShortcodeError: Unknown directive, or inner content missing
                for a paired-only directive
        """
        definition = self.get(call.name)
        if definition is None:
            raise ShortcodeError(f"unknown shortcode '{call.name}'", line=call.line, name=call.name)
        if definition.paired is True and call.inner is None:
            raise ShortcodeError(
                f"'{call.name}' needs a closing tag {{{{{call.style.value} /{call.name} "
                f"{'>' if call.style.value == '<' else '%'}}}}}",
                line=call.line,
                name=call.name,
            )
        return definition

    def copy(self) -> ShortcodeRegistry:
        clone = ShortcodeRegistry()
        clone._definitions = dict(self._definitions)
        return clone
