"""Data models for shortcode directives."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable, Optional

if TYPE_CHECKING:
    from src.corpus.models import Corpus, Post


class ShortcodeStyle(str, Enum):
    """How a directive's output is treated."""
    RAW = "<"  # {{< name >}}: output inserted as HTML
    MARKDOWN = "%"  # {{% name %}}: output processed as Markdown


class ShortcodeError(ValueError):
    """Raised for malformed, unknown or failing shortcode directives."""

    def __init__(self, message: str, line: Optional[int] = None, name: str = ""):
        self.message = message
        self.line = line
        self.name = name
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.line is not None:
            return f"line {self.line}: {self.message}"
        return self.message


@dataclass
class ShortcodeCall:
    """One directive invocation found in a post body."""
    name: str
    style: ShortcodeStyle
    start: int  # offset of the opening "{{"
    end: int  # offset just past the closing "}}" (of the closing tag if paired)
    line: int
    positional: list[str] = field(default_factory=list)
    named: dict[str, str] = field(default_factory=dict)
    inner: Optional[str] = None  # None for standalone directives
    inner_start: int = -1  # offset of inner text, for nested line numbers
    children: list[ShortcodeCall] = field(default_factory=list)

    @property
    def is_paired(self) -> bool:
        return self.inner is not None

    def get(self, key: str | int, default: str = "") -> str:
        """Named argument by key, or positional argument by index."""
        if isinstance(key, int):
            return self.positional[key] if key < len(self.positional) else default
        return self.named.get(key, default)

    def walk(self):
        """Yield this call and every nested call, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()


@dataclass
class ShortcodeContext:
    """What a shortcode handler can see while rendering."""
    post: Optional[Post] = None
    corpus: Optional[Corpus] = None
    base_url: str = "/"
    markdownify: Callable[[str], str] = str

    def absolute_url(self, url: str) -> str:
        return self.base_url.rstrip("/") + "/" + url.lstrip("/")


# (call, resolved inner or None, context) -> output text
ShortcodeHandler = Callable[[ShortcodeCall, Optional[str], ShortcodeContext], str]


@dataclass
class ShortcodeDefinition:
    """A registered directive."""
    name: str
    handler: ShortcodeHandler
    paired: Optional[bool] = None  # True: needs inner, False: never has inner
    description: str = ""
