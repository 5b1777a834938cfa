"""Shortcode directive parser.

Recognises Hugo-style directives in a post body:

    {{< name arg "quoted arg" >}}          raw HTML output
    {{% name key="value" %}}               Markdown output
    {{< name >}} inner {{< /name >}}       paired
    {{< name />}}                          self-closing
    {{</* name */>}}                       escaped, rendered literally

Only the directive syntax is handled here; what a directive produces is
up to the registry (see registry.py).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .models import ShortcodeCall, ShortcodeError, ShortcodeStyle

_TAG_RE = re.compile(
    r"\{\{(?P<open>[<%])\s*(?P<closing>/)?\s*(?P<name>[A-Za-z][\w\-.]*)"
    r"(?P<args>(?:\"(?:[^\"\\]|\\.)*\"|`[^`]*`|[^\"`])*?)"
    r"\s*(?P<selfclose>/)?\s*(?P<close>[>%])\}\}",
    re.DOTALL,
)

_ESCAPED_RE = re.compile(
    r"\{\{(?P<open>[<%])\s*/\*(?P<inner>.*?)\*/\s*(?P<close>[>%])\}\}",
    re.DOTALL,
)

_OPENER_RE = re.compile(r"\{\{[<%]")

_ARG_RE = re.compile(
    r"(?:(?P<key>[A-Za-z_][\w\-]*)=)?"
    r"(?P<value>\"(?:[^\"\\]|\\.)*\"|`[^`]*`|[^\s\"`]+)"
)

_MATCHING_CLOSE = {"<": ">", "%": "%"}


@dataclass
class _Tag:
    name: str
    style: ShortcodeStyle
    closing: bool
    self_closing: bool
    start: int
    end: int
    line: int
    positional: list[str]
    named: dict[str, str]


@dataclass
class _Frame:
    tag: _Tag
    children: list[ShortcodeCall] = field(default_factory=list)


def _line_at(text: str, offset: int, first_line: int) -> int:
    return first_line + text.count("\n", 0, offset)


def _unquote(value: str) -> str:
    if value.startswith("`") and value.endswith("`") and len(value) >= 2:
        return value[1:-1]
    if value.startswith('"') and value.endswith('"') and len(value) >= 2:
        return re.sub(r"\\(.)", r"\1", value[1:-1])
    return value


def parse_arguments(args: str, line: Optional[int] = None, name: str = "") -> tuple[list[str], dict[str, str]]:
    """Split a directive's argument string into positional and named args.

    Raises:
        ShortcodeError: On unparseable text or mixed positional/named args
    """
    positional: list[str] = []
    named: dict[str, str] = {}
    pos = 0
    args = args.strip()
    while pos < len(args):
        if args[pos].isspace():
            pos += 1
            continue
        match = _ARG_RE.match(args, pos)
        if not match:
            raise ShortcodeError(f"cannot parse arguments of '{name}': {args[pos:]!r}", line=line, name=name)
        value = _unquote(match.group("value"))
        if match.group("key"):
            named[match.group("key")] = value
        else:
            positional.append(value)
        pos = match.end()

    if positional and named:
        raise ShortcodeError(
            f"'{name}' mixes positional and named arguments", line=line, name=name
        )
    return positional, named


def _escaped_spans(text: str) -> list[tuple[int, int]]:
    return [m.span() for m in _ESCAPED_RE.finditer(text)]


def _inside(offset: int, spans: list[tuple[int, int]]) -> bool:
    return any(start <= offset < end for start, end in spans)


def _tokenize(text: str, first_line: int) -> list[_Tag]:
    escaped = _escaped_spans(text)
    tags: list[_Tag] = []
    matched_starts: set[int] = set()

    for match in _TAG_RE.finditer(text):
        if _inside(match.start(), escaped):
            continue
        line = _line_at(text, match.start(), first_line)
        name = match.group("name")
        open_delim, close_delim = match.group("open"), match.group("close")
        if _MATCHING_CLOSE[open_delim] != close_delim:
            raise ShortcodeError(
                f"'{name}' opens with '{{{{{open_delim}' but closes with '{close_delim}}}}}'",
                line=line,
                name=name,
            )
        closing = bool(match.group("closing"))
        positional, named = parse_arguments(match.group("args"), line=line, name=name)
        if closing and (positional or named):
            raise ShortcodeError(f"closing tag of '{name}' takes no arguments", line=line, name=name)

        tags.append(_Tag(
            name=name,
            style=ShortcodeStyle(open_delim),
            closing=closing,
            self_closing=bool(match.group("selfclose")),
            start=match.start(),
            end=match.end(),
            line=line,
            positional=positional,
            named=named,
        ))
        matched_starts.add(match.start())

    for opener in _OPENER_RE.finditer(text):
        if opener.start() in matched_starts or _inside(opener.start(), escaped):
            continue
        raise ShortcodeError(
            "malformed shortcode (unterminated tag or quote)",
            line=_line_at(text, opener.start(), first_line),
        )

    return tags


def _to_call(tag: _Tag) -> ShortcodeCall:
    return ShortcodeCall(
        name=tag.name,
        style=tag.style,
        start=tag.start,
        end=tag.end,
        line=tag.line,
        positional=tag.positional,
        named=tag.named,
    )


def parse_shortcodes(
    text: str,
    standalone: Iterable[str] = (),
    first_line: int = 1,
) -> list[ShortcodeCall]:
    """Find the top-level directives of a text.

    A closing tag pairs with the innermost open directive of the same name.
    Directives left open become standalone and whatever was collected as
    their children is promoted to their level.

    Args:
        text: Post body (or any Markdown source)
        standalone: Names that never take inner content
        first_line: Line number of the first line of text, for errors

    Returns:
        Top-level calls in source order; nested calls are in .children

    Raises:
        ShortcodeError: On malformed tags, stray closing tags or
            mismatched delimiters
    """
    standalone = set(standalone)
    root: list[ShortcodeCall] = []
    stack: list[_Frame] = []

    def add(call: ShortcodeCall) -> None:
        (stack[-1].children if stack else root).append(call)

    def close_standalone(frame: _Frame) -> None:
        add(_to_call(frame.tag))
        for child in frame.children:
            add(child)

    for tag in _tokenize(text, first_line):
        if tag.closing:
            index = next(
                (i for i in range(len(stack) - 1, -1, -1) if stack[i].tag.name == tag.name),
                None,
            )
            if index is None:
                raise ShortcodeError(
                    f"closing tag for '{tag.name}' has no matching opening tag",
                    line=tag.line,
                    name=tag.name,
                )
            opener = stack[index].tag
            if opener.style != tag.style:
                raise ShortcodeError(
                    f"'{tag.name}' is opened with '{opener.style.value}' but closed with '{tag.style.value}'",
                    line=tag.line,
                    name=tag.name,
                )
            while len(stack) > index + 1:
                close_standalone(stack.pop())
            frame = stack.pop()
            call = _to_call(frame.tag)
            call.inner = text[frame.tag.end:tag.start]
            call.inner_start = frame.tag.end
            call.end = tag.end
            call.children = sorted(frame.children, key=lambda c: c.start)
            add(call)
        elif tag.self_closing or tag.name in standalone:
            add(_to_call(tag))
        else:
            stack.append(_Frame(tag=tag))

    while stack:
        close_standalone(stack.pop())

    return sorted(root, key=lambda c: c.start)


def unescape_shortcodes(text: str) -> str:
    """Turn escaped directives ({{</* x */>}}) into their literal form."""
    return _ESCAPED_RE.sub(
        lambda m: "{{" + m.group("open") + m.group("inner") + m.group("close") + "}}",
        text,
    )
