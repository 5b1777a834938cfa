"""Built-in shortcode directives used by the corpus.

highlight, figure, ref, relref, details, youtube, gist and param.
"""

from __future__ import annotations

import html
import re
from typing import Optional

from .models import ShortcodeCall, ShortcodeContext, ShortcodeError
from .registry import ShortcodeRegistry

_LANG_RE = re.compile(r"^[\w+#.\-]+$")
_TRUE_VALUES = {"true", "1", "yes", "on", "table", "inline"}


def _truthy(value: str) -> bool:
    return value.strip().lower() in _TRUE_VALUES


def parse_highlight_options(raw: str) -> dict[str, str]:
    """Parse "linenos=table,hl_lines=3 5-7" style option strings."""
    options: dict[str, str] = {}
    for part in re.split(r",\s*", raw.strip()):
        if not part:
            continue
        key, _, value = part.partition("=")
        options[key.strip()] = value.strip()
    return options


def parse_line_ranges(ranges: str) -> set[int]:
    """Parse "2 4-6" into {2, 4, 5, 6}."""
    lines: set[int] = set()
    for token in ranges.replace(",", " ").split():
        start, _, end = token.partition("-")
        try:
            first = int(start)
            last = int(end) if end else first
        except ValueError as e:
            raise ValueError(f"invalid line range '{token}'") from e
        lines.update(range(first, last + 1))
    return lines


def _strip_code(inner: str) -> str:
    """Drop the newline after the opening tag and trailing blank lines."""
    if inner.startswith("\n"):
        inner = inner[1:]
    return inner.rstrip()


def highlight(call: ShortcodeCall, inner: Optional[str], context: ShortcodeContext) -> str:
    lang = call.get(0) or call.get("lang")
    if lang and not _LANG_RE.match(lang):
        raise ShortcodeError(f"invalid highlight language '{lang}'", line=call.line, name=call.name)

    options = parse_highlight_options(call.get(1) or call.get("options"))
    try:
        marked = parse_line_ranges(options.get("hl_lines", ""))
        start = int(options.get("linenostart", "1") or 1)
    except ValueError as e:
        raise ShortcodeError(str(e), line=call.line, name=call.name) from e
    linenos = _truthy(options.get("linenos", "false"))

    code_lines = _strip_code(inner or "").split("\n")
    rendered = []
    for number, line in enumerate(code_lines, start=1):
        text = html.escape(line, quote=False)
        if linenos:
            text = f'<span class="ln">{number + start - 1}</span>{text}'
        if number in marked:
            text = f'<span class="hl">{text}</span>'
        rendered.append(text)

    lang_attrs = f' class="language-{lang}" data-lang="{lang}"' if lang else ""
    return (
        f'<div class="highlight"><pre tabindex="0"><code{lang_attrs}>'
        + "\n".join(rendered)
        + "</code></pre></div>"
    )


def figure(call: ShortcodeCall, inner: Optional[str], context: ShortcodeContext) -> str:
    src = call.get("src") or call.get(0)
    if not src:
        raise ShortcodeError("figure requires a src", line=call.line, name=call.name)

    alt = call.get("alt") or call.get("caption")
    img = f'<img src="{html.escape(src)}" alt="{html.escape(alt)}">'
    link = call.get("link")
    if link:
        img = f'<a href="{html.escape(link)}">{img}</a>'

    caption_parts = []
    title = call.get("title")
    if title:
        caption_parts.append(f"<h4>{html.escape(title)}</h4>")
    caption = call.get("caption")
    if caption:
        caption_parts.append(f"<p>{html.escape(caption)}</p>")
    figcaption = f"<figcaption>{''.join(caption_parts)}</figcaption>" if caption_parts else ""

    css = call.get("class")
    class_attr = f' class="{html.escape(css)}"' if css else ""
    return f"<figure{class_attr}>{img}{figcaption}</figure>"


def _resolve_ref(call: ShortcodeCall, context: ShortcodeContext) -> str:
    target = call.get(0) or call.get("path")
    if not target:
        raise ShortcodeError(f"{call.name} requires a target", line=call.line, name=call.name)
    path, _, anchor = target.partition("#")
    if not path:
        if context.post is None:
            raise ShortcodeError(f"{call.name} '{target}' has no current page", line=call.line, name=call.name)
        url = context.post.url
    else:
        post = context.corpus.find(path) if context.corpus is not None else None
        if post is None:
            raise ShortcodeError(f"{call.name} target not found: '{path}'", line=call.line, name=call.name)
        url = post.url
    return f"{url}#{anchor}" if anchor else url


def ref(call: ShortcodeCall, inner: Optional[str], context: ShortcodeContext) -> str:
    return context.absolute_url(_resolve_ref(call, context))


def relref(call: ShortcodeCall, inner: Optional[str], context: ShortcodeContext) -> str:
    return _resolve_ref(call, context)


def details(call: ShortcodeCall, inner: Optional[str], context: ShortcodeContext) -> str:
    summary = call.get("summary") or call.get(0) or "Details"
    open_attr = " open" if _truthy(call.get("open", "false")) else ""
    body = context.markdownify(_strip_code(inner or ""))
    return (
        f"<details{open_attr}><summary>{html.escape(summary)}</summary>\n"
        f"{body}\n</details>"
    )


def youtube(call: ShortcodeCall, inner: Optional[str], context: ShortcodeContext) -> str:
    video_id = call.get("id") or call.get(0)
    if not video_id:
        raise ShortcodeError("youtube requires a video id", line=call.line, name=call.name)
    title = call.get("title") or "YouTube video"
    return (
        '<div class="video"><iframe '
        f'src="https://www.youtube-nocookie.com/embed/{html.escape(video_id)}" '
        f'title="{html.escape(title)}" allowfullscreen loading="lazy"></iframe></div>'
    )


def gist(call: ShortcodeCall, inner: Optional[str], context: ShortcodeContext) -> str:
    user = call.get(0) or call.get("user")
    gist_id = call.get(1) or call.get("id")
    if not user or not gist_id:
        raise ShortcodeError("gist requires a user and a gist id", line=call.line, name=call.name)
    filename = call.get(2) or call.get("file")
    query = f"?file={html.escape(filename)}" if filename else ""
    return (
        f'<script src="https://gist.github.com/{html.escape(user)}/'
        f'{html.escape(gist_id)}.js{query}"></script>'
    )


def param(call: ShortcodeCall, inner: Optional[str], context: ShortcodeContext) -> str:
    name = call.get(0) or call.get("name")
    if not name:
        raise ShortcodeError("param requires a name", line=call.line, name=call.name)
    if context.post is None:
        return ""
    value = context.post.param(name)
    if value is None:
        return ""
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    return str(value)


def default_registry() -> ShortcodeRegistry:
    """A registry with every built-in directive."""
    registry = ShortcodeRegistry()
    registry.register("highlight", highlight, paired=True, description="Syntax-highlighted code block")
    registry.register("figure", figure, paired=False, description="Image with caption")
    registry.register("ref", ref, paired=False, description="Absolute URL of another post")
    registry.register("relref", relref, paired=False, description="Relative URL of another post")
    registry.register("details", details, paired=True, description="Collapsible section")
    registry.register("youtube", youtube, paired=False, description="Embedded YouTube video")
    registry.register("gist", gist, paired=False, description="Embedded GitHub gist")
    registry.register("param", param, paired=False, description="Front matter value of the post")
    return registry
