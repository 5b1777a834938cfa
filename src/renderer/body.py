"""Post body rendering — shortcodes, then Markdown to HTML.

Usage:
    renderer = MarkdownRenderer()
    rendered = renderer.render_body(post, corpus)
    print(rendered.html)
"""

from __future__ import annotations

import html
import re
from typing import Optional

import markdown as md

from src.common.config import RenderSettings, settings
from src.common.logging import setup_logging
from src.corpus.models import Corpus, Post
from src.shortcodes import (
    ShortcodeContext,
    ShortcodeError,
    ShortcodeResolver,
    parse_shortcodes,
)

from .models import RenderedPost, TocEntry

logger = setup_logging(module_name="renderer.body")

MORE_RE = re.compile(r"<!--\s*more\s*-->", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_BLOCK_END_RE = re.compile(
    r"</(?:p|li|h[1-6]|blockquote|td|th|tr|dt|dd|div|figcaption|details|summary)>|<br\s*/?>|<hr\s*/?>",
    re.IGNORECASE,
)
_PRE_RE = re.compile(r"<pre\b.*?</pre>", re.DOTALL | re.IGNORECASE)
_FOOTNOTE_REF_RE = re.compile(r'<sup id="fnref[^"]*">.*?</sup>', re.DOTALL)
_FOOTNOTES_RE = re.compile(r'<div class="footnote">.*?</div>', re.DOTALL)
_DIRECTIVE_RE = re.compile(r"\{\{[<%].*?[>%]\}\}", re.DOTALL)
_SPACE_RE = re.compile(r"\s+")


class MarkdownRenderer:
    """Renders post bodies to HTML.

    Directives are resolved first; the result is converted with
    Python-Markdown using the configured extensions.
    """

    def __init__(
        self,
        config: RenderSettings | None = None,
        resolver: ShortcodeResolver | None = None,
        base_url: str | None = None,
    ):
        self.config = config or settings.render
        self.resolver = resolver or ShortcodeResolver()
        self.base_url = base_url if base_url is not None else settings.site.base_url

    def _markdown(self) -> md.Markdown:
        return md.Markdown(extensions=list(self.config.markdown_extensions))

    def markdownify(self, text: str) -> str:
        """Convert a Markdown fragment to HTML."""
        return self._markdown().convert(text)

    def render_body(self, post: Post, corpus: Optional[Corpus] = None) -> RenderedPost:
        """Render a post body to HTML.

        Args:
            post: Post to render
            corpus: Corpus for resolving ref/relref directives

        Returns:
            RenderedPost with HTML, summary and table of contents

        Raises:
            ShortcodeError: If a directive is malformed, unknown or fails
        """
        context = ShortcodeContext(
            post=post,
            corpus=corpus,
            base_url=self.base_url,
            markdownify=self.markdownify,
        )
        try:
            resolved = self.resolver.resolve(post.body, context, first_line=post.body_line)
        except ShortcodeError as e:
            logger.error("%s: %s", post.path, e)
            raise

        converter = self._markdown()
        body_html = resolved.restore(converter.convert(resolved.text))
        toc = [_toc_entry(token) for token in getattr(converter, "toc_tokens", [])]

        return RenderedPost(
            post=post,
            html=body_html,
            summary=self.build_summary(post),
            toc=toc,
            reading_time=post.reading_time(self.config.words_per_minute),
        )

    def build_summary(self, post: Post) -> str:
        """Plain-text summary of a post.

        The front matter summary wins; otherwise the text before a
        <!--more--> divider; otherwise the first summary_words words.
        """
        if post.metadata.summary:
            return post.metadata.summary

        source = post.body
        divider = MORE_RE.search(source)
        if divider:
            source = source[:divider.start()]

        plain = self.plain_text(source)
        if divider:
            return plain
        return truncate_words(plain, self.config.summary_words)

    def plain_text(self, source: str) -> str:
        """Markdown to plain text, dropping directives and code blocks."""
        source = strip_directives(source, self.resolver.registry.standalone_names)
        rendered = self.markdownify(source)
        rendered = _PRE_RE.sub(" ", rendered)
        rendered = _FOOTNOTE_REF_RE.sub("", rendered)
        rendered = _FOOTNOTES_RE.sub(" ", rendered)
        rendered = _BLOCK_END_RE.sub(lambda m: m.group(0) + "\n", rendered)
        text = html.unescape(_TAG_RE.sub("", rendered))
        return _SPACE_RE.sub(" ", text).strip()


def strip_directives(source: str, standalone: frozenset[str] = frozenset()) -> str:
    """Remove every top-level directive (with its inner content)."""
    try:
        calls = parse_shortcodes(source, standalone=standalone)
    except ShortcodeError:
        return _DIRECTIVE_RE.sub(" ", source)

    parts = []
    cursor = 0
    for call in calls:
        parts.append(source[cursor:call.start])
        cursor = call.end
    parts.append(source[cursor:])
    return " ".join(parts)


def truncate_words(text: str, limit: int) -> str:
    words = text.split()
    if len(words) <= limit:
        return text
    return " ".join(words[:limit]) + " …"


def _toc_entry(token: dict) -> TocEntry:
    return TocEntry(
        level=int(token.get("level", 1)),
        anchor=token.get("id", ""),
        title=html.unescape(token.get("name", "")),
        children=[_toc_entry(child) for child in token.get("children", [])],
    )
