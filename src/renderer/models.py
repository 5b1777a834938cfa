"""Data models for the renderer."""

from __future__ import annotations

import html
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from src.corpus.models import Post


@dataclass
class SEOMetaTags:
    """SEO metadata for a rendered page."""
    title: str = ""
    description: str = ""  # 150-160 chars
    keywords: list[str] = field(default_factory=list)
    og_title: str = ""
    og_description: str = ""
    og_image: str = ""
    og_type: str = ""
    canonical_url: str = ""

    def to_html_tags(self) -> str:
        """Generate HTML meta tags."""
        e = html.escape
        tags = []
        if self.title:
            tags.append(f'<title>{e(self.title)}</title>')
        if self.description:
            tags.append(f'<meta name="description" content="{e(self.description)}">')
        if self.keywords:
            tags.append(f'<meta name="keywords" content="{e(", ".join(self.keywords))}">')
        if self.og_title:
            tags.append(f'<meta property="og:title" content="{e(self.og_title)}">')
        if self.og_description:
            tags.append(f'<meta property="og:description" content="{e(self.og_description)}">')
        if self.og_type:
            tags.append(f'<meta property="og:type" content="{e(self.og_type)}">')
        if self.og_image:
            tags.append(f'<meta property="og:image" content="{e(self.og_image)}">')
        if self.canonical_url:
            tags.append(f'<link rel="canonical" href="{e(self.canonical_url)}">')
        return "\n".join(tags)


@dataclass
class TocEntry:
    """Heading of a rendered post."""
    level: int
    anchor: str
    title: str
    children: list[TocEntry] = field(default_factory=list)


@dataclass
class RenderedPost:
    """A post body rendered to HTML."""
    post: Post
    html: str
    summary: str
    toc: list[TocEntry] = field(default_factory=list)
    reading_time: int = 1

    def to_template_context(self) -> dict[str, Any]:
        """Convert to a Jinja2 template context entry."""
        post = self.post
        return {
            "title": post.title,
            "date": post.date,
            "lastmod": post.metadata.lastmod,
            "author": post.metadata.author,
            "tags": post.tags,
            "categories": post.metadata.categories,
            "draft": post.is_draft,
            "url": post.url,
            "path": str(post.path),
            "summary": self.summary,
            "content": self.html,
            "toc": self.toc,
            "reading_time": self.reading_time,
            "word_count": post.word_count,
        }
