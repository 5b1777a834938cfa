# Renderer — post bodies to HTML, Jinja2 page templates
"""
Renders post bodies (shortcodes + Markdown) and whole pages (Jinja2).
"""

from .body import MarkdownRenderer, strip_directives, truncate_words
from .models import RenderedPost, SEOMetaTags, TocEntry
from .renderer import TemplateRenderer

__all__ = [
    "MarkdownRenderer",
    "RenderedPost",
    "SEOMetaTags",
    "TemplateRenderer",
    "TocEntry",
    "strip_directives",
    "truncate_words",
]
