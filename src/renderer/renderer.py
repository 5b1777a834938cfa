"""
Page renderer for published posts.
Handles Jinja2 template loading and rendering.
"""

from datetime import datetime, timezone
from email.utils import format_datetime
from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from src.common.config import SiteSettings, settings
from src.common.text import slugify

from .models import RenderedPost, SEOMetaTags


class TemplateRenderer:
    """
    Renders site pages using Jinja2 templates.

    Usage:
        renderer = TemplateRenderer()
        html = renderer.render_post(rendered_post)
    """

    def __init__(self, templates_dir: Optional[Path] = None, site: Optional[SiteSettings] = None):
        """
        Initialize the template renderer.

        Args:
            templates_dir: Path to templates directory.
                          Defaults to ./templates relative to this file.
            site: Site metadata (defaults to configured settings)
        """
        if templates_dir is None:
            templates_dir = Path(__file__).parent / "templates"

        self.templates_dir = templates_dir
        self.site = site or settings.site
        self.env = Environment(
            loader=FileSystemLoader(str(templates_dir)),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )
        self.env.filters["date_format"] = _date_format
        self.env.filters["rfc822"] = format_datetime
        self.env.filters["absolute_url"] = self.absolute_url
        self.env.filters["tag_slug"] = slugify
        self.env.globals["site"] = self.site

    def absolute_url(self, url: str) -> str:
        return self.site.base_url.rstrip("/") + "/" + url.lstrip("/")

    def build_seo(self, rendered: RenderedPost) -> SEOMetaTags:
        """
        Build SEO meta tags for a post page.

        Args:
            rendered: Rendered post

        Returns:
            SEOMetaTags with description trimmed to 160 characters
        """
        post = rendered.post
        description = rendered.summary[:160]
        return SEOMetaTags(
            title=f"{post.title} | {self.site.title}",
            description=description,
            keywords=list(post.tags),
            og_title=post.title,
            og_description=description,
            og_type="article",
            og_image=str(post.param("image") or ""),
            canonical_url=self.absolute_url(post.url),
        )

    def render_post(self, rendered: RenderedPost, seo: Optional[SEOMetaTags] = None) -> str:
        """
        Render a complete post page.

        Args:
            rendered: Post with its body already rendered to HTML
            seo: SEO meta tags (built from the post when omitted)

        Returns:
            Rendered HTML page
        """
        seo = seo or self.build_seo(rendered)
        template = self.env.get_template("post.html")
        return template.render(page=rendered.to_template_context(), seo_tags=seo.to_html_tags())

    def render_list(
        self,
        posts: list[RenderedPost],
        title: str,
        tags: Optional[dict[str, int]] = None,
        url: str = "/",
    ) -> str:
        """
        Render a list page (home page or a tag page).

        Args:
            posts: Posts to list, in display order
            title: Page heading
            tags: Tag name to post count, for the tag cloud
            url: Page URL, for the canonical link

        Returns:
            Rendered HTML page
        """
        seo = SEOMetaTags(
            title=title if title == self.site.title else f"{title} | {self.site.title}",
            description=self.site.description,
            og_title=title,
            og_type="website",
            canonical_url=self.absolute_url(url),
        )
        template = self.env.get_template("list.html")
        return template.render(
            title=title,
            posts=[p.to_template_context() for p in posts],
            tags=tags or {},
            seo_tags=seo.to_html_tags(),
        )

    def render_feed(self, posts: list[RenderedPost], build_date: Optional[datetime] = None) -> str:
        """
        Render an RSS 2.0 feed.

        Args:
            posts: Posts to include, newest first
            build_date: lastBuildDate (defaults to now, UTC)

        Returns:
            Rendered XML
        """
        template = self.env.get_template("feed.xml")
        return template.render(
            posts=[p.to_template_context() for p in posts],
            build_date=build_date or datetime.now(timezone.utc),
        )

    def render_template(self, name: str, context: dict[str, Any]) -> str:
        """
        Render any template by name.

        Args:
            name: Template file name (e.g., "post.html")
            context: Template variables

        Returns:
            Rendered string
        """
        template = self.env.get_template(name)
        return template.render(**context)


def _date_format(value: datetime, fmt: str = "%Y-%m-%d") -> str:
    return value.strftime(fmt) if value else ""
