"""Full publishing pipeline — post corpus to a static site.

Orchestrates the complete flow:
content/ → CorpusLoader → CorpusValidator → MarkdownRenderer →
TemplateRenderer → output/

Usage:
    pipeline = PublishPipeline()
    report = pipeline.run(Path("content"), Path("public"))
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from src.common.config import PublishSettings, settings
from src.common.logging import setup_logging
from src.common.text import slugify
from src.corpus.loader import CorpusLoader
from src.corpus.models import Corpus, Post
from src.corpus.validator import CorpusValidator
from src.renderer import MarkdownRenderer, RenderedPost, TemplateRenderer
from src.shortcodes import ShortcodeError

from .models import PageKind, PublishedPage, PublishError, PublishReport

logger = setup_logging(module_name="publisher.pipeline")


class PublishPipeline:
    """End-to-end pipeline from the post corpus to published pages.

    Steps:
    1. Load the corpus (CorpusLoader)
    2. Validate it (CorpusValidator)
    3. Select published posts (drafts and future posts excluded)
    4. Render each post body and page (MarkdownRenderer, TemplateRenderer)
    5. Write the home page, tag pages and RSS feed
    """

    def __init__(
        self,
        loader: CorpusLoader | None = None,
        validator: CorpusValidator | None = None,
        body_renderer: MarkdownRenderer | None = None,
        page_renderer: TemplateRenderer | None = None,
        config: PublishSettings | None = None,
    ):
        self.loader = loader or CorpusLoader()
        self.validator = validator or CorpusValidator(loader=self.loader)
        self.body_renderer = body_renderer or MarkdownRenderer()
        self.page_renderer = page_renderer or TemplateRenderer()
        self.config = config or settings.publish

    def run(
        self,
        content_dir: Path | None = None,
        output_dir: Path | None = None,
        include_drafts: bool | None = None,
        include_future: bool | None = None,
        fail_on_invalid: bool = False,
        now: datetime | None = None,
    ) -> PublishReport:
        """Execute the full publishing pipeline.

        Args:
            content_dir: Corpus root (defaults to configured content_dir)
            output_dir: Where pages are written (defaults to configured output_dir)
            include_drafts: Publish draft posts too
            include_future: Publish posts dated in the future too
            fail_on_invalid: Write nothing if validation finds problems
            now: Reference time for future-dated posts

        Returns:
            PublishReport listing written pages and per-post errors

        Raises:
            FileNotFoundError: If the content directory does not exist
        """
        content_dir = Path(content_dir or self.loader.config.content_dir)
        output_dir = Path(output_dir or self.config.output_dir)
        include_drafts = self.config.include_drafts if include_drafts is None else include_drafts
        include_future = self.config.include_future if include_future is None else include_future
        now = now or datetime.now(timezone.utc)

        report = PublishReport(output_dir=str(output_dir))

        # Step 1: Load
        logger.info("Step 1: Loading corpus from %s...", content_dir)
        loaded = self.loader.load(content_dir)
        corpus = loaded.corpus
        for error in loaded.errors:
            report.errors.append(PublishError(path=error.path, message=error.message, line=error.line))

        # Step 2: Validate
        logger.info("Step 2: Validating %d files...", len(corpus) + len(loaded.errors))
        report.validation = self.validator.validate(content_dir)
        if fail_on_invalid and not report.validation.passed:
            for failure in report.validation.failures:
                logger.error("%s", failure)
            logger.error("Validation failed, nothing published: %s", report.validation.summary())
            report.aborted = True
            return report

        # Step 3: Select
        published = corpus.published(include_drafts=include_drafts, include_future=include_future, now=now)
        if not include_drafts:
            report.skipped_drafts = sum(1 for p in corpus if p.is_draft)
        if not include_future:
            report.skipped_future = sum(1 for p in corpus if p.is_future(now) and (include_drafts or not p.is_draft))
        logger.info(
            "Step 3: %d posts selected (%d drafts, %d future skipped)",
            len(published), report.skipped_drafts, report.skipped_future,
        )

        # Step 4: Render posts
        logger.info("Step 4: Rendering posts...")
        rendered_posts: list[RenderedPost] = []
        written: dict[str, Post] = {}
        for post in published:
            if post.url in written:
                message = f"URL {post.url} already published by {written[post.url].path}"
                logger.warning("Skipping %s: %s", post.path, message)
                report.errors.append(PublishError(path=post.path, message=message))
                continue
            try:
                rendered = self.body_renderer.render_body(post, corpus)
            except ShortcodeError as e:
                report.errors.append(PublishError(path=post.path, message=e.message, line=e.line))
                continue
            try:
                page_path = self._page_path(output_dir, post.url)
            except ValueError as e:
                report.errors.append(PublishError(path=post.path, message=str(e)))
                continue
            written[post.url] = post
            self._write(page_path, self.page_renderer.render_post(rendered))
            report.pages.append(PublishedPage(PageKind.POST, post.url, str(page_path), source=post.path))
            rendered_posts.append(rendered)

        # Step 5: Index, tags, feed
        logger.info("Step 5: Writing index, tag pages and feed...")
        self._write_index(rendered_posts, output_dir, report)
        self._write_tags(rendered_posts, corpus, output_dir, report)
        self._write_feed(rendered_posts, output_dir, report, now)

        report.published_at = datetime.now(timezone.utc).isoformat()
        logger.info(
            "Pipeline complete: %d pages written, %d errors", len(report.pages), len(report.errors)
        )
        return report

    def render_post(self, post: Post, corpus: Optional[Corpus] = None) -> str:
        """Render a single post to a full HTML page."""
        rendered = self.body_renderer.render_body(post, corpus)
        return self.page_renderer.render_post(rendered)

    def _write_index(self, posts: list[RenderedPost], output_dir: Path, report: PublishReport) -> None:
        tag_counts = {
            tag: len(tagged)
            for tag, tagged in Corpus(root=output_dir, posts=[r.post for r in posts]).tags().items()
        }
        html = self.page_renderer.render_list(
            posts, title=self.page_renderer.site.title, tags=tag_counts, url="/"
        )
        path = output_dir / "index.html"
        self._write(path, html)
        report.pages.append(PublishedPage(PageKind.INDEX, "/", str(path)))

    def _write_tags(
        self,
        posts: list[RenderedPost],
        corpus: Corpus,
        output_dir: Path,
        report: PublishReport,
    ) -> None:
        by_post = {r.post.path: r for r in posts}
        tag_pages: dict[str, tuple[str, list[RenderedPost]]] = {}
        for tag, tagged in corpus.tags([r.post for r in posts]).items():
            slug = slugify(tag)
            if not slug:
                logger.warning("Tag %r has no usable URL slug, skipping its page", tag)
                continue
            if slug in tag_pages:
                logger.warning("Tags %r and %r share the URL /tags/%s/", tag_pages[slug][0], tag, slug)
                merged = tag_pages[slug][1]
                merged.extend(by_post[p.path] for p in tagged if by_post[p.path] not in merged)
                continue
            tag_pages[slug] = (tag, [by_post[p.path] for p in tagged])

        for slug, (tag, tagged) in tag_pages.items():
            url = f"/tags/{slug}/"
            tagged.sort(key=lambda r: r.post.date, reverse=True)
            html = self.page_renderer.render_list(tagged, title=f"Tag: {tag}", url=url)
            path = self._page_path(output_dir, url)
            self._write(path, html)
            report.pages.append(PublishedPage(PageKind.TAG, url, str(path)))

    def _write_feed(
        self,
        posts: list[RenderedPost],
        output_dir: Path,
        report: PublishReport,
        now: datetime,
    ) -> None:
        limit = self.config.feed_limit
        feed_posts = posts[:limit] if limit else posts
        xml = self.page_renderer.render_feed(feed_posts, build_date=now)
        path = output_dir / "index.xml"
        self._write(path, xml)
        report.pages.append(PublishedPage(PageKind.FEED, "/index.xml", str(path)))

    @staticmethod
    def _page_path(output_dir: Path, url: str) -> Path:
        """Output file for a page URL.

        Raises:
            ValueError: If the URL would land outside output_dir
        """
        path = output_dir.joinpath(*[part for part in url.split("/") if part], "index.html")
        if not path.resolve().is_relative_to(output_dir.resolve()):
            raise ValueError(f"URL {url} escapes the output directory")
        return path

    @staticmethod
    def _write(path: Path, content: str) -> None:
        """Write a page, creating parent directories."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        logger.debug("Wrote %s", path)
