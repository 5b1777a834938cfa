"""Tests for the publish pipeline."""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from src.common.config import PublishSettings
from src.corpus.loader import CorpusLoader
from src.publisher import PageKind, PublishPipeline
from src.renderer import MarkdownRenderer, TemplateRenderer

NOW = datetime(2024, 3, 1, tzinfo=timezone.utc)


@pytest.fixture
def make_pipeline(render_settings, site_settings, publish_settings):
    def _make(config: PublishSettings | None = None) -> PublishPipeline:
        return PublishPipeline(
            loader=CorpusLoader(),
            body_renderer=MarkdownRenderer(config=render_settings, base_url=site_settings.base_url),
            page_renderer=TemplateRenderer(site=site_settings),
            config=config or publish_settings,
        )

    return _make


@pytest.fixture
def output_dir(tmp_path) -> Path:
    return tmp_path / "public"


class TestPublish:
    def test_writes_all_pages(self, make_pipeline, corpus_dir, output_dir):
        report = make_pipeline().run(corpus_dir, output_dir, now=NOW)

        assert report.success
        assert report.validation.passed
        assert report.posts_published == 3
        assert report.skipped_drafts == 1
        assert report.skipped_future == 0
        assert report.published_at

        assert (output_dir / "posts" / "type-lists" / "index.html").exists()
        assert (output_dir / "posts" / "crt-destructors" / "index.html").exists()
        assert (output_dir / "posts" / "unreal-lifecycle" / "index.html").exists()
        assert not (output_dir / "posts" / "init-order").exists()
        assert (output_dir / "index.html").exists()
        assert (output_dir / "index.xml").exists()

    def test_post_page_content(self, make_pipeline, corpus_dir, output_dir):
        make_pipeline().run(corpus_dir, output_dir, now=NOW)
        html = (output_dir / "posts" / "type-lists" / "index.html").read_text(encoding="utf-8")
        assert "<h1>Type lists without recursion</h1>" in html
        assert 'href="/posts/crt-destructors/"' in html

    def test_tag_pages(self, make_pipeline, corpus_dir, output_dir):
        report = make_pipeline().run(corpus_dir, output_dir, now=NOW)

        urls = sorted(page.url for page in report.pages_of(PageKind.TAG))
        assert urls == ["/tags/c++/", "/tags/crt/", "/tags/templates/", "/tags/unreal-engine/"]
        html = (output_dir / "tags" / "c++" / "index.html").read_text(encoding="utf-8")
        assert "<h1>Tag: C++</h1>" in html
        assert html.index("Unreal editor lifecycle pitfalls") < html.index("Type lists without recursion")

    def test_drafts_included_on_request(self, make_pipeline, corpus_dir, output_dir):
        report = make_pipeline().run(corpus_dir, output_dir, include_drafts=True, include_future=True, now=NOW)
        assert report.posts_published == 4
        assert report.skipped_drafts == 0
        assert (output_dir / "posts" / "init-order" / "index.html").exists()

    def test_future_posts_skipped(self, make_pipeline, corpus_dir, output_dir):
        now = datetime(2023, 12, 1, tzinfo=timezone.utc)
        report = make_pipeline().run(corpus_dir, output_dir, now=now)
        assert report.skipped_future == 1
        assert report.posts_published == 2
        assert not (output_dir / "posts" / "unreal-lifecycle").exists()

    def test_feed_limit(self, make_pipeline, corpus_dir, output_dir):
        pipeline = make_pipeline(PublishSettings(output_dir=str(output_dir), feed_limit=1))
        pipeline.run(corpus_dir, output_dir, now=NOW)
        xml = (output_dir / "index.xml").read_text(encoding="utf-8")
        assert xml.count("<item>") == 1
        assert "Unreal editor lifecycle pitfalls" in xml

    def test_feed_limit_zero_means_all(self, make_pipeline, corpus_dir, output_dir):
        pipeline = make_pipeline(PublishSettings(output_dir=str(output_dir), feed_limit=0))
        pipeline.run(corpus_dir, output_dir, now=NOW)
        assert (output_dir / "index.xml").read_text(encoding="utf-8").count("<item>") == 3


class TestPublishErrors:
    def test_invalid_file_reported_and_skipped(self, make_pipeline, corpus_dir, write_post, output_dir):
        write_post("posts/broken.md", "---\ndate: 2023-01-01\n---\nNo title.\n")
        report = make_pipeline().run(corpus_dir, output_dir, now=NOW)

        assert not report.success
        assert not report.validation.passed
        assert [str(e.path) for e in report.errors] == ["posts/broken.md"]
        assert report.posts_published == 3

    def test_strict_publishes_nothing(self, make_pipeline, corpus_dir, write_post, output_dir):
        write_post("posts/broken.md", "---\ntitle: Broken\ndate: 2023-01-01\ndraft: yes please\n---\n")
        report = make_pipeline().run(corpus_dir, output_dir, fail_on_invalid=True, now=NOW)

        assert report.aborted
        assert report.pages == []
        assert not output_dir.exists()

    def test_directive_error_skips_post(self, make_pipeline, corpus_dir, write_post, output_dir):
        write_post("posts/bad-directive.md", "---\ntitle: Bad\ndate: 2023-01-01\n---\n\n{{< nope >}}\n")
        report = make_pipeline().run(corpus_dir, output_dir, now=NOW)

        assert report.posts_published == 3
        assert len(report.errors) == 1
        error = report.errors[0]
        assert str(error.path) == "posts/bad-directive.md"
        assert error.line == 6
        assert "unknown shortcode 'nope'" in error.message

    def test_duplicate_url_not_overwritten(self, make_pipeline, write_post, tmp_path, output_dir):
        write_post("posts/a.md", "---\ntitle: A\ndate: 2023-01-02\nslug: same\n---\nBody of A\n")
        write_post("posts/b.md", "---\ntitle: B\ndate: 2023-01-01\nslug: same\n---\nBody of B\n")
        report = make_pipeline().run(tmp_path / "content", output_dir, now=NOW)

        assert not report.success
        assert not report.validation.passed
        assert report.posts_published == 1
        assert [str(e.path) for e in report.errors] == ["posts/b.md"]
        assert "already published by posts/a.md" in report.errors[0].message
        html = (output_dir / "posts" / "same" / "index.html").read_text(encoding="utf-8")
        assert "Body of A" in html and "Body of B" not in html

    def test_page_path_stays_in_output_dir(self, output_dir):
        assert PublishPipeline._page_path(output_dir, "/posts/a/") == output_dir / "posts" / "a" / "index.html"
        with pytest.raises(ValueError, match="escapes the output directory"):
            PublishPipeline._page_path(output_dir, "/posts/../../escaped/")

    def test_tag_slug_collision_merged(self, make_pipeline, write_post, tmp_path, output_dir):
        write_post("posts/a.md", "---\ntitle: A\ndate: 2023-01-01\ntags: [Go]\n---\nA\n")
        write_post("posts/b.md", "---\ntitle: B\ndate: 2023-01-02\ntags: [go]\n---\nB\n")
        report = make_pipeline().run(tmp_path / "content", output_dir, now=NOW)

        assert [page.url for page in report.pages_of(PageKind.TAG)] == ["/tags/go/"]
        html = (output_dir / "tags" / "go" / "index.html").read_text(encoding="utf-8")
        assert ">A</a>" in html and ">B</a>" in html

    def test_missing_content_dir(self, make_pipeline, tmp_path):
        with pytest.raises(FileNotFoundError):
            make_pipeline().run(tmp_path / "missing", tmp_path / "public")


class TestRenderPost:
    def test_single_page(self, make_pipeline, sample_corpus):
        post = sample_corpus.get("posts/crt-destructors.md")
        html = make_pipeline().render_post(post, sample_corpus)
        assert html.startswith("<!DOCTYPE html>")
        assert "<details>" in html
