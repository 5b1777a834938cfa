"""End-to-end tests over the shipped content directory.

Every post under content/ must load, validate and publish cleanly.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from src.common.config import CorpusSettings, PublishSettings, SiteSettings
from src.corpus import CorpusLoader, CorpusValidator
from src.publisher import PageKind, PublishPipeline
from src.renderer import MarkdownRenderer, TemplateRenderer

NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def content_root(project_root):
    return project_root / "content"


@pytest.fixture
def site() -> SiteSettings:
    return SiteSettings(title="Integration Blog", base_url="https://int.test/")


class TestShippedCorpus:
    def test_every_file_has_valid_metadata(self, content_root):
        report = CorpusValidator().validate(content_root)

        assert report.files_checked == 4
        assert report.passed, "\n".join(str(f) for f in report.failures)
        for path, results in report.by_path().items():
            if path is None:
                continue
            checks = {r.check_name for r in results}
            assert {"front_matter", "title", "date", "draft", "shortcodes"} <= checks

    def test_loads_all_formats(self, content_root):
        loaded = CorpusLoader(CorpusSettings(content_dir=str(content_root))).load()
        assert loaded.success
        formats = {post.front_matter_format.value for post in loaded.corpus}
        assert formats == {"yaml", "toml"}
        assert all(post.title and post.date.tzinfo for post in loaded.corpus)
        assert all(isinstance(post.is_draft, bool) for post in loaded.corpus)

    def test_publish(self, content_root, tmp_path, site):
        output = tmp_path / "site"
        pipeline = PublishPipeline(
            body_renderer=MarkdownRenderer(base_url=site.base_url),
            page_renderer=TemplateRenderer(site=site),
            config=PublishSettings(output_dir=str(output)),
        )
        report = pipeline.run(content_root, output, now=NOW)

        assert report.success, "\n".join(str(e) for e in report.errors)
        assert report.posts_published == 3
        assert report.skipped_drafts == 1
        assert len(report.pages_of(PageKind.INDEX)) == 1
        assert len(report.pages_of(PageKind.FEED)) == 1

        for page in report.pages_of(PageKind.POST):
            html = Path(page.file_path).read_text(encoding="utf-8")
            assert "SHORTCODEPLACEHOLDER" not in html
            assert "{{<" not in html and "{{%" not in html

        unreal = output / "posts" / "unreal-editor-lifecycle-pitfalls" / "index.html"
        assert 'href="/posts/crt-exit-time-destructors/"' in unreal.read_text(encoding="utf-8")
        crt = output / "posts" / "crt-exit-time-destructors" / "index.html"
        assert 'href="https://int.test/posts/unreal-editor-lifecycle-pitfalls/"' in crt.read_text(encoding="utf-8")
        assert (output / "tags" / "c++" / "index.html").exists()
