"""Tests for Jinja2 page, list and feed rendering."""

from datetime import datetime, timezone

import pytest

from src.renderer import MarkdownRenderer, SEOMetaTags, TemplateRenderer


@pytest.fixture
def renderer(site_settings) -> TemplateRenderer:
    return TemplateRenderer(site=site_settings)


@pytest.fixture
def rendered(sample_corpus, render_settings, site_settings):
    body_renderer = MarkdownRenderer(config=render_settings, base_url=site_settings.base_url)
    return {
        str(post.path): body_renderer.render_body(post, sample_corpus)
        for post in sample_corpus
    }


class TestSEOMetaTags:
    def test_values_are_escaped(self):
        tags = SEOMetaTags(title='A "quoted" <title>', description="x & y").to_html_tags()
        assert "<title>A &quot;quoted&quot; &lt;title&gt;</title>" in tags
        assert 'content="x &amp; y"' in tags

    def test_empty_fields_omitted(self):
        assert SEOMetaTags(title="Only").to_html_tags() == "<title>Only</title>"


class TestRenderPost:
    def test_post_page(self, renderer, rendered):
        html = renderer.render_post(rendered["posts/type-lists.md"])

        assert "<title>Type lists without recursion | Test Blog</title>" in html
        assert '<link rel="canonical" href="https://blog.test/posts/type-lists/">' in html
        assert '<meta property="og:type" content="article">' in html
        assert "<h1>Type lists without recursion</h1>" in html
        assert '<time datetime="2023-04-12T09:30:00+02:00">2023-04-12</time>' in html
        assert 'href="#recursive-lookup"' in html
        assert 'href="https://blog.test/tags/c++/"' in html
        assert '<div class="highlight">' in html

    def test_title_is_escaped(self, renderer, rendered):
        post = rendered["posts/crt-destructors.md"]
        post.post.metadata = post.post.metadata.model_copy(update={"title": "Fish & <Chips>"})
        html = renderer.render_post(post)
        assert "<h1>Fish &amp; &lt;Chips&gt;</h1>" in html

    def test_draft_flag_shown(self, renderer, rendered):
        html = renderer.render_post(rendered["posts/init-order.md"])
        assert "<strong>draft</strong>" in html


class TestRenderList:
    def test_home_page(self, renderer, rendered):
        posts = [rendered["posts/unreal-lifecycle/index.md"], rendered["posts/type-lists.md"]]
        html = renderer.render_list(posts, title="Test Blog", tags={"C++": 2}, url="/")

        assert "<title>Test Blog</title>" in html
        assert html.index("Unreal editor lifecycle pitfalls") < html.index("Type lists without recursion")
        assert "Picking the N-th type of a pack." in html
        assert '<a href="https://blog.test/tags/c++/">C++</a> (2)' in html

    def test_tag_without_slug_not_linked(self, renderer):
        html = renderer.render_list([], title="Test Blog", tags={"!!!": 1}, url="/")
        assert "<li>!!! (1)</li>" in html
        assert "/tags//" not in html

    def test_tag_page_title(self, renderer, rendered):
        html = renderer.render_list([], title="Tag: CRT", url="/tags/crt/")
        assert "<title>Tag: CRT | Test Blog</title>" in html
        assert 'href="https://blog.test/tags/crt/"' in html


class TestRenderFeed:
    def test_feed(self, renderer, rendered):
        build = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
        xml = renderer.render_feed([rendered["posts/type-lists.md"]], build_date=build)

        assert xml.startswith('<?xml version="1.0" encoding="utf-8"?>')
        assert "<lastBuildDate>Fri, 01 Mar 2024 12:00:00 +0000</lastBuildDate>" in xml
        assert "<link>https://blog.test/posts/type-lists/</link>" in xml
        assert "<pubDate>Wed, 12 Apr 2023 09:30:00 +0200</pubDate>" in xml
        assert "<category>C++</category>" in xml
        assert "<author>Test Author</author>" in xml

    def test_render_template(self, renderer):
        out = renderer.render_template("feed.xml", {"posts": [], "build_date": datetime(2024, 1, 1, tzinfo=timezone.utc)})
        assert "<item>" not in out
