"""Shared test fixtures for the post corpus tools."""

import sys
from pathlib import Path

import pytest

# Ensure src is importable
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from fixtures.sample_posts import SAMPLE_POSTS, write_corpus
from src.common.config import CorpusSettings, PublishSettings, RenderSettings, SiteSettings
from src.corpus.loader import CorpusLoader


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def corpus_dir(tmp_path) -> Path:
    """A temporary content directory holding the sample posts."""
    return write_corpus(tmp_path / "content")


@pytest.fixture
def write_post(tmp_path):
    """Write a single post under a fresh content directory."""
    root = tmp_path / "content"

    def _write(rel: str, text: str) -> Path:
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def site_settings() -> SiteSettings:
    return SiteSettings(
        title="Test Blog",
        description="A test blog.",
        base_url="https://blog.test/",
        language="en",
    )


@pytest.fixture
def render_settings() -> RenderSettings:
    return RenderSettings()


@pytest.fixture
def publish_settings(tmp_path) -> PublishSettings:
    return PublishSettings(output_dir=str(tmp_path / "public"), feed_limit=20)


@pytest.fixture
def loader(corpus_dir) -> CorpusLoader:
    return CorpusLoader(CorpusSettings(content_dir=str(corpus_dir)))


@pytest.fixture
def sample_corpus(loader, corpus_dir):
    """The sample corpus, loaded."""
    return loader.load(corpus_dir).corpus


@pytest.fixture
def sample_sources() -> dict[str, str]:
    return dict(SAMPLE_POSTS)
