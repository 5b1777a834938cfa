"""Tests for corpus discovery and loading."""

import logging
from pathlib import PurePosixPath

import pytest

from src.common.config import CorpusSettings
from src.corpus.frontmatter import FrontMatterError
from src.corpus.loader import CorpusLoader


class TestDiscover:
    def test_skips_underscore_files(self, loader, corpus_dir):
        files = [p.relative_to(corpus_dir).as_posix() for p in loader.discover(corpus_dir)]
        assert files == [
            "posts/crt-destructors.md",
            "posts/init-order.md",
            "posts/type-lists.md",
            "posts/unreal-lifecycle/index.md",
        ]

    def test_extension_filter(self, write_post, tmp_path):
        write_post("posts/a.md", "---\ntitle: A\ndate: 2023-01-01\n---\n")
        write_post("posts/b.markdown", "---\ntitle: B\ndate: 2023-01-01\n---\n")
        write_post("posts/notes.txt", "not a post")
        write_post(".drafts/c.md", "---\ntitle: C\ndate: 2023-01-01\n---\n")
        loader = CorpusLoader(CorpusSettings(extensions=[".md", ".markdown"]))
        found = [p.name for p in loader.discover(tmp_path / "content")]
        assert found == ["a.md", "b.markdown"]


class TestLoad:
    def test_loads_sample_corpus(self, loader, corpus_dir):
        result = loader.load(corpus_dir)
        assert result.success
        assert len(result.corpus) == 4
        assert result.corpus.root == corpus_dir

    def test_collects_errors(self, write_post, tmp_path):
        write_post("posts/good.md", "---\ntitle: Good\ndate: 2023-01-01\n---\nBody")
        write_post("posts/bad.md", "No front matter here")
        result = CorpusLoader().load(tmp_path / "content")
        assert not result.success
        assert len(result.corpus) == 1
        assert result.errors[0].path == PurePosixPath("posts/bad.md")
        assert "missing front matter" in result.errors[0].message

    def test_strict_raises(self, write_post, tmp_path):
        write_post("posts/bad.md", "---\ntitle: [unclosed\n---\n")
        with pytest.raises(FrontMatterError):
            CorpusLoader().load(tmp_path / "content", strict=True)

    def test_invalid_utf8_is_an_error(self, tmp_path):
        root = tmp_path / "content"
        root.mkdir()
        (root / "latin1.md").write_bytes(b"---\ntitle: Caf\xe9\ndate: 2023-01-01\n---\n")
        result = CorpusLoader().load(root)
        assert "UTF-8" in result.errors[0].message

    def test_missing_root(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            CorpusLoader().load(tmp_path / "nope")

    def test_logs_skipped_files(self, write_post, tmp_path, caplog):
        write_post("posts/bad.md", "No front matter here")
        with caplog.at_level(logging.WARNING, logger="corpus.loader"):
            CorpusLoader().load(tmp_path / "content")
        assert "posts/bad.md" in caplog.text
