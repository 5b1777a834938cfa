"""Tests for the postcorpus command line."""

import pytest

from src.publisher.main import build_parser, main


def listed(out: str) -> list[str]:
    return [line for line in out.splitlines() if "  posts/" in line]


class TestParser:
    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_publish_flags(self):
        args = build_parser().parse_args(["publish", "--drafts", "--strict"])
        assert args.drafts and args.strict and not args.future


class TestCheck:
    def test_valid_corpus(self, corpus_dir, capsys):
        assert main(["--content", str(corpus_dir), "check"]) == 0
        assert "4 files checked, 0 failures in 0 files" in capsys.readouterr().out

    def test_invalid_corpus(self, corpus_dir, write_post, capsys):
        write_post("posts/bad.md", "---\ntitle: Bad\ndate: someday\n---\n")
        assert main(["--content", str(corpus_dir), "check"]) == 1
        out = capsys.readouterr().out
        assert "posts/bad.md" in out
        assert "[date] FAIL" in out

    def test_missing_content_dir(self, tmp_path):
        assert main(["--content", str(tmp_path / "missing"), "check"]) == 1


class TestList:
    def test_lists_published(self, corpus_dir, capsys):
        assert main(["--content", str(corpus_dir), "list"]) == 0
        lines = listed(capsys.readouterr().out)
        assert len(lines) == 3
        assert lines[0].startswith("2024-02-18  posts/unreal-lifecycle/index.md")

    def test_drafts_and_tag_filter(self, corpus_dir, capsys):
        assert main(["--content", str(corpus_dir), "list", "--drafts", "--future", "--tag", "CRT"]) == 0
        lines = listed(capsys.readouterr().out)
        assert lines == ["2023-09-03  posts/crt-destructors.md  Static destructors on MSVC and glibc"]


class TestRender:
    def test_render_to_file(self, corpus_dir, tmp_path):
        target = tmp_path / "out" / "page.html"
        source = corpus_dir / "posts" / "type-lists.md"
        assert main(["--content", str(corpus_dir), "render", str(source), "--output", str(target)]) == 0
        assert "<h1>Type lists without recursion</h1>" in target.read_text(encoding="utf-8")

    def test_render_outside_content_dir(self, corpus_dir, tmp_path):
        stray = tmp_path / "stray.md"
        stray.write_text("---\ntitle: Stray\ndate: 2023-01-01\n---\n", encoding="utf-8")
        assert main(["--content", str(corpus_dir), "render", str(stray)]) == 1


class TestPublish:
    def test_publish(self, corpus_dir, tmp_path, capsys):
        output = tmp_path / "public"
        assert main(["--content", str(corpus_dir), "publish", "--output", str(output)]) == 0
        assert (output / "index.html").exists()
        assert "Published 3 posts" in capsys.readouterr().out

    def test_duplicate_urls_fail(self, write_post, tmp_path, capsys):
        write_post("posts/a.md", "---\ntitle: A\ndate: 2023-01-02\nslug: same\n---\nA\n")
        write_post("posts/b.md", "---\ntitle: B\ndate: 2023-01-01\nslug: same\n---\nB\n")
        output = tmp_path / "public"
        assert main(["--content", str(tmp_path / "content"), "publish", "--output", str(output)]) == 1
        err = capsys.readouterr().err
        assert "already published by posts/a.md" in err
        assert "[unique_url] FAIL" in err

    def test_strict_publish_fails(self, corpus_dir, write_post, tmp_path):
        write_post("posts/bad.md", "---\ntitle: ''\ndate: 2023-01-01\n---\n")
        output = tmp_path / "public"
        assert main(["--content", str(corpus_dir), "publish", "--output", str(output), "--strict"]) == 1
        assert not output.exists()
