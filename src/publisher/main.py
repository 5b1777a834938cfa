"""CLI entry point for checking and publishing the corpus.

Usage:
    python -m src.publisher.main check
    python -m src.publisher.main list --tags "C++"
    python -m src.publisher.main render content/posts/some-post.md --output page.html
    python -m src.publisher.main publish --output public --drafts
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path, PurePosixPath

from src.common.config import settings
from src.common.logging import set_level, setup_logging
from src.corpus.frontmatter import FrontMatterError, load_post
from src.corpus.loader import CorpusLoader
from src.corpus.validator import CorpusValidator
from src.shortcodes import ShortcodeError

from .pipeline import PublishPipeline

logger = setup_logging(module_name="publisher.main")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="postcorpus",
        description="Check, list, render and publish the blog post corpus",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--content",
        type=Path,
        default=Path(settings.corpus.content_dir),
        help=f"Content directory (default: {settings.corpus.content_dir})",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    check = sub.add_parser("check", help="Validate front matter and shortcodes of every post")
    check.add_argument("--all", action="store_true", help="Print passing checks too")

    lister = sub.add_parser("list", help="List posts, newest first")
    lister.add_argument("--drafts", action="store_true", help="Include drafts")
    lister.add_argument("--future", action="store_true", help="Include future-dated posts")
    lister.add_argument("--tag", help="Only posts with this tag")

    render = sub.add_parser("render", help="Render one post to an HTML page")
    render.add_argument("file", type=Path, help="Post file under the content directory")
    render.add_argument("--output", type=Path, help="Write the page here instead of stdout")

    publish = sub.add_parser("publish", help="Render every published post to the output directory")
    publish.add_argument(
        "--output",
        type=Path,
        default=Path(settings.publish.output_dir),
        help=f"Output directory (default: {settings.publish.output_dir})",
    )
    publish.add_argument("--drafts", action="store_true", help="Publish drafts too")
    publish.add_argument("--future", action="store_true", help="Publish future-dated posts too")
    publish.add_argument(
        "--strict",
        action="store_true",
        help="Publish nothing if validation finds problems",
    )
    return parser


def cmd_check(args: argparse.Namespace) -> int:
    report = CorpusValidator().validate(args.content)
    for result in report.results:
        if args.all or not result.passed:
            print(result)
    print(report.summary())
    return 0 if report.passed else 1


def cmd_list(args: argparse.Namespace) -> int:
    loaded = CorpusLoader().load(args.content)
    posts = loaded.corpus.published(include_drafts=args.drafts, include_future=args.future)
    if args.tag:
        posts = [p for p in posts if args.tag in p.tags]
    for post in posts:
        flags = " [draft]" if post.is_draft else ""
        print(f"{post.date:%Y-%m-%d}  {post.path}  {post.title}{flags}")
    for error in loaded.errors:
        print(f"error: {error.path}: {error.message}", file=sys.stderr)
    return 0 if loaded.success else 1


def cmd_render(args: argparse.Namespace) -> int:
    root = Path(args.content).resolve()
    file_path = args.file.resolve()
    try:
        file_path.relative_to(root)
    except ValueError:
        logger.error("%s is not inside the content directory %s", args.file, root)
        return 1

    corpus = CorpusLoader().load(root).corpus
    rel = PurePosixPath(file_path.relative_to(root).as_posix())
    try:
        post = corpus.get(rel) or load_post(file_path, root)
        page = PublishPipeline().render_post(post, corpus)
    except (FrontMatterError, ShortcodeError) as e:
        logger.error("Cannot render %s: %s", rel, e)
        return 1

    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(page, encoding="utf-8")
        logger.info("Rendered %s to %s", rel, args.output)
    else:
        sys.stdout.write(page)
    return 0


def cmd_publish(args: argparse.Namespace) -> int:
    report = PublishPipeline().run(
        content_dir=args.content,
        output_dir=args.output,
        include_drafts=args.drafts or None,
        include_future=args.future or None,
        fail_on_invalid=args.strict,
    )
    for error in report.errors:
        print(f"error: {error}", file=sys.stderr)
    if report.aborted:
        print(f"Validation failed: {report.validation.summary()}", file=sys.stderr)
        return 1
    if report.validation is not None and not report.validation.passed:
        for failure in report.validation.failures:
            print(f"invalid: {failure}", file=sys.stderr)
    print(f"\nPublished {report.posts_published} posts ({len(report.pages)} pages) to {report.output_dir}")
    return 0 if report.success else 1


COMMANDS = {
    "check": cmd_check,
    "list": cmd_list,
    "render": cmd_render,
    "publish": cmd_publish,
}


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        set_level(logging.DEBUG)

    try:
        return COMMANDS[args.command](args)
    except FileNotFoundError as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
