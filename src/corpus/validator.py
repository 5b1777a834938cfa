"""Validation checks for the post corpus.

Per file: front matter parseable, title present, date valid, draft flag
boolean, other metadata well typed, shortcodes well formed. Across the
corpus: no two posts share a URL and every ref/relref target exists.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any, Optional

from pydantic import ValidationError

from src.common.logging import setup_logging
from src.shortcodes import ShortcodeCall, ShortcodeError, ShortcodeResolver

from .frontmatter import (
    FrontMatterError,
    decode_front_matter,
    describe_error,
    field_name,
    split_front_matter,
)
from .loader import CorpusLoader
from .models import Corpus, Post, PostMetadata

logger = setup_logging(module_name="corpus.validator")

# Fields with their own check; everything else is reported under "metadata"
_FIELD_CHECKS = ("title", "date", "draft")
_REF_SHORTCODES = ("ref", "relref")


@dataclass
class ValidationResult:
    """Outcome of a single check."""
    check_name: str
    passed: bool
    detail: str = ""
    path: Optional[PurePosixPath] = None
    line: Optional[int] = None

    def __str__(self) -> str:
        location = str(self.path) if self.path else "<corpus>"
        if self.line is not None:
            location = f"{location}:{self.line}"
        status = "ok" if self.passed else "FAIL"
        return f"{location} [{self.check_name}] {status}: {self.detail}"


@dataclass
class ValidationReport:
    """All check results for a corpus."""
    results: list[ValidationResult] = field(default_factory=list)
    files_checked: int = 0

    @property
    def failures(self) -> list[ValidationResult]:
        return [r for r in self.results if not r.passed]

    @property
    def passed(self) -> bool:
        return not self.failures

    def by_path(self) -> dict[Optional[PurePosixPath], list[ValidationResult]]:
        grouped: dict[Optional[PurePosixPath], list[ValidationResult]] = {}
        for result in self.results:
            grouped.setdefault(result.path, []).append(result)
        return grouped

    def failed_checks(self) -> Counter:
        return Counter(r.check_name for r in self.failures)

    def summary(self) -> str:
        failing_files = {r.path for r in self.failures if r.path is not None}
        return (
            f"{self.files_checked} files checked, {len(self.failures)} failures "
            f"in {len(failing_files)} files"
        )


@dataclass
class _FileOutcome:
    results: list[ValidationResult]
    post: Optional[Post] = None
    calls: list[ShortcodeCall] = field(default_factory=list)


class CorpusValidator:
    """Validates post files and the corpus they form.

    Usage:
        validator = CorpusValidator()
        report = validator.validate(Path("content"))
        if not report.passed:
            for failure in report.failures:
                print(failure)
    """

    def __init__(
        self,
        loader: CorpusLoader | None = None,
        resolver: ShortcodeResolver | None = None,
    ) -> None:
        self.loader = loader or CorpusLoader()
        self.resolver = resolver or ShortcodeResolver()

    def validate(self, root: Path | None = None) -> ValidationReport:
        """Run every check over a content directory.

        Raises:
            FileNotFoundError: If root does not exist
        """
        root = Path(root or self.loader.config.content_dir)
        if not root.is_dir():
            raise FileNotFoundError(f"Content directory not found: {root}")

        report = ValidationReport()
        corpus = Corpus(root=root)
        calls_by_post: dict[PurePosixPath, list[ShortcodeCall]] = {}

        for file_path in self.loader.discover(root):
            rel = PurePosixPath(file_path.relative_to(root).as_posix())
            outcome = self._validate_file(file_path, rel)
            report.results.extend(outcome.results)
            report.files_checked += 1
            if outcome.post is not None:
                corpus.posts.append(outcome.post)
                calls_by_post[rel] = outcome.calls

        report.results.extend(self.check_unique_urls(corpus))
        report.results.extend(self.check_refs(corpus, calls_by_post))

        if report.passed:
            logger.info("Corpus valid: %s", report.summary())
        else:
            logger.warning("Corpus has problems: %s", report.summary())
        return report

    def validate_text(self, text: str, path: str | PurePosixPath) -> list[ValidationResult]:
        """Run the per-file checks on source text."""
        return self._validate_text(text, PurePosixPath(path)).results

    def _validate_file(self, file_path: Path, rel: PurePosixPath) -> _FileOutcome:
        try:
            text = file_path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            return _FileOutcome(results=[
                ValidationResult("front_matter", False, f"not valid UTF-8: {e.reason}", path=rel)
            ])
        outcome = self._validate_text(text, rel)
        if outcome.post is not None:
            outcome.post.source_file = file_path
        return outcome

    def _validate_text(self, text: str, rel: PurePosixPath) -> _FileOutcome:
        try:
            block = split_front_matter(text, rel)
            data = decode_front_matter(block, rel)
        except FrontMatterError as e:
            return _FileOutcome(results=[
                ValidationResult("front_matter", False, e.message, path=rel, line=e.line)
            ])

        results = [
            ValidationResult("front_matter", True, f"{block.format.value} block", path=rel)
        ]
        metadata, field_results = self._check_fields(data, rel)
        results.extend(field_results)

        calls: list[ShortcodeCall] = []
        try:
            calls = self.resolver.parse(block.body, first_line=block.body_line)
            count = 0
            for top in calls:
                for call in top.walk():
                    self.resolver.registry.check(call)
                    count += 1
            results.append(ValidationResult("shortcodes", True, f"{count} directives", path=rel))
        except ShortcodeError as e:
            calls = []
            results.append(ValidationResult("shortcodes", False, e.message, path=rel, line=e.line))

        post = None
        if metadata is not None:
            post = Post(
                path=rel,
                metadata=metadata,
                body=block.body,
                front_matter_format=block.format,
                body_line=block.body_line,
            )
        return _FileOutcome(results=results, post=post, calls=calls)

    def _check_fields(
        self, data: dict[str, Any], rel: PurePosixPath
    ) -> tuple[Optional[PostMetadata], list[ValidationResult]]:
        try:
            metadata = PostMetadata.model_validate(data)
            errors: list[dict] = []
        except ValidationError as e:
            metadata = None
            errors = e.errors()

        problems: dict[str, list[str]] = {}
        for error in errors:
            name = field_name(error)
            check = name if name in _FIELD_CHECKS else "metadata"
            problems.setdefault(check, []).append(describe_error(error))

        results = []
        for check in (*_FIELD_CHECKS, "metadata"):
            if check in problems:
                results.append(ValidationResult(check, False, "; ".join(problems[check]), path=rel))
            elif check == "draft" and "draft" not in data:
                results.append(ValidationResult(check, True, "not set (defaults to false)", path=rel))
            else:
                results.append(ValidationResult(check, True, "ok", path=rel))
        return metadata, results

    def check_unique_urls(self, corpus: Corpus) -> list[ValidationResult]:
        """No two posts may publish to the same URL."""
        duplicates = corpus.duplicate_urls()
        if not duplicates:
            return [ValidationResult("unique_url", True, f"{len(corpus)} distinct URLs")]
        results = []
        for url, posts in duplicates.items():
            others = ", ".join(str(p.path) for p in posts)
            for post in posts:
                results.append(ValidationResult(
                    "unique_url", False, f"{url} is shared by {others}", path=post.path
                ))
        return results

    def check_refs(
        self,
        corpus: Corpus,
        calls_by_post: dict[PurePosixPath, list[ShortcodeCall]],
    ) -> list[ValidationResult]:
        """Every ref/relref directive must point at an existing post."""
        results = []
        checked = 0
        for rel, calls in calls_by_post.items():
            for top in calls:
                for call in top.walk():
                    if call.name not in _REF_SHORTCODES:
                        continue
                    checked += 1
                    target = (call.get(0) or call.get("path")).partition("#")[0]
                    if target and corpus.find(target) is None:
                        results.append(ValidationResult(
                            "refs", False, f"{call.name} target not found: '{target}'",
                            path=rel, line=call.line,
                        ))
        if not results:
            results.append(ValidationResult("refs", True, f"{checked} references resolved"))
        return results
