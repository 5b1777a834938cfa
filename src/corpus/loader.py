"""Corpus loader — discovers post files and parses them into a Corpus."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Optional

from src.common.config import CorpusSettings, settings
from src.common.logging import setup_logging

from .frontmatter import FrontMatterError, load_post
from .models import Corpus

logger = setup_logging(module_name="corpus.loader")


@dataclass
class LoadError:
    """A file that could not be turned into a Post."""
    path: PurePosixPath
    message: str
    line: Optional[int] = None


@dataclass
class LoadResult:
    """Result of loading a corpus directory."""
    corpus: Corpus
    errors: list[LoadError] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors


class CorpusLoader:
    """Loads every post under a content directory.

    Usage:
        loader = CorpusLoader()
        result = loader.load(Path("content"))
        for post in result.corpus.published():
            ...
    """

    def __init__(self, config: CorpusSettings | None = None):
        self.config = config or settings.corpus

    def discover(self, root: Path) -> list[Path]:
        """List post files under root, sorted by relative path.

        Files and directories whose name starts with "_" or "." are skipped
        (section list pages like _index.md are not posts).
        """
        extensions = {ext.lower() for ext in self.config.extensions}
        files = []
        for candidate in root.rglob("*"):
            if not candidate.is_file():
                continue
            if candidate.suffix.lower() not in extensions:
                continue
            rel_parts = candidate.relative_to(root).parts
            if any(part.startswith(("_", ".")) for part in rel_parts):
                continue
            files.append(candidate)
        return sorted(files, key=lambda p: p.relative_to(root).as_posix())

    def load(self, root: Path | None = None, strict: bool = False) -> LoadResult:
        """Parse every discovered file.

        Args:
            root: Content directory (defaults to the configured one)
            strict: Raise on the first malformed file instead of collecting

        Returns:
            LoadResult with the corpus and any per-file errors

        Raises:
            FileNotFoundError: If root does not exist
            FrontMatterError: In strict mode, for the first malformed file
        """
        root = Path(root or self.config.content_dir)
        if not root.is_dir():
            raise FileNotFoundError(f"Content directory not found: {root}")

        corpus = Corpus(root=root)
        errors: list[LoadError] = []

        for file_path in self.discover(root):
            rel = PurePosixPath(file_path.relative_to(root).as_posix())
            try:
                post = load_post(file_path, root)
            except FrontMatterError as e:
                if strict:
                    raise
                logger.warning("Skipping %s", e)
                errors.append(LoadError(path=rel, message=e.message, line=e.line))
                continue
            except UnicodeDecodeError as e:
                if strict:
                    raise
                logger.warning("Skipping %s: not valid UTF-8", rel)
                errors.append(LoadError(path=rel, message=f"not valid UTF-8: {e.reason}"))
                continue

            corpus.posts.append(post)
            logger.debug("Loaded %s (%s)", rel, post.title)

        logger.info(
            "Loaded %d posts from %s (%d errors)", len(corpus.posts), root, len(errors)
        )
        return LoadResult(corpus=corpus, errors=errors)


def load_corpus(root: Path | None = None, strict: bool = False) -> LoadResult:
    """Convenience function to load a corpus with default settings."""
    return CorpusLoader().load(root, strict=strict)
