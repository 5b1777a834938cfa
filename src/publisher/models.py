"""Data models for the publisher module."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from src.corpus.validator import ValidationReport


class PageKind(str, Enum):
    """Kinds of pages the pipeline writes."""
    POST = "post"
    INDEX = "index"
    TAG = "tag"
    FEED = "feed"


@dataclass
class PublishedPage:
    """A page written to the output directory."""
    kind: PageKind
    url: str
    file_path: str
    source: Optional[PurePosixPath] = None  # post path, for POST pages


@dataclass
class PublishError:
    """A post or file that could not be published."""
    path: Optional[PurePosixPath]
    message: str
    line: Optional[int] = None

    def __str__(self) -> str:
        location = str(self.path) if self.path else "<corpus>"
        if self.line is not None:
            location = f"{location}:{self.line}"
        return f"{location}: {self.message}"


@dataclass
class PublishReport:
    """Result of a publish run."""
    output_dir: str
    pages: list[PublishedPage] = field(default_factory=list)
    errors: list[PublishError] = field(default_factory=list)
    skipped_drafts: int = 0
    skipped_future: int = 0
    validation: Optional[ValidationReport] = None
    published_at: str = ""
    aborted: bool = False

    @property
    def success(self) -> bool:
        validation_passed = self.validation is None or self.validation.passed
        return not self.errors and not self.aborted and validation_passed

    @property
    def posts_published(self) -> int:
        return sum(1 for p in self.pages if p.kind == PageKind.POST)

    def pages_of(self, kind: PageKind) -> list[PublishedPage]:
        return [p for p in self.pages if p.kind == kind]
