"""Data models for the post corpus.

A post is identified by its path relative to the corpus root. Metadata is
validated with Pydantic; the post and corpus containers are dataclasses.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Any, Optional

from pydantic import BaseModel, Field, StrictBool, field_validator

_DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_WORD_RE = re.compile(r"\S+")

WORDS_PER_MINUTE = 213


class FrontMatterFormat(str, Enum):
    """Supported front matter encodings, keyed by their delimiter."""
    YAML = "yaml"  # ---
    TOML = "toml"  # +++
    JSON = "json"  # { ... }


class PostMetadata(BaseModel):
    """Front matter of a post."""

    model_config = {
        "frozen": True,
        "extra": "allow",
        "str_strip_whitespace": True,
    }

    title: str = Field(min_length=1)
    date: datetime
    summary: str = ""
    tags: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    author: str = ""
    draft: StrictBool = False
    slug: Optional[str] = None
    lastmod: Optional[datetime] = None

    @field_validator("date", "lastmod", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> Any:
        if isinstance(value, bool) or isinstance(value, (int, float)):
            raise ValueError("must be a date or datetime, not a number")
        if isinstance(value, datetime):
            return value
        if isinstance(value, date):
            return datetime.combine(value, time.min)
        if isinstance(value, str) and _DATE_ONLY_RE.match(value.strip()):
            return datetime.combine(date.fromisoformat(value.strip()), time.min)
        return value

    @field_validator("date", "lastmod")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @field_validator("tags", "categories", mode="before")
    @classmethod
    def _coerce_terms(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple)):
            return value
        seen: list[str] = []
        for term in value:
            if term is None or isinstance(term, (dict, list)):
                raise ValueError(f"invalid term: {term!r}")
            term = str(term).strip()
            if term and term not in seen:
                seen.append(term)
        return seen

    @field_validator("summary", mode="before")
    @classmethod
    def _empty_summary(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("slug")
    @classmethod
    def _single_segment(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        if not value or "/" in value or "\\" in value or ".." in value:
            raise ValueError(f"must be a single URL path segment, got {value!r}")
        return value

    @field_validator("author", mode="before")
    @classmethod
    def _join_authors(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, (list, tuple)):
            return ", ".join(str(a).strip() for a in value if str(a).strip())
        return value

    @property
    def extras(self) -> dict[str, Any]:
        """Front matter keys that are not part of the known schema."""
        return dict(self.model_extra or {})


@dataclass
class Post:
    """A single document of the corpus."""
    path: PurePosixPath  # relative to the corpus root; the post's identity
    metadata: PostMetadata
    body: str
    front_matter_format: FrontMatterFormat = FrontMatterFormat.YAML
    body_line: int = 1  # line of the source file where the body starts
    source_file: Optional[Path] = None

    @property
    def title(self) -> str:
        return self.metadata.title

    @property
    def date(self) -> datetime:
        return self.metadata.date

    @property
    def is_draft(self) -> bool:
        return self.metadata.draft

    @property
    def tags(self) -> list[str]:
        return self.metadata.tags

    @property
    def slug(self) -> str:
        """Front matter slug, else the file stem (bundle dir for index.md)."""
        if self.metadata.slug:
            return self.metadata.slug
        if self.path.stem == "index" and len(self.path.parts) > 1:
            return self.path.parent.name
        return self.path.stem

    @property
    def section(self) -> str:
        """First directory under the corpus root, or "" for top-level files."""
        parts = self.path.parts
        if self.path.stem == "index":
            parts = parts[:-1]
        return parts[0] if len(parts) > 1 else ""

    @property
    def url(self) -> str:
        if self.section:
            return f"/{self.section}/{self.slug}/"
        return f"/{self.slug}/"

    @property
    def word_count(self) -> int:
        return len(_WORD_RE.findall(self.body))

    def reading_time(self, words_per_minute: int = WORDS_PER_MINUTE) -> int:
        """Estimated reading time in whole minutes (at least 1)."""
        return max(1, math.ceil(self.word_count / words_per_minute))

    def is_future(self, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return self.date > now

    def param(self, name: str) -> Any:
        """Look up a front matter value by key, including extra keys."""
        if name in PostMetadata.model_fields:
            return getattr(self.metadata, name)
        return self.metadata.extras.get(name)


@dataclass
class Corpus:
    """All posts found under a content root."""
    root: Path
    posts: list[Post] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.posts)

    def __iter__(self):
        return iter(self.posts)

    def get(self, path: str | PurePosixPath) -> Optional[Post]:
        """Return the post with this corpus-relative path."""
        wanted = PurePosixPath(path)
        for post in self.posts:
            if post.path == wanted:
                return post
        return None

    def published(
        self,
        include_drafts: bool = False,
        include_future: bool = False,
        now: Optional[datetime] = None,
    ) -> list[Post]:
        """Posts that would be published, newest first."""
        now = now or datetime.now(timezone.utc)
        selected = [
            p for p in self.posts
            if (include_drafts or not p.is_draft)
            and (include_future or not p.is_future(now))
        ]
        return sorted(selected, key=lambda p: (p.date, str(p.path)), reverse=True)

    def tags(self, posts: Optional[list[Post]] = None) -> dict[str, list[Post]]:
        """Map each tag to its posts, tags sorted case-insensitively."""
        index: dict[str, list[Post]] = {}
        for post in posts if posts is not None else self.posts:
            for tag in post.tags:
                index.setdefault(tag, []).append(post)
        return dict(sorted(index.items(), key=lambda kv: kv[0].lower()))

    def duplicate_urls(self) -> dict[str, list[Post]]:
        """URLs claimed by more than one post."""
        by_url: dict[str, list[Post]] = {}
        for post in self.posts:
            by_url.setdefault(post.url, []).append(post)
        return {url: ps for url, ps in by_url.items() if len(ps) > 1}

    def find(self, target: str) -> Optional[Post]:
        """Resolve a ref target: a relative path (with or without
        extension), a file name or a slug."""
        target = target.strip().lstrip("/")
        if not target:
            return None
        wanted = PurePosixPath(target)
        for post in self.posts:
            if post.path == wanted or post.path.with_suffix("") == wanted:
                return post
            if post.path.stem == "index" and post.path.parent == wanted:
                return post
        for post in self.posts:
            if post.path.name == target or post.path.stem == target:
                return post
        for post in self.posts:
            if post.slug == target:
                return post
        return None
