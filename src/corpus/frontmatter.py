"""Front matter parsing.

A post starts with a delimited metadata block:

    ---            +++             {
    title: ...     title = "..."     "title": "..."
    ---            +++             }

followed by the Markdown body. YAML is decoded with PyYAML, TOML with
tomllib and JSON with the json module; the decoded mapping is validated
into PostMetadata.
"""

from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from .models import FrontMatterFormat, Post, PostMetadata

_DELIMITERS = {
    "---": FrontMatterFormat.YAML,
    "+++": FrontMatterFormat.TOML,
}


class FrontMatterError(ValueError):
    """Raised when a post's metadata block is missing or malformed."""

    def __init__(
        self,
        message: str,
        path: Optional[str | PurePosixPath | Path] = None,
        line: Optional[int] = None,
        fields: Optional[list[str]] = None,
    ):
        self.message = message
        self.path = str(path) if path is not None else None
        self.line = line
        self.fields = fields or []
        super().__init__(str(self))

    def __str__(self) -> str:
        location = self.path or "<string>"
        if self.line is not None:
            location = f"{location}:{self.line}"
        return f"{location}: {self.message}"


@dataclass
class FrontMatterBlock:
    """The raw metadata block and the body that follows it."""
    format: FrontMatterFormat
    raw: str
    body: str
    body_line: int  # 1-based line number where the body starts


def split_front_matter(text: str, path: Optional[str | PurePosixPath] = None) -> FrontMatterBlock:
    """Split a post's source into its metadata block and body.

    Args:
        text: Full file contents
        path: Source path, used only in error messages

    Returns:
        FrontMatterBlock

    Raises:
        FrontMatterError: If the block is missing or unterminated
    """
    text = text.lstrip("\ufeff").replace("\r\n", "\n")

    if text.startswith("{"):
        return _split_json(text, path)

    lines = text.split("\n")
    opener = lines[0].rstrip()
    fmt = _DELIMITERS.get(opener)
    if fmt is None:
        raise FrontMatterError("missing front matter block", path=path, line=1)

    for index in range(1, len(lines)):
        if lines[index].rstrip() == opener:
            raw = "\n".join(lines[1:index])
            body = "\n".join(lines[index + 1:])
            return FrontMatterBlock(format=fmt, raw=raw, body=body, body_line=index + 2)

    raise FrontMatterError(
        f"unterminated front matter block (no closing '{opener}')", path=path, line=1
    )


def _split_json(text: str, path: Optional[str | PurePosixPath]) -> FrontMatterBlock:
    try:
        _, end = json.JSONDecoder().raw_decode(text)
    except json.JSONDecodeError as e:
        raise FrontMatterError(f"invalid JSON front matter: {e.msg}", path=path, line=e.lineno) from e

    raw = text[:end]
    body = text[end:]
    if body.startswith("\n"):
        body = body[1:]
    body_line = raw.count("\n") + 2
    return FrontMatterBlock(format=FrontMatterFormat.JSON, raw=raw, body=body, body_line=body_line)


def decode_front_matter(block: FrontMatterBlock, path: Optional[str | PurePosixPath] = None) -> dict[str, Any]:
    """Decode the raw block into a mapping.

    Raises:
        FrontMatterError: On syntax errors or a non-mapping document
    """
    try:
        if block.format == FrontMatterFormat.YAML:
            data = yaml.safe_load(block.raw)
        elif block.format == FrontMatterFormat.TOML:
            data = tomllib.loads(block.raw)
        else:
            data = json.loads(block.raw)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        # +1 for the opening delimiter line, +1 for 0-based marks
        line = mark.line + 2 if mark is not None else None
        problem = getattr(e, "problem", None) or str(e)
        raise FrontMatterError(f"invalid YAML front matter: {problem}", path=path, line=line) from e
    except tomllib.TOMLDecodeError as e:
        raise FrontMatterError(f"invalid TOML front matter: {e}", path=path) from e
    except json.JSONDecodeError as e:
        raise FrontMatterError(f"invalid JSON front matter: {e.msg}", path=path, line=e.lineno) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise FrontMatterError(
            f"front matter must be a key/value mapping, got {type(data).__name__}",
            path=path,
        )
    return data


def parse_metadata(data: dict[str, Any], path: Optional[str | PurePosixPath] = None) -> PostMetadata:
    """Validate decoded front matter.

    Raises:
        FrontMatterError: Listing every invalid field
    """
    try:
        return PostMetadata.model_validate(data)
    except ValidationError as e:
        fields = [field_name(err) for err in e.errors()]
        problems = "; ".join(describe_error(err) for err in e.errors())
        raise FrontMatterError(f"invalid metadata: {problems}", path=path, fields=fields) from e


def field_name(error: dict) -> str:
    """Top-level front matter key a pydantic error refers to."""
    loc = error.get("loc") or ("",)
    return str(loc[0])


def describe_error(error: dict) -> str:
    loc = ".".join(str(part) for part in error.get("loc", ()))
    msg = error.get("msg", "invalid value")
    if error.get("type") == "missing":
        return f"{loc} is required"
    return f"{loc}: {msg}"


def parse_post(text: str, path: str | PurePosixPath, source_file: Optional[Path] = None) -> Post:
    """Parse a post from its source text.

    Args:
        text: File contents
        path: Corpus-relative path (the post's identity)
        source_file: Absolute file path, if read from disk

    Returns:
        Post
    """
    rel = PurePosixPath(path)
    block = split_front_matter(text, rel)
    data = decode_front_matter(block, rel)
    metadata = parse_metadata(data, rel)
    return Post(
        path=rel,
        metadata=metadata,
        body=block.body,
        front_matter_format=block.format,
        body_line=block.body_line,
        source_file=source_file,
    )


def load_post(file_path: Path, root: Path) -> Post:
    """Read and parse a post file located under a corpus root."""
    rel = PurePosixPath(file_path.relative_to(root).as_posix())
    text = file_path.read_text(encoding="utf-8")
    return parse_post(text, rel, source_file=file_path)
