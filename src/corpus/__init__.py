# Corpus — post model, front matter parsing, loading and validation
"""
The post corpus: documents made of a front matter block and a Markdown
body, identified by their path under the content directory.
"""

from .frontmatter import (
    FrontMatterBlock,
    FrontMatterError,
    decode_front_matter,
    load_post,
    parse_metadata,
    parse_post,
    split_front_matter,
)
from .loader import CorpusLoader, LoadError, LoadResult, load_corpus
from .models import Corpus, FrontMatterFormat, Post, PostMetadata
from .validator import CorpusValidator, ValidationReport, ValidationResult

__all__ = [
    "Corpus",
    "CorpusLoader",
    "CorpusValidator",
    "FrontMatterBlock",
    "FrontMatterError",
    "FrontMatterFormat",
    "LoadError",
    "LoadResult",
    "Post",
    "PostMetadata",
    "ValidationReport",
    "ValidationResult",
    "decode_front_matter",
    "load_corpus",
    "load_post",
    "parse_metadata",
    "parse_post",
    "split_front_matter",
]
