# Publisher — corpus to static pages, plus the command line interface
"""
Publisher module for turning the post corpus into published pages.

Loads and validates the corpus, renders every published post, and writes
post pages, the home page, tag pages and an RSS feed.
"""

from .models import PageKind, PublishedPage, PublishError, PublishReport
from .pipeline import PublishPipeline

__all__ = [
    "PageKind",
    "PublishedPage",
    "PublishError",
    "PublishPipeline",
    "PublishReport",
]
