"""Project configuration and paths.

Loads settings from config/settings.yaml and environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

# === Paths ===
PROJECT_ROOT = Path(__file__).parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "config"
CONTENT_DIR = PROJECT_ROOT / "content"
OUTPUT_DIR = PROJECT_ROOT / "public"

# Load .env from project root
load_dotenv(PROJECT_ROOT / ".env")


class SiteSettings(BaseModel):
    """Site-wide metadata used in rendered pages and the feed."""
    title: str = "Notes on C++ and Unreal"
    description: str = "Long-form articles on templates, CRT shutdown and editor lifecycles."
    base_url: str = "https://example.com/"
    language: str = "en"


class CorpusSettings(BaseModel):
    """Where posts live and which files count as posts."""
    content_dir: str = str(CONTENT_DIR)
    extensions: list[str] = Field(default_factory=lambda: [".md", ".markdown"])


class RenderSettings(BaseModel):
    """Markdown rendering settings."""
    markdown_extensions: list[str] = Field(
        default_factory=lambda: [
            "tables",
            "fenced_code",
            "footnotes",
            "toc",
            "attr_list",
            "sane_lists",
        ]
    )
    summary_words: int = Field(default=70, gt=0)
    words_per_minute: int = Field(default=213, gt=0)


class PublishSettings(BaseModel):
    """Output settings for the publish pipeline."""
    output_dir: str = str(OUTPUT_DIR)
    include_drafts: bool = False
    include_future: bool = False
    feed_limit: int = Field(default=20, ge=0)


class Settings(BaseModel):
    """Top-level application settings."""
    site: SiteSettings = Field(default_factory=SiteSettings)
    corpus: CorpusSettings = Field(default_factory=CorpusSettings)
    render: RenderSettings = Field(default_factory=RenderSettings)
    publish: PublishSettings = Field(default_factory=PublishSettings)

    @classmethod
    def load(cls, settings_path: Path | None = None) -> Settings:
        """Load settings from config/settings.yaml, falling back to defaults.

        Environment variables BLOG_BASE_URL, BLOG_CONTENT_DIR and
        BLOG_OUTPUT_DIR override the file.
        """
        settings_path = settings_path or CONFIG_DIR / "settings.yaml"
        data: dict = {}
        if settings_path.exists():
            with open(settings_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        loaded = cls(**data)
        loaded._apply_env()
        loaded._resolve_dirs()
        return loaded

    def _apply_env(self) -> None:
        base_url = os.getenv("BLOG_BASE_URL", "")
        if base_url:
            self.site.base_url = base_url
        content_dir = os.getenv("BLOG_CONTENT_DIR", "")
        if content_dir:
            self.corpus.content_dir = content_dir
        output_dir = os.getenv("BLOG_OUTPUT_DIR", "")
        if output_dir:
            self.publish.output_dir = output_dir

    def _resolve_dirs(self) -> None:
        """Make relative directories absolute against the project root."""
        self.corpus.content_dir = str(resolve_path(self.corpus.content_dir))
        self.publish.output_dir = str(resolve_path(self.publish.output_dir))


def resolve_path(value: str | Path) -> Path:
    """Resolve a configured path relative to the project root."""
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = PROJECT_ROOT / path
    return path


# Singleton settings instance
settings = Settings.load()
