"""Configuration and environment settings for the exporter."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class WordPressConfig:
    """WordPress REST API configuration.  The API caps ``per_page`` at 100."""
    site: str = "https://your-wordpress-site.com"
    per_page: int = 100
    total_posts: int = 500
    rate_limit_cooldown: float = 60.0  # seconds to wait after a 429
    request_delay: float = 0.0  # seconds between API requests
    timeout: float = 30.0
    user_agent: str = "wpexport/1.0"

    @property
    def posts_endpoint(self) -> str:
        return f"{self.site.rstrip('/')}/wp-json/wp/v2/posts"

    @classmethod
    def from_env(cls) -> WordPressConfig:
        return cls(
            site=os.getenv("WP_SITE", "https://your-wordpress-site.com"),
            per_page=int(os.getenv("WP_PER_PAGE", "100")),
            total_posts=int(os.getenv("WP_TOTAL_POSTS", "500")),
            rate_limit_cooldown=float(os.getenv("WP_RATE_LIMIT_COOLDOWN", "60")),
        )


@dataclass(frozen=True)
class OutputConfig:
    root: Path = Path("markdown-posts")
    image_naming: str = "basename"  # or "hash"

    @property
    def images_dir(self) -> Path:
        return self.root / "images"

    @classmethod
    def from_env(cls) -> OutputConfig:
        return cls(
            root=Path(os.getenv("WP_OUTPUT_DIR", "markdown-posts")),
            image_naming=os.getenv("WP_IMAGE_NAMING", "basename"),
        )


@dataclass
class ExportConfig:
    wordpress: WordPressConfig = field(default_factory=WordPressConfig.from_env)
    output: OutputConfig = field(default_factory=OutputConfig.from_env)
