from __future__ import annotations

from pathlib import Path
from typing import Any

import httpx
import pytest

from wpexport.config import ExportConfig, OutputConfig, WordPressConfig

SITE = "https://blog.example.com"
POSTS_URL = f"{SITE}/wp-json/wp/v2/posts"


def make_record(post_id: int, slug: str | None = None, **overrides: Any) -> dict[str, Any]:
    """Build a record shaped like a /wp/v2/posts item."""
    record: dict[str, Any] = {
        "id": post_id,
        "date": "2024-01-02T03:04:05",
        "modified": "2024-01-03T00:00:00",
        "slug": slug or f"post-{post_id}",
        "title": {"rendered": f"Post {post_id}"},
        "excerpt": {"rendered": f"<p>Excerpt {post_id}</p>"},
        "content": {"rendered": f"<p>Body {post_id}</p>"},
        "categories": [1],
        "tags": [],
    }
    record.update(overrides)
    return record


class BrokenStream(httpx.AsyncByteStream):
    """Response body that yields some bytes and then drops the connection."""

    async def __aiter__(self):
        yield b"partial"
        raise httpx.ReadError("connection reset")


class RecordingSleep:
    """Async stand-in for asyncio.sleep that only records the delays."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def wp_config() -> WordPressConfig:
    return WordPressConfig(site=SITE, per_page=100, total_posts=150)


@pytest.fixture
def export_config(tmp_path: Path, wp_config: WordPressConfig) -> ExportConfig:
    return ExportConfig(wordpress=wp_config, output=OutputConfig(root=tmp_path / "out"))
