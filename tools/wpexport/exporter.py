"""Core export logic – orchestrates API → images → Markdown → disk."""

from __future__ import annotations

import asyncio
import enum
import logging
from pathlib import Path

from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from .api import Sleep, WordPressAPI
from .config import ExportConfig
from .images import ImageLocalizer
from .markdown import transform
from .models import Post
from .writer import DocumentWriter

logger = logging.getLogger("wpexport.core")


class ExportState(enum.Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    PROCESSING = "processing"
    DONE = "done"


class Exporter:
    """Runs the full WordPress → Markdown archive pipeline for one site."""

    def __init__(
        self,
        cfg: ExportConfig | None = None,
        *,
        api: WordPressAPI | None = None,
        sleep: Sleep | None = None,
        show_progress: bool = False,
    ) -> None:
        self.cfg = cfg or ExportConfig()
        if api is None:
            api = WordPressAPI(self.cfg.wordpress, sleep=sleep or asyncio.sleep)
        self.api = api
        self.localizer = ImageLocalizer(
            self.api, self.cfg.output.images_dir, naming=self.cfg.output.image_naming
        )
        self.writer = DocumentWriter(self.cfg.output.root, self.cfg.output.images_dir)
        self.show_progress = show_progress
        self.state = ExportState.IDLE
        # Stats
        self.stats = {"posts": 0, "written": 0, "images": 0, "errors": 0}

    # ── single post ──────────────────────────────────────────────

    async def process_post(self, post: Post) -> Path:
        """Localize images, convert and write one post.  Returns the file path."""
        html, artifacts = await self.localizer.localize(post.content)
        self.stats["images"] += len(artifacts)
        document = transform(post, html)
        return self.writer.write(document, post.slug)

    # ── full run ─────────────────────────────────────────────────

    async def run(self) -> dict[str, int]:
        """Fetch every post and export them in source order.

        A failing post is logged and skipped; the run always reaches DONE.
        """
        self.state = ExportState.FETCHING
        posts = await self.api.fetch_all_posts(self.cfg.wordpress.total_posts)
        self.stats["posts"] = len(posts)
        logger.info("Fetched %d posts.", len(posts))

        self.state = ExportState.PROCESSING
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            TimeElapsedColumn(),
            disable=not self.show_progress,
        ) as progress:
            task = progress.add_task("posts", total=len(posts))
            for post in posts:
                try:
                    await self.process_post(post)
                    self.stats["written"] += 1
                except Exception:
                    logger.exception("Error processing post %d (%s)", post.id, post.slug)
                    self.stats["errors"] += 1
                progress.advance(task)

        self.state = ExportState.DONE
        logger.info(
            "Export complete: %d/%d posts written to %s",
            self.stats["written"],
            len(posts),
            self.cfg.output.root,
        )
        return self.stats

    # ── lifecycle ────────────────────────────────────────────────

    async def aclose(self) -> None:
        await self.api.aclose()

    async def __aenter__(self) -> Exporter:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()


async def export_site(cfg: ExportConfig, *, show_progress: bool = False) -> dict[str, int]:
    """Convenience wrapper: run one export and close the HTTP client."""
    async with Exporter(cfg, show_progress=show_progress) as exporter:
        return await exporter.run()
