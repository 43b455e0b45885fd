"""WordPress REST API client – paginated, rate-limit aware post fetcher."""

from __future__ import annotations

import asyncio
import logging
import math
import time
from pathlib import Path
from typing import Any, Awaitable, Callable

import httpx

from .config import WordPressConfig
from .models import Post

logger = logging.getLogger("wpexport.api")

Sleep = Callable[[float], Awaitable[None]]


class WordPressAPI:
    """Thin async wrapper around ``/wp-json/wp/v2/posts``."""

    def __init__(
        self,
        cfg: WordPressConfig | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.cfg = cfg or WordPressConfig()
        self._sleep = sleep
        self._last_request: float = 0.0
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=self.cfg.timeout,
            headers={"User-Agent": self.cfg.user_agent},
            follow_redirects=True,
        )

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    # ── rate limiting ────────────────────────────────────────────
    async def _throttle(self) -> None:
        if not self.cfg.request_delay:
            return
        elapsed = time.monotonic() - self._last_request
        if elapsed < self.cfg.request_delay:
            await self._sleep(self.cfg.request_delay - elapsed)
        self._last_request = time.monotonic()

    async def _get_page(self, page: int, per_page: int) -> Any:
        params = {"page": page, "per_page": per_page, "_embed": "true"}
        while True:
            await self._throttle()
            resp = await self._client.get(self.cfg.posts_endpoint, params=params)
            if resp.status_code == 429:
                logger.warning(
                    "Rate limited on page %d; waiting %.0fs before retrying",
                    page,
                    self.cfg.rate_limit_cooldown,
                )
                await self._sleep(self.cfg.rate_limit_cooldown)
                continue
            resp.raise_for_status()
            return resp.json()

    # ── public API ───────────────────────────────────────────────

    async def fetch_posts(self, page: int = 1, per_page: int | None = None) -> list[Post]:
        """Fetch one page of posts.

        A 429 response is retried after the configured cooldown for as long
        as the server keeps answering 429.  Any other failure is logged and
        reported as an empty page.
        """
        per_page = per_page or self.cfg.per_page
        try:
            data = await self._get_page(page, per_page)
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Error fetching posts (page %d): %s", page, exc)
            return []

        if not isinstance(data, list):
            logger.error("Unexpected payload for page %d: %s", page, type(data).__name__)
            return []

        posts: list[Post] = []
        for record in data:
            try:
                posts.append(Post.from_api(record))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping malformed post record on page %d: %s", page, exc)
        return posts

    async def fetch_all_posts(self, total_posts: int | None = None) -> list[Post]:
        """Fetch every page needed to cover ``total_posts`` in source order.

        Stops at the first empty page, even if fewer pages than expected
        were consumed.
        """
        if total_posts is None:
            total_posts = self.cfg.total_posts
        per_page = self.cfg.per_page
        total_pages = math.ceil(total_posts / per_page) if total_posts > 0 else 0

        all_posts: list[Post] = []
        for page in range(1, total_pages + 1):
            logger.info("Fetching page %d of %d...", page, total_pages)
            posts = await self.fetch_posts(page, per_page)
            if not posts:
                break
            all_posts.extend(posts)
        return all_posts

    async def download(self, url: str, dest: Path) -> None:
        """Stream ``url`` into ``dest``, creating parent directories.

        The body is streamed into a ``.part`` sibling that only replaces
        ``dest`` once complete, so a failed download never touches an
        existing file.  Raises ``httpx.HTTPError`` or ``OSError``.
        """
        dest.parent.mkdir(parents=True, exist_ok=True)
        part = dest.with_name(dest.name + ".part")
        async with self._client.stream("GET", url) as resp:
            resp.raise_for_status()
            try:
                with part.open("wb") as fh:
                    async for chunk in resp.aiter_bytes():
                        fh.write(chunk)
                part.replace(dest)
            except BaseException:
                part.unlink(missing_ok=True)
                raise

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> WordPressAPI:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()
