"""Image localization – download remote post images and rewrite their URLs."""

from __future__ import annotations

import hashlib
import logging
import posixpath
from pathlib import Path
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup

from .api import WordPressAPI
from .models import ImageArtifact

logger = logging.getLogger("wpexport.images")

NAMING_STRATEGIES = ("basename", "hash")


def find_image_urls(html: str) -> list[str]:
    """Return absolute http(s) ``<img src>`` values in document order."""
    soup = BeautifulSoup(html, "html.parser")
    urls: list[str] = []
    for img in soup.find_all("img"):
        src = img.get("src")
        if src and src.startswith(("http://", "https://")):
            urls.append(src)
    return urls


def url_forms(url: str) -> list[str]:
    """Spellings of ``url`` that may appear in raw post HTML.

    The parser hands back decoded attribute values, while WordPress writes
    ``&`` in query strings as ``&amp;`` or ``&#038;``.
    """
    forms = [url]
    if "&" in url:
        for entity in ("&amp;", "&#038;", "&#38;"):
            forms.append(url.replace("&", entity))
    return forms


def image_filename(url: str, naming: str = "basename") -> str:
    """Derive the local filename for ``url``.

    ``basename`` keeps the last path segment, so two different URLs with the
    same basename share a file.  ``hash`` prefixes the first 8 hex digits of
    the URL's MD5 to keep them apart.
    """
    filename = posixpath.basename(urlparse(url).path)
    if not filename:
        raise ValueError(f"no filename in image URL {url!r}")
    if naming == "hash":
        digest = hashlib.md5(url.encode("utf-8")).hexdigest()[:8]
        filename = f"{digest}-{filename}"
    return filename


class ImageLocalizer:
    """Download a post's images into ``images_dir`` and point the HTML at them."""

    def __init__(self, api: WordPressAPI, images_dir: Path, naming: str = "basename") -> None:
        if naming not in NAMING_STRATEGIES:
            raise ValueError(f"unknown image naming strategy: {naming!r}")
        self.api = api
        self.images_dir = images_dir
        self.naming = naming

    async def localize(self, html: str) -> tuple[str, list[ImageArtifact]]:
        """Return the rewritten HTML and the images that were downloaded.

        Images that fail to download keep their original URL in the HTML.
        A URL already rewritten by an earlier occurrence is not fetched again.
        """
        artifacts: list[ImageArtifact] = []
        for url in find_image_urls(html):
            forms = [form for form in url_forms(url) if form in html]
            if not forms:
                if url not in {a.url for a in artifacts}:
                    logger.warning("Image %s not found verbatim in content; skipping", url)
                continue
            try:
                filename = image_filename(url, self.naming)
                dest = self.images_dir / filename
                await self.api.download(url, dest)
            except (httpx.HTTPError, OSError, ValueError) as exc:
                logger.warning("Failed to download image %s: %s", url, exc)
                continue

            artifact = ImageArtifact(url=url, filename=filename, path=dest)
            logger.info("Downloaded image: %s to %s", url, dest)
            for form in forms:
                html = html.replace(form, artifact.relative_path)
            artifacts.append(artifact)
        return html, artifacts
