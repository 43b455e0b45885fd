"""Disk writer for the Markdown archive."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from slugify import slugify

from .models import MarkdownDocument

logger = logging.getLogger("wpexport.writer")


WORD_BREAK = re.compile(r"[\s-]+")


def document_filename(slug: str) -> str:
    """``<slug>.md`` keeping only ``a-z``, ``0-9`` and hyphens.

    Characters outside that set are dropped, not turned into hyphens, so
    ``a.b`` becomes ``ab``; whitespace and hyphens still separate words.
    """
    words = (slugify(word, separator="") for word in WORD_BREAK.split(slug))
    return f"{'-'.join(w for w in words if w) or 'untitled'}.md"


class DocumentWriter:
    """Write rendered documents under ``root``, one file per post."""

    def __init__(self, root: Path, images_dir: Path | None = None) -> None:
        self.root = root
        self.images_dir = images_dir or root / "images"

    def write(self, document: MarkdownDocument, slug: str) -> Path:
        """Write ``document`` to ``<root>/<slug>.md``, replacing any existing file."""
        self.root.mkdir(parents=True, exist_ok=True)
        self.images_dir.mkdir(parents=True, exist_ok=True)

        path = self.root / document_filename(slug)
        path.write_text(document.render(), encoding="utf-8")
        logger.info("Saved Markdown: %s", path)
        return path
