"""HTML → Markdown conversion and front matter assembly."""

from __future__ import annotations

import re

from markdownify import ATX, markdownify

from .models import FrontMatterValue, MarkdownDocument, Post

TAG_PATTERN = re.compile(r"<[^>]+>")


def strip_tags(text: str) -> str:
    """Drop HTML tags, leaving text and entities untouched."""
    return TAG_PATTERN.sub("", text)


def html_to_markdown(html: str) -> str:
    # markdownify renders <pre> blocks as ``` fences; older releases pad the
    # document with blank lines
    return markdownify(html, heading_style=ATX).strip("\n")


def build_front_matter(post: Post) -> dict[str, FrontMatterValue]:
    return {
        "title": post.title,
        "date": post.date,
        "modified": post.modified,
        "excerpt": strip_tags(post.excerpt),
        "slug": post.slug,
        "categories": list(post.categories),
        "tags": list(post.tags),
    }


def transform(post: Post, html: str) -> MarkdownDocument:
    """Build the Markdown document for ``post`` from its localized HTML."""
    return MarkdownDocument(front_matter=build_front_matter(post), body=html_to_markdown(html))
