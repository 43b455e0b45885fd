"""Data models passed between the fetch, localize, transform and write stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Union

FrontMatterValue = Union[str, list[int]]


def quote_escape(value: str) -> str:
    return value.replace('"', '\\"')


def _rendered(value: Any) -> str:
    # WordPress wraps rich text as {"rendered": "...", "protected": false}
    if isinstance(value, Mapping):
        return str(value.get("rendered") or "")
    return "" if value is None else str(value)


@dataclass(frozen=True)
class Post:
    """A single post record as returned by ``/wp-json/wp/v2/posts``."""

    id: int
    title: str
    date: str
    modified: str
    excerpt: str
    content: str
    slug: str
    categories: tuple[int, ...] = ()
    tags: tuple[int, ...] = ()

    @classmethod
    def from_api(cls, record: Mapping[str, Any]) -> Post:
        return cls(
            id=int(record["id"]),
            title=_rendered(record.get("title")),
            date=str(record.get("date") or ""),
            modified=str(record.get("modified") or ""),
            excerpt=_rendered(record.get("excerpt")),
            content=_rendered(record.get("content")),
            slug=str(record.get("slug") or ""),
            categories=tuple(int(c) for c in record.get("categories") or ()),
            tags=tuple(int(t) for t in record.get("tags") or ()),
        )


@dataclass(frozen=True)
class ImageArtifact:
    """An image downloaded into the local archive."""

    url: str
    filename: str
    path: Path

    @property
    def relative_path(self) -> str:
        return f"./images/{self.filename}"


@dataclass(frozen=True)
class MarkdownDocument:
    """Front matter plus Markdown body for one post."""

    front_matter: dict[str, FrontMatterValue] = field(default_factory=dict)
    body: str = ""

    def render(self) -> str:
        lines = ["---"]
        for key, value in self.front_matter.items():
            if isinstance(value, list):
                lines.append(f"{key}: [{', '.join(str(v) for v in value)}]")
            else:
                lines.append(f'{key}: "{quote_escape(value)}"')
        lines.append("---")
        return "\n".join(lines) + "\n\n" + self.body
