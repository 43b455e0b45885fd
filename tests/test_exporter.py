"""End-to-end tests for the export pipeline."""

from __future__ import annotations

import httpx
import pytest
import respx

from conftest import POSTS_URL, make_record
from wpexport.api import WordPressAPI
from wpexport.config import ExportConfig, OutputConfig, WordPressConfig
from wpexport.exporter import Exporter, ExportState

PHOTO = "https://cdn.example.com/a/b/photo.jpg"


def _mock_site(records: list[dict]) -> respx.Route:
    def handler(request: httpx.Request) -> httpx.Response:
        page = int(request.url.params["page"])
        per_page = int(request.url.params["per_page"])
        start = (page - 1) * per_page
        return httpx.Response(200, json=records[start : start + per_page])

    return respx.get(POSTS_URL).mock(side_effect=handler)


@pytest.mark.asyncio
@respx.mock
async def test_run_writes_one_file_per_post_with_local_images(export_config, sleep):
    records = [
        make_record(1, slug="first", content={"rendered": f'<h2>Intro</h2><img src="{PHOTO}">'}),
        make_record(2, slug="second"),
    ]
    _mock_site(records)
    respx.get(PHOTO).mock(return_value=httpx.Response(200, content=b"jpeg"))

    async with Exporter(export_config, sleep=sleep) as exporter:
        assert exporter.state is ExportState.IDLE
        stats = await exporter.run()
        assert exporter.state is ExportState.DONE

    root = export_config.output.root
    first = (root / "first.md").read_text(encoding="utf-8")
    assert "./images/photo.jpg" in first
    assert PHOTO not in first
    assert "## Intro" in first
    assert (root / "images" / "photo.jpg").read_bytes() == b"jpeg"
    assert (root / "second.md").exists()
    assert stats == {"posts": 2, "written": 2, "images": 1, "errors": 0}


@pytest.mark.asyncio
@respx.mock
async def test_failing_post_does_not_stop_the_run(export_config, sleep, monkeypatch, caplog):
    _mock_site([make_record(1, slug="ok-1"), make_record(2, slug="bad"), make_record(3, slug="ok-3")])

    async with Exporter(export_config, sleep=sleep) as exporter:
        real_write = exporter.writer.write

        def flaky_write(document, slug):
            if slug == "bad":
                raise OSError("disk full")
            return real_write(document, slug)

        monkeypatch.setattr(exporter.writer, "write", flaky_write)
        stats = await exporter.run()
        assert exporter.state is ExportState.DONE

    root = export_config.output.root
    assert sorted(p.name for p in root.glob("*.md")) == ["ok-1.md", "ok-3.md"]
    assert stats["errors"] == 1
    assert stats["written"] == 2
    assert "Error processing post 2 (bad)" in caplog.text


@pytest.mark.asyncio
@respx.mock
async def test_posts_are_written_in_fetch_order(export_config, sleep, monkeypatch):
    _mock_site([make_record(i, slug=f"p{i}") for i in (5, 3, 9)])
    written: list[str] = []

    async with Exporter(export_config, sleep=sleep) as exporter:
        real_write = exporter.writer.write

        def recording_write(document, slug):
            written.append(slug)
            return real_write(document, slug)

        monkeypatch.setattr(exporter.writer, "write", recording_write)
        await exporter.run()

    assert written == ["p5", "p3", "p9"]


@pytest.mark.asyncio
@respx.mock
async def test_rerun_produces_identical_files(export_config, sleep):
    _mock_site(
        [
            make_record(1, slug="quoted", title={"rendered": 'A "quoted" title'}),
            make_record(2, slug="pic", content={"rendered": f'<img src="{PHOTO}">'}),
        ]
    )
    respx.get(PHOTO).mock(return_value=httpx.Response(200, content=b"jpeg"))
    root = export_config.output.root

    async with Exporter(export_config, sleep=sleep) as exporter:
        await exporter.run()
    first_run = {p.name: p.read_bytes() for p in root.glob("*.md")}

    async with Exporter(export_config, sleep=sleep) as exporter:
        await exporter.run()
    second_run = {p.name: p.read_bytes() for p in root.glob("*.md")}

    assert first_run == second_run
    assert set(first_run) == {"quoted.md", "pic.md"}


@pytest.mark.asyncio
@respx.mock
async def test_rate_limited_page_is_retried_before_moving_on(tmp_path, sleep):
    cfg = ExportConfig(
        wordpress=WordPressConfig(site="https://blog.example.com", per_page=1, total_posts=3),
        output=OutputConfig(root=tmp_path / "out"),
    )
    responses = iter(
        [
            httpx.Response(200, json=[make_record(1)]),
            httpx.Response(200, json=[make_record(2)]),
            httpx.Response(429),
            httpx.Response(200, json=[make_record(3)]),
        ]
    )
    route = respx.get(POSTS_URL).mock(side_effect=lambda request: next(responses))

    async with WordPressAPI(cfg.wordpress, sleep=sleep) as api:
        stats = await Exporter(cfg, api=api).run()

    pages = [c.request.url.params["page"] for c in route.calls]
    assert pages == ["1", "2", "3", "3"]
    assert sleep.calls == [60.0]
    assert stats["written"] == 3


@pytest.mark.asyncio
@respx.mock
async def test_empty_site_reaches_done(export_config, sleep):
    _mock_site([])

    async with Exporter(export_config, sleep=sleep) as exporter:
        stats = await exporter.run()
        assert exporter.state is ExportState.DONE

    assert stats["posts"] == 0
