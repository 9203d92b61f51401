from __future__ import annotations

from pathlib import Path

import pytest

from src.svg_clip.capture import wrapper
from src.svg_clip.render.errors import SourceError

_SVG = '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 10 10"><circle r="4"/></svg>'


def test_http_urls_are_remote() -> None:
    source = wrapper.resolve_source("https://example.com/art/logo.svg?v=2")

    assert source.is_remote
    assert source.url == "https://example.com/art/logo.svg?v=2"
    assert source.stem == "logo"


def test_relative_path_resolves_against_cwd(tmp_path: Path) -> None:
    (tmp_path / "logo.svg").write_text(_SVG, encoding="utf-8")

    source = wrapper.resolve_source("logo.svg", cwd=tmp_path)

    assert not source.is_remote
    assert source.local_path == (tmp_path / "logo.svg").resolve()
    assert source.stem == "logo"


def test_file_url_is_local(tmp_path: Path) -> None:
    svg = tmp_path / "anim.SVG"
    svg.write_text(_SVG, encoding="utf-8")

    source = wrapper.resolve_source(svg.as_uri())

    assert source.local_path == svg.resolve()


@pytest.mark.parametrize("raw", ["", "   ", "picture.png"])
def test_invalid_sources_raise(raw: str, tmp_path: Path) -> None:
    (tmp_path / "picture.png").write_bytes(b"png")

    with pytest.raises(SourceError):
        wrapper.resolve_source(raw, cwd=tmp_path)


def test_missing_svg_raises(tmp_path: Path) -> None:
    with pytest.raises(SourceError, match="not found"):
        wrapper.resolve_source("nope.svg", cwd=tmp_path)


def test_wrapper_embeds_svg_in_transparent_centred_page(tmp_path: Path) -> None:
    svg = tmp_path / "logo.svg"
    svg.write_text("\ufeff" + _SVG, encoding="utf-8")
    source = wrapper.resolve_source(str(svg))

    path = wrapper.write_wrapper(source, tmp_path / "work")
    html = path.read_text(encoding="utf-8")

    assert path.name == wrapper.WRAPPER_FILENAME
    assert _SVG in html
    assert "\ufeff" not in html
    assert "background: transparent;" in html
    assert "justify-content: center;" in html


def test_opaque_wrapper_omits_transparent_background() -> None:
    html = wrapper.build_wrapper_html(_SVG, transparent=False, title="<x>")

    assert "background: transparent;" not in html
    assert "<title>&lt;x&gt;</title>" in html


def test_remote_source_has_no_wrapper(tmp_path: Path) -> None:
    source = wrapper.resolve_source("http://example.com/a.svg")

    with pytest.raises(SourceError):
        wrapper.write_wrapper(source, tmp_path)
