"""Tests for building a site directory."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from pluma import AddressCollisionError, RenderError, SiteConfig, WarningKind, build_site, load_sources

from post_builder import SWIFT_POST, make_post


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    content = tmp_path / "content"
    (content / "2021").mkdir(parents=True)
    (content / "2021" / "op.md").write_text(SWIFT_POST, encoding="utf-8")
    (content / "hello.md").write_text(
        make_post(title="Hello", date="2020-05-01", body="Hi.\n"), encoding="utf-8"
    )
    (content / "notes.txt").write_text("not a post", encoding="utf-8")
    return content


class TestLoadSources:
    def test_sorted_relative_posix(self, content_dir: Path) -> None:
        documents = load_sources(content_dir)
        assert [d.source_file for d in documents] == ["2021/op.md", "hello.md"]
        assert documents[0].text == SWIFT_POST

    def test_pattern(self, content_dir: Path) -> None:
        documents = load_sources(content_dir, "*.txt")
        assert [d.source_file for d in documents] == ["notes.txt"]

    def test_missing_dir(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_sources(tmp_path / "nope")


class TestBuildSite:
    def test_writes_pages_index_and_manifest(self, content_dir: Path, tmp_path: Path) -> None:
        out = tmp_path / "public"
        result = build_site(content_dir, out)

        assert result.failures == ()
        page = out / "2021" / "02" / "20" / "nsoperation-subclassing" / "index.html"
        assert page.is_file()
        assert "&lt;b&gt;not&lt;/b&gt;" in page.read_text(encoding="utf-8")
        assert (out / "2020" / "05" / "01" / "hello" / "index.html").is_file()

        index_html = (out / "index.html").read_text(encoding="utf-8")
        assert index_html.index("NSOperation") < index_html.index("Hello")

        manifest = json.loads((out / "manifest.json").read_text(encoding="utf-8"))
        assert [e["address"] for e in manifest["entries"]] == [
            "2021/02/20/nsoperation-subclassing",
            "2020/05/01/hello",
        ]

    def test_bad_post_skipped(self, content_dir: Path, tmp_path: Path) -> None:
        (content_dir / "broken.md").write_text("no header\n", encoding="utf-8")
        out = tmp_path / "public"
        result = build_site(content_dir, out)
        assert [r.source_file for r in result.failures] == ["broken.md"]
        assert len(result.pages) == 2
        assert (out / "index.html").is_file()

    def test_layout_warning_reported(self, content_dir: Path, tmp_path: Path) -> None:
        (content_dir / "odd.md").write_text(
            make_post(title="Odd", layout="gallery"), encoding="utf-8"
        )
        result = build_site(content_dir, tmp_path / "public")
        kinds = [w.kind for w in result.warnings]
        assert WarningKind.UNKNOWN_LAYOUT in kinds
        (warning,) = [w for w in result.warnings if w.kind is WarningKind.UNKNOWN_LAYOUT]
        assert warning.source_file == "odd.md"

    def test_broken_template_skips_only_its_page(self, content_dir: Path, tmp_path: Path) -> None:
        templates_dir = tmp_path / "templates"
        templates_dir.mkdir()
        (templates_dir / "broken.html").write_text("{{ page.missing.attribute }}", encoding="utf-8")
        (content_dir / "odd.md").write_text(
            make_post(title="Odd", date="2019-01-01", layout="broken"), encoding="utf-8"
        )
        out = tmp_path / "public"
        result = build_site(content_dir, out, config=SiteConfig(templates_dir=str(templates_dir)))

        (failure,) = result.failures
        assert failure.source_file == "odd.md"
        assert isinstance(failure.error, RenderError)
        assert (out / "2020" / "05" / "01" / "hello" / "index.html").is_file()
        assert not (out / "2019").exists()
        manifest = json.loads((out / "manifest.json").read_text(encoding="utf-8"))
        assert "2019/01/01/odd" not in [e["address"] for e in manifest["entries"]]
        assert len(manifest["entries"]) == 2

    def test_collision_writes_nothing(self, content_dir: Path, tmp_path: Path) -> None:
        (content_dir / "zzz.md").write_text(make_post(title="Hello", date="2020-05-01"), encoding="utf-8")
        out = tmp_path / "public"
        with pytest.raises(AddressCollisionError):
            build_site(content_dir, out)
        assert not out.exists()

    def test_collision_tie_break(self, content_dir: Path, tmp_path: Path) -> None:
        (content_dir / "zzz.md").write_text(
            make_post(title="Hello", date="2020-05-01", body="Loser.\n"), encoding="utf-8"
        )
        out = tmp_path / "public"
        result = build_site(content_dir, out, config=SiteConfig(tie_break_collisions=True))
        assert [r.source_file for r in result.failures] == ["zzz.md"]
        html = (out / "2020" / "05" / "01" / "hello" / "index.html").read_text(encoding="utf-8")
        assert "Hi." in html
        assert "Loser." not in html

    def test_site_title(self, content_dir: Path, tmp_path: Path) -> None:
        out = tmp_path / "public"
        build_site(content_dir, out, config=SiteConfig(title="My Notes"))
        assert "<h1>My Notes</h1>" in (out / "index.html").read_text(encoding="utf-8")
