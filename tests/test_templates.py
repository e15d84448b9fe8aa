"""Tests for Jinja2 page templates."""

from __future__ import annotations

from pathlib import Path

import pytest

from pluma import PageTemplates, PostRenderer, RenderError, SiteConfig, WarningKind, build_index
from pluma.templates import page_url

from post_builder import make_post


class TestPageUrl:
    @pytest.mark.parametrize(
        "base,expected",
        [
            ("/", "/2021/02/20/a/"),
            ("", "/2021/02/20/a/"),
            ("https://example.com/blog", "https://example.com/blog/2021/02/20/a/"),
            ("https://example.com/blog/", "https://example.com/blog/2021/02/20/a/"),
        ],
    )
    def test_join(self, base: str, expected: str) -> None:
        assert page_url(base, "2021/02/20/a") == expected


class TestRenderPage:
    """Layouts select templates; body HTML is inserted unescaped."""

    def test_post_layout(self, renderer: PostRenderer, swift_post: str) -> None:
        html, warnings = PageTemplates(SiteConfig(title="Notes")).render_page(renderer(swift_post))
        assert warnings == ()
        assert '<article class="post">' in html
        assert "<title>NSOperation Subclassing | Notes</title>" in html
        assert "<h1>Subclassing</h1>" in html
        assert '<li>swift</li>' in html
        assert 'datetime="2021-02-20T10:00:00-08:00"' in html

    def test_code_stays_escaped(self, renderer: PostRenderer, swift_post: str) -> None:
        html, _ = PageTemplates().render_page(renderer(swift_post))
        assert "&lt;b&gt;not&lt;/b&gt;" in html
        assert "&amp;lt;" not in html

    def test_title_autoescaped(self, renderer: PostRenderer) -> None:
        page = renderer(make_post(title="Less <than> more"))
        html, _ = PageTemplates().render_page(page)
        assert "Less &lt;than&gt; more" in html

    def test_unknown_layout_falls_back(self, renderer: PostRenderer) -> None:
        page = renderer(make_post(layout="gallery"), source_file="a.md")
        html, warnings = PageTemplates().render_page(page)
        assert "<article>" in html
        (warning,) = warnings
        assert warning.kind is WarningKind.UNKNOWN_LAYOUT
        assert warning.lineno == 2
        assert warning.source_file == "a.md"

    @pytest.mark.parametrize("layout", ["index", "base"])
    def test_reserved_layouts_fall_back(self, renderer: PostRenderer, layout: str) -> None:
        page = renderer(make_post(layout=layout))
        name, warnings = PageTemplates().check_layout(page)
        assert name == "default.html"
        assert len(warnings) == 1

    def test_templates_dir_overrides(self, tmp_path: Path, renderer: PostRenderer) -> None:
        (tmp_path / "post.html").write_text("CUSTOM {{ page.title }} {{ url }}\n{{ body }}")
        (tmp_path / "gallery.html").write_text("GALLERY {{ page.title }}")
        templates = PageTemplates(SiteConfig(templates_dir=str(tmp_path), base_url="/blog"))

        html, _ = templates.render_page(renderer(make_post(body="*hi*\n")))
        assert html.startswith("CUSTOM NSOperation Subclassing /blog/2021/02/20/nsoperation-subclassing/")
        assert "<em>hi</em>" in html

        html, warnings = templates.render_page(renderer(make_post(layout="gallery")))
        assert html == "GALLERY NSOperation Subclassing"
        assert warnings == ()

    def test_template_failure_is_render_error(self, tmp_path: Path, renderer: PostRenderer) -> None:
        (tmp_path / "post.html").write_text("{{ page.missing.attribute }}")
        templates = PageTemplates(SiteConfig(templates_dir=str(tmp_path)))
        with pytest.raises(RenderError, match="post.html"):
            templates.render_page(renderer(make_post()))

    def test_template_syntax_error_is_render_error(self, tmp_path: Path, renderer: PostRenderer) -> None:
        (tmp_path / "post.html").write_text("{% if %}", encoding="utf-8")
        templates = PageTemplates(SiteConfig(templates_dir=str(tmp_path)))
        with pytest.raises(RenderError, match="post.html"):
            templates.render_page(renderer(make_post()))


class TestRenderIndex:
    def test_listing(self, renderer: PostRenderer) -> None:
        pages = [
            renderer(make_post(title="First", date="2021-01-01", categories="[swift]")),
            renderer(make_post(title="Second", date="2021-02-01")),
        ]
        html = PageTemplates(SiteConfig(title="Notes", base_url="/blog/")).render_index(build_index(pages))
        assert "<h1>Notes</h1>" in html
        assert html.index("Second") < html.index("First")
        assert 'href="/blog/2021/01/01/first/"' in html
        assert "<h2>swift</h2>" in html

    def test_empty_index(self) -> None:
        html = PageTemplates().render_index(build_index([]))
        assert '<ul class="posts">' in html
