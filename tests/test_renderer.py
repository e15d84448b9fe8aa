"""Tests for PostRenderer."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from pluma import (
    CodeFence,
    ConfigError,
    MistuneConverter,
    ParseError,
    ParseErrorKind,
    PostRenderer,
    RenderError,
    SiteConfig,
    WarningKind,
)
from pluma.renderer import rebind_source

from post_builder import make_post


class UpperHighlighter:
    def highlight(self, code: str, language: str) -> str:
        return f"<pre data-lang='{language}'>{code.upper()}</pre>"

    def supports_language(self, language: str) -> bool:
        return True


class BrokenConverter:
    def convert(self, text: str) -> str:
        raise RuntimeError("converter exploded")


class TestPostRenderer:
    """End-to-end rendering of single documents."""

    def test_address(self, renderer: PostRenderer, swift_post: str) -> None:
        page = renderer(swift_post)
        assert page.address == "2021/02/20/nsoperation-subclassing"
        assert page.title == "NSOperation Subclassing"

    def test_block_kinds(self, renderer: PostRenderer, swift_post: str) -> None:
        page = renderer(swift_post)
        assert [b.kind for b in page.blocks] == ["prose", "prose", "code_fence", "prose"]

    def test_code_is_escaped_not_interpreted(self, renderer: PostRenderer, swift_post: str) -> None:
        """Markup inside a fence must come out as literal text."""
        page = renderer(swift_post)
        fence_html = page.blocks[2].html
        assert 'class="language-swift"' in fence_html
        assert "*not* emphasis" in fence_html
        assert "&lt;b&gt;not&lt;/b&gt;" in fence_html
        assert "<em>" not in fence_html

    def test_prose_is_converted(self, renderer: PostRenderer, swift_post: str) -> None:
        html = renderer(swift_post).body_html
        assert "<h1>Subclassing</h1>" in html
        assert "<code>start</code>" in html
        assert "<li>isExecuting</li>" in html

    def test_fence_code_unchanged_in_post(self, renderer: PostRenderer, swift_post: str) -> None:
        post = renderer.parse(swift_post)
        (fence,) = post.code_fences
        assert fence.code == (
            "override var isAsynchronous: Bool { true }\n"
            "// *not* emphasis, <b>not</b> html\n"
        )

    def test_render_string(self, renderer: PostRenderer) -> None:
        html = renderer.render_string(make_post(body="Hello *world*\n"))
        assert html == "<p>Hello <em>world</em></p>\n"

    def test_metadata_carried(self, renderer: PostRenderer, swift_post: str) -> None:
        page = renderer(swift_post, source_file="posts/op.md")
        assert page.metadata.categories == ("swift", "concurrency")
        assert page.source_file == "posts/op.md"
        assert page.metadata.date_text == "2021-02-20 10:00:00 -0800"

    def test_empty_body(self, renderer: PostRenderer) -> None:
        page = renderer(make_post(body=""))
        assert page.blocks == ()
        assert page.body_html == ""


class TestReferenceLinks:
    """Link definitions apply across prose blocks."""

    def test_definition_after_heading_resolves(self, renderer: PostRenderer) -> None:
        body = "See [the docs][docs].\n\n# Later\n\n[docs]: https://example.com/docs\n"
        page = renderer(make_post(body=body))
        assert '<a href="https://example.com/docs">the docs</a>' in page.body_html

    def test_definition_block_renders_nothing(self, renderer: PostRenderer) -> None:
        page = renderer(make_post(body="Text\n\n[x]: https://example.com\n"))
        assert page.blocks[-1].html == ""
        assert "https://example.com" not in page.body_html

    def test_bracketed_sentence_renders_once_in_place(self, renderer: PostRenderer) -> None:
        body = "# Intro\n\nSome intro.\n\n[Update]: I changed my mind about this.\n"
        html = renderer.render_string(make_post(body=body))
        assert html.count("changed my mind") == 1
        assert html.index("Some intro.") < html.index("changed my mind")

    def test_multiline_definition_resolves(self, renderer: PostRenderer) -> None:
        body = "See [docs].\n\n# Later\n\n[docs]:\n  https://example.com/docs\n"
        page = renderer(make_post(body=body))
        assert '<a href="https://example.com/docs">docs</a>' in page.body_html
        assert page.blocks[-1].html == ""


class TestConfigOptions:
    """SiteConfig switches for prose conversion."""

    def test_raw_html_passes_through_by_default(self, renderer: PostRenderer) -> None:
        html = renderer.render_string(make_post(body="Some <b>bold</b> text\n"))
        assert "<b>bold</b>" in html

    def test_escape_html(self) -> None:
        renderer = PostRenderer(SiteConfig(escape_html=True))
        html = renderer.render_string(make_post(body="Some <b>bold</b> text\n"))
        assert "&lt;b&gt;" in html

    def test_plugins(self) -> None:
        renderer = PostRenderer(SiteConfig(plugins=("strikethrough",)))
        html = renderer.render_string(make_post(body="~~gone~~\n"))
        assert "<del>gone</del>" in html

    def test_unknown_plugin(self) -> None:
        with pytest.raises(ConfigError, match="nope"):
            PostRenderer(SiteConfig(plugins=("nope",)))


class TestCollaborators:
    """Converter and highlighter are swappable."""

    def test_custom_highlighter(self) -> None:
        renderer = PostRenderer(highlighter=UpperHighlighter())
        page = renderer(make_post(body="```py\nx = 1\n```\n"))
        assert page.blocks[0].html == "<pre data-lang='py'>X = 1\n</pre>"

    def test_highlighter_gets_exact_code(self) -> None:
        seen: list[tuple[str, str]] = []

        class Recorder:
            def highlight(self, code: str, language: str) -> str:
                seen.append((code, language))
                return ""

            def supports_language(self, language: str) -> bool:
                return False

        code = "  indented\n\n\ttab\r\n"
        PostRenderer(highlighter=Recorder())(make_post(body=f"~~~ text extra\n{code}~~~\n"))
        assert seen == [(code, "text")]

    def test_converter_failure_is_render_error(self) -> None:
        renderer = PostRenderer(converter=BrokenConverter())
        with pytest.raises(RenderError, match="converter exploded") as exc_info:
            renderer(make_post(body="Text\n"), source_file="a.md")
        assert "a.md:6" in str(exc_info.value)

    def test_converter_not_called_for_code(self) -> None:
        renderer = PostRenderer(converter=BrokenConverter())
        page = renderer(make_post(body="```\ncode\n```\n"))
        assert isinstance(page.blocks[0].block, CodeFence)


class TestRenderErrors:
    """Malformed documents raise with whole-document line numbers."""

    def test_unterminated_fence_lineno(self, renderer: PostRenderer) -> None:
        raw = make_post(body="Intro\n\n```swift\nlet x = 1\n")
        with pytest.raises(ParseError) as exc_info:
            renderer(raw, source_file="a.md")
        err = exc_info.value
        assert err.kind is ParseErrorKind.UNTERMINATED_FENCE
        # 5 header lines, then Intro, blank, fence
        assert err.lineno == 8
        assert err.source_file == "a.md"

    def test_empty_slug(self, renderer: PostRenderer) -> None:
        with pytest.raises(ParseError) as exc_info:
            renderer(make_post(title="???"))
        assert exc_info.value.kind is ParseErrorKind.EMPTY_SLUG

    def test_missing_front_matter(self, renderer: PostRenderer) -> None:
        with pytest.raises(ParseError) as exc_info:
            renderer("# Just a heading\n")
        assert exc_info.value.kind is ParseErrorKind.MISSING_FRONT_MATTER


class TestWarnings:
    def test_unknown_key_warning_on_page(self, renderer: PostRenderer) -> None:
        page = renderer(make_post(extra={"author": "Jo"}), source_file="a.md")
        assert [w.kind for w in page.warnings] == [WarningKind.UNKNOWN_METADATA_KEY]
        assert page.metadata.extra["author"] == "Jo"

    def test_rebind_source(self, renderer: PostRenderer) -> None:
        page = renderer(make_post(extra={"author": "Jo"}), source_file="a.md")
        moved = rebind_source(page, "b.md")
        assert moved.source_file == "b.md"
        assert moved.warnings[0].source_file == "b.md"
        assert rebind_source(page, "a.md") is page


class TestThreadSafety:
    """A single renderer is shared by every worker."""

    def test_shared_renderer_concurrent(self, renderer: PostRenderer) -> None:
        posts = [
            make_post(title=f"Post {i}", body=f"# Heading {i}\n\n```\ncode {i}\n```\n\n- item {i}\n")
            for i in range(50)
        ]
        expected = [renderer(p).body_html for p in posts]
        with ThreadPoolExecutor(max_workers=8) as executor:
            actual = list(executor.map(lambda p: renderer(p).body_html, posts))
        assert actual == expected

    def test_converter_per_thread(self) -> None:
        converter = MistuneConverter()
        texts = [f"*item {i}*" for i in range(40)]
        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(converter.convert, texts))
        assert results == [f"<p><em>item {i}</em></p>\n" for i in range(40)]
