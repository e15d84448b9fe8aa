"""Page templating with Jinja2.

Every rendered page goes through a template named after its ``layout``
(``post`` -> ``post.html``). Built-in templates cover ``default``, ``post``
and the ``index`` listing; a ``templates_dir`` overrides any of them by
file name.

Template context:
    page:   RenderedPage (``page.body_html`` is inserted as markup)
    site:   SiteConfig
    url:    Absolute URL of the page
    index:  SiteIndex (index template only)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from jinja2 import (
    BaseLoader,
    ChoiceLoader,
    DictLoader,
    Environment,
    FileSystemLoader,
    TemplateError,
    TemplateNotFound,
    select_autoescape,
)
from markupsafe import Markup

from pluma.config import DEFAULT_CONFIG, SiteConfig
from pluma.errors import Diagnostic, RenderError, WarningKind
from pluma.utils.logger import get_logger

if TYPE_CHECKING:
    from pluma.index import SiteIndex
    from pluma.renderer import RenderedPage

logger = get_logger(__name__)

DEFAULT_LAYOUT = "default"
INDEX_TEMPLATE = "index.html"
# Not usable as post layouts
_RESERVED_LAYOUTS = frozenset({"base", "index"})

_BASE = """\
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{% block title %}{{ site.title }}{% endblock %}</title>
</head>
<body>
{% block content %}{% endblock %}
</body>
</html>
"""

_DEFAULT = """\
{% extends "base.html" %}
{% block title %}{{ page.title }} | {{ site.title }}{% endblock %}
{% block content %}
<article>
<h1>{{ page.title }}</h1>
{{ body }}
</article>
{% endblock %}
"""

_POST = """\
{% extends "base.html" %}
{% block title %}{{ page.title }} | {{ site.title }}{% endblock %}
{% block content %}
<article class="post">
<header>
<h1>{{ page.title }}</h1>
<time datetime="{{ page.metadata.date.isoformat() }}">{{ page.metadata.date_text }}</time>
{% if page.metadata.categories %}
<ul class="categories">
{% for category in page.metadata.categories %}<li>{{ category }}</li>
{% endfor %}</ul>
{% endif %}
</header>
{{ body }}
</article>
{% endblock %}
"""

_INDEX = """\
{% extends "base.html" %}
{% block content %}
<h1>{{ site.title }}</h1>
<ul class="posts">
{% for entry in index.entries %}<li><a href="{{ site_url(entry.address) }}">{{ entry.title }}</a> <time datetime="{{ entry.date.isoformat() }}">{{ entry.date_text }}</time></li>
{% endfor %}</ul>
{% for category, entries in index.by_category.items() %}
<section class="category">
<h2>{{ category }}</h2>
<ul>
{% for entry in entries %}<li><a href="{{ site_url(entry.address) }}">{{ entry.title }}</a></li>
{% endfor %}</ul>
</section>
{% endfor %}
{% endblock %}
"""

BUILTIN_TEMPLATES: dict[str, str] = {
    "base.html": _BASE,
    "default.html": _DEFAULT,
    "post.html": _POST,
    "index.html": _INDEX,
}


def page_url(base_url: str, address: str) -> str:
    """Join the site base URL and a page address.

    Example:
        >>> page_url("https://example.com/blog", "2021/02/20/post")
        'https://example.com/blog/2021/02/20/post/'
    """
    return f"{base_url.rstrip('/')}/{address}/"


class PageTemplates:
    """Jinja2 environment for page and index templates.

    Usage:
        >>> templates = PageTemplates(SiteConfig(title="Notes"))
        >>> html, warnings = templates.render_page(page)

    Thread Safety:
        Jinja2 environments are safe to share once built; rendering keeps
        all state in the call.

    """

    __slots__ = ("_config", "_env")

    def __init__(self, config: SiteConfig | None = None) -> None:
        self._config = config or DEFAULT_CONFIG
        loaders: list[BaseLoader] = []
        if self._config.templates_dir:
            loaders.append(FileSystemLoader(self._config.templates_dir))
        loaders.append(DictLoader(BUILTIN_TEMPLATES))
        self._env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=select_autoescape(default=True, default_for_string=True),
            keep_trailing_newline=True,
        )
        self._env.globals["site_url"] = lambda address: page_url(self._config.base_url, address)

    @property
    def environment(self) -> Environment:
        return self._env

    def template_for(self, layout: str) -> tuple[str, Diagnostic | None]:
        """Resolve a layout to a template name.

        Unknown layouts fall back to ``default.html`` with a warning.
        """
        name = f"{layout}.html"
        try:
            if layout not in _RESERVED_LAYOUTS:
                self._env.get_template(name)
                return name, None
        except TemplateNotFound:
            pass
        return f"{DEFAULT_LAYOUT}.html", Diagnostic(
            WarningKind.UNKNOWN_LAYOUT,
            f"No template for layout '{layout}', using '{DEFAULT_LAYOUT}'",
        )

    def check_layout(self, page: RenderedPage) -> tuple[str, tuple[Diagnostic, ...]]:
        """Resolve a page's template, locating any fallback warning in its source."""
        name, warning = self.template_for(page.metadata.layout)
        if warning is None:
            return name, ()
        lineno = page.metadata.key_lines.get("layout")
        warning = Diagnostic(warning.kind, warning.message, lineno, page.source_file)
        logger.debug("%s", warning)
        return name, (warning,)

    def render_page(self, page: RenderedPage) -> tuple[str, tuple[Diagnostic, ...]]:
        """Render a page through its layout template.

        Returns:
            (html, warnings) where warnings holds the layout fallback, if any

        Raises:
            RenderError: If the template fails to render
        """
        name = f"{page.metadata.layout}.html"
        try:
            name, warnings = self.check_layout(page)
            html = self._env.get_template(name).render(
                page=page,
                site=self._config,
                body=Markup(page.body_html),
                url=page_url(self._config.base_url, page.address),
            )
        except TemplateError as e:
            raise RenderError(f"Template {name!r} failed for {page.address}: {e}") from e
        return html, warnings

    def render_index(self, index: SiteIndex) -> str:
        """Render the index listing.

        Raises:
            RenderError: If the template fails to render
        """
        try:
            return self._env.get_template(INDEX_TEMPLATE).render(
                index=index,
                site=self._config,
                url=self._config.base_url.rstrip("/") + "/",
            )
        except TemplateError as e:
            raise RenderError(f"Template {INDEX_TEMPLATE!r} failed: {e}") from e
