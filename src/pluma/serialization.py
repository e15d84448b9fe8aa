"""Serialization of blocks and pages.

- serialize_body: rebuild exact source text from body blocks
- page_to_dict / page_to_json: JSON-compatible view of a rendered page,
  for manifests, caches on disk and debugging

All JSON output is deterministic (sorted keys).

Thread Safety:
    All functions are pure. Safe to call from any thread.

"""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from pluma.nodes import CodeFence, Prose

if TYPE_CHECKING:
    from pluma.renderer import RenderedPage


def serialize_body(blocks: Iterable[Prose | CodeFence]) -> str:
    """Rebuild body text from blocks.

    For any body that scans without error,
    ``serialize_body(render_body(body)) == body`` exactly: prose keeps its
    raw text and code fences keep their marker lines.
    """
    return "".join(block.source() for block in blocks)


def _block_to_dict(block: Prose | CodeFence) -> dict[str, Any]:
    loc = block.location
    data: dict[str, Any] = {
        "lineno": loc.lineno,
        "end_lineno": loc.end_lineno,
        "offset": loc.offset,
        "end_offset": loc.end_offset,
    }
    if isinstance(block, CodeFence):
        data.update(type="code_fence", language=block.language, info=block.info, code=block.code)
    else:
        data.update(type="prose", kind=block.kind, text=block.text)
    return data


def page_to_dict(page: RenderedPage) -> dict[str, Any]:
    """Convert a rendered page to a JSON-compatible dict."""
    meta = page.metadata
    return {
        "address": page.address,
        "source_file": page.source_file,
        "metadata": {
            "layout": meta.layout,
            "title": meta.title,
            "date": meta.date.isoformat(),
            "date_text": meta.date_text,
            "categories": list(meta.categories),
            "extra": dict(meta.extra),
        },
        "blocks": [
            {**_block_to_dict(rendered.block), "html": rendered.html} for rendered in page.blocks
        ],
        "warnings": [str(w) for w in page.warnings],
    }


def page_to_json(page: RenderedPage, *, indent: int | None = None) -> str:
    """Serialize a rendered page to JSON (sorted keys)."""
    return json.dumps(page_to_dict(page), indent=indent, sort_keys=True, ensure_ascii=False)
