"""Builders for raw post text used across the test suite."""

from __future__ import annotations


def make_post(
    title: str = "NSOperation Subclassing",
    date: str = "2021-02-20",
    body: str = "Some prose.\n",
    *,
    layout: str = "post",
    categories: str | None = None,
    extra: dict[str, str] | None = None,
) -> str:
    """Build raw post text with a front matter header."""
    lines = ["---", f"layout: {layout}", f"title: {title}", f"date: {date}"]
    if categories is not None:
        lines.append(f"categories: {categories}")
    for key, value in (extra or {}).items():
        lines.append(f"{key}: {value}")
    lines.append("---")
    return "\n".join(lines) + "\n" + body


SWIFT_POST = make_post(
    title="NSOperation Subclassing",
    date="2021-02-20 10:00:00 -0800",
    categories="[swift, concurrency]",
    body=(
        "# Subclassing\n"
        "\n"
        "Override `start` and manage state yourself.\n"
        "\n"
        "```swift\n"
        "override var isAsynchronous: Bool { true }\n"
        "// *not* emphasis, <b>not</b> html\n"
        "```\n"
        "\n"
        "- isExecuting\n"
        "- isFinished\n"
    ),
)
