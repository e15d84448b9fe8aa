"""Shared fixtures for pluma tests."""

from __future__ import annotations

import pytest

from pluma import PostRenderer, SiteConfig

from post_builder import SWIFT_POST


@pytest.fixture
def renderer() -> PostRenderer:
    return PostRenderer(SiteConfig())


@pytest.fixture
def swift_post() -> str:
    return SWIFT_POST
