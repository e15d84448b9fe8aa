"""Site configuration for pluma.

SiteConfig is an immutable settings object. Build it once and share it
between the renderer, the batch runner and the site builder. Every worker
thread reads the same instance, so no locking is needed.

Usage:
    config = SiteConfig(title="Notes", plugins=("table", "strikethrough"))

    # From a TOML file (a [site] table, or top-level keys)
    config = load_config("pluma.toml")

"""

from __future__ import annotations

import re
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, fields
from datetime import timedelta, timezone
from pathlib import Path
from typing import Any

from pluma.errors import ConfigError
from pluma.utils.hashing import hash_str

_OFFSET_RE = re.compile(r"^([+-])(\d{2}):?(\d{2})$")


def _parse_offset(text: str) -> timezone | None:
    match = _OFFSET_RE.match(text)
    if match is None:
        return None
    sign, hours, minutes = match.groups()
    delta = timedelta(hours=int(hours), minutes=int(minutes))
    return timezone(-delta if sign == "-" else delta)


@dataclass(frozen=True, slots=True)
class SiteConfig:
    """Immutable site configuration.

    Attributes:
        title: Site title shown on the index page
        base_url: Prefix joined to page addresses in links
        plugins: mistune plugin names enabled for prose blocks
        escape_html: Escape raw HTML in prose instead of passing it through
        highlighter: Name of the code highlighter ("plain" or "rosettes")
        ascii_slugs: Restrict slugs to ASCII letters, digits and '_'
        default_utc_offset: Offset assumed for dates written without one
        extra_keys: Metadata keys accepted without an unknown-key warning
        tie_break_collisions: Resolve address collisions by source order
        max_workers: Upper bound on render threads (None = CPU count)
        templates_dir: Directory whose templates override the built-ins

    """

    title: str = "Posts"
    base_url: str = "/"
    plugins: tuple[str, ...] = ()
    escape_html: bool = False
    highlighter: str = "plain"
    ascii_slugs: bool = False
    default_utc_offset: str = "+00:00"
    extra_keys: frozenset[str] = frozenset()
    tie_break_collisions: bool = False
    max_workers: int | None = None
    templates_dir: str | None = None

    def __post_init__(self) -> None:
        if _parse_offset(self.default_utc_offset) is None:
            raise ConfigError(
                f"default_utc_offset must look like +HH:MM, got {self.default_utc_offset!r}"
            )
        if self.max_workers is not None and self.max_workers < 1:
            raise ConfigError(f"max_workers must be positive, got {self.max_workers}")

    @property
    def default_tzinfo(self) -> timezone:
        """The default offset as a tzinfo."""
        tzinfo = _parse_offset(self.default_utc_offset)
        if tzinfo is None:
            raise ConfigError(f"Invalid default_utc_offset {self.default_utc_offset!r}")
        return tzinfo

    @classmethod
    def from_dict(cls, config_dict: Mapping[str, Any]) -> SiteConfig:
        """Create SiteConfig from a dictionary.

        Only keys that are SiteConfig fields are used; unknown keys are
        ignored. Lists are coerced to the tuple/frozenset the fields expect.

        Raises:
            ConfigError: If plugins or extra_keys is a bare string

        Example:
            >>> config = SiteConfig.from_dict({
            ...     "plugins": ["table"],
            ...     "unknown_key": "ignored",
            ... })
            >>> config.plugins
            ('table',)

        """
        valid_fields = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in config_dict.items() if k in valid_fields}
        for key in ("plugins", "extra_keys"):
            if isinstance(filtered.get(key), str):
                raise ConfigError(f"{key} must be a list of names, got a string")
        if "plugins" in filtered:
            filtered["plugins"] = tuple(filtered["plugins"])
        if "extra_keys" in filtered:
            filtered["extra_keys"] = frozenset(filtered["extra_keys"])
        return cls(**filtered)


DEFAULT_CONFIG: SiteConfig = SiteConfig()


def load_config(path: str | Path) -> SiteConfig:
    """Load a SiteConfig from a TOML file.

    Reads the ``[site]`` table when present, otherwise the top-level keys.

    Raises:
        ConfigError: If the file is missing or is not valid TOML
    """
    path = Path(path)
    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {path}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    table = data.get("site", data)
    if not isinstance(table, dict):
        raise ConfigError(f"[site] in {path} must be a table")
    try:
        return SiteConfig.from_dict(table)
    except TypeError as e:
        raise ConfigError(f"Invalid config in {path}: {e}") from e


def hash_config(config: SiteConfig) -> str:
    """Compute a stable hash of everything that affects rendered output.

    Args:
        config: SiteConfig to hash

    Returns:
        Hex digest of config hash
    """
    parts = (
        ",".join(config.plugins),
        str(config.escape_html),
        config.highlighter,
        str(config.ascii_slugs),
        config.default_utc_offset,
        ",".join(sorted(config.extra_keys)),
    )
    return hash_str("|".join(parts))


__all__ = [
    "DEFAULT_CONFIG",
    "SiteConfig",
    "hash_config",
    "load_config",
]
