"""ContextVar-based render configuration for gfmark.

RenderOptions is immutable and set once per render call; every pipeline
stage reads it from a ContextVar instead of carrying it through arguments.

Thread Safety:
    ContextVars are thread-local. Each thread (and each asyncio
    task) has independent storage, so concurrent renders with different
    options never observe each other's configuration.

Usage:
    # Through the public API
    html = gfmark.render(text, RenderOptions(enable_tables=False))

    # Direct parser usage
    with render_options_context(RenderOptions(tab_width=2)):
        doc = Parser(text).parse()
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any

from gfmark.errors import ConfigError


class SanitizePolicy(Enum):
    """What the renderer does with raw HTML and unsafe URLs.

    ALLOW_RAW_HTML: raw HTML passes through unescaped (the tag filter and
        event-handler stripping still apply).
    SANITIZE: only allow-listed tags and attributes survive; unsafe URL
        schemes are replaced by an empty placeholder.
    ESCAPE_ALL: raw HTML is always written as escaped text.
    """

    ALLOW_RAW_HTML = "allow-raw-html"
    SANITIZE = "sanitize"
    ESCAPE_ALL = "escape-all"


@dataclass(frozen=True, slots=True)
class RenderOptions:
    """Immutable render configuration.

    Attributes:
        sanitize_policy: Raw HTML / URL policy (default: SANITIZE)
        enable_tables: Enable GFM pipe tables
        enable_strikethrough: Enable ~~strikethrough~~
        enable_autolinks: Enable bare www./http(s):// and e-mail autolinks
        enable_task_lists: Enable - [ ] / - [x] list items
        tab_width: Column width used to expand tabs in indentation
    """

    sanitize_policy: SanitizePolicy = SanitizePolicy.SANITIZE
    enable_tables: bool = True
    enable_strikethrough: bool = True
    enable_autolinks: bool = True
    enable_task_lists: bool = True
    tab_width: int = 4

    def __post_init__(self) -> None:
        policy = self.sanitize_policy
        if not isinstance(policy, SanitizePolicy):
            try:
                policy = SanitizePolicy(policy)
            except ValueError:
                allowed = ", ".join(p.value for p in SanitizePolicy)
                raise ConfigError(
                    "sanitize_policy", f"{self.sanitize_policy!r} is not one of {allowed}"
                ) from None
            object.__setattr__(self, "sanitize_policy", policy)

        width = self.tab_width
        if isinstance(width, bool) or not isinstance(width, int) or width < 1:
            raise ConfigError("tab_width", f"expected a positive integer, got {width!r}")

    @classmethod
    def from_dict(cls, config_dict: Mapping[str, Any]) -> RenderOptions:
        """Create RenderOptions from a mapping, ignoring unknown keys.

        Example:
            >>> opts = RenderOptions.from_dict({"sanitize_policy": "escape-all", "x": 1})
            >>> opts.sanitize_policy
            <SanitizePolicy.ESCAPE_ALL: 'escape-all'>
        """
        valid_fields = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in config_dict.items() if k in valid_fields})


# Module-level default (immutable, reused)
_DEFAULT_OPTIONS: RenderOptions = RenderOptions()

_render_options: ContextVar[RenderOptions] = ContextVar(
    "render_options",
    default=_DEFAULT_OPTIONS,
)


def get_render_options() -> RenderOptions:
    """Get the RenderOptions active in this context."""
    return _render_options.get()


def set_render_options(options: RenderOptions) -> None:
    """Set RenderOptions for the current context only."""
    _render_options.set(options)


def reset_render_options() -> None:
    """Restore the module default options for the current context."""
    _render_options.set(_DEFAULT_OPTIONS)


@contextmanager
def render_options_context(options: RenderOptions) -> Iterator[None]:
    """Temporarily activate options, restoring the previous ones on exit.

    Example:
        >>> with render_options_context(RenderOptions(enable_tables=False)):
        ...     get_render_options().enable_tables
        False
    """
    token = _render_options.set(options)
    try:
        yield
    finally:
        _render_options.reset(token)


__all__ = [
    "RenderOptions",
    "SanitizePolicy",
    "get_render_options",
    "render_options_context",
    "reset_render_options",
    "set_render_options",
]
