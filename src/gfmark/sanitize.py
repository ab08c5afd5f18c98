"""Raw HTML and URL filtering for the HTML renderer.

Every raw HTML block and span passes through an HtmlSanitizer before it is
written. What survives depends on the SanitizePolicy:

- ALLOW_RAW_HTML: markup passes through, except that the GFM tag filter
  escapes the ``<`` of ``script``, ``iframe``, ``style`` and similar tags,
  and event-handler (``on*``), ``style`` and ``srcdoc`` attributes are
  removed.
- SANITIZE: only allow-listed tags and attributes survive. Filtered tags
  are dropped together with their content, other unknown tags are
  unwrapped, comments and declarations are removed, and URL attributes
  with a dangerous scheme are dropped.
- ESCAPE_ALL: the raw text is escaped and shown literally.

Example:
    >>> from gfmark.config import SanitizePolicy
    >>> HtmlSanitizer(SanitizePolicy.SANITIZE).clean('<b onclick="x()">hi</b><script>x()</script>')
    '<b>hi</b>'
    >>> is_dangerous_url(" JavaScript:alert(1)")
    True
"""

from __future__ import annotations

import html
import re

from gfmark.config import SanitizePolicy
from gfmark.scanner.patterns import ATTRIBUTE_RE, TAG_PARTS_RE
from gfmark.utils.logger import get_logger
from gfmark.utils.text import escape_html

logger = get_logger(__name__)

# GFM "disallowed raw HTML" extension
FILTERED_TAGS = frozenset(
    (
        "iframe",
        "noembed",
        "noframes",
        "plaintext",
        "script",
        "style",
        "textarea",
        "title",
        "xmp",
    )
)

ALLOWED_TAGS = frozenset(
    (
        "a",
        "abbr",
        "b",
        "blockquote",
        "br",
        "caption",
        "cite",
        "code",
        "dd",
        "del",
        "details",
        "div",
        "dl",
        "dt",
        "em",
        "figcaption",
        "figure",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "hr",
        "i",
        "img",
        "ins",
        "kbd",
        "li",
        "mark",
        "ol",
        "p",
        "pre",
        "q",
        "s",
        "samp",
        "small",
        "span",
        "strike",
        "strong",
        "sub",
        "summary",
        "sup",
        "table",
        "tbody",
        "td",
        "tfoot",
        "th",
        "thead",
        "tr",
        "u",
        "ul",
        "var",
    )
)

_GLOBAL_ATTRIBUTES = frozenset(("class", "dir", "id", "lang", "title"))

ALLOWED_ATTRIBUTES: dict[str, frozenset[str]] = {
    "a": frozenset(("href", "name")),
    "blockquote": frozenset(("cite",)),
    "del": frozenset(("cite", "datetime")),
    "details": frozenset(("open",)),
    "img": frozenset(("alt", "height", "src", "width")),
    "ins": frozenset(("cite", "datetime")),
    "li": frozenset(("value",)),
    "ol": frozenset(("reversed", "start", "type")),
    "q": frozenset(("cite",)),
    "td": frozenset(("align", "colspan", "rowspan")),
    "th": frozenset(("align", "colspan", "rowspan", "scope")),
}

_URL_ATTRIBUTES = frozenset(("cite", "href", "src"))

# Attributes removed even when raw HTML is allowed
_ALWAYS_STRIPPED_ATTRIBUTES = frozenset(("srcdoc", "style"))

_DANGEROUS_SCHEMES = ("javascript:", "vbscript:", "file:", "data:")

_SAFE_DATA_IMAGE = re.compile(r"data:image/(?:png|gif|jpeg|webp)[;,]")

# Whitespace and control characters browsers ignore inside a scheme
_IGNORED_URL_CHARS = re.compile(r"[\x00-\x20\x7f]+")

# Comments, processing instructions, CDATA and declarations (most specific first)
_NON_TAG_MARKUP = (("<!--", "-->"), ("<?", "?>"), ("<![CDATA[", "]]>"), ("<!", ">"))

# "<" that a browser would read as the start of a tag
_TAG_START = re.compile(r"</?[A-Za-z]")


def is_dangerous_url(url: str) -> bool:
    """Check if a URL uses a script-capable or local-file scheme.

    ``data:`` is allowed only for common raster image types.
    """
    normalized = _IGNORED_URL_CHARS.sub("", html.unescape(url)).casefold()
    if not normalized.startswith(_DANGEROUS_SCHEMES):
        return False
    return not _SAFE_DATA_IMAGE.match(normalized)


def _is_event_handler(name: str) -> bool:
    return name.startswith("on")


class HtmlSanitizer:
    """Applies one SanitizePolicy to raw HTML fragments.

    Instances hold no per-call state and can be shared.
    """

    __slots__ = ("_policy",)

    def __init__(self, policy: SanitizePolicy) -> None:
        self._policy = policy

    @property
    def policy(self) -> SanitizePolicy:
        return self._policy

    def clean(self, fragment: str) -> str:
        """Return the fragment as it may be written into the output."""
        match self._policy:
            case SanitizePolicy.ESCAPE_ALL:
                if fragment:
                    logger.debug("Escaped raw HTML (%d chars)", len(fragment))
                return escape_html(fragment)
            case SanitizePolicy.ALLOW_RAW_HTML:
                return self._filter(fragment, strict=False)
            case SanitizePolicy.SANITIZE:
                return self._filter(fragment, strict=True)
            case _:
                raise AssertionError(f"unknown policy {self._policy!r}")

    def _filter(self, fragment: str, *, strict: bool) -> str:
        out: list[str] = []
        pos = 0
        length = len(fragment)
        while pos < length:
            lt = fragment.find("<", pos)
            if lt == -1:
                out.append(fragment[pos:])
                break
            out.append(fragment[pos:lt])

            m = TAG_PARTS_RE.match(fragment, lt)
            if m is None:
                pos = self._non_tag(fragment, lt, out, strict=strict)
                continue

            closing, name, attributes, self_closing = m.groups()
            tag = name.lower()
            if tag in FILTERED_TAGS:
                logger.debug("Filtered <%s> under %s policy", tag, self._policy.value)
                if strict:
                    pos = self._skip_filtered(fragment, m.end(), tag, closing=bool(closing))
                else:
                    out.append("&lt;")
                    pos = lt + 1
                continue

            pos = m.end()
            if strict and tag not in ALLOWED_TAGS:
                logger.debug("Dropped <%s%s> (not allow-listed)", closing, tag)
                continue
            if closing:
                out.append(f"</{name}>" if strict else m.group())
                continue
            kept = self._filter_attributes(tag, attributes, strict=strict)
            if strict or kept != attributes:
                out.append(f"<{name}{kept}{' /' if self_closing else ''}>")
            else:
                out.append(m.group())
        return "".join(out)

    def _non_tag(self, fragment: str, lt: int, out: list[str], *, strict: bool) -> int:
        """Handle a ``<`` that does not start a well-formed tag."""
        if strict:
            for opener, closer in _NON_TAG_MARKUP:
                if fragment.startswith(opener, lt):
                    end = fragment.find(closer, lt + len(opener))
                    return len(fragment) if end == -1 else end + len(closer)
            out.append("&lt;")
            return lt + 1

        if _TAG_START.match(fragment, lt):
            # Malformed tag: keep it inert instead of guessing its attributes
            out.append("&lt;")
        else:
            out.append("<")
        return lt + 1

    @staticmethod
    def _skip_filtered(fragment: str, pos: int, tag: str, *, closing: bool) -> int:
        """Position after a filtered element and its content."""
        if closing:
            return pos
        m = re.compile(rf"</{tag}\s*>", re.IGNORECASE).search(fragment, pos)
        return len(fragment) if m is None else m.end()

    def _filter_attributes(self, tag: str, attributes: str, *, strict: bool) -> str:
        allowed = ALLOWED_ATTRIBUTES.get(tag, frozenset()) | _GLOBAL_ATTRIBUTES
        kept: list[str] = []
        for m in ATTRIBUTE_RE.finditer(attributes):
            name = m.group(1).lower()
            if _is_event_handler(name) or name in _ALWAYS_STRIPPED_ATTRIBUTES:
                logger.debug("Removed %s attribute from <%s>", name, tag)
                continue
            if not strict:
                kept.append(m.group())
                continue
            if name not in allowed:
                continue
            value = m.group(2)
            if value is None:
                kept.append(f" {name}")
                continue
            if value[:1] in ("'", '"'):
                value = value[1:-1]
            if name in _URL_ATTRIBUTES and is_dangerous_url(value):
                logger.debug("Removed unsafe %s on <%s>", name, tag)
                continue
            kept.append(f' {name}="{escape_html(html.unescape(value))}"')
        return "".join(kept)


__all__ = [
    "ALLOWED_ATTRIBUTES",
    "ALLOWED_TAGS",
    "FILTERED_TAGS",
    "HtmlSanitizer",
    "is_dangerous_url",
]
