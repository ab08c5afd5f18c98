"""Property-based tests for gfmark using Hypothesis.

These check invariants that hold for any input:
1. Rendering never crashes and is deterministic
2. Plain text is only ever escaped, never reinterpreted
3. The output never contains an element outside the allow list
"""

import re

from hypothesis import given, settings
from hypothesis import strategies as st

from gfmark import RenderOptions, SanitizePolicy, parse, render
from gfmark.nodes import Document
from gfmark.sanitize import ALLOWED_TAGS

# Characters that drive most of the grammar, mixed with ordinary text
markdown_alphabet = st.sampled_from(
    list("abc xyz123\n\t*_~`[]()<>!&#;:/.-+=|\\\"'@")
    + ["www.", "http://", "<b>", "<script>", "</div>", "<!--", "-->", "- [x] ", "|---|"]
)
markdown_text = st.lists(markdown_alphabet, max_size=80).map("".join)

plain_text = st.from_regex(r"[A-Za-z0-9]([A-Za-z0-9 <&\"]*[A-Za-z0-9])?", fullmatch=True)

TAG_NAME_RE = re.compile(r"</?([A-Za-z][A-Za-z0-9-]*)")

policies = st.sampled_from(list(SanitizePolicy))


class TestRenderProperties:
    @given(text=st.text(max_size=200))
    @settings(max_examples=200)
    def test_never_crashes(self, text: str) -> None:
        """Any text renders to a string."""
        assert isinstance(render(text), str)

    @given(text=markdown_text, policy=policies)
    @settings(max_examples=200)
    def test_deterministic(self, text: str, policy: SanitizePolicy) -> None:
        """Same input and options always produce the same output."""
        options = RenderOptions(sanitize_policy=policy)
        assert render(text, options) == render(text, options)

    @given(text=markdown_text)
    @settings(max_examples=200)
    def test_parse_returns_document(self, text: str) -> None:
        doc = parse(text)
        assert isinstance(doc, Document)
        assert doc.location.lineno == 1

    @given(text=plain_text)
    @settings(max_examples=100)
    def test_plain_text_is_escaped(self, text: str) -> None:
        """A single line without markup becomes one escaped paragraph."""
        escaped = (
            text.replace("&", "&amp;")
            .replace("<", "&lt;")
            .replace(">", "&gt;")
            .replace('"', "&quot;")
        )
        assert render(text) == f"<p>{escaped}</p>\n"


class TestSanitizeProperties:
    """Tag allow-listing holds for arbitrary input."""

    @given(text=markdown_text)
    @settings(max_examples=300)
    def test_only_allowed_elements(self, text: str) -> None:
        html = render(text)
        for name in TAG_NAME_RE.findall(html):
            assert name.lower() in ALLOWED_TAGS | {"input"}, f"<{name}> in {html!r}"

    @given(text=markdown_text, policy=policies)
    @settings(max_examples=300)
    def test_no_script_elements(self, text: str, policy: SanitizePolicy) -> None:
        html = render(text, RenderOptions(sanitize_policy=policy)).lower()
        assert "<script" not in html
        assert "<iframe" not in html

    @given(text=markdown_text)
    @settings(max_examples=100)
    def test_escape_all_emits_no_raw_tags(self, text: str) -> None:
        """Under escape-all every tag in the output comes from the renderer."""
        html = render(text, RenderOptions(sanitize_policy=SanitizePolicy.ESCAPE_ALL))
        assert "<b>" not in html
        assert "</div>" not in html
        assert "<!--" not in html
