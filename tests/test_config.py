"""Tests for ContextVar-based render configuration.

Validates option validation, thread isolation and context manager behavior.
"""

from threading import Thread

import pytest

from gfmark import (
    ConfigError,
    Parser,
    RenderOptions,
    SanitizePolicy,
    get_render_options,
    render,
    render_options_context,
    reset_render_options,
    set_render_options,
)
from gfmark.nodes import Paragraph, Table


class TestRenderOptionsDataclass:
    """Test RenderOptions frozen dataclass behavior."""

    def test_default_values(self) -> None:
        """Every GFM extension is on by default and raw HTML is sanitized."""
        opts = RenderOptions()
        assert opts.sanitize_policy is SanitizePolicy.SANITIZE
        assert opts.enable_tables is True
        assert opts.enable_strikethrough is True
        assert opts.enable_autolinks is True
        assert opts.enable_task_lists is True
        assert opts.tab_width == 4

    def test_immutability(self) -> None:
        opts = RenderOptions()
        with pytest.raises(AttributeError):
            opts.tab_width = 8  # type: ignore[misc]

    def test_policy_from_string(self) -> None:
        """Policy names are accepted and normalized to the enum."""
        opts = RenderOptions(sanitize_policy="allow-raw-html")  # type: ignore[arg-type]
        assert opts.sanitize_policy is SanitizePolicy.ALLOW_RAW_HTML

    def test_equality(self) -> None:
        assert RenderOptions(sanitize_policy="escape-all") == RenderOptions(  # type: ignore[arg-type]
            sanitize_policy=SanitizePolicy.ESCAPE_ALL
        )


class TestRenderOptionsValidation:
    """Invalid values raise ConfigError naming the field."""

    def test_unknown_policy(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            RenderOptions(sanitize_policy="strip-everything")  # type: ignore[arg-type]
        assert exc_info.value.field_name == "sanitize_policy"
        assert "escape-all" in str(exc_info.value)

    @pytest.mark.parametrize("width", [0, -4])
    def test_non_positive_tab_width(self, width: int) -> None:
        with pytest.raises(ConfigError) as exc_info:
            RenderOptions(tab_width=width)
        assert exc_info.value.field_name == "tab_width"

    @pytest.mark.parametrize("width", [True, "4", 4.0])
    def test_tab_width_must_be_int(self, width: object) -> None:
        with pytest.raises(ConfigError):
            RenderOptions(tab_width=width)  # type: ignore[arg-type]

    def test_config_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            RenderOptions(tab_width=0)


class TestFromDict:
    """RenderOptions.from_dict() builds options from plain mappings."""

    def test_known_keys(self) -> None:
        opts = RenderOptions.from_dict({"sanitize_policy": "escape-all", "tab_width": 2})
        assert opts.sanitize_policy is SanitizePolicy.ESCAPE_ALL
        assert opts.tab_width == 2

    def test_unknown_keys_ignored(self) -> None:
        opts = RenderOptions.from_dict({"enable_tables": False, "theme": "dark"})
        assert opts.enable_tables is False
        assert opts == RenderOptions(enable_tables=False)

    def test_empty_mapping(self) -> None:
        assert RenderOptions.from_dict({}) == RenderOptions()

    def test_invalid_value_still_validated(self) -> None:
        with pytest.raises(ConfigError):
            RenderOptions.from_dict({"tab_width": 0})


class TestContextVarFunctions:
    """Test get/set/reset functions."""

    def teardown_method(self) -> None:
        reset_render_options()

    def test_default_options(self) -> None:
        assert get_render_options() == RenderOptions()

    def test_set_and_get(self) -> None:
        custom = RenderOptions(enable_tables=False, tab_width=2)
        set_render_options(custom)
        assert get_render_options() is custom

    def test_reset(self) -> None:
        set_render_options(RenderOptions(tab_width=8))
        reset_render_options()
        assert get_render_options().tab_width == 4

    def test_parser_reads_context(self) -> None:
        """Parser picks up whatever options are active when parse() runs."""
        set_render_options(RenderOptions(enable_tables=False))
        doc = Parser("| a |\n|---|").parse()
        assert isinstance(doc.children[0], Paragraph)


class TestContextManager:
    """render_options_context() activates options temporarily."""

    def test_restores_previous(self) -> None:
        before = get_render_options()
        with render_options_context(RenderOptions(tab_width=8)):
            assert get_render_options().tab_width == 8
        assert get_render_options() is before

    def test_nesting(self) -> None:
        with render_options_context(RenderOptions(tab_width=2)):
            with render_options_context(RenderOptions(tab_width=8)):
                assert get_render_options().tab_width == 8
            assert get_render_options().tab_width == 2

    def test_restores_after_exception(self) -> None:
        with pytest.raises(RuntimeError):
            with render_options_context(RenderOptions(tab_width=8)):
                raise RuntimeError("boom")
        assert get_render_options().tab_width == 4

    def test_tables_toggle(self) -> None:
        source = "| a |\n|---|\n| 1 |"
        with render_options_context(RenderOptions(enable_tables=True)):
            assert isinstance(Parser(source).parse().children[0], Table)
        with render_options_context(RenderOptions(enable_tables=False)):
            assert isinstance(Parser(source).parse().children[0], Paragraph)


class TestThreadIsolation:
    """Options set in one thread never leak into another."""

    def test_threads_see_own_options(self) -> None:
        results: dict[int, int] = {}
        errors: list[Exception] = []

        def worker(width: int) -> None:
            try:
                set_render_options(RenderOptions(tab_width=width))
                for _ in range(50):
                    results[width] = get_render_options().tab_width
            except Exception as e:
                errors.append(e)

        threads = [Thread(target=worker, args=(width,)) for width in range(1, 9)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert not errors
        assert results == {width: width for width in range(1, 9)}
        assert get_render_options().tab_width == 4

    def test_concurrent_renders_with_different_policies(self) -> None:
        source = "<b>x</b>"
        outputs: dict[str, str] = {}

        def worker(policy: str) -> None:
            outputs[policy] = render(source, RenderOptions(sanitize_policy=policy))  # type: ignore[arg-type]

        threads = [Thread(target=worker, args=(p.value,)) for p in SanitizePolicy]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert outputs["sanitize"] == "<p><b>x</b></p>\n"
        assert outputs["allow-raw-html"] == "<p><b>x</b></p>\n"
        assert outputs["escape-all"] == "<p>&lt;b&gt;x&lt;/b&gt;</p>\n"


class TestTabWidth:
    """tab_width controls how tabs count toward indentation."""

    def test_tab_is_indented_code_by_default(self) -> None:
        assert render("\tcode") == "<pre><code>code\n</code></pre>\n"

    def test_narrow_tabs_do_not_indent_code(self) -> None:
        assert render("\tcode", RenderOptions(tab_width=2)) == "<p>code</p>\n"
