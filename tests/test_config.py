"""Tests for ContextVar-based parse configuration and RenderConfig.

Validates thread isolation, context manager behavior, and that the lexer
and parser read the active configuration.
"""

from threading import Thread

import pytest

from podita import (
    ParseConfig,
    Parser,
    Podita,
    RenderConfig,
    get_parse_config,
    parse,
    parse_config_context,
    reset_parse_config,
    set_parse_config,
)
from podita.config import DEFAULT_CODE_KINDS
from podita.errors import StructureError
from podita.nodes import CodeListing, Sidebar


class TestParseConfigDataclass:
    """Test ParseConfig frozen dataclass behavior."""

    def test_default_values(self) -> None:
        config = ParseConfig()
        assert config.code_kinds == DEFAULT_CODE_KINDS
        assert "programlisting" in config.code_kinds
        assert config.ignored_for_kinds == frozenset({"comment"})
        assert config.strict_directives is False

    def test_immutability(self) -> None:
        """Config is frozen and cannot be modified."""
        config = ParseConfig()
        with pytest.raises(AttributeError):
            config.strict_directives = True  # type: ignore[misc]

    def test_from_dict_ignores_unknown_keys(self) -> None:
        config = ParseConfig.from_dict({"strict_directives": True, "bogus": 1})
        assert config.strict_directives is True

    def test_from_dict_converts_kind_lists(self) -> None:
        config = ParseConfig.from_dict({"code_kinds": ["perl", "sql"]})
        assert config.code_kinds == frozenset({"perl", "sql"})


class TestRenderConfig:
    def test_defaults(self) -> None:
        config = RenderConfig()
        assert config.format == "html"
        assert config.heading_offset == 0

    def test_unknown_format(self) -> None:
        with pytest.raises(ValueError, match="Unknown output format"):
            RenderConfig(format="pdf")  # type: ignore[arg-type]

    @pytest.mark.parametrize("offset", [1.5, "2", True])
    def test_heading_offset_must_be_int(self, offset: object) -> None:
        with pytest.raises(ValueError, match="heading_offset"):
            RenderConfig(heading_offset=offset)  # type: ignore[arg-type]

    def test_from_dict(self) -> None:
        config = RenderConfig.from_dict({"format": "plain", "heading_offset": -1, "x": 0})
        assert config == RenderConfig(format="plain", heading_offset=-1)


class TestContextVarFunctions:
    """Test get/set/reset functions."""

    def teardown_method(self) -> None:
        """Reset config after each test."""
        reset_parse_config()

    def test_default_config(self) -> None:
        assert get_parse_config() == ParseConfig()

    def test_set_and_get(self) -> None:
        set_parse_config(ParseConfig(strict_directives=True))
        assert get_parse_config().strict_directives is True

    def test_reset_restores_default(self) -> None:
        set_parse_config(ParseConfig(strict_directives=True))
        reset_parse_config()
        assert get_parse_config().strict_directives is False


class TestParseConfigContext:
    """Test parse_config_context context manager."""

    def test_nested_contexts(self) -> None:
        with parse_config_context(ParseConfig(strict_directives=True)):
            assert get_parse_config().strict_directives is True
            with parse_config_context(ParseConfig(code_kinds=frozenset({"perl"}))):
                # Inner config replaces the outer one entirely
                assert get_parse_config().strict_directives is False
                assert get_parse_config().code_kinds == frozenset({"perl"})
            assert get_parse_config().strict_directives is True
        assert get_parse_config().strict_directives is False

    def test_context_restores_on_exception(self) -> None:
        with pytest.raises(ValueError, match="test"):
            with parse_config_context(ParseConfig(strict_directives=True)):
                raise ValueError("test")
        assert get_parse_config().strict_directives is False

    def test_explicit_config_overrides_context_for_one_call(self) -> None:
        with parse_config_context(ParseConfig(strict_directives=True)):
            doc = parse("=frobnicate\n", config=ParseConfig())
            assert len(doc.diagnostics) == 1
            assert get_parse_config().strict_directives is True


class TestParserReadsConfig:
    def teardown_method(self) -> None:
        reset_parse_config()

    def test_code_kinds_from_context(self) -> None:
        set_parse_config(ParseConfig(code_kinds=frozenset({"perl"})))
        (block,) = Parser("=begin perl\nB<x\n=end perl\n").parse().children
        assert isinstance(block, CodeListing)

    def test_default_kinds_are_regions_when_overridden(self) -> None:
        set_parse_config(ParseConfig(code_kinds=frozenset({"perl"})))
        (block,) = Parser("=begin code\n\ntext\n\n=end code\n").parse().children
        assert isinstance(block, Sidebar)

    def test_ignored_for_kinds(self) -> None:
        set_parse_config(ParseConfig(ignored_for_kinds=frozenset({"editor"})))
        doc = Parser("=for editor fix this\n\n=for comment kept\n").parse()
        assert [type(b) for b in doc.children] == [Sidebar]
        assert doc.children[0].kind == "comment"


class TestThreadIsolation:
    """Test thread-local configuration isolation."""

    def test_thread_isolation(self) -> None:
        """Each thread sees its own config."""
        results: dict[int, bool] = {}

        def worker(thread_id: int, strict: bool) -> None:
            set_parse_config(ParseConfig(strict_directives=strict))
            try:
                Parser("=frobnicate\n").parse()
            except StructureError:
                results[thread_id] = True
            else:
                results[thread_id] = False

        threads = [Thread(target=worker, args=(i, i % 2 == 0)) for i in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results == {0: True, 1: False, 2: True, 3: False}
        # The main thread never saw any of it
        assert get_parse_config().strict_directives is False

    def test_concurrent_podita_instances(self) -> None:
        results: dict[int, str] = {}
        source = "=begin perl\nB<x>\n=end perl\n"

        def worker(thread_id: int, kinds: frozenset[str]) -> None:
            results[thread_id] = Podita(config=ParseConfig(code_kinds=kinds))(source)

        threads = [
            Thread(target=worker, args=(0, frozenset({"perl"}))),
            Thread(target=worker, args=(1, DEFAULT_CODE_KINDS)),
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert "<pre" in results[0]
        assert "<strong>x</strong>" in results[1]
