"""Parse and render configuration for Podita.

ParseConfig lives in a ContextVar (PEP 567) so every lexer and parser in the
current thread or context reads the same settings without passing them
around. RenderConfig is per render call and is passed explicitly.

Usage:
    from podita.config import ParseConfig, parse_config_context

    with parse_config_context(ParseConfig(strict_directives=True)):
        doc = Parser(source).parse()

Thread Safety:
    ContextVars are thread-local by design. Both config classes are frozen.

"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, fields
from typing import Any, Literal, TypeAlias

DEFAULT_CODE_KINDS = frozenset({"code", "programlisting", "screen", "verbatim"})
DEFAULT_IGNORED_FOR_KINDS = frozenset({"comment"})

OutputFormat: TypeAlias = Literal["html", "plain"]

OUTPUT_FORMATS: tuple[str, ...] = ("html", "plain")


def _filter_fields(cls: type, config_dict: dict[str, Any]) -> dict[str, Any]:
    valid_fields = {f.name for f in fields(cls)}
    return {k: v for k, v in config_dict.items() if k in valid_fields}


@dataclass(frozen=True, slots=True)
class ParseConfig:
    """Immutable parse configuration.

    Attributes:
        code_kinds: ``=begin``/``=for`` kinds whose body is literal code
        ignored_for_kinds: ``=for`` kinds whose content is dropped
        strict_directives: Raise StructureError on unknown directives
            instead of recording a diagnostic

    """

    code_kinds: frozenset[str] = DEFAULT_CODE_KINDS
    ignored_for_kinds: frozenset[str] = DEFAULT_IGNORED_FOR_KINDS
    strict_directives: bool = False

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "ParseConfig":
        """Create ParseConfig from a dictionary, ignoring unknown keys.

        Sequences given for the kind sets are converted to frozensets.

        Example:
            >>> ParseConfig.from_dict({"code_kinds": ["perl"], "x": 1}).code_kinds
            frozenset({'perl'})

        """
        filtered = _filter_fields(cls, config_dict)
        for key in ("code_kinds", "ignored_for_kinds"):
            if key in filtered:
                filtered[key] = frozenset(filtered[key])
        return cls(**filtered)


@dataclass(frozen=True, slots=True)
class RenderConfig:
    """Immutable render configuration.

    Attributes:
        format: Target format, ``"html"`` or ``"plain"`` (normalized markup)
        heading_offset: Added to every heading level, for embedding a
            chapter under an existing heading hierarchy. Results are clamped
            to the range the target format supports.

    """

    format: OutputFormat = "html"
    heading_offset: int = 0

    def __post_init__(self) -> None:
        if self.format not in OUTPUT_FORMATS:
            msg = f"Unknown output format {self.format!r}; expected one of {OUTPUT_FORMATS}"
            raise ValueError(msg)
        if not isinstance(self.heading_offset, int) or isinstance(self.heading_offset, bool):
            msg = f"heading_offset must be an integer, got {self.heading_offset!r}"
            raise ValueError(msg)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "RenderConfig":
        """Create RenderConfig from a dictionary, ignoring unknown keys."""
        return cls(**_filter_fields(cls, config_dict))


_DEFAULT_CONFIG: ParseConfig = ParseConfig()

_parse_config: ContextVar[ParseConfig] = ContextVar(
    "podita_parse_config",
    default=_DEFAULT_CONFIG,
)


def get_parse_config() -> ParseConfig:
    """Get current parse configuration (thread-local)."""
    return _parse_config.get()


def set_parse_config(config: ParseConfig) -> None:
    """Set parse configuration for current context."""
    _parse_config.set(config)


def reset_parse_config() -> None:
    """Reset to the default configuration."""
    _parse_config.set(_DEFAULT_CONFIG)


@contextmanager
def parse_config_context(config: ParseConfig) -> Iterator[None]:
    """Context manager for temporary config changes.

    Restores the previous config even if an exception is raised.

    Example:
        >>> with parse_config_context(ParseConfig(strict_directives=True)):
        ...     doc = parse("=frobnicate\\n")  # raises StructureError

    """
    previous = _parse_config.get()
    _parse_config.set(config)
    try:
        yield
    finally:
        _parse_config.set(previous)


__all__ = [
    "DEFAULT_CODE_KINDS",
    "OUTPUT_FORMATS",
    "OutputFormat",
    "ParseConfig",
    "RenderConfig",
    "get_parse_config",
    "parse_config_context",
    "reset_parse_config",
    "set_parse_config",
]
