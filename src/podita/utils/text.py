"""Text helpers: slugs for HTML ids and flattening inline spans.

Example:
    >>> slugify("Variables and Context")
    'variables-and-context'
"""

from __future__ import annotations

import re
from collections.abc import Iterable

_NON_WORD = re.compile(r"[^\w\s-]")
_SEPARATORS = re.compile(r"[-\s]+")


def slugify(text: str, separator: str = "-") -> str:
    """Convert text to a URL-safe slug, keeping Unicode word characters.

    Examples:
        >>> slugify("Hello World!")
        'hello-world'
        >>> slugify("What is Moose?")
        'what-is-moose'
        >>> slugify("Café")
        'café'
    """
    if not text:
        return ""
    text = text.lower().strip()
    text = _NON_WORD.sub("", text)
    text = _SEPARATORS.sub(separator, text)
    return text.strip(separator)


def unique_slug(text: str, seen: set[str], fallback: str = "section") -> str:
    """Slugify ``text`` and disambiguate against ``seen`` (updated in place).

    Examples:
        >>> seen = set()
        >>> unique_slug("Intro", seen), unique_slug("Intro", seen)
        ('intro', 'intro-1')
    """
    base = slugify(text) or fallback
    slug = base
    counter = 1
    while slug in seen:
        slug = f"{base}-{counter}"
        counter += 1
    seen.add(slug)
    return slug


def flatten_text(nodes: Iterable[object]) -> str:
    """Concatenate the visible text of inline nodes.

    Invisible spans (index and anchor tags) contribute nothing.
    """
    from podita.nodes import (
        AnchorTag,
        Bold,
        CodeSpan,
        CrossRefTag,
        Footnote,
        IndexTag,
        Italic,
        Link,
        Text,
    )

    parts: list[str] = []
    for node in nodes:
        match node:
            case Text(content=content):
                parts.append(content)
            case CodeSpan(code=code):
                parts.append(code)
            case Bold(children=children) | Italic(children=children) | Footnote(children=children):
                parts.append(flatten_text(children))
            case Link(url=url, children=children):
                parts.append(flatten_text(children) if children else url)
            case CrossRefTag(target=target, label=label, title=title):
                parts.append(label or title or target)
            case IndexTag() | AnchorTag():
                pass
    return "".join(parts)
