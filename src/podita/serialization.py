"""Tree serialization: JSON round-trip for Podita nodes.

Converts typed nodes to/from JSON-compatible dicts. Useful for:
- Caching parsed chapters between builds
- The ``podita dump`` command
- Comparing trees while ignoring where things came from

All output is deterministic (sorted keys) for cache-key stability.

Example:
    from podita import parse
    from podita.serialization import to_json, from_json

    doc = parse("=head1 Hello\\n\\nB<World>\\n")
    json_str = to_json(doc)
    restored = from_json(json_str)
    assert doc == restored

Thread Safety:
    All functions are pure and safe to call from any thread.

"""

import json
from dataclasses import fields
from typing import Any

from podita.anchors import AnchorTable, AnchorTarget
from podita.errors import (
    DeprecatedDirectiveError,
    RecoverableError,
    UnknownDirectiveError,
    UnknownEntityError,
    UnresolvedReferenceError,
)
from podita.location import SourceLocation
from podita.nodes import (
    AnchorTag,
    Bold,
    CodeListing,
    CodeSpan,
    CrossReference,
    CrossRefTag,
    Document,
    Footnote,
    IndexMarker,
    IndexTag,
    Italic,
    Link,
    List,
    ListItem,
    Node,
    Paragraph,
    Section,
    Sidebar,
    Text,
)

# Registry of node type names to classes for deserialization
_NODE_TYPES: dict[str, type[Node]] = {
    cls.__name__: cls
    for cls in (
        Document,
        Section,
        Paragraph,
        CodeListing,
        Sidebar,
        IndexMarker,
        CrossReference,
        List,
        ListItem,
        Text,
        Bold,
        Italic,
        CodeSpan,
        IndexTag,
        AnchorTag,
        CrossRefTag,
        Link,
        Footnote,
    )
}

# Diagnostic classes and the keyword attributes each one carries
_DIAGNOSTIC_TYPES: dict[str, tuple[type[RecoverableError], tuple[str, ...]]] = {
    "UnresolvedReferenceError": (UnresolvedReferenceError, ("target",)),
    "UnknownDirectiveError": (UnknownDirectiveError, ("directive",)),
    "DeprecatedDirectiveError": (DeprecatedDirectiveError, ("directive", "replacement")),
    "UnknownEntityError": (UnknownEntityError, ("entity",)),
}

_LOCATION_FIELDS = {"location", "title_location", "label_location"}


def to_dict(node: Node, *, strip_locations: bool = False) -> dict[str, Any]:
    """Convert a node to a JSON-compatible dict.

    Includes a ``_type`` discriminator field for deserialization.
    Recursively serializes child nodes, the anchor table, diagnostics and
    SourceLocation objects.

    Args:
        node: Any Podita node.
        strip_locations: Leave out every source location. Used to compare
            trees parsed from different text.

    Returns:
        Dict with ``_type`` and all node fields.

    """
    result: dict[str, Any] = {"_type": type(node).__name__}

    for f in fields(node):
        if strip_locations and f.name in _LOCATION_FIELDS:
            continue
        value = getattr(node, f.name)
        result[f.name] = _serialize_value(value, strip_locations)

    return result


def _serialize_value(value: Any, strip_locations: bool) -> Any:
    """Serialize a single field value."""
    if isinstance(value, Node):
        return to_dict(value, strip_locations=strip_locations)
    if isinstance(value, SourceLocation):
        return {
            "_type": "SourceLocation",
            "lineno": value.lineno,
            "col_offset": value.col_offset,
            "offset": value.offset,
            "end_offset": value.end_offset,
            "source_file": value.source_file,
        }
    if isinstance(value, AnchorTable):
        return {
            "_type": "AnchorTable",
            "targets": [_serialize_target(t, strip_locations) for t in value.values()],
        }
    if isinstance(value, RecoverableError):
        return _serialize_diagnostic(value, strip_locations)
    if isinstance(value, tuple):
        return [_serialize_value(item, strip_locations) for item in value]
    # Primitives: str, int, bool, None
    return value


def _serialize_target(target: AnchorTarget, strip_locations: bool) -> dict[str, Any]:
    data: dict[str, Any] = {
        "name": target.name,
        "node_type": target.node_type,
        "title": target.title,
    }
    if not strip_locations:
        data["location"] = _serialize_value(target.location, strip_locations)
    return data


def _serialize_diagnostic(error: RecoverableError, strip_locations: bool) -> dict[str, Any]:
    type_name = type(error).__name__
    data: dict[str, Any] = {"_type": type_name, "message": error.message}
    if not strip_locations:
        data.update(
            lineno=error.lineno, col_offset=error.col_offset, source_file=error.source_file
        )
    for attr in _DIAGNOSTIC_TYPES.get(type_name, (RecoverableError, ()))[1]:
        data[attr] = getattr(error, attr)
    return data


def from_dict(data: dict[str, Any]) -> Node:
    """Reconstruct a typed node from a dict.

    Uses the ``_type`` discriminator to determine the node class.
    Missing locations (from ``strip_locations=True``) come back as
    ``SourceLocation.unknown()``.

    Args:
        data: Dict with ``_type`` and node fields (as produced by to_dict).

    Returns:
        Typed node (frozen dataclass).

    Raises:
        ValueError: If ``_type`` is missing or unknown.

    """
    type_name = data.get("_type")
    if type_name is None:
        msg = "Missing '_type' field in serialized node"
        raise ValueError(msg)

    node_cls = _NODE_TYPES.get(type_name)
    if node_cls is None:
        msg = f"Unknown node type: {type_name!r}"
        raise ValueError(msg)

    kwargs: dict[str, Any] = {"location": SourceLocation.unknown()}
    for f in fields(node_cls):
        if f.name not in data:
            continue
        kwargs[f.name] = _deserialize_value(data[f.name])

    return node_cls(**kwargs)


def _deserialize_value(value: Any) -> Any:
    """Deserialize a single field value."""
    if isinstance(value, dict):
        type_name = value.get("_type")
        if type_name == "SourceLocation":
            return SourceLocation(
                lineno=value["lineno"],
                col_offset=value["col_offset"],
                offset=value.get("offset", 0),
                end_offset=value.get("end_offset", 0),
                source_file=value.get("source_file"),
            )
        if type_name == "AnchorTable":
            return AnchorTable(_deserialize_target(t) for t in value["targets"]).freeze()
        if type_name in _DIAGNOSTIC_TYPES:
            return _deserialize_diagnostic(value)
        if type_name is not None:
            return from_dict(value)
        return value
    if isinstance(value, list):
        return tuple(_deserialize_value(item) for item in value)
    return value


def _deserialize_target(data: dict[str, Any]) -> AnchorTarget:
    location = data.get("location")
    return AnchorTarget(
        name=data["name"],
        node_type=data["node_type"],
        title=data.get("title"),
        location=_deserialize_value(location) if location else SourceLocation.unknown(),
    )


def _deserialize_diagnostic(data: dict[str, Any]) -> RecoverableError:
    error_cls, extras = _DIAGNOSTIC_TYPES[data["_type"]]
    return error_cls(
        data["message"],
        data.get("lineno"),
        data.get("col_offset"),
        data.get("source_file"),
        **{attr: data.get(attr, "") for attr in extras},
    )


def to_json(doc: Document, *, indent: int | None = None, strip_locations: bool = False) -> str:
    """Serialize a Document to a JSON string.

    Output is deterministic (sorted keys) for cache-key stability.

    Args:
        doc: Document to serialize.
        indent: JSON indentation level (None for compact).
        strip_locations: Leave out source locations.

    Returns:
        JSON string.

    """
    return json.dumps(
        to_dict(doc, strip_locations=strip_locations), sort_keys=True, indent=indent
    )


def from_json(data: str) -> Document:
    """Deserialize a Document from a JSON string.

    Args:
        data: JSON string (as produced by to_json).

    Returns:
        Document node.

    Raises:
        ValueError: If the JSON doesn't represent a Document.

    """
    raw = json.loads(data)
    node = from_dict(raw)
    if not isinstance(node, Document):
        msg = f"Expected Document, got {type(node).__name__}"
        raise ValueError(msg)
    return node


def equivalent(a: Document, b: Document) -> bool:
    """Structural equality ignoring source locations and diagnostics.

    Two documents are equivalent when they have the same blocks, spans
    and anchors, wherever in the source those were written.
    """
    left = to_dict(a, strip_locations=True)
    right = to_dict(b, strip_locations=True)
    left.pop("diagnostics", None)
    right.pop("diagnostics", None)
    return left == right
