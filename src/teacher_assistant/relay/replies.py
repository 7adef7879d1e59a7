"""
Normalization of whatever an adapter returns into plain text.

Adapters are free to return a response object, a bare string or a mapping.
``classify_reply`` tags the raw value with one of four variants and
``normalize_reply`` dispatches on the tag, in this precedence:

1. ObjectWithContent: an object exposing ``content`` (attribute or method)
2. PlainString: a ``str``
3. StructuredWithContent: a mapping with a ``content`` key
4. Unknown: anything else, converted with ``str()``
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class ObjectWithContent:
    content: Any


@dataclass(frozen=True)
class PlainString:
    text: str


@dataclass(frozen=True)
class StructuredWithContent:
    content: Any


@dataclass(frozen=True)
class Unknown:
    value: Any


Reply = Union[ObjectWithContent, PlainString, StructuredWithContent, Unknown]


def classify_reply(raw: Any) -> Reply:
    """Tag a raw adapter result with its shape."""
    if not isinstance(raw, (str, Mapping)) and hasattr(raw, "content"):
        content = raw.content
        if callable(content):
            content = content()
        return ObjectWithContent(content)
    if isinstance(raw, str):
        return PlainString(raw)
    if isinstance(raw, Mapping) and "content" in raw:
        return StructuredWithContent(raw["content"])
    return Unknown(raw)


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def normalize_reply(raw: Any) -> str:
    """Convert a raw adapter result into the reply text."""
    reply = classify_reply(raw)

    if isinstance(reply, ObjectWithContent):
        return _as_text(reply.content)
    if isinstance(reply, PlainString):
        return reply.text
    if isinstance(reply, StructuredWithContent):
        return _as_text(reply.content)
    return _as_text(reply.value)
