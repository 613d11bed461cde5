"""Path query helpers.

Records use Kubernetes-style JSONPath templates such as ``{.data.key}`` or
``{.data.client\\.key}``. They are translated into jsonpath-ng expressions
and evaluated against plain JSON-like documents.
"""

import json
import re
from functools import lru_cache
from typing import Any, List

from jsonpath_ng.exceptions import JSONPathError
from jsonpath_ng.ext import parse


_PLAIN_FIELD = re.compile(r"^[A-Za-z_][A-Za-z0-9_\-]*$")


def _split_segments(query: str) -> List[str]:
    """Split on unescaped dots that are not inside brackets."""
    segments = []
    buf = ""
    depth = 0
    i = 0
    while i < len(query):
        char = query[i]
        if char == "\\" and i + 1 < len(query):
            buf += query[i + 1]
            i += 2
            continue
        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
        if char == "." and depth == 0:
            segments.append(buf)
            buf = ""
        else:
            buf += char
        i += 1
    segments.append(buf)
    return segments


def _quote_field(name: str) -> str:
    if name == "*" or _PLAIN_FIELD.match(name):
        return name
    return "'" + name.replace("'", "\\'") + "'"


def to_expression(template: str) -> str:
    """Translate a Kubernetes-style JSONPath template into a jsonpath-ng expression."""
    query = template.strip()
    if query.startswith("{") and query.endswith("}"):
        query = query[1:-1].strip()
    if query.startswith("$"):
        query = query[1:]
    if not query:
        raise ValueError(f"empty path query: {template!r}")

    segments = _split_segments(query)
    # A leading dot yields an empty first segment
    if segments and segments[0] == "":
        segments = segments[1:]

    expression = "$"
    for segment in segments:
        if not segment:
            raise ValueError(f"recursive descent is not supported: {template!r}")
        bracket = segment.find("[")
        name, suffix = (segment, "") if bracket < 0 else (segment[:bracket], segment[bracket:])
        if name:
            expression += "." + _quote_field(name)
        expression += suffix
    return expression


@lru_cache(maxsize=256)
def compile_path(template: str):
    """Compile and cache a path query template."""
    expression = to_expression(template)
    try:
        return parse(expression)
    except JSONPathError as e:
        raise ValueError(f"invalid path query {template!r}: {e}") from e


def validate_path(template: str) -> str:
    """Validate a template and return it unchanged."""
    compile_path(template)
    return template


def _render_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"))


def find(template: str, document: Any) -> List[Any]:
    """Return every value the template matches in document."""
    return [match.value for match in compile_path(template).find(document)]


def render(values: List[Any]) -> bytes:
    """Render matched values the way kubectl prints them."""
    return " ".join(_render_value(v) for v in values).encode()
