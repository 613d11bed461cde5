"""Butane to Ignition transformer.

Translates Butane YAML into Ignition JSON locally. The translation covers
the sugar-free subset of Butane: version mapping, ``inline`` resources
turned into ``data:`` URLs, and snake_case keys converted to Ignition's
camelCase. Anything that needs a files directory (``local``, ``trees``,
``contents_local``) is rejected.
"""

import json
from typing import Any, Dict, Tuple
from urllib.parse import quote

from ruamel.yaml import YAML
from ruamel.yaml.constructor import SafeConstructor
from ruamel.yaml.error import YAMLError

from shaper.errors import TransformError
from shaper.models.content import TransformerConfig
from shaper.models.selectors import IPXESelectors
from shaper.transformers.base import BaseTransformer


IGNITION_VERSIONS: Dict[Tuple[str, str], str] = {
    ("fcos", "1.0.0"): "3.0.0",
    ("fcos", "1.1.0"): "3.1.0",
    ("fcos", "1.2.0"): "3.2.0",
    ("fcos", "1.3.0"): "3.2.0",
    ("fcos", "1.4.0"): "3.3.0",
    ("fcos", "1.5.0"): "3.4.0",
    ("fcos", "1.6.0"): "3.5.0",
    ("flatcar", "1.0.0"): "3.3.0",
    ("flatcar", "1.1.0"): "3.4.0",
    ("r4e", "1.0.0"): "3.3.0",
    ("r4e", "1.1.0"): "3.4.0",
    ("fiot", "1.0.0"): "3.4.0",
}

TOP_LEVEL_KEYS = {"variant", "version", "ignition", "storage", "systemd", "passwd", "kernel_arguments"}

LOCAL_KEYS = {"local", "trees", "contents_local"}


class ButaneConstructor(SafeConstructor):
    """Safe constructor that keeps timestamps as their source text."""

    def construct_yaml_timestamp(self, node, values=None):
        return self.construct_scalar(node)


ButaneConstructor.add_constructor("tag:yaml.org,2002:timestamp", ButaneConstructor.construct_yaml_timestamp)


def _camel(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def _data_url(text: str) -> str:
    return "data:," + quote(text, safe="")


def _translate(node: Any, path: str) -> Any:
    if isinstance(node, list):
        return [_translate(item, f"{path}[{i}]") for i, item in enumerate(node)]
    if not isinstance(node, dict):
        return node

    out = {}
    for key, value in node.items():
        if not isinstance(key, str):
            raise TransformError(f"{path}: non-string key {key!r}")
        if key in LOCAL_KEYS:
            raise TransformError(f"{path}.{key}: local file references are not supported")
        if key == "inline":
            if "source" in node:
                raise TransformError(f"{path}: inline and source are mutually exclusive")
            if not isinstance(value, str):
                raise TransformError(f"{path}.inline: expected a string")
            out["source"] = _data_url(value)
            continue
        out[_camel(key)] = _translate(value, f"{path}.{key}")
    return out


def butane_to_ignition(source: bytes) -> bytes:
    """Translate a Butane document into compact Ignition JSON."""
    yaml = YAML(typ="safe", pure=True)
    yaml.Constructor = ButaneConstructor
    try:
        doc = yaml.load(source.decode())
    except (YAMLError, UnicodeDecodeError) as e:
        raise TransformError("parsing butane config") from e

    if not isinstance(doc, dict):
        raise TransformError("butane config must be a mapping")

    variant, version = doc.get("variant"), doc.get("version")
    if not variant or not version:
        raise TransformError("butane config requires variant and version")
    ignition_version = IGNITION_VERSIONS.get((str(variant), str(version)))
    if ignition_version is None:
        raise TransformError(f"unsupported butane variant/version {variant}/{version}")

    unknown = sorted(set(doc) - TOP_LEVEL_KEYS)
    if unknown:
        raise TransformError(f"unused keys in butane config: {', '.join(map(str, unknown))}")

    ignition = _translate(doc.get("ignition") or {}, "$.ignition")
    if not isinstance(ignition, dict):
        raise TransformError("$.ignition must be a mapping")
    if "version" in ignition:
        raise TransformError("$.ignition.version is derived from the butane version")

    result = {"ignition": {"version": ignition_version, **ignition}}
    for key in ("kernel_arguments", "passwd", "storage", "systemd"):
        if doc.get(key) is not None:
            result[_camel(key)] = _translate(doc[key], f"$.{key}")

    try:
        return json.dumps(result, separators=(",", ":")).encode()
    except (TypeError, ValueError) as e:
        raise TransformError("encoding ignition config") from e


class ButaneTransformer(BaseTransformer):
    """Converts Butane configs into Ignition configs."""

    async def transform(
        self,
        config: TransformerConfig,
        payload: bytes,
        selectors: IPXESelectors,
    ) -> bytes:
        return butane_to_ignition(payload)
