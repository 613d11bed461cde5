"""Content transformers for shaper."""

from shaper.transformers.base import BaseTransformer
from shaper.transformers.butane import ButaneTransformer, butane_to_ignition
from shaper.transformers.registry import TransformerRegistry
from shaper.transformers.webhook import WebhookTransformer

__all__ = [
    "BaseTransformer",
    "ButaneTransformer",
    "butane_to_ignition",
    "TransformerRegistry",
    "WebhookTransformer",
]
