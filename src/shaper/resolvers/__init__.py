"""Content resolvers for shaper."""

from shaper.resolvers.base import BaseResolver
from shaper.resolvers.inline import InlineResolver
from shaper.resolvers.objectref import ObjectRefResolver
from shaper.resolvers.registry import ResolverRegistry
from shaper.resolvers.webhook import WebhookResolver

__all__ = [
    "BaseResolver",
    "InlineResolver",
    "ObjectRefResolver",
    "ResolverRegistry",
    "WebhookResolver",
]
