"""Resolver registry mapping resolver kinds to implementations."""

import logging
from typing import Dict, Optional, Type

import httpx

from shaper.models.content import ResolverKind
from shaper.resolvers.base import BaseResolver
from shaper.resolvers.inline import InlineResolver
from shaper.resolvers.objectref import ObjectRefResolver
from shaper.resolvers.webhook import WebhookResolver


logger = logging.getLogger(__name__)


class ResolverRegistry:
    """Registry for managing content resolvers."""
    
    def __init__(self, object_store=None, transport: Optional[httpx.AsyncBaseTransport] = None):
        """Initialize resolver registry."""
        self.object_store = object_store
        self.transport = transport
        self._resolvers: Dict[ResolverKind, BaseResolver] = {}
        self._resolver_classes: Dict[ResolverKind, Type[BaseResolver]] = {
            ResolverKind.INLINE: InlineResolver,
            ResolverKind.OBJECT_REF: ObjectRefResolver,
            ResolverKind.WEBHOOK: WebhookResolver,
        }
        
    async def initialize(self, config):
        """Initialize all resolvers with two-pass injection."""
        # Phase 1: Instantiate all resolvers
        for kind, resolver_class in self._resolver_classes.items():
            if kind in self._resolvers:
                continue
            try:
                self._resolvers[kind] = resolver_class()
            except Exception as e:
                logger.error(f"Failed to instantiate resolver {kind.value}: {e}")
                raise

        # Phase 2: Initialize and inject registry
        for kind, resolver in self._resolvers.items():
            try:
                await resolver.initialize(config, self)
                logger.debug(f"Initialized resolver: {kind.value}")
            except Exception as e:
                logger.error(f"Failed to initialize resolver {kind.value}: {e}")
                raise
                
    def register(self, kind: ResolverKind, resolver: BaseResolver):
        """Register a resolver instance for a kind."""
        self._resolvers[kind] = resolver
        
    def get_resolver(self, kind) -> Optional[BaseResolver]:
        """Get a resolver by kind."""
        return self._resolvers.get(kind)
        
    def list_resolvers(self) -> list[ResolverKind]:
        """List registered resolver kinds."""
        return list(self._resolvers.keys())
