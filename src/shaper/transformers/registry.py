"""Transformer registry mapping transformer kinds to implementations."""

import logging
from typing import Dict, Optional, Type

from shaper.models.content import TransformerKind
from shaper.transformers.base import BaseTransformer
from shaper.transformers.butane import ButaneTransformer
from shaper.transformers.webhook import WebhookTransformer


logger = logging.getLogger(__name__)


class TransformerRegistry:
    """Registry for managing content transformers."""
    
    def __init__(self, resolvers=None):
        """Initialize transformer registry.

        ``resolvers`` is the resolver registry; webhook transformers
        resolve their credentials through its object ref resolver.
        """
        self.resolvers = resolvers
        self._transformers: Dict[TransformerKind, BaseTransformer] = {}
        self._transformer_classes: Dict[TransformerKind, Type[BaseTransformer]] = {
            TransformerKind.BUTANE_TO_IGNITION: ButaneTransformer,
            TransformerKind.WEBHOOK: WebhookTransformer,
        }
        
    async def initialize(self, config):
        """Initialize all transformers with two-pass injection."""
        for kind, transformer_class in self._transformer_classes.items():
            if kind in self._transformers:
                continue
            try:
                self._transformers[kind] = transformer_class()
            except Exception as e:
                logger.error(f"Failed to instantiate transformer {kind.value}: {e}")
                raise

        for kind, transformer in self._transformers.items():
            try:
                await transformer.initialize(config, self)
                logger.debug(f"Initialized transformer: {kind.value}")
            except Exception as e:
                logger.error(f"Failed to initialize transformer {kind.value}: {e}")
                raise
                
    def register(self, kind: TransformerKind, transformer: BaseTransformer):
        """Register a transformer instance for a kind."""
        self._transformers[kind] = transformer
        
    def get_transformer(self, kind) -> Optional[BaseTransformer]:
        """Get a transformer by kind."""
        return self._transformers.get(kind)
        
    def list_transformers(self) -> list[TransformerKind]:
        """List registered transformer kinds."""
        return list(self._transformers.keys())
