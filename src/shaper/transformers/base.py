"""Base transformer interface."""

from abc import ABC, abstractmethod

from shaper.models.content import TransformerConfig
from shaper.models.selectors import IPXESelectors


class BaseTransformer(ABC):
    """Base transformer interface that all post-processing steps must implement."""
    
    async def initialize(self, config, registry):
        """Initialize the transformer with configuration and its registry."""
        pass
        
    @abstractmethod
    async def transform(
        self,
        config: TransformerConfig,
        payload: bytes,
        selectors: IPXESelectors,
    ) -> bytes:
        """Transform a payload."""
        pass
