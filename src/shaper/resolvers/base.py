"""Base resolver interface."""

from abc import ABC, abstractmethod

from shaper.models.content import ContentItem
from shaper.models.selectors import IPXESelectors


class BaseResolver(ABC):
    """Base resolver interface that all content resolvers must implement."""
    
    async def initialize(self, config, registry):
        """Initialize the resolver with configuration and its registry."""
        pass
        
    @abstractmethod
    async def resolve(self, content: ContentItem, selectors: IPXESelectors) -> bytes:
        """Fetch the raw content of an item."""
        pass
