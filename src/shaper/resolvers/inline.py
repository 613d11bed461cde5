"""Inline resolver."""

from shaper.errors import ResolutionError
from shaper.models.content import ContentItem
from shaper.models.selectors import IPXESelectors
from shaper.resolvers.base import BaseResolver


class InlineResolver(BaseResolver):
    """Returns the literal payload stored in the content item."""
    
    async def resolve(self, content: ContentItem, selectors: IPXESelectors) -> bytes:
        if content.inline is None:
            raise ResolutionError(f"content {content.name!r} has no inline payload")
        return content.inline.encode()
