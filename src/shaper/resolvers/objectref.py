"""Object reference resolver."""

import logging
from typing import List

from shaper.errors import NotFoundError, ObjectRefResolutionError, StoreError
from shaper.models.content import ContentItem, ObjectRef
from shaper.models.selectors import IPXESelectors
from shaper.resolvers.base import BaseResolver
from shaper.utils import jsonpath


logger = logging.getLogger(__name__)


class ObjectRefResolver(BaseResolver):
    """Extracts fields from external objects held by the object store."""

    def __init__(self, object_store=None):
        """Initialize object ref resolver."""
        self.object_store = object_store

    async def initialize(self, config, registry):
        """Pick up the object store from the registry."""
        if self.object_store is None:
            self.object_store = registry.object_store

    async def resolve(self, content: ContentItem, selectors: IPXESelectors) -> bytes:
        """Resolve the single path query of the item's object reference."""
        ref = content.object_ref
        if ref is None:
            raise ObjectRefResolutionError(f"content {content.name!r}: object ref must be specified")
        if not ref.path_query:
            raise ObjectRefResolutionError(
                f"content {content.name!r}: object ref {ref.coordinates()} has no path query"
            )

        out = await self.resolve_paths([ref.path_query], ref)
        return out[0]

    async def resolve_paths(self, paths: List[str], ref: ObjectRef) -> List[bytes]:
        """Fetch the referenced object once and evaluate every path.

        Results are returned in the order of ``paths``; callers index them
        positionally.
        """
        obj = await self._get_object(ref)

        out = []
        for path in paths:
            try:
                values = jsonpath.find(path, obj)
            except ValueError as e:
                raise ObjectRefResolutionError(f"evaluating {path!r} on {ref.coordinates()}") from e
            if not values:
                raise ObjectRefResolutionError(f"path {path!r} matched nothing in {ref.coordinates()}")
            out.append(jsonpath.render(values))

        logger.debug(f"Resolved {len(out)} path(s) from {ref.coordinates()}")
        return out

    async def _get_object(self, ref: ObjectRef) -> dict:
        if self.object_store is None:
            raise ObjectRefResolutionError("object store is not configured")
        try:
            return await self.object_store.get_object(
                ref.group, ref.version, ref.resource, ref.namespace, ref.name
            )
        except NotFoundError as e:
            raise ObjectRefResolutionError(f"object {ref.coordinates()} not found") from e
        except StoreError as e:
            raise ObjectRefResolutionError(f"fetching object {ref.coordinates()}") from e
