"""Content-by-ID engine."""

import logging
from uuid import UUID

from shaper.engine.mux import ResolveTransformMux
from shaper.errors import ContentNotFoundError, InvalidIDError, NotFoundError, ShaperError
from shaper.models.selectors import IPXESelectors
from shaper.utils.logging import format_event


logger = logging.getLogger(__name__)


ERROR_CONTEXT = "getting content by id"


class ContentEngine:
    """Serves exposed content by its stable ID."""

    def __init__(self, catalog, mux: ResolveTransformMux):
        """Initialize the engine."""
        self.catalog = catalog
        self.mux = mux

    async def get_by_id(self, content_id: UUID, selectors: IPXESelectors) -> bytes:
        """Materialize the exposed content identified by ``content_id``.

        The content ID replaces the caller's UUID in the selectors passed to
        resolvers and transformers; the build architecture is kept. This
        always resolves the content, it never returns a reference URL.
        """
        if content_id.int == 0:
            raise InvalidIDError("uuid cannot be nil").with_context(ERROR_CONTEXT)

        try:
            profiles = await self.catalog.list_profiles_by_content_id(content_id)
        except NotFoundError as e:
            raise ContentNotFoundError(f"content {content_id} cannot be found").with_context(ERROR_CONTEXT) from e
        except ShaperError as e:
            raise e.with_context(ERROR_CONTEXT)

        if not profiles:
            raise ContentNotFoundError(f"content {content_id} cannot be found").with_context(ERROR_CONTEXT)

        profile = profiles[0]
        name = profile.content_id_to_name.get(content_id)
        content = profile.additional_content.get(name) if name is not None else None
        if content is None:
            raise ContentNotFoundError(
                f"profile {profile.name!r} indexes content {content_id} but does not hold it"
            ).with_context(ERROR_CONTEXT)

        try:
            out = await self.mux.resolve_and_transform(content, selectors.with_uuid(content_id))
        except ShaperError as e:
            raise e.with_context(ERROR_CONTEXT)

        logger.info(format_event(
            "config_retrieved",
            config_uuid=str(content_id),
            content_type=content.resolver_kind.value,
            size_bytes=len(out),
        ))
        return out
