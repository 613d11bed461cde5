"""Service facade wiring stores, registries, multiplexer and engines."""

import asyncio
import logging
from pathlib import Path
from typing import Awaitable, Optional, TypeVar
from uuid import UUID

import httpx

from shaper.engine.content import ContentEngine
from shaper.engine.ipxe import IPXEEngine
from shaper.engine.mux import ResolveTransformMux
from shaper.errors import RequestTimeoutError
from shaper.models.config import ShaperConfig
from shaper.models.selectors import IPXESelectors
from shaper.resolvers import ResolverRegistry
from shaper.store.base import Catalog, ObjectStore
from shaper.store.loader import StoreLoader
from shaper.transformers import TransformerRegistry


logger = logging.getLogger(__name__)


T = TypeVar("T")


class ShaperService:
    """Read interface of the resolution engine."""
    
    def __init__(
        self,
        config: ShaperConfig,
        catalog: Catalog,
        object_store: ObjectStore,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the service; call ``initialize`` before serving."""
        self.config = config
        self.catalog = catalog
        self.object_store = object_store
        self.transport = transport
        self.resolvers: Optional[ResolverRegistry] = None
        self.transformers: Optional[TransformerRegistry] = None
        self.mux: Optional[ResolveTransformMux] = None
        self.ipxe_engine: Optional[IPXEEngine] = None
        self.content_engine: Optional[ContentEngine] = None
        self.loader: Optional[StoreLoader] = None
        
    async def initialize(self):
        """Initialize registries and engines."""
        self.resolvers = ResolverRegistry(object_store=self.object_store, transport=self.transport)
        await self.resolvers.initialize(self.config)

        self.transformers = TransformerRegistry(resolvers=self.resolvers)
        await self.transformers.initialize(self.config)

        engine_config = self.config.engine
        self.mux = ResolveTransformMux(
            engine_config.base_url,
            self.resolvers,
            self.transformers,
            max_concurrency=engine_config.max_concurrency,
        )
        self.ipxe_engine = IPXEEngine(self.catalog, self.mux)
        self.content_engine = ContentEngine(self.catalog, self.mux)
        logger.info(
            f"Shaper initialized: namespace={engine_config.namespace} base_url={engine_config.base_url}"
        )

    @classmethod
    async def from_config_dir(
        cls,
        config_dir: Path,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "ShaperService":
        """Load a configuration directory and return an initialized service."""
        loader = StoreLoader(config_dir)
        store = await loader.load()
        service = cls(loader.config, store, store, transport=transport)
        service.loader = loader
        await service.initialize()
        return service

    async def render_boot(self, selectors: IPXESelectors) -> bytes:
        """Render the iPXE script of the profile assigned to a machine."""
        return await self._with_timeout(self.ipxe_engine.find_profile_and_render(selectors))

    async def get_content(self, content_id: UUID, selectors: IPXESelectors) -> bytes:
        """Resolve exposed content by its ID."""
        return await self._with_timeout(self.content_engine.get_by_id(content_id, selectors))

    def bootstrap(self) -> bytes:
        """Return the iPXE bootstrap script."""
        return self.ipxe_engine.bootstrap()

    async def _with_timeout(self, request: Awaitable[T]) -> T:
        timeout = self.config.engine.request_timeout
        try:
            return await asyncio.wait_for(request, timeout=timeout)
        except asyncio.TimeoutError as e:
            logger.warning(f"Request timed out after {timeout}s")
            raise RequestTimeoutError(f"request timed out after {timeout}s") from e
