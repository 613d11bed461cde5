"""Resolve/transform multiplexer.

Dispatches a content item to the resolver registered for its kind, then
threads the result through the item's transformer chain in order.
"""

import asyncio
import logging
from enum import Enum
from typing import Dict, Mapping

from shaper.errors import ShaperError, UnknownResolverError, UnknownTransformerError
from shaper.models.content import ContentItem
from shaper.models.selectors import IPXESelectors


logger = logging.getLogger(__name__)


CONTENT_PATH = "content"


class BatchMode(Enum):
    """How a batch treats exposed content."""
    RESOLVE = "resolve"
    RETURN_EXPOSED_URL = "return_exposed_url"


def _kind_name(kind) -> str:
    return getattr(kind, "value", str(kind))


class ResolveTransformMux:
    """Shared dispatch core for resolvers and transformers."""

    def __init__(self, base_url: str, resolvers, transformers, max_concurrency: int = 0):
        """Initialize the multiplexer.

        ``max_concurrency`` bounds the items of one batch processed at the
        same time; 0 processes every item concurrently.
        """
        self.base_url = base_url.rstrip("/")
        self.resolvers = resolvers
        self.transformers = transformers
        self.max_concurrency = max_concurrency

    def exposed_url(self, content: ContentItem) -> str:
        """Reference URL of an exposed content item."""
        return f"{self.base_url}/{CONTENT_PATH}/{content.exposed_uuid}"

    async def resolve_and_transform(self, content: ContentItem, selectors: IPXESelectors) -> bytes:
        """Resolve a content item and apply its transformers in order."""
        context = f"resolving and transforming content {content.name!r}"

        resolver = self.resolvers.get_resolver(content.resolver_kind)
        if resolver is None:
            raise UnknownResolverError(
                f"unknown resolver {_kind_name(content.resolver_kind)}"
            ).with_context(context)

        try:
            out = await resolver.resolve(content, selectors)
        except ShaperError as e:
            raise e.with_context(context)

        for i, transformer_config in enumerate(content.post_transformers):
            kind = _kind_name(transformer_config.kind)
            transformer = self.transformers.get_transformer(transformer_config.kind)
            if transformer is None:
                raise UnknownTransformerError(f"unknown transformer {kind}").with_context(context)

            try:
                out = await transformer.transform(transformer_config, out, selectors)
            except ShaperError as e:
                raise e.with_context(f"transformer #{i} ({kind})").with_context(context)

        return out

    async def resolve_and_transform_batch(
        self,
        batch: Mapping[str, ContentItem],
        selectors: IPXESelectors,
        mode: BatchMode = BatchMode.RESOLVE,
    ) -> Dict[str, bytes]:
        """Resolve and transform every item of a batch.

        With ``BatchMode.RETURN_EXPOSED_URL`` exposed items yield their
        reference URL and are never resolved. The first failure cancels the
        items still in flight and is raised; no partial result is returned.
        """
        output: Dict[str, bytes] = {}
        pending: Dict[str, ContentItem] = {}
        for name, content in batch.items():
            if mode is BatchMode.RETURN_EXPOSED_URL and content.exposed:
                output[name] = self.exposed_url(content).encode()
            else:
                pending[name] = content

        if pending:
            output.update(await self._run_pending(pending, selectors))

        return {name: output[name] for name in batch}

    async def _run_pending(
        self,
        pending: Dict[str, ContentItem],
        selectors: IPXESelectors,
    ) -> Dict[str, bytes]:
        semaphore = asyncio.Semaphore(self.max_concurrency or len(pending))

        async def run(content: ContentItem) -> bytes:
            async with semaphore:
                return await self.resolve_and_transform(content, selectors)

        tasks = {name: asyncio.create_task(run(content)) for name, content in pending.items()}
        try:
            done, not_done = await asyncio.wait(tasks.values(), return_when=asyncio.FIRST_EXCEPTION)
        finally:
            for task in tasks.values():
                if not task.done():
                    task.cancel()

        failed = [task for task in tasks.values() if task in done and task.exception() is not None]
        if failed:
            if not_done:
                await asyncio.gather(*not_done, return_exceptions=True)
            error = failed[0].exception()
            if isinstance(error, ShaperError):
                error.with_context("resolve and transform batch")
            logger.debug(f"Batch aborted after {len(done)} of {len(tasks)} item(s): {error}")
            raise error

        return {name: task.result() for name, task in tasks.items()}
