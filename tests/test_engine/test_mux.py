"""Tests for ResolveTransformMux."""

import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from shaper.engine.mux import BatchMode, ResolveTransformMux
from shaper.errors import ResolutionError, TransformError, UnknownResolverError, UnknownTransformerError
from shaper.models.content import ContentItem, ResolverKind, TransformerConfig, TransformerKind
from shaper.resolvers.base import BaseResolver
from shaper.resolvers.inline import InlineResolver
from shaper.transformers.base import BaseTransformer
from conftest import CONTENT_UUID


BASE_URL = "https://boot.example.com"


class SuffixTransformer(BaseTransformer):
    """Appends a marker to the payload."""
    
    def __init__(self, suffix: bytes):
        self.suffix = suffix
        
    async def transform(self, config, payload, selectors):
        return payload + self.suffix


class FailingTransformer(BaseTransformer):
    async def transform(self, config, payload, selectors):
        raise TransformError("bad payload")


class ScriptedResolver(BaseResolver):
    """Resolves inline items, sleeping or failing on request."""
    
    def __init__(self):
        self.running = 0
        self.max_running = 0
        self.cancelled = []
        
    async def resolve(self, content, selectors):
        self.running += 1
        self.max_running = max(self.max_running, self.running)
        try:
            if content.inline == "fail":
                await asyncio.sleep(0.05)
                raise ResolutionError(f"{content.name} failed")
            if content.inline == "hang":
                await asyncio.sleep(10)
            await asyncio.sleep(0.01)
            return content.inline.encode()
        except asyncio.CancelledError:
            self.cancelled.append(content.name)
            raise
        finally:
            self.running -= 1


def _registries(resolver=None, transformers=None):
    resolvers = Mock()
    resolvers.get_resolver = Mock(
        side_effect=lambda kind: resolver if kind == ResolverKind.INLINE else None
    )
    registry = Mock()
    registry.get_transformer = Mock(side_effect=lambda kind: (transformers or {}).get(kind))
    return resolvers, registry


WEBHOOK_STEP = TransformerConfig(webhook={"url": "https://t.example.com"})
BUTANE_STEP = TransformerConfig(butane_to_ignition=True)


class TestResolveAndTransform:
    """Test single item dispatch."""
    
    @pytest.mark.asyncio
    async def test_transformers_applied_in_order(self, make_inline, selectors):
        resolvers, transformers = _registries(InlineResolver(), {
            TransformerKind.BUTANE_TO_IGNITION: SuffixTransformer(b"-A"),
            TransformerKind.WEBHOOK: SuffixTransformer(b"-B"),
        })
        mux = ResolveTransformMux(BASE_URL, resolvers, transformers)
        
        out = await mux.resolve_and_transform(
            make_inline("x", "data", post_transformers=[BUTANE_STEP, WEBHOOK_STEP]),
            selectors,
        )
        
        assert out == b"data-A-B"

    @pytest.mark.asyncio
    async def test_unknown_resolver(self, selectors):
        resolvers, transformers = _registries(InlineResolver())
        mux = ResolveTransformMux(BASE_URL, resolvers, transformers)
        item = ContentItem(name="remote", webhook={"url": "example.com"})
        
        with pytest.raises(UnknownResolverError) as exc_info:
            await mux.resolve_and_transform(item, selectors)
        assert "remote" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_unknown_transformer(self, make_inline, selectors):
        resolvers, transformers = _registries(InlineResolver())
        mux = ResolveTransformMux(BASE_URL, resolvers, transformers)
        
        with pytest.raises(UnknownTransformerError):
            await mux.resolve_and_transform(make_inline("x", "d", post_transformers=[BUTANE_STEP]), selectors)

    @pytest.mark.asyncio
    async def test_transformer_error_context(self, make_inline, selectors):
        """Test failures name the transformer index and the content."""
        resolvers, transformers = _registries(InlineResolver(), {
            TransformerKind.BUTANE_TO_IGNITION: SuffixTransformer(b"-A"),
            TransformerKind.WEBHOOK: FailingTransformer(),
        })
        mux = ResolveTransformMux(BASE_URL, resolvers, transformers)
        
        with pytest.raises(TransformError) as exc_info:
            await mux.resolve_and_transform(
                make_inline("cfg", "d", post_transformers=[BUTANE_STEP, WEBHOOK_STEP]),
                selectors,
            )
        assert str(exc_info.value) == (
            "resolving and transforming content 'cfg': transformer #1 (webhook): bad payload"
        )

    @pytest.mark.asyncio
    async def test_resolver_receives_selectors(self, make_inline, selectors):
        resolver = Mock()
        resolver.resolve = AsyncMock(return_value=b"ok")
        resolvers, transformers = _registries(resolver)
        mux = ResolveTransformMux(BASE_URL, resolvers, transformers)
        item = make_inline("x", "d")
        
        await mux.resolve_and_transform(item, selectors)
        
        resolver.resolve.assert_awaited_once_with(item, selectors)


class TestBatch:
    """Test batch processing."""
    
    @pytest.mark.asyncio
    async def test_exposed_items_return_url(self, make_inline, selectors):
        """Test exposed items are referenced, not resolved."""
        resolver = ScriptedResolver()
        resolver.resolve = AsyncMock(wraps=resolver.resolve)
        resolvers, transformers = _registries(resolver)
        mux = ResolveTransformMux(BASE_URL + "/", resolvers, transformers)
        batch = {
            "kernel": make_inline("kernel", "vmlinuz"),
            "ignition": make_inline("ignition", "secret", exposed_uuid=CONTENT_UUID),
        }
        
        out = await mux.resolve_and_transform_batch(batch, selectors, BatchMode.RETURN_EXPOSED_URL)
        
        assert out == {
            "kernel": b"vmlinuz",
            "ignition": f"https://boot.example.com/content/{CONTENT_UUID}".encode(),
        }
        resolver.resolve.assert_awaited_once_with(batch["kernel"], selectors)

    @pytest.mark.asyncio
    async def test_resolve_mode_resolves_exposed(self, make_inline, selectors):
        resolvers, transformers = _registries(InlineResolver())
        mux = ResolveTransformMux(BASE_URL, resolvers, transformers)
        batch = {"ignition": make_inline("ignition", "secret", exposed_uuid=CONTENT_UUID)}
        
        assert await mux.resolve_and_transform_batch(batch, selectors) == {"ignition": b"secret"}

    @pytest.mark.asyncio
    async def test_order_preserved(self, make_inline, selectors):
        resolvers, transformers = _registries(ScriptedResolver())
        mux = ResolveTransformMux(BASE_URL, resolvers, transformers)
        names = ["c", "a", "b", "d"]
        batch = {name: make_inline(name, name.upper()) for name in names}
        
        out = await mux.resolve_and_transform_batch(batch, selectors)
        
        assert list(out) == names
        assert out["a"] == b"A"

    @pytest.mark.asyncio
    async def test_empty_batch(self, selectors):
        resolvers, transformers = _registries(InlineResolver())
        mux = ResolveTransformMux(BASE_URL, resolvers, transformers)
        assert await mux.resolve_and_transform_batch({}, selectors) == {}

    @pytest.mark.asyncio
    async def test_fail_fast_cancels_pending(self, make_inline, selectors):
        """Test the first failure aborts the batch and cancels the rest."""
        resolver = ScriptedResolver()
        resolvers, transformers = _registries(resolver)
        mux = ResolveTransformMux(BASE_URL, resolvers, transformers)
        batch = {
            "ok": make_inline("ok", "fine"),
            "broken": make_inline("broken", "fail"),
            "stuck": make_inline("stuck", "hang"),
        }
        
        with pytest.raises(ResolutionError) as exc_info:
            await asyncio.wait_for(mux.resolve_and_transform_batch(batch, selectors), timeout=5)
            
        assert "broken failed" in str(exc_info.value)
        assert str(exc_info.value).startswith("resolve and transform batch")
        assert resolver.cancelled == ["stuck"]
        assert resolver.running == 0

    @pytest.mark.asyncio
    async def test_max_concurrency(self, make_inline, selectors):
        resolver = ScriptedResolver()
        resolvers, transformers = _registries(resolver)
        mux = ResolveTransformMux(BASE_URL, resolvers, transformers, max_concurrency=2)
        batch = {f"item{i}": make_inline(f"item{i}", str(i)) for i in range(6)}
        
        out = await mux.resolve_and_transform_batch(batch, selectors)
        
        assert len(out) == 6
        assert resolver.max_running == 2
