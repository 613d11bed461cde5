"""Tests for WebhookTransformer."""

import base64
import json
from unittest.mock import AsyncMock, Mock

import httpx
import pytest

from shaper.errors import TransformError
from shaper.models.content import TransformerConfig
from shaper.resolvers.objectref import ObjectRefResolver
from shaper.transformers.webhook import WebhookTransformer
from shaper.utils.webhook import WebhookClientFactory


def _transformer(handler, object_store=None):
    factory = WebhookClientFactory(ObjectRefResolver(object_store), transport=httpx.MockTransport(handler))
    return WebhookTransformer(factory)


CONFIG = TransformerConfig(webhook={"url": "http://transform.example.com/render"})


class TestWebhookTransformer:
    """Test webhook transformation."""
    
    @pytest.mark.asyncio
    async def test_post_payload(self, selectors):
        """Test the payload is posted base64 encoded with the selectors."""
        requests = []
        
        def handler(request):
            requests.append(request)
            return httpx.Response(200, content=b"transformed")
            
        out = await _transformer(handler).transform(CONFIG, b"\x00raw", selectors)
        
        assert out == b"transformed"
        request = requests[0]
        assert request.method == "POST"
        assert str(request.url).startswith("http://transform.example.com/render?")
        assert list(request.url.params.items()) == [
            ("uuid", str(selectors.uuid)),
            ("buildarch", "x86_64"),
        ]
        body = json.loads(request.content)
        assert base64.b64decode(body["content"]) == b"\x00raw"
        assert body["attributes"] == {"uuid": str(selectors.uuid), "buildarch": "x86_64"}

    @pytest.mark.asyncio
    async def test_error_status_passes_body_through(self, selectors):
        def handler(request):
            return httpx.Response(500, content=b"boom")
            
        assert await _transformer(handler).transform(CONFIG, b"x", selectors) == b"boom"

    @pytest.mark.asyncio
    async def test_transport_error(self, selectors):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)
            
        with pytest.raises(TransformError):
            await _transformer(handler).transform(CONFIG, b"x", selectors)

    @pytest.mark.asyncio
    async def test_invalid_url(self, selectors):
        handler = Mock(return_value=httpx.Response(200))
        config = TransformerConfig(webhook={"url": "transform.example.com:abc/render"})
        
        with pytest.raises(TransformError):
            await _transformer(handler).transform(config, b"x", selectors)
        handler.assert_not_called()

    @pytest.mark.asyncio
    async def test_credential_failure(self, object_store, selectors):
        handler = Mock(return_value=httpx.Response(200))
        config = TransformerConfig(webhook={
            "url": "transform.example.com",
            "basic_auth_object_ref": {
                "version": "v1",
                "resource": "secrets",
                "namespace": "default",
                "name": "webhook-creds",
                "username_path": "{.data.username}",
                "password_path": "{.data.missing}",
            },
        })
        
        with pytest.raises(TransformError):
            await _transformer(handler, object_store).transform(config, b"x", selectors)
        handler.assert_not_called()

    @pytest.mark.asyncio
    async def test_initialize_uses_resolver_registry(self):
        objectref = Mock()
        resolvers = Mock(transport=None)
        resolvers.get_resolver = Mock(return_value=objectref)
        config = Mock()
        config.webhook.timeout = 3.0
        config.webhook.disable_insecure_skip_verify = True
        
        transformer = WebhookTransformer()
        await transformer.initialize(config, Mock(resolvers=resolvers))
        
        assert transformer.client_factory.object_ref_resolver is objectref
        assert transformer.client_factory.timeout == 3.0
        assert transformer.client_factory.disable_insecure_skip_verify is True
