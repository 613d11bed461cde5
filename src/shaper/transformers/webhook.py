"""Webhook transformer."""

import base64
import logging
from typing import Optional

import httpx

from shaper.errors import ResolutionError, TransformError
from shaper.models.content import ResolverKind, TransformerConfig
from shaper.models.selectors import IPXESelectors
from shaper.transformers.base import BaseTransformer
from shaper.utils.webhook import WebhookClientFactory


logger = logging.getLogger(__name__)


class WebhookTransformer(BaseTransformer):
    """POSTs the payload to a remote webhook and returns its response body."""

    def __init__(self, client_factory: Optional[WebhookClientFactory] = None):
        """Initialize webhook transformer."""
        self.client_factory = client_factory

    async def initialize(self, config, registry):
        """Wire the client factory to the object ref resolver."""
        if self.client_factory is not None:
            return
        self.client_factory = WebhookClientFactory(
            registry.resolvers.get_resolver(ResolverKind.OBJECT_REF),
            timeout=config.webhook.timeout,
            disable_insecure_skip_verify=config.webhook.disable_insecure_skip_verify,
            transport=registry.resolvers.transport,
        )

    async def transform(
        self,
        config: TransformerConfig,
        payload: bytes,
        selectors: IPXESelectors,
    ) -> bytes:
        if config.webhook is None:
            raise TransformError("webhook transformer requires a webhook config")
        if self.client_factory is None:
            raise TransformError("webhook transformer is not initialized")

        # Payload bytes travel base64 encoded
        body = {
            "content": base64.b64encode(payload).decode(),
            "attributes": selectors.as_params(),
        }

        try:
            client, url = await self.client_factory.client(config.webhook)
        except ResolutionError as e:
            raise TransformError("resolving webhook credentials") from e

        params = {"uuid": str(selectors.uuid), "buildarch": selectors.buildarch}
        try:
            async with client:
                response = await client.post(url, params=params, json=body)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransformError(f"POST {url}") from e

        if response.is_error:
            logger.warning(f"Webhook transformer {url} answered {response.status_code}; passing the body through")
        return response.content
