"""Webhook resolver."""

import logging
from typing import Optional

import httpx

from shaper.errors import ResolutionError, WebhookResolutionError
from shaper.models.content import ContentItem, ResolverKind
from shaper.models.selectors import IPXESelectors
from shaper.resolvers.base import BaseResolver
from shaper.utils.webhook import WebhookClientFactory


logger = logging.getLogger(__name__)


class WebhookResolver(BaseResolver):
    """Fetches content from a remote webhook with a GET request.

    The response body is the content whatever the status code; an upstream
    error body becomes the payload. Only transport-level failures and
    credential resolution failures are errors.
    """

    def __init__(self, client_factory: Optional[WebhookClientFactory] = None):
        """Initialize webhook resolver."""
        self.client_factory = client_factory

    async def initialize(self, config, registry):
        """Wire the client factory to the registry's object ref resolver."""
        if self.client_factory is not None:
            return
        self.client_factory = WebhookClientFactory(
            registry.get_resolver(ResolverKind.OBJECT_REF),
            timeout=config.webhook.timeout,
            disable_insecure_skip_verify=config.webhook.disable_insecure_skip_verify,
            transport=registry.transport,
        )

    async def resolve(self, content: ContentItem, selectors: IPXESelectors) -> bytes:
        """GET the webhook URL with the selectors as query parameters."""
        config = content.webhook
        if config is None:
            raise WebhookResolutionError(f"content {content.name!r}: webhook config should not be nil")
        if self.client_factory is None:
            raise WebhookResolutionError("webhook resolver is not initialized")

        try:
            client, url = await self.client_factory.client(config)
        except ResolutionError as e:
            raise WebhookResolutionError(f"content {content.name!r}") from e

        params = {"buildarch": selectors.buildarch, "uuid": str(selectors.uuid)}
        try:
            async with client:
                response = await client.get(url, params=params)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise WebhookResolutionError(f"content {content.name!r}: GET {url}") from e

        if response.is_error:
            logger.warning(
                f"Webhook {url} answered {response.status_code} for content {content.name}; "
                "passing the body through"
            )
        return response.content
