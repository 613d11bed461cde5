"""Shared plumbing for outbound webhook calls.

Credentials are resolved at call time from external objects through the
object-ref resolver, then turned into an httpx client. Both the webhook
resolver and the webhook transformer build their clients here.
"""

import asyncio
import logging
import os
import ssl
import tempfile
from typing import Optional, Tuple
from urllib.parse import urlsplit

import httpx

from shaper.errors import ResolutionError
from shaper.models.content import BasicAuthObjectRef, MTLSObjectRef, WebhookConfig


logger = logging.getLogger(__name__)


def normalize_url(url: str) -> str:
    """Prefix scheme-less webhook URLs with https://."""
    if urlsplit(url).scheme in ("http", "https"):
        return url
    return f"https://{url}"


def build_ssl_context(
    client_key: bytes,
    client_cert: bytes,
    ca_bundle: bytes,
    insecure_skip_verify: bool = False,
) -> ssl.SSLContext:
    """Build a client TLS context from in-memory PEM material.

    The CA bundle becomes the only trust root. Raises ``ssl.SSLError`` or
    ``ValueError`` when the material cannot be parsed.
    """
    if not ca_bundle.strip():
        raise ValueError("empty CA bundle")
    context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH, cadata=ca_bundle.decode())

    # load_cert_chain only reads from files
    with tempfile.TemporaryDirectory(prefix="shaper-mtls-") as tmp:
        cert_file = os.path.join(tmp, "tls.crt")
        key_file = os.path.join(tmp, "tls.key")
        for path, data in ((cert_file, client_cert), (key_file, client_key)):
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
            with os.fdopen(fd, "wb") as f:
                f.write(data)
        context.load_cert_chain(certfile=cert_file, keyfile=key_file)

    if insecure_skip_verify:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


class WebhookClientFactory:
    """Builds authenticated httpx clients for webhook configs."""

    def __init__(
        self,
        object_ref_resolver,
        timeout: float = 10.0,
        disable_insecure_skip_verify: bool = False,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.object_ref_resolver = object_ref_resolver
        self.timeout = timeout
        self.disable_insecure_skip_verify = disable_insecure_skip_verify
        self.transport = transport

    async def mtls_context(self, ref: Optional[MTLSObjectRef]) -> Optional[ssl.SSLContext]:
        """Resolve mTLS material into a TLS context."""
        if ref is None:
            return None

        paths = [ref.client_key_path, ref.client_cert_path, ref.ca_bundle_path]
        try:
            res = await self.object_ref_resolver.resolve_paths(paths, ref)
        except ResolutionError as e:
            raise ResolutionError("resolving mTLS config") from e

        if len(res) < 3:
            raise ResolutionError(
                f"resolving mTLS config: expected 3 results, got {len(res)}; "
                "mTLS requires 1 client key, 1 client certificate and 1 CA bundle"
            )

        client_key, client_cert, ca_bundle = res[0], res[1], res[2]
        skip_verify = ref.insecure_skip_verify and not self.disable_insecure_skip_verify
        try:
            return await asyncio.to_thread(build_ssl_context, client_key, client_cert, ca_bundle, skip_verify)
        except (ssl.SSLError, ValueError, UnicodeDecodeError) as e:
            raise ResolutionError(f"resolving mTLS config from {ref.coordinates()}") from e

    async def basic_auth(self, ref: Optional[BasicAuthObjectRef]) -> Optional[httpx.BasicAuth]:
        """Resolve basic auth credentials."""
        if ref is None:
            return None

        paths = [ref.username_path, ref.password_path]
        try:
            res = await self.object_ref_resolver.resolve_paths(paths, ref)
        except ResolutionError as e:
            raise ResolutionError("resolving basic auth ref") from e

        if len(res) < 2:
            raise ResolutionError(
                f"resolving basic auth ref: expected 2 results, got {len(res)}; "
                "basic auth requires 1 username and 1 password"
            )

        username, password = res[0], res[1]
        return httpx.BasicAuth(username, password)

    async def client(self, config: WebhookConfig) -> Tuple[httpx.AsyncClient, str]:
        """Return a configured client and the normalized URL.

        Credential resolution happens before the client exists, so a
        failure never reaches the network.
        """
        context = await self.mtls_context(config.mtls_object_ref)
        auth = await self.basic_auth(config.basic_auth_object_ref)

        kwargs = {"timeout": self.timeout, "auth": auth}
        if context is not None:
            kwargs["verify"] = context
        if self.transport is not None:
            kwargs["transport"] = self.transport

        return httpx.AsyncClient(**kwargs), normalize_url(config.url)
