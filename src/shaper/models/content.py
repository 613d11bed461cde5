"""Content item models: resolver payloads and transformer chains."""

from enum import Enum
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from shaper.utils.jsonpath import validate_path


class ResolverKind(str, Enum):
    """Content source kinds."""
    INLINE = "inline"
    OBJECT_REF = "object_ref"
    WEBHOOK = "webhook"


class TransformerKind(str, Enum):
    """Post-processing kinds."""
    BUTANE_TO_IGNITION = "butane_to_ignition"
    WEBHOOK = "webhook"


class ObjectRef(BaseModel):
    """Reference to an external object, optionally with a path query."""
    group: str = Field(default="", description="API group, empty for the core group")
    version: str = Field(..., description="API version")
    resource: str = Field(..., description="Resource name, e.g. configmaps")
    namespace: str = Field(default="", description="Namespace, empty for cluster-scoped objects")
    name: str = Field(..., description="Object name")
    path_query: Optional[str] = Field(None, description="JSONPath template, e.g. {.data.key}")

    model_config = ConfigDict(extra="forbid")

    @field_validator("path_query")
    @classmethod
    def validate_path_query(cls, v):
        """Validate the path query syntax."""
        if v is None:
            return v
        return validate_path(v)

    def coordinates(self) -> str:
        """Human readable object coordinates."""
        gv = f"{self.group}/{self.version}" if self.group else self.version
        ns = f"{self.namespace}/" if self.namespace else ""
        return f"{gv}/{self.resource}/{ns}{self.name}"


class MTLSObjectRef(ObjectRef):
    """Reference to mTLS credential material."""
    client_key_path: str = Field(..., description="Path to the PEM client key")
    client_cert_path: str = Field(..., description="Path to the PEM client certificate")
    ca_bundle_path: str = Field(..., description="Path to the PEM CA bundle")
    insecure_skip_verify: bool = Field(default=False)

    @field_validator("client_key_path", "client_cert_path", "ca_bundle_path")
    @classmethod
    def validate_paths(cls, v):
        """Validate the credential path queries."""
        return validate_path(v)


class BasicAuthObjectRef(ObjectRef):
    """Reference to basic auth credential material."""
    username_path: str = Field(..., description="Path to the username")
    password_path: str = Field(..., description="Path to the password")

    @field_validator("username_path", "password_path")
    @classmethod
    def validate_paths(cls, v):
        """Validate the credential path queries."""
        return validate_path(v)


class WebhookConfig(BaseModel):
    """Remote webhook endpoint and its credentials."""
    url: str = Field(..., min_length=1, description="Webhook URL, https:// assumed when no scheme")
    mtls_object_ref: Optional[MTLSObjectRef] = None
    basic_auth_object_ref: Optional[BasicAuthObjectRef] = None

    model_config = ConfigDict(extra="forbid")


class TransformerConfig(BaseModel):
    """One step of a post-processing chain."""
    kind: TransformerKind
    webhook: Optional[WebhookConfig] = None

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="before")
    @classmethod
    def infer_kind(cls, data):
        """Accept the record shorthands ``{butane_to_ignition: true}`` and ``{webhook: {...}}``."""
        if not isinstance(data, dict) or "kind" in data:
            return data
        data = dict(data)
        if data.pop("butane_to_ignition", False):
            data["kind"] = TransformerKind.BUTANE_TO_IGNITION
        elif data.get("webhook") is not None:
            data["kind"] = TransformerKind.WEBHOOK
        return data

    @model_validator(mode="after")
    def check_webhook(self):
        """Webhook config is set iff the kind is webhook."""
        if (self.kind == TransformerKind.WEBHOOK) != (self.webhook is not None):
            raise ValueError("webhook config must be set if and only if kind is webhook")
        return self


_PAYLOAD_FIELDS = {
    ResolverKind.INLINE: "inline",
    ResolverKind.OBJECT_REF: "object_ref",
    ResolverKind.WEBHOOK: "webhook",
}


class ContentItem(BaseModel):
    """A piece of auxiliary profile content."""
    name: str = Field(..., min_length=1)
    exposed: bool = Field(default=False)
    exposed_uuid: Optional[UUID] = None
    resolver_kind: ResolverKind
    inline: Optional[str] = None
    object_ref: Optional[ObjectRef] = None
    webhook: Optional[WebhookConfig] = None
    post_transformers: List[TransformerConfig] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="before")
    @classmethod
    def infer_resolver_kind(cls, data):
        """Infer the resolver kind from the populated payload when omitted."""
        if not isinstance(data, dict) or data.get("resolver_kind") is not None:
            return data
        populated = [kind for kind, field in _PAYLOAD_FIELDS.items() if data.get(field) is not None]
        if len(populated) == 1:
            data = dict(data)
            data["resolver_kind"] = populated[0]
        return data

    @model_validator(mode="after")
    def check_invariants(self):
        """Exactly one payload matching the kind; exposed UUID iff exposed."""
        populated = [kind for kind, field in _PAYLOAD_FIELDS.items() if getattr(self, field) is not None]
        if populated != [self.resolver_kind]:
            raise ValueError(
                f"content {self.name!r} must carry exactly one payload matching "
                f"resolver kind {self.resolver_kind.value!r}"
            )
        if self.exposed_uuid is not None and self.exposed_uuid.int == 0:
            raise ValueError(f"content {self.name!r} has a nil exposed_uuid")
        if self.exposed and self.exposed_uuid is None:
            raise ValueError(f"content {self.name!r} is exposed but has no exposed_uuid")
        if not self.exposed and self.exposed_uuid is not None:
            raise ValueError(f"content {self.name!r} has an exposed_uuid but is not exposed")
        return self
