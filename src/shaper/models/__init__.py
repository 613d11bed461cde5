"""Pydantic models for records, selectors and configuration."""

from shaper.models.assignment import Assignment, SubjectSelectors
from shaper.models.config import EngineConfig, ShaperConfig, WebhookClientConfig
from shaper.models.content import (
    BasicAuthObjectRef,
    ContentItem,
    MTLSObjectRef,
    ObjectRef,
    ResolverKind,
    TransformerConfig,
    TransformerKind,
    WebhookConfig,
)
from shaper.models.profile import Profile
from shaper.models.selectors import NIL_UUID, Buildarch, IPXESelectors

__all__ = [
    "Assignment",
    "SubjectSelectors",
    "EngineConfig",
    "ShaperConfig",
    "WebhookClientConfig",
    "BasicAuthObjectRef",
    "ContentItem",
    "MTLSObjectRef",
    "ObjectRef",
    "ResolverKind",
    "TransformerConfig",
    "TransformerKind",
    "WebhookConfig",
    "Profile",
    "NIL_UUID",
    "Buildarch",
    "IPXESelectors",
]
