"""Exception hierarchy for shaper.

Callers branch on the exception class; each layer that re-raises an error
appends context (stage, content name) through ``with_context`` so the final
message reads as a trail from the outermost stage to the root cause.
"""

from typing import List


class ShaperError(Exception):
    """Base class for all shaper errors."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message
        self.context: List[str] = []

    def with_context(self, context: str) -> "ShaperError":
        """Prepend a context entry and return the same error."""
        self.context.insert(0, context)
        return self

    def __str__(self) -> str:
        parts = self.context + ([self.message] if self.message else [])
        cause = self.__cause__
        if cause is not None:
            parts.append(str(cause) or type(cause).__name__)
        return ": ".join(parts)


# Not found


class NotFoundError(ShaperError):
    """A requested record does not exist."""


class AssignmentNotFoundError(NotFoundError):
    """No assignment matches the selectors."""


class ProfileNotFoundError(NotFoundError):
    """Profile does not exist."""


class ContentNotFoundError(NotFoundError):
    """No profile exposes the requested content ID."""


class ObjectNotFoundError(NotFoundError):
    """Referenced external object does not exist."""


class ProfileSelectionError(NotFoundError):
    """Neither a matching nor a default assignment could be selected."""


# Unknown kinds


class UnknownKindError(ShaperError):
    """A resolver or transformer kind is not registered."""


class UnknownResolverError(UnknownKindError):
    """Resolver kind is not registered."""


class UnknownTransformerError(UnknownKindError):
    """Transformer kind is not registered."""


# Pipeline failures


class ResolutionError(ShaperError):
    """Resolving content failed."""


class ObjectRefResolutionError(ResolutionError):
    """Resolving an object reference failed."""


class WebhookResolutionError(ResolutionError):
    """Resolving content through a webhook failed."""


class TransformError(ShaperError):
    """Transforming content failed."""


class TemplateRenderError(ShaperError):
    """Boot template could not be parsed or rendered."""


# Input and collaborators


class InvalidInputError(ShaperError):
    """Caller supplied invalid input."""


class InvalidIDError(InvalidInputError):
    """Content ID is invalid."""


class StoreError(ShaperError):
    """Store collaborator failed for a reason other than not-found."""


class ConfigError(ShaperError):
    """Configuration or record files are invalid."""


class RequestTimeoutError(ShaperError):
    """Request did not complete within the configured timeout."""
