"""Tests for the error hierarchy."""

import pytest

from shaper.errors import (
    ContentNotFoundError,
    NotFoundError,
    ProfileSelectionError,
    ResolutionError,
    ShaperError,
    UnknownKindError,
    UnknownResolverError,
    WebhookResolutionError,
)


def test_context_trail():
    """Test contexts read from the outermost stage to the root cause."""
    error = ResolutionError("object missing").with_context("content 'a'").with_context("batch")
    assert str(error) == "batch: content 'a': object missing"


def test_cause_appended():
    with pytest.raises(WebhookResolutionError) as exc_info:
        try:
            raise OSError("connection reset")
        except OSError as e:
            raise WebhookResolutionError("GET https://example.com") from e
    assert str(exc_info.value) == "GET https://example.com: connection reset"


def test_with_context_keeps_class():
    error = UnknownResolverError("unknown resolver webhook")
    assert error.with_context("resolving") is error
    assert isinstance(error, UnknownKindError)


@pytest.mark.parametrize("error_class", [ContentNotFoundError, ProfileSelectionError])
def test_not_found_family(error_class):
    assert issubclass(error_class, NotFoundError)
    assert issubclass(error_class, ShaperError)
