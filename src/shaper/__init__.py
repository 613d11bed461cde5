"""
Shaper - iPXE boot profile resolution.

Selects the boot profile assigned to a machine, renders its iPXE script and
serves the auxiliary content the script references, resolved from inline
data, stored objects or webhooks and post-processed by transformers.
"""

__version__ = "1.0.0"
__author__ = "Shaper Development Team"

# Re-export key components for easier access
from shaper.models.assignment import Assignment
from shaper.models.config import ShaperConfig
from shaper.models.content import ContentItem
from shaper.models.profile import Profile
from shaper.models.selectors import IPXESelectors

__all__ = [
    "Assignment",
    "ContentItem",
    "IPXESelectors",
    "Profile",
    "ShaperConfig",
]
