"""Store collaborator interfaces."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List
from uuid import UUID

from shaper.models.assignment import Assignment
from shaper.models.profile import Profile
from shaper.models.selectors import IPXESelectors


class ObjectStore(ABC):
    """Read access to the external objects content refers to."""
    
    @abstractmethod
    async def get_object(
        self,
        group: str,
        version: str,
        resource: str,
        namespace: str,
        name: str,
    ) -> Dict[str, Any]:
        """Fetch an object; raises ObjectNotFoundError or StoreError."""
        pass


class Catalog(ABC):
    """Read access to profiles and assignments."""
    
    @abstractmethod
    async def get_profile(self, name: str) -> Profile:
        """Get a profile by name; raises ProfileNotFoundError."""
        pass
        
    @abstractmethod
    async def find_assignment_by_selectors(self, selectors: IPXESelectors) -> Assignment:
        """Find the assignment selecting a machine; raises AssignmentNotFoundError."""
        pass
        
    @abstractmethod
    async def find_default_assignment(self, buildarch: str) -> Assignment:
        """Find the default assignment of an architecture; raises AssignmentNotFoundError."""
        pass
        
    @abstractmethod
    async def list_profiles_by_content_id(self, content_id: UUID) -> List[Profile]:
        """List profiles exposing a content ID."""
        pass
