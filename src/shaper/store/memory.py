"""In-memory store backing both collaborator interfaces."""

import copy
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple
from uuid import UUID

from shaper.errors import AssignmentNotFoundError, ObjectNotFoundError, ProfileNotFoundError
from shaper.models.assignment import Assignment
from shaper.models.profile import Profile
from shaper.models.selectors import IPXESelectors
from shaper.store.base import Catalog, ObjectStore


logger = logging.getLogger(__name__)


ObjectKey = Tuple[str, str, str, str, str]


class MemoryStore(ObjectStore, Catalog):
    """Holds profiles, assignments and external objects in memory.

    Profiles and assignments are looked up in a single namespace. Objects
    are keyed by group, version, resource, namespace and name.
    """

    def __init__(
        self,
        namespace: str = "default",
        profiles: Optional[Iterable[Profile]] = None,
        assignments: Optional[Iterable[Assignment]] = None,
    ):
        self.namespace = namespace
        self.profiles: Dict[Tuple[str, str], Profile] = {}
        self.assignments: Dict[Tuple[str, str], Assignment] = {}
        self.objects: Dict[ObjectKey, Dict[str, Any]] = {}
        for profile in profiles or []:
            self.add_profile(profile)
        for assignment in assignments or []:
            self.add_assignment(assignment)

    def add_profile(self, profile: Profile):
        """Add or replace a profile."""
        self.profiles[(profile.namespace, profile.name)] = profile

    def add_assignment(self, assignment: Assignment):
        """Add or replace an assignment."""
        self.assignments[(assignment.namespace, assignment.name)] = assignment

    def add_object(self, group: str, version: str, resource: str, namespace: str, name: str, obj: Dict[str, Any]):
        """Add or replace an external object."""
        self.objects[(group, version, resource, namespace, name)] = obj

    def clear(self):
        """Drop every record."""
        self.profiles.clear()
        self.assignments.clear()
        self.objects.clear()

    # ObjectStore

    async def get_object(self, group: str, version: str, resource: str, namespace: str, name: str) -> Dict[str, Any]:
        obj = self.objects.get((group, version, resource, namespace, name))
        if obj is None:
            raise ObjectNotFoundError(f"{resource} {namespace}/{name} ({group or 'core'}/{version}) not found")
        return copy.deepcopy(obj)

    # Catalog

    def _namespaced_assignments(self) -> List[Assignment]:
        return [a for (ns, _), a in sorted(self.assignments.items()) if ns == self.namespace]

    async def get_profile(self, name: str) -> Profile:
        profile = self.profiles.get((self.namespace, name))
        if profile is None:
            raise ProfileNotFoundError(f"profile {self.namespace}/{name} not found")
        return profile

    async def find_assignment_by_selectors(self, selectors: IPXESelectors) -> Assignment:
        for assignment in self._namespaced_assignments():
            if assignment.matches(selectors):
                return assignment
        raise AssignmentNotFoundError(
            f"no assignment for uuid={selectors.uuid} buildarch={selectors.buildarch!r}"
        )

    async def find_default_assignment(self, buildarch: str) -> Assignment:
        for assignment in self._namespaced_assignments():
            if assignment.is_default and assignment.subject_selectors.matches_buildarch(buildarch):
                return assignment
        raise AssignmentNotFoundError(f"no default assignment for buildarch={buildarch!r}")

    async def list_profiles_by_content_id(self, content_id: UUID) -> List[Profile]:
        return [
            profile for _, profile in sorted(self.profiles.items())
            if content_id in profile.content_id_to_name
        ]
