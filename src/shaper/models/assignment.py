"""Assignment specification models."""

from typing import Dict, List
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from shaper.models.selectors import Buildarch, IPXESelectors


class SubjectSelectors(BaseModel):
    """Machines an assignment applies to."""
    buildarch: List[Buildarch] = Field(default_factory=list, description="Empty means any architecture")
    uuid_list: List[UUID] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    def matches_buildarch(self, buildarch: str) -> bool:
        """Check whether the architecture is selected."""
        if not self.buildarch:
            return True
        return buildarch in {b.value for b in self.buildarch}

    def as_dict(self) -> Dict[str, List[str]]:
        """Selectors as plain strings, omitting empty lists."""
        out = {}
        if self.buildarch:
            out["buildarch"] = [b.value for b in self.buildarch]
        if self.uuid_list:
            out["uuid"] = [str(u) for u in self.uuid_list]
        return out


class Assignment(BaseModel):
    """Rule binding machine selectors to a profile."""
    name: str = Field(..., description="Assignment name")
    namespace: str = Field(default="default")
    profile_name: str = Field(..., description="Name of the assigned profile")
    subject_selectors: SubjectSelectors = Field(default_factory=SubjectSelectors)
    is_default: bool = Field(default=False, description="Per-architecture default assignment")

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def check_default(self):
        """Default assignments cannot select UUIDs."""
        if self.is_default and self.subject_selectors.uuid_list:
            raise ValueError(f"default assignment {self.name!r} cannot select uuids")
        return self

    def matches(self, selectors: IPXESelectors) -> bool:
        """Check whether this non-default assignment selects the machine."""
        if self.is_default or selectors.uuid.int == 0:
            return False
        return (
            selectors.uuid in self.subject_selectors.uuid_list
            and self.subject_selectors.matches_buildarch(selectors.buildarch)
        )
