"""Machine selector models."""

from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


NIL_UUID = UUID(int=0)


class Buildarch(str, Enum):
    """Build architectures reported by iPXE."""
    ARM32 = "arm32"
    ARM64 = "arm64"
    I386 = "i386"
    X86_64 = "x86_64"


class IPXESelectors(BaseModel):
    """Selectors identifying a requesting machine."""
    uuid: UUID = Field(default=NIL_UUID, description="Machine UUID")
    buildarch: str = Field(default="", description="iPXE build architecture")

    def with_uuid(self, uuid: UUID) -> "IPXESelectors":
        """Return a copy of the selectors carrying another UUID."""
        return IPXESelectors(uuid=uuid, buildarch=self.buildarch)

    def as_params(self) -> dict:
        """Selectors as webhook attributes."""
        return {"uuid": str(self.uuid), "buildarch": self.buildarch}
