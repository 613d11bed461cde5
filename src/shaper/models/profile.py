"""Boot profile specification models."""

from typing import Dict
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from shaper.models.content import ContentItem


class Profile(BaseModel):
    """Boot template plus its auxiliary content."""
    name: str = Field(..., description="Profile name")
    namespace: str = Field(default="default", description="Profile namespace")
    ipxe_template: str = Field(..., description="Jinja2 template rendered into the iPXE script")
    additional_content: Dict[str, ContentItem] = Field(default_factory=dict)
    content_id_to_name: Dict[UUID, str] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="before")
    @classmethod
    def key_content_by_name(cls, data):
        """Accept additional content as a list and key it by name."""
        if not isinstance(data, dict):
            return data
        content = data.get("additional_content")
        if isinstance(content, list):
            keyed = {}
            for item in content:
                name = item.name if isinstance(item, ContentItem) else item.get("name")
                if name in keyed:
                    raise ValueError(f"duplicate content name {name!r}")
                keyed[name] = item
            data = dict(data)
            data["additional_content"] = keyed
        elif isinstance(content, dict):
            # Names default to their key
            data = dict(data)
            data["additional_content"] = {
                key: ({"name": key, **item} if isinstance(item, dict) else item)
                for key, item in content.items()
            }
        return data

    @model_validator(mode="after")
    def derive_content_ids(self):
        """Derive the content ID index and reject inconsistent ones."""
        derived = {}
        for key, item in self.additional_content.items():
            if key != item.name:
                raise ValueError(f"content keyed {key!r} is named {item.name!r}")
            if item.exposed_uuid is None:
                continue
            if item.exposed_uuid in derived:
                raise ValueError(f"exposed_uuid {item.exposed_uuid} is used by more than one content")
            derived[item.exposed_uuid] = item.name

        if self.content_id_to_name and self.content_id_to_name != derived:
            raise ValueError("content_id_to_name is inconsistent with exposed content")
        self.content_id_to_name = derived
        return self
