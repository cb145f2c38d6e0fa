"""Pydantic models shared by the export and schema-import pipelines."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class CanonicalType(str, Enum):
    """Attribute types understood by Permit."""
    STRING = "string"
    NUMBER = "number"
    BOOL = "bool"
    JSON = "json"
    TIME = "time"
    ARRAY = "array"
    OBJECT = "object"


class ExportScope(BaseModel):
    """Organization, project and environment an export runs against."""
    environment_id: Optional[str] = None
    project_id: Optional[str] = None
    organization_id: Optional[str] = None

    class Config:
        frozen = True


class AttributeSpec(BaseModel):
    """Type (and optional description) of a single resource attribute."""
    type: CanonicalType
    description: Optional[str] = None

    class Config:
        frozen = True


class ResourceDefinition(BaseModel):
    """Canonical, origin-independent description of an authorizable resource."""
    key: str
    name: str
    actions: List[str]
    attributes: Dict[str, AttributeSpec] = Field(default_factory=dict)
    description: Optional[str] = None

    class Config:
        frozen = True

    @field_validator("actions")
    @classmethod
    def _actions_not_empty(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("a resource needs at least one action")
        return value

    def to_api_payload(self) -> Dict[str, object]:
        """Body accepted by the Permit resources endpoint."""
        payload: Dict[str, object] = {
            "key": self.key,
            "name": self.name,
            "actions": {action: {"name": action} for action in self.actions},
            "attributes": {
                name: spec.model_dump(mode="json", exclude_none=True)
                for name, spec in self.attributes.items()
            },
        }
        if self.description:
            payload["description"] = self.description
        return payload


@dataclass
class ExportResult:
    """Final HCL document plus the warnings collected while producing it."""
    document: str
    warnings: List[str] = field(default_factory=list)


@dataclass
class ExportState:
    """Observable progress of an export run."""
    status: str = ""
    stage: Optional[str] = None
    is_complete: bool = False
    error: Optional[BaseException] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return self.error is not None
