"""
Repository content schema.

Pydantic models for installable units, artifact descriptors and the simple
YAML repository documents (content.yaml / artifacts.yaml).
"""
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


def _version_to_str(value: Any) -> Any:
    # YAML reads unquoted 1.0 as a float and 2 as an int
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class InstallableUnit(BaseModel):
    """One installable component and what it provides and requires."""
    id: str = Field(..., description="Unit identifier")
    version: str = Field("0.0.0", description="Unit version")
    provides: List[Dict[str, Any]] = Field(default_factory=list)
    requires: List[Dict[str, Any]] = Field(default_factory=list)
    properties: Dict[str, str] = Field(default_factory=dict)
    
    @field_validator("version", mode="before")
    @classmethod
    def coerce_version(cls, value: Any) -> Any:
        return _version_to_str(value)
    
    def __str__(self) -> str:
        return f"{self.id} {self.version}"


class ArtifactKey(BaseModel):
    """Identity of a binary artifact."""
    classifier: str = Field("osgi.bundle", description="Artifact namespace, e.g. osgi.bundle or binary")
    id: str
    version: str = "0.0.0"
    
    @field_validator("version", mode="before")
    @classmethod
    def coerce_version(cls, value: Any) -> Any:
        return _version_to_str(value)
    
    def __str__(self) -> str:
        return f"{self.classifier}/{self.id}/{self.version}"


class ArtifactDescriptor(BaseModel):
    """An artifact stored in an artifact repository."""
    key: ArtifactKey
    path: Optional[str] = Field(None, description="Path of the artifact relative to the repository root")
    size: Optional[int] = None
    sha256: Optional[str] = None
    properties: Dict[str, str] = Field(default_factory=dict)


class ReferenceEntry(BaseModel):
    """Repository reference as declared in content.yaml."""
    location: str
    type: Literal["metadata", "artifact"] = "metadata"
    enabled: Optional[bool] = None
    options: Optional[int] = Field(None, ge=0, description="Raw option bitmask; overrides 'enabled'")
    nickname: Optional[str] = None


class ContentDocument(BaseModel):
    """content.yaml: metadata repository document."""
    name: Optional[str] = None
    units: List[InstallableUnit] = Field(default_factory=list)
    references: List[ReferenceEntry] = Field(default_factory=list)


class ArtifactEntry(BaseModel):
    """Artifact as declared in artifacts.yaml."""
    classifier: str = "osgi.bundle"
    id: str
    version: str = "0.0.0"
    path: Optional[str] = None
    size: Optional[int] = Field(None, ge=0)
    sha256: Optional[str] = None
    properties: Dict[str, str] = Field(default_factory=dict)
    
    @field_validator("version", mode="before")
    @classmethod
    def coerce_version(cls, value: Any) -> Any:
        return _version_to_str(value)
    
    def to_descriptor(self) -> ArtifactDescriptor:
        return ArtifactDescriptor(
            key=ArtifactKey(classifier=self.classifier, id=self.id, version=self.version),
            path=self.path,
            size=self.size,
            sha256=self.sha256,
            properties=self.properties,
        )


class ArtifactsDocument(BaseModel):
    """artifacts.yaml: artifact repository document."""
    name: Optional[str] = None
    artifacts: List[ArtifactEntry] = Field(default_factory=list)
