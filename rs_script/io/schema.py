"""
Schema — Pydantic models for the cargo package descriptor (Cargo.toml).

The same model carries both the descriptor embedded in a script and the
merged descriptor written next to the generated source:
  - package metadata (name, version, edition)
  - dependency mapping: bare version string or detailed record
  - optional [workspace] marker
  - [[bin]] targets

Unknown keys are kept on every model so that tables we do not interpret
([features], [profile.*], git = ..., default-features = ...) survive the
trip into the generated project.
"""
from typing import Any, Dict, List, Optional, Union

import toml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from rs_script.errors import DescriptorParseError


# ── Package block ────────────────────────────────────────────────────────────

class PackageMeta(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    version: str = "0.0.1"
    edition: Optional[str] = None      # filled from settings by the merge


# ── Dependencies ─────────────────────────────────────────────────────────────

class DependencyDetail(BaseModel):
    """When definition of a dependency is more than just a version string."""
    model_config = ConfigDict(extra="allow")

    version: Optional[str] = None       # absent for feature-only declarations
    features: List[str] = Field(default_factory=list)


Dependency = Union[str, DependencyDetail]

UNRESOLVED_VERSION = "*"


# ── Binary targets ───────────────────────────────────────────────────────────

class BinTarget(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: Optional[str] = None
    path: Optional[str] = None
    required_features: Optional[List[str]] = Field(
        default=None, alias="required-features"
    )


# ── Descriptor ───────────────────────────────────────────────────────────────

class PackageDescriptor(BaseModel):
    """Cargo.toml contents. ``package`` is None only for an embedded fragment without one."""
    model_config = ConfigDict(extra="allow")

    package: Optional[PackageMeta] = None
    dependencies: Dict[str, Dependency] = Field(default_factory=dict)
    workspace: Optional[Dict[str, Any]] = None
    bin: List[BinTarget] = Field(default_factory=list)

    @classmethod
    def from_toml(cls, text: str) -> "PackageDescriptor":
        """
        Parse TOML text into a descriptor.

        Raises
        ------
        DescriptorParseError
            If *text* is not valid TOML, or its tables have the wrong shape.
        """
        try:
            data = toml.loads(text)
        except toml.TomlDecodeError as e:
            raise DescriptorParseError(str(e)) from e
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise DescriptorParseError(str(e)) from e

    def to_dict(self) -> Dict[str, Any]:
        data = self.model_dump(by_alias=True, exclude_none=True)
        if not data.get("bin"):
            data.pop("bin", None)
        return data

    def to_toml(self) -> str:
        return toml.dumps(self.to_dict())

    def dependency_names(self) -> List[str]:
        return sorted(self.dependencies)
