"""Models for generated release metadata."""

from datetime import datetime

from pydantic import ConfigDict, Field, field_validator

from kiln.models.base import KilnBaseModel


class Dependency(KilnBaseModel):
    """One package of the dependency graph with its licensing metadata."""

    name: str
    version: str
    license: str | None = None
    license_file: str | None = None
    repository: str | None = None

    @property
    def declared_license(self) -> str | None:
        if self.license:
            return self.license
        if self.license_file:
            return f"see {self.license_file}"
        return None


class DependencyGraph(KilnBaseModel):
    """Every transitive dependency of the firmware source tree."""

    dependencies: list[Dependency] = Field(default_factory=list)

    def sorted_dependencies(self) -> list[Dependency]:
        return sorted(self.dependencies, key=lambda d: (d.name, d.version))


class CommandArgument(KilnBaseModel):
    name: str
    description: str = ""
    type: str | None = None


class CommandDefinition(KilnBaseModel):
    """A firmware command as exposed over the device interface."""

    opcode: int
    name: str
    description: str = ""
    arguments: list[CommandArgument] = Field(default_factory=list)

    @field_validator("opcode", mode="before")
    @classmethod
    def parse_opcode(cls, v: object) -> object:
        """Accept hexadecimal strings such as ``0x61``."""
        if isinstance(v, str):
            return int(v, 0)
        return v


class CommandSurface(KilnBaseModel):
    commands: list[CommandDefinition] = Field(default_factory=list)


class LicenseReport(KilnBaseModel):
    model_config = ConfigDict(str_strip_whitespace=False)

    product: str
    dependency_count: int
    content: str


class CommandDoc(KilnBaseModel):
    model_config = ConfigDict(str_strip_whitespace=False)

    command_count: int
    content: str


class Manifest(KilnBaseModel):
    """A stamped manifest; ``content`` is kept byte for byte."""

    model_config = ConfigDict(str_strip_whitespace=False)

    version: str
    generated_at: datetime = Field(default_factory=datetime.now)
    content: str
