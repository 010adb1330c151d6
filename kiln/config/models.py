"""Project configuration models loaded from ``kiln.yaml``."""

from enum import Enum
from pathlib import Path

from pydantic import ConfigDict, Field, field_validator, model_validator

from kiln.models.base import KilnBaseModel


class ArtifactFormat(str, Enum):
    """File format of a target's firmware image."""

    BIN = "bin"
    IHEX = "ihex"

    @property
    def extension(self) -> str:
        return f".{self.value}"


class ArtifactKind(str, Enum):
    """Leading name component of a collected artifact."""

    FIRMWARE = "firmware"
    PROVISIONER = "provisioner"


class CacheStrategy(str, Enum):
    """How parallel builds treat the toolchain's build cache."""

    ISOLATED = "isolated"
    SHARED = "shared"


class ToolchainProfile(KilnBaseModel):
    """How to invoke the toolchain for a family of targets.

    ``command``, ``output`` and ``post_process`` may reference the
    ``{features}``, ``{target}``, ``{variant}`` and ``{target_dir}``
    placeholders.
    """

    # Arguments, environment values and the separator reach the toolchain as written
    model_config = ConfigDict(str_strip_whitespace=False)

    working_dir: Path = Path(".")
    command: list[str]
    output: str
    post_process: list[list[str]] = Field(default_factory=list)
    env: dict[str, str] = Field(default_factory=dict)
    feature_separator: str = ","
    target_dir: str = "target"
    cache_env: str = "CARGO_TARGET_DIR"

    @field_validator("command")
    @classmethod
    def validate_command(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("Toolchain command must not be empty")
        return v

    @field_validator("feature_separator")
    @classmethod
    def validate_feature_separator(cls, v: str) -> str:
        if not v:
            raise ValueError("Feature separator must not be empty")
        return v


class TargetConfig(KilnBaseModel):
    """A hardware target and its base feature set."""

    id: str
    toolchain: str
    format: ArtifactFormat = ArtifactFormat.BIN
    features: list[str] = Field(default_factory=list)
    variants: list[str] | None = None
    description: str | None = None

    def supports(self, variant_id: str) -> bool:
        """Check whether this target is built for the given variant."""
        return self.variants is None or variant_id in self.variants


class VariantConfig(KilnBaseModel):
    """A named build configuration expressed as extra features."""

    id: str
    features: list[str] = Field(default_factory=list)
    kind: ArtifactKind = ArtifactKind.FIRMWARE
    suffix: str = ""
    description: str | None = None

    def with_extra_features(self, features: list[str]) -> "VariantConfig":
        """Return a copy of this variant with additional features."""
        merged = list(self.features) + [f for f in features if f not in self.features]
        return self.model_copy(update={"features": merged})


class SubsystemConfig(KilnBaseModel):
    """A hardware runner with its own check, lint and doc routines."""

    name: str
    path: Path = Path(".")
    check: list[list[str]] = Field(default_factory=list)
    lint: list[list[str]] = Field(default_factory=list)
    doc: list[list[str]] = Field(default_factory=list)


class WorkspaceConfig(KilnBaseModel):
    """Commands run at the workspace root."""

    lint: list[list[str]] = Field(default_factory=list)


class BinariesPhaseConfig(KilnBaseModel):
    """Settings for the ``binaries`` phase."""

    variants: list[str] = Field(
        default_factory=lambda: ["release", "test", "provisioner"]
    )
    output_dir: Path = Path("binaries")
    metadata: bool = True


class PhasesConfig(KilnBaseModel):
    binaries: BinariesPhaseConfig = Field(default_factory=BinariesPhaseConfig)


class LicenseMetadataConfig(KilnBaseModel):
    manifest_path: Path = Path("Cargo.toml")
    output: Path = Path("license.txt")


class CommandsMetadataConfig(KilnBaseModel):
    source: Path | None = None
    extract_command: list[str] | None = None
    output: Path = Path("commands.bd")

    @model_validator(mode="after")
    def validate_source(self) -> "CommandsMetadataConfig":
        if self.source is not None and self.extract_command:
            raise ValueError("Specify either commands source or extract_command")
        return self


class ManifestMetadataConfig(KilnBaseModel):
    template: Path = Path("utils/manifest.template.json")
    output: Path = Path("manifest.json")
    placeholder: str = "@VERSION@"


class MetadataConfig(KilnBaseModel):
    license: LicenseMetadataConfig = Field(default_factory=LicenseMetadataConfig)
    commands: CommandsMetadataConfig = Field(default_factory=CommandsMetadataConfig)
    manifest: ManifestMetadataConfig = Field(default_factory=ManifestMetadataConfig)


class ProjectConfig(KilnBaseModel):
    """Complete project configuration.

    Cross references between sections are validated here so that a bad
    configuration is rejected before any build starts.
    """

    product: str = "Nitrokey 3"
    toolchains: dict[str, ToolchainProfile] = Field(default_factory=dict)
    targets: list[TargetConfig] = Field(default_factory=list)
    variants: list[VariantConfig] = Field(default_factory=list)
    phases: PhasesConfig = Field(default_factory=PhasesConfig)
    subsystems: list[SubsystemConfig] = Field(default_factory=list)
    workspace: WorkspaceConfig = Field(default_factory=WorkspaceConfig)
    metadata: MetadataConfig = Field(default_factory=MetadataConfig)

    @model_validator(mode="after")
    def validate_references(self) -> "ProjectConfig":
        _ensure_unique("target", [t.id for t in self.targets])
        _ensure_unique("variant", [v.id for v in self.variants])
        _ensure_unique("subsystem", [s.name for s in self.subsystems])

        variant_ids = {v.id for v in self.variants}
        for target in self.targets:
            if target.toolchain not in self.toolchains:
                raise ValueError(
                    f"Target '{target.id}' references unknown toolchain "
                    f"'{target.toolchain}'"
                )
            for variant_id in target.variants or []:
                if variant_id not in variant_ids:
                    raise ValueError(
                        f"Target '{target.id}' references unknown variant "
                        f"'{variant_id}'"
                    )

        for variant_id in self.phases.binaries.variants:
            if variant_id not in variant_ids:
                raise ValueError(
                    f"Phase 'binaries' references unknown variant '{variant_id}'"
                )

        # Canonical artifact names must be unique
        seen: dict[tuple[str, str], str] = {}
        for variant in self.variants:
            key = (variant.kind, variant.suffix)
            if key in seen:
                raise ValueError(
                    f"Variants '{seen[key]}' and '{variant.id}' produce the same "
                    "artifact names"
                )
            seen[key] = variant.id
        return self

    def get_target(self, target_id: str) -> TargetConfig | None:
        return next((t for t in self.targets if t.id == target_id), None)

    def get_variant(self, variant_id: str) -> VariantConfig | None:
        return next((v for v in self.variants if v.id == variant_id), None)


def _ensure_unique(kind: str, ids: list[str]) -> None:
    duplicates = sorted({i for i in ids if ids.count(i) > 1})
    if duplicates:
        raise ValueError(f"Duplicate {kind} ids: {', '.join(duplicates)}")
