"""Identity record and run settings shared by the prompts, pipeline and CLI."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from .naming import (
    PREFIX_MIN_LENGTH,
    derive_namespace,
    derive_prefix,
    derive_slug,
    is_valid_prefix,
    is_valid_slug,
)
from .substitute import ExclusionPolicy

__all__ = ["CookerSettings", "IdentitySpec"]


class IdentitySpec(BaseModel):
    """Derived identifiers describing the theme being cooked.

    Attributes
    ----------
    name:
        The human readable theme title, whitespace normalised.
    package_slug:
        Lowercase machine identifier. Also used as the destination directory.
    prefix:
        Short uppercase code used for constants.
    description, author, url:
        Optional free text collected by the prompts.

    ``namespace``, ``env_constant`` and ``asset_manifest_constant`` are
    computed from the fields above and can never drift out of sync.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = Field(..., description="Human readable theme name.")
    package_slug: str = Field(..., description="Lowercase package name and directory name.")
    prefix: str = Field(..., description="Uppercase constant prefix.")
    description: str = Field("", description="Optional theme description.")
    author: str = Field("", description="Optional author name.")
    url: str | None = Field(None, description="Local development url without protocol.")

    @field_validator("name")
    @classmethod
    def _normalise_name(cls, value: str) -> str:
        normalized = " ".join(value.split())
        if not normalized:
            raise ValueError("theme name must not be empty")
        return normalized

    @field_validator("package_slug")
    @classmethod
    def _check_slug(cls, value: str) -> str:
        if not is_valid_slug(value):
            raise ValueError(
                f"package name '{value}' must be lowercase letters, digits, '_' or '-'"
            )
        return value

    @field_validator("prefix")
    @classmethod
    def _check_prefix(cls, value: str) -> str:
        value = value.strip().upper()
        if len(value) < PREFIX_MIN_LENGTH:
            raise ValueError(f"prefix must have at least {PREFIX_MIN_LENGTH} characters")
        if not is_valid_prefix(value):
            raise ValueError(f"prefix '{value}' must be uppercase letters, digits or '_'")
        return value

    @computed_field  # type: ignore[prop-decorator]
    @property
    def namespace(self) -> str:
        return derive_namespace(self.package_slug)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def env_constant(self) -> str:
        return f"{self.prefix}_ENV"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def asset_manifest_constant(self) -> str:
        return f"{self.prefix}_ASSETS_MANIFEST"

    @classmethod
    def from_name(
        cls,
        name: str,
        *,
        url: str | None = None,
        description: str = "",
        author: str = "",
    ) -> "IdentitySpec":
        """Build an :class:`IdentitySpec` deriving every identifier from ``name``."""

        return cls(
            name=name,
            package_slug=derive_slug(name, separator="_"),
            prefix=derive_prefix(name.strip()),
            description=description.strip(),
            author=author.strip(),
            url=url,
        )

    def summary_lines(self, *, detailed: bool = False) -> list[tuple[str, str]]:
        """Return the labelled values shown before asking for confirmation."""

        lines = [(":green_book: Theme name", self.name)]
        if detailed:
            lines.append((":spiral_notepad: Theme description", self.description))
            lines.append((":crab: Author", self.author))
        lines.extend(
            [
                (":package: Package", self.package_slug),
                (":sun_behind_cloud: Namespace", self.namespace),
                (":bullet_train: Theme prefix", self.prefix),
            ]
        )
        if not detailed:
            lines.append((":earth_africa: Dev url", self.url or ""))
        return lines


DEFAULT_REPOSITORY = "https://github.com/stevenselcuk/palamut.git"


@dataclass(slots=True)
class CookerSettings:
    """Fixed configuration for a single cooking run."""

    repository_url: str = DEFAULT_REPOSITORY
    default_branch: str = "master"
    manifest: str = "package.json"
    reset_version: str = "1.0.0"
    build_script: str = "install:wordpress"
    ecosystems: tuple[str, ...] = ("node", "composer")
    cleanup_paths: tuple[str, ...] = ("packages", ".git", ".github")
    required_tools: tuple[str, ...] = ("git", "npm", "composer")
    exclusions: ExclusionPolicy = field(default_factory=ExclusionPolicy)
    directory: Path = field(default_factory=Path.cwd)

    def project_path(self, identity: IdentitySpec) -> Path:
        """Return the destination directory for ``identity``."""

        return Path(self.directory).expanduser().resolve() / identity.package_slug

    def manifest_policy(self) -> ExclusionPolicy:
        """Return the exclusion policy restricted to the manifest file."""

        return self.exclusions.restricted_to(self.manifest)
