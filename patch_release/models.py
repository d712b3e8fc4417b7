"""Data models for patch-release.

These Pydantic models represent the core data structures passed between the
steps of the release pipeline.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from .errors import UnrecognizedProjectTypeError


class ProjectType(str, Enum):
    """Kind of project being patched; selects how the version is stamped."""

    CORE_PACKAGE = "core-package"
    MODULE_PACKAGE = "module-package"
    EXTENSION_PACKAGE = "extension-package"

    @classmethod
    def _missing_(cls, value: object) -> ProjectType | None:
        # Older input names: civicrm-core, drupal-module, civicrm-extension
        return _LEGACY_NAMES.get(value) if isinstance(value, str) else None

    @classmethod
    def parse(cls, value: str | ProjectType) -> ProjectType:
        """Convert an input value, raising UnrecognizedProjectTypeError if unknown."""
        try:
            return cls(value)
        except ValueError:
            raise UnrecognizedProjectTypeError(str(value)) from None


_LEGACY_NAMES = {
    "civicrm-core": ProjectType.CORE_PACKAGE,
    "drupal-module": ProjectType.MODULE_PACKAGE,
    "civicrm-extension": ProjectType.EXTENSION_PACKAGE,
}


class Project(BaseModel):
    """A checked-out project that will be patched in place.

    Attributes:
        directory: Absolute path to the project files. Owned by the caller.
        type: Project type, selects the version stamping strategy.
        name: Name used as the prefix of the package file name.
    """

    directory: Path
    type: ProjectType
    name: str


class Package(BaseModel):
    """A release archive produced by the pipeline.

    Attributes:
        file_name: Archive file name, ``<project>-<patch version>.tar.gz``.
        path: Absolute path to the archive under the workspace root.
    """

    model_config = ConfigDict(frozen=True)

    file_name: str
    path: Path


class ReleaseResult(BaseModel):
    """Outcome of a successful pipeline run."""

    model_config = ConfigDict(frozen=True)

    version: str
    package: Package
