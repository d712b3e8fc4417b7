"""Write the patch version into project metadata.

Where the version goes depends on the project type:

- core-package: as a comment before ``</version_no>`` in ``xml/version.xml``
- module-package: as a ``;patch = ...`` line in every ``.info`` file
- extension-package: nowhere, the version is embedded by other means

This makes it easy to tell which patch level a deployed site is running.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path

from .models import ProjectType
from .shell import step

VERSION_XML = Path("xml") / "version.xml"
VERSION_CLOSING_TAG = b"</version_no>"
MODULE_DESCRIPTOR_SUFFIX = ".info"


def stamp_core_package(project_dir: Path, patch_version: str) -> None:
    """Embed the patch version before every closing version tag in version.xml.

    Works on raw bytes: the file is usually ISO-8859-1, and nothing outside
    the tag may change, line endings included.
    """
    version_xml = project_dir / VERSION_XML
    content = version_xml.read_bytes()
    comment = f"<!-- {patch_version} -->".encode()
    version_xml.write_bytes(
        content.replace(VERSION_CLOSING_TAG, comment + VERSION_CLOSING_TAG)
    )
    print(f"  {VERSION_XML}: {content.count(VERSION_CLOSING_TAG)} tag(s) stamped")


def _ends_with_newline(path: Path) -> bool:
    """True if path is empty or its last byte is a newline."""
    with path.open("rb") as fh:
        if fh.seek(0, os.SEEK_END) == 0:
            return True
        fh.seek(-1, os.SEEK_END)
        return fh.read(1) == b"\n"


def stamp_module_package(project_dir: Path, patch_version: str) -> None:
    """Append a patch line to each module descriptor at the top of project_dir.

    Subdirectories are not searched. Finding no descriptor is not an error.
    """
    descriptors = sorted(
        p
        for p in project_dir.iterdir()
        if p.name.endswith(MODULE_DESCRIPTOR_SUFFIX) and p.is_file()
    )
    for descriptor in descriptors:
        # Keep the appended line separate from an unterminated last line
        prefix = b"" if _ends_with_newline(descriptor) else b"\n"
        with descriptor.open("ab") as fh:
            fh.write(prefix + f";patch = {patch_version}\n".encode())
        print(f"  {descriptor.name}")
    if not descriptors:
        print(f"  No {MODULE_DESCRIPTOR_SUFFIX} files found in {project_dir}")


def stamp_extension_package(project_dir: Path, patch_version: str) -> None:
    """Extensions carry their version elsewhere; nothing to write."""
    print("  Extension package: version not stamped")


STAMPERS: dict[ProjectType, Callable[[Path, str], None]] = {
    ProjectType.CORE_PACKAGE: stamp_core_package,
    ProjectType.MODULE_PACKAGE: stamp_module_package,
    ProjectType.EXTENSION_PACKAGE: stamp_extension_package,
}


def stamp_version(
    project_dir: Path, project_type: ProjectType | str, patch_version: str
) -> None:
    """Write the patch version into the project using its type's strategy.

    Raises:
        UnrecognizedProjectTypeError: If project_type is not supported. No
            file is touched in that case.
        OSError: If reading, listing or writing project files fails.
    """
    kind = ProjectType.parse(project_type)
    step(f"Stamping {patch_version} ({kind.value})")
    STAMPERS[kind](project_dir, patch_version)
