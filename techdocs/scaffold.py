"""
Starter project creation for `techdocs init`.

Copies the skeleton shipped in techdocs/resources/skeleton into a directory.
"""

import shutil
from pathlib import Path
from typing import List

from loguru import logger

from techdocs.contexts.configuring.config import RESOURCES_PATH
from techdocs.exceptions import ProjectExistsError

SKELETON_PATH = RESOURCES_PATH / "skeleton"


def skeleton_files() -> List[Path]:
    """Skeleton files, relative to the skeleton root."""
    return sorted(p.relative_to(SKELETON_PATH) for p in SKELETON_PATH.rglob("*") if p.is_file())


def init_project(target_dir: Path, force: bool = False) -> List[Path]:
    """
    Write a starter project into target_dir.

    Args:
        target_dir: Directory to populate (created if missing)
        force: Overwrite existing files

    Returns:
        Paths of the written files

    Raises:
        ProjectExistsError: If files would be overwritten and force is False
    """
    target_dir = Path(target_dir).resolve()
    relative_paths = skeleton_files()

    if not force:
        conflicts = [target_dir / rel for rel in relative_paths if (target_dir / rel).exists()]
        if conflicts:
            raise ProjectExistsError(conflicts)

    written = []
    for rel in relative_paths:
        destination = target_dir / rel
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(SKELETON_PATH / rel, destination)
        written.append(destination)
        logger.debug(f"Wrote {destination}")

    return written
