"""
Publishing Context

Responsibilities:
- Creates the output directory
- Copies documents, diagrams, assets and stylesheets into it
- Removes temporary files and build products

Owns: Output directory, cleanup
Never: Runs external tools
"""

from techdocs.contexts.publishing.publisher import (
    clean_project,
    cleanup_temp_files,
    prepare_output_dir,
    publish_artifacts,
    remove_paths,
)

__all__ = [
    "clean_project",
    "cleanup_temp_files",
    "prepare_output_dir",
    "publish_artifacts",
    "remove_paths",
]
