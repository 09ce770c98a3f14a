"""
Output Management

Copies build products into the output directory and removes everything a
build leaves behind.
"""

import shutil
from pathlib import Path
from typing import Iterable, List, Tuple

from techdocs.contexts.configuring.config import IMAGES_DIR_NAME, BuildConfig
from techdocs.contexts.converting.pandoc import STYLESHEET_NAME
from techdocs.contexts.publishing.logger import _log_debug, _log_info
from techdocs.contexts.templating.renderer import project_templates, rendered_path

# Formats whose output links to images instead of embedding them
LINKED_ASSET_FORMATS = ("html", "md")

# Diagram sources the plantuml filter leaves next to the images it renders
DIAGRAM_SOURCE_PATTERNS = ("*.puml",)


def prepare_output_dir(config: BuildConfig) -> Path:
    """Create the output directory if needed."""
    config.output_dir.mkdir(parents=True, exist_ok=True)
    return config.output_dir


def _copy_tree(source: Path, destination: Path, skip: Tuple[str, ...] = ()) -> Path:
    if destination.exists():
        shutil.rmtree(destination)
    shutil.copytree(source, destination, ignore=shutil.ignore_patterns(*skip) if skip else None)
    return destination


def publish_artifacts(config: BuildConfig, files: Iterable[Path]) -> List[Path]:
    """
    Copy build products into the output directory.

    Diagram images and asset directories are copied along for formats that
    link to them; the stylesheet is copied for multi-page HTML.

    Args:
        config: BuildConfig for this build
        files: Files produced by the build

    Returns:
        Destination paths of the published documents (not supporting assets)
    """
    output_dir = prepare_output_dir(config)

    published = []
    for source in files:
        destination = output_dir / source.name
        if source.resolve() != destination.resolve():
            shutil.copy2(source, destination)
        published.append(destination)
        _log_debug(f"Published {destination}")

    if config.format in LINKED_ASSET_FORMATS:
        if config.images_dir.is_dir():
            _copy_tree(config.images_dir, output_dir / IMAGES_DIR_NAME, skip=DIAGRAM_SOURCE_PATTERNS)
            _log_debug(f"Copied {IMAGES_DIR_NAME}/")
        for asset_dir in config.asset_dirs:
            if asset_dir.is_dir():
                _copy_tree(asset_dir, output_dir / asset_dir.name)
                _log_debug(f"Copied {asset_dir.name}/")

    if config.format == "html" and config.stylesheet is not None:
        shutil.copy2(config.stylesheet, output_dir / STYLESHEET_NAME)

    _log_info(f"Published {len(published)} file(s) to {output_dir}")
    return published


def remove_paths(paths: Iterable[Path]) -> List[Path]:
    """Delete files and directories, skipping ones already gone."""
    removed = []
    for path in paths:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        elif path.exists() or path.is_symlink():
            path.unlink()
        else:
            continue
        removed.append(path)
        _log_debug(f"Removed {path}")
    return removed


def cleanup_temp_files(config: BuildConfig) -> List[Path]:
    """
    Remove rendered templates and the work directory after a build.

    Rendered outputs are derived from the templates on disk, so files from a
    build that failed halfway through rendering are removed too.
    """
    rendered = [rendered_path(t) for t in project_templates(config)]
    return remove_paths([*rendered, config.work_dir])


def clean_project(config: BuildConfig, remove_logs: bool = False) -> List[Path]:
    """
    Remove every build product of a project.

    Removes the output directory, the work directory, rendered template
    outputs and generated diagram images; the log directory too when
    remove_logs is set.

    Args:
        config: BuildConfig of the project
        remove_logs: Also remove .techdocs/logs

    Returns:
        Paths that were removed
    """
    targets = [config.output_dir, config.work_dir, config.images_dir]
    targets += [rendered_path(t) for t in project_templates(config)]
    if remove_logs:
        targets.append(config.logs_dir)

    removed = remove_paths(targets)

    # Drop the state directory once nothing is left in it
    state_dir = config.state_dir
    if state_dir.is_dir() and not any(state_dir.iterdir()):
        state_dir.rmdir()

    return removed
