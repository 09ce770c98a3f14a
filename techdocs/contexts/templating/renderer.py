"""
Template Rendering

Renders *.jinja files found in the project tree. Each template is written next
to itself with the .jinja suffix removed, so `intro.md.jinja` produces
`intro.md` and the include filter can pick it up like any other page.
"""

import os
import time
from pathlib import Path
from typing import Any, Dict, Iterable, List

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError, TemplateNotFound

from techdocs.contexts.configuring.config import IMAGES_DIR_NAME, BuildConfig
from techdocs.contexts.templating.logger import _log_debug, _log_error, log_rendering_summary
from techdocs.exceptions import TemplateRenderError
from techdocs.utils.timestamp import today

TEMPLATE_SUFFIX = ".jinja"


def rendered_path(template_path: Path) -> Path:
    """Path a template renders to (the template path minus .jinja)."""
    return template_path.with_name(template_path.name[: -len(TEMPLATE_SUFFIX)])


def template_variables(config: BuildConfig) -> Dict[str, Any]:
    """
    The fixed variable set passed to every template.

    Args:
        config: BuildConfig for this build

    Returns:
        Dict of template variables
    """
    return {
        "project_name": config.project_name,
        "author": config.author,
        "format": config.format,
        "output_file_name_base": config.output_file_name_base,
        "date": today(),
        "toc_depth": config.toc_depth,
        "config": config.as_dict(),
        "env": dict(os.environ),
    }


def render_template(template_path: Path, variables: Dict[str, Any]) -> Path:
    """
    Render one template file and write the result beside it.

    Sibling files can be pulled in with {% include %} since the loader is
    rooted at the template's directory.

    Args:
        template_path: Path to a *.jinja file
        variables: Template variables

    Returns:
        Path to the rendered file

    Raises:
        TemplateRenderError: If the template is missing or fails to render
    """
    template_path = Path(template_path)
    if not template_path.exists():
        raise TemplateRenderError("Template file not found", template_path=template_path)
    if not template_path.name.endswith(TEMPLATE_SUFFIX) or template_path.name == TEMPLATE_SUFFIX:
        raise TemplateRenderError(
            f"Template file name must end in {TEMPLATE_SUFFIX}", template_path=template_path
        )

    env = Environment(
        loader=FileSystemLoader(str(template_path.parent)),
        # Catches silent failures
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )

    try:
        template = env.get_template(template_path.name)
        output = template.render(**variables)
    except TemplateNotFound as e:
        raise TemplateRenderError(
            f"Included template not found: {e.name}", template_path=template_path, original_error=e
        ) from e
    except TemplateError as e:
        raise TemplateRenderError(
            "Failed to render template", template_path=template_path, original_error=e
        ) from e

    output_path = rendered_path(template_path)
    output_path.write_text(output, encoding="utf-8")
    _log_debug(f"Rendered {template_path.name} -> {output_path.name}")
    return output_path


def _is_excluded(path: Path, project_dir: Path, excluded_dirs: Iterable[Path]) -> bool:
    relative = path.relative_to(project_dir)
    if any(part.startswith(".") for part in relative.parts[:-1]):
        return True
    return any(excluded == path or excluded in path.parents for excluded in excluded_dirs)


def find_templates(project_dir: Path, excluded_dirs: Iterable[Path] = ()) -> List[Path]:
    """
    Find every *.jinja file under a project directory.

    Files inside hidden directories and inside excluded_dirs are skipped.

    Args:
        project_dir: Directory to search
        excluded_dirs: Directories whose contents are never templates (e.g., output)

    Returns:
        Sorted list of template paths
    """
    project_dir = Path(project_dir).resolve()
    excluded = [Path(d).resolve() for d in excluded_dirs]
    return sorted(
        path
        for path in project_dir.rglob(f"*{TEMPLATE_SUFFIX}")
        if path.is_file() and not _is_excluded(path, project_dir, excluded)
    )


def project_templates(config: BuildConfig) -> List[Path]:
    """Templates of a configured project, skipping build and output directories."""
    return find_templates(
        config.project_dir,
        excluded_dirs=[config.output_dir, config.state_dir, config.project_dir / IMAGES_DIR_NAME],
    )


def render_project_templates(config: BuildConfig) -> List[Path]:
    """
    Render every template in the project.

    Args:
        config: BuildConfig for this build

    Returns:
        Paths of the generated files, for later cleanup

    Raises:
        TemplateRenderError: On the first template that fails
    """
    start_time = time.time()
    variables = template_variables(config)

    rendered = []
    for template_path in project_templates(config):
        try:
            rendered.append(render_template(template_path, variables))
        except TemplateRenderError:
            _log_error(f"Failed to render {template_path}")
            raise

    log_rendering_summary(rendered, time.time() - start_time)
    return rendered
