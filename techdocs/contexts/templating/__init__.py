"""
Templating Context

Responsibilities:
- Finds *.jinja files in the project tree
- Renders them with Jinja2 using a fixed variable set
- Reports generated files so they can be cleaned up

Owns: Jinja2 rendering of project sources
Never: Invokes pandoc
"""

from techdocs.contexts.templating.renderer import (
    find_templates,
    project_templates,
    render_project_templates,
    render_template,
    rendered_path,
    template_variables,
)

__all__ = [
    "find_templates",
    "project_templates",
    "render_project_templates",
    "render_template",
    "rendered_path",
    "template_variables",
]
