"""
PlantUML filter.

Renders code blocks with class `plantuml` (or `uml`) to images:

    ```{.plantuml caption="Request flow"}
    Alice -> Bob: request
    Bob --> Alice: response
    ```

The @startuml/@enduml wrapper is added when missing.
"""

from pathlib import Path

from pandocfilters import get_caption

from techdocs.contexts.configuring.dependencies import PLANTUML
from techdocs.filters.common import (
    code_block_classes,
    diagram_basename,
    diagram_block,
    image_extension,
    run_filter,
)
from techdocs.utils.process import ToolCommand, run_command

PLANTUML_CLASSES = {"plantuml", "uml"}


def render_plantuml(code: str, ext: str) -> Path:
    """
    Render PlantUML source to an image, reusing an earlier rendering.

    Args:
        code: PlantUML source
        ext: Image type ("svg" or "png")

    Returns:
        Path to the image
    """
    if not code.lstrip().startswith("@start"):
        code = f"@startuml\n{code}\n@enduml\n"

    base = diagram_basename(code)
    image = base.with_name(f"{base.name}.{ext}")
    if image.exists():
        return image

    source = base.with_name(f"{base.name}.puml")
    source.write_text(code, encoding="utf-8")

    # plantuml writes <name>.<ext> next to the source file
    run_command(ToolCommand(PLANTUML, [f"-t{ext}", "-charset", "UTF-8", str(source)]))
    return image


def plantuml_action(key, value, fmt, meta):
    if key != "CodeBlock" or not PLANTUML_CLASSES & set(code_block_classes(value)):
        return None

    [[ident, _, keyvals], code] = value
    caption, typef, keyvals = get_caption(keyvals)
    image = render_plantuml(code, image_extension(fmt))
    return diagram_block(ident, keyvals, caption, typef, image)


def main():
    run_filter("techdocs-plantuml", plantuml_action)


if __name__ == "__main__":
    main()
