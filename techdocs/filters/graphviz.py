"""
Graphviz filter.

Renders code blocks with class `dot` (or `graphviz`) to images. A `layout`
attribute picks another Graphviz engine:

    ```{.dot layout=neato caption="Service map"}
    digraph { api -> db; api -> cache; }
    ```
"""

from pathlib import Path

from pandocfilters import get_caption, get_value

from techdocs.contexts.configuring.dependencies import DOT
from techdocs.filters.common import (
    code_block_classes,
    diagram_basename,
    diagram_block,
    image_extension,
    run_filter,
)
from techdocs.utils.process import ToolCommand, run_command

GRAPHVIZ_CLASSES = {"dot", "graphviz"}


def render_graphviz(code: str, ext: str, layout: str = "dot") -> Path:
    """
    Render Graphviz source to an image, reusing an earlier rendering.

    Args:
        code: Graphviz source
        ext: Image type ("svg" or "png")
        layout: Graphviz layout engine (dot, neato, fdp, ...)

    Returns:
        Path to the image
    """
    base = diagram_basename(f"{layout}\n{code}")
    image = base.with_name(f"{base.name}.{ext}")
    if image.exists():
        return image

    run_command(
        ToolCommand(DOT, [f"-K{layout}", f"-T{ext}", "-o", str(image)]),
        input_text=code,
    )
    return image


def graphviz_action(key, value, fmt, meta):
    if key != "CodeBlock" or not GRAPHVIZ_CLASSES & set(code_block_classes(value)):
        return None

    [[ident, _, keyvals], code] = value
    caption, typef, keyvals = get_caption(keyvals)
    layout, keyvals = get_value(keyvals, "layout", "dot")
    image = render_graphviz(code, image_extension(fmt), layout)
    return diagram_block(ident, keyvals, caption, typef, image)


def main():
    run_filter("techdocs-graphviz", graphviz_action)


if __name__ == "__main__":
    main()
