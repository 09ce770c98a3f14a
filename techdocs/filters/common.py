"""Helpers shared by the pandoc filters."""

import os
import sys
from pathlib import Path
from typing import Callable, List, Optional

from loguru import logger
from pandocfilters import Image, Para, get_filename4code, toJSONFilter

from techdocs.contexts.configuring.config import HTML_FORMATS, IMAGES_DIR_NAME
from techdocs.contexts.configuring.dependencies import FORMAT_ENV
from techdocs.exceptions import TechDocsError

# get_filename4code() stores images in "<module>-images"
IMAGE_MODULE = IMAGES_DIR_NAME[: -len("-images")]

HTML_WRITERS = {"html", "html4", "html5", "chunkedhtml"}


def image_extension(output_format: Optional[str]) -> str:
    """
    SVG for HTML output, PNG for everything else.

    The build's FORMAT, when pandoc passes it down, wins over the writer
    name: multi-page HTML runs the filters with `--to json`.
    """
    build_format = os.getenv(FORMAT_ENV)
    if build_format:
        return "svg" if build_format in HTML_FORMATS else "png"
    return "svg" if output_format in HTML_WRITERS else "png"


def diagram_basename(code: str) -> Path:
    """Content-addressed path (without extension) for a diagram's files."""
    return Path(get_filename4code(IMAGE_MODULE, code))


def code_block_classes(value) -> List[str]:
    [[_, classes, _], _] = value
    return classes


def diagram_block(ident: str, keyvals: list, caption: list, typef: str, image: Path) -> dict:
    """Replacement paragraph holding a rendered diagram image."""
    return Para([Image([ident, [], keyvals], caption, [image.as_posix(), typef])])


def run_filter(name: str, action: Callable) -> None:
    """
    Run a filter action over the document on stdin.

    stdout carries the JSON document, so log messages go to stderr. Pipeline
    errors end the process with exit status 1, which makes pandoc abort.
    """
    logger.remove()
    logger.add(sys.stderr, format=f"{name}: {{message}}", level="WARNING")

    try:
        toJSONFilter(action)
    except TechDocsError as e:
        logger.error(str(e))
        sys.exit(1)
