"""
Converting Context

Responsibilities:
- Selects pandoc flags for each output format
- Runs pandoc with the filter chain
- Splits multi-page HTML output and fixes cross-page links

Owns: pandoc invocation, format dispatch
Never: Typesets PDF (see rendering context)
"""

from techdocs.contexts.converting.pages import (
    Page,
    build_navigation,
    rewrite_cross_page_links,
    split_into_pages,
)
from techdocs.contexts.converting.pandoc import (
    PANDOC_WRITERS,
    STYLESHEET_NAME,
    build_pandoc_command,
    convert_document,
    convert_multipage_html,
    run_pandoc,
)

__all__ = [
    "Page",
    "build_navigation",
    "rewrite_cross_page_links",
    "split_into_pages",
    "PANDOC_WRITERS",
    "STYLESHEET_NAME",
    "build_pandoc_command",
    "convert_document",
    "convert_multipage_html",
    "run_pandoc",
]
