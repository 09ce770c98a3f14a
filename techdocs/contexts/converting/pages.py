"""
Multi-page HTML support.

Splits a pandoc JSON document into one page per level-1 header and rewrites
internal links so anchors defined on another page still resolve.
"""

import html
from dataclasses import dataclass, field
from typing import Dict, List

from pandocfilters import Link, stringify, walk

INDEX_PAGE = "index"

# Block and inline types that carry an Attr as their first content element
ATTR_FIRST_TYPES = {"CodeBlock", "Div", "Span", "Code", "Figure", "Table"}


@dataclass
class Page:
    """
    One output page.

    Attributes:
        name: File stem (e.g., "installation")
        title: Plain-text page title
        blocks: pandoc blocks making up the page
    """

    name: str
    title: str
    blocks: List[dict] = field(default_factory=list)

    @property
    def filename(self) -> str:
        return f"{self.name}.html"


def _unique_name(candidate: str, taken: set) -> str:
    name = candidate
    suffix = 2
    while name in taken:
        name = f"{candidate}-{suffix}"
        suffix += 1
    taken.add(name)
    return name


def split_into_pages(doc: dict, index_title: str = "Contents") -> List[Page]:
    """
    Split a document at its level-1 headers.

    Blocks before the first level-1 header form the index page, which always
    exists (possibly empty).

    Args:
        doc: pandoc JSON document
        index_title: Title of the index page

    Returns:
        List of pages, index first
    """
    taken = {INDEX_PAGE}
    pages = [Page(name=INDEX_PAGE, title=index_title)]
    section_number = 0

    for block in doc["blocks"]:
        if block.get("t") == "Header" and block["c"][0] == 1:
            section_number += 1
            [_, [ident, _, _], inlines] = block["c"]
            name = _unique_name(ident or f"section-{section_number}", taken)
            pages.append(Page(name=name, title=stringify(inlines), blocks=[block]))
        else:
            pages[-1].blocks.append(block)

    return pages


def _is_numbered(block: dict) -> bool:
    [_, [_, classes, _], _] = block["c"]
    return "unnumbered" not in classes


def section_offsets(pages: List[Page]) -> List[int]:
    """
    Number of numbered top-level sections before each page.

    Pages are converted one at a time, so pandoc needs this as
    --number-offset to keep section numbers running across pages.
    """
    offsets = []
    count = 0
    for page in pages:
        offsets.append(count)
        count += sum(
            1
            for block in page.blocks
            if block.get("t") == "Header" and block["c"][0] == 1 and _is_numbered(block)
        )
    return offsets


def collect_identifiers(blocks: List[dict]) -> List[str]:
    """Every element identifier defined in a block list."""
    identifiers = []

    def action(key, value, fmt, meta):
        if key == "Header":
            ident = value[1][0]
        elif key in ATTR_FIRST_TYPES:
            ident = value[0][0]
        else:
            return None
        if ident:
            identifiers.append(ident)
        return None

    walk(blocks, action, "", {})
    return identifiers


def anchor_map(pages: List[Page]) -> Dict[str, str]:
    """Map each identifier to the file name of the page defining it."""
    anchors = {}
    for page in pages:
        for ident in collect_identifiers(page.blocks):
            anchors.setdefault(ident, page.filename)
    return anchors


def rewrite_cross_page_links(pages: List[Page]) -> List[Page]:
    """
    Point "#anchor" links at the page that defines the anchor.

    Links to anchors on the same page, or to unknown anchors, are left alone.

    Args:
        pages: Pages from split_into_pages(), modified in place

    Returns:
        The same pages
    """
    anchors = anchor_map(pages)

    for page in pages:

        def action(key, value, fmt, meta, current=page.filename):
            if key != "Link":
                return None
            [attr, inlines, [url, title]] = value
            if not url.startswith("#"):
                return None
            target_page = anchors.get(url[1:])
            if target_page is None or target_page == current:
                return None
            return Link(attr, inlines, [f"{target_page}{url}", title])

        page.blocks = walk(page.blocks, action, "html", {})

    return pages


def page_document(doc: dict, page: Page) -> dict:
    """A standalone pandoc document holding one page."""
    return {
        "pandoc-api-version": doc["pandoc-api-version"],
        "meta": doc.get("meta", {}),
        "blocks": page.blocks,
    }


def build_navigation(pages: List[Page], current: Page) -> str:
    """
    HTML navigation list linking every page, marking the current one.

    Args:
        pages: All pages
        current: Page being rendered

    Returns:
        HTML fragment for --include-before-body
    """
    items = []
    for page in pages:
        css_class = ' class="current"' if page.name == current.name else ""
        items.append(
            f'    <li{css_class}><a href="{html.escape(page.filename)}">'
            f"{html.escape(page.title)}</a></li>"
        )
    return '<nav class="techdocs-nav">\n  <ul>\n' + "\n".join(items) + "\n  </ul>\n</nav>\n"
