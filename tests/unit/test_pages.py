"""Unit tests for splitting a document into HTML pages."""

import pytest
from pandocfilters import CodeBlock, Header, Link, Para, Space, Str

from techdocs.contexts.converting.pages import (
    anchor_map,
    build_navigation,
    collect_identifiers,
    page_document,
    rewrite_cross_page_links,
    section_offsets,
    split_into_pages,
)


def h1(ident, *words):
    inlines = []
    for word in words:
        if inlines:
            inlines.append(Space())
        inlines.append(Str(word))
    return Header(1, [ident, [], []], inlines)


def link(url, text="here"):
    return Link(["", [], []], [Str(text)], [url, ""])


@pytest.fixture
def doc():
    return {
        "pandoc-api-version": [1, 23, 1],
        "meta": {"title": {"t": "MetaInlines", "c": [Str("Docs")]}},
        "blocks": [
            Para([Str("Preface")]),
            h1("introduction", "Getting", "started"),
            Para([Str("See"), Space(), link("#config-file")]),
            Para([link("#introduction", "top")]),
            h1("configuration", "Configuration"),
            Header(2, ["config-file", [], []], [Str("The"), Space(), Str("file")]),
            CodeBlock(["sample", ["ini"], []], "FORMAT=html"),
            Para([link("https://pandoc.org"), link("#nowhere")]),
        ],
    }


@pytest.mark.unit
def test_split_at_level_one_headers(doc):
    pages = split_into_pages(doc, index_title="Docs")

    assert [p.name for p in pages] == ["index", "introduction", "configuration"]
    assert [p.title for p in pages] == ["Docs", "Getting started", "Configuration"]
    assert pages[0].blocks == [Para([Str("Preface")])]
    assert pages[1].blocks[0]["t"] == "Header"
    assert len(pages[2].blocks) == 4
    assert pages[1].filename == "introduction.html"


@pytest.mark.unit
def test_index_page_exists_without_preamble():
    doc = {"pandoc-api-version": [1, 23], "meta": {}, "blocks": [h1("only", "Only")]}

    pages = split_into_pages(doc)

    assert [p.name for p in pages] == ["index", "only"]
    assert pages[0].title == "Contents"
    assert pages[0].blocks == []


@pytest.mark.unit
def test_page_names_are_unique():
    doc = {
        "pandoc-api-version": [1, 23],
        "meta": {},
        "blocks": [h1("", "Untitled"), h1("setup", "Setup"), h1("setup", "Setup"), h1("index", "Index")],
    }

    names = [p.name for p in split_into_pages(doc)]

    assert names == ["index", "section-1", "setup", "setup-2", "index-2"]


@pytest.mark.unit
def test_identifiers_and_anchor_map(doc):
    pages = split_into_pages(doc)

    assert collect_identifiers(pages[2].blocks) == ["configuration", "config-file", "sample"]
    anchors = anchor_map(pages)
    assert anchors["config-file"] == "configuration.html"
    assert anchors["introduction"] == "introduction.html"


@pytest.mark.unit
def test_cross_page_links_point_at_defining_page(doc):
    pages = rewrite_cross_page_links(split_into_pages(doc))

    cross_page = pages[1].blocks[1]["c"][2]
    same_page = pages[1].blocks[2]["c"][0]
    external, unknown = pages[2].blocks[3]["c"]

    assert cross_page["c"][2][0] == "configuration.html#config-file"
    assert same_page["c"][2][0] == "#introduction"
    assert external["c"][2][0] == "https://pandoc.org"
    assert unknown["c"][2][0] == "#nowhere"


@pytest.mark.unit
def test_page_document_keeps_metadata(doc):
    page = split_into_pages(doc)[1]

    page_doc = page_document(doc, page)

    assert page_doc["pandoc-api-version"] == [1, 23, 1]
    assert page_doc["meta"] == doc["meta"]
    assert page_doc["blocks"] is page.blocks


@pytest.mark.unit
def test_navigation_marks_current_page(doc):
    pages = split_into_pages(doc, index_title="Docs & Notes")

    nav = build_navigation(pages, pages[1])

    assert nav.startswith('<nav class="techdocs-nav">')
    assert '<li class="current"><a href="introduction.html">Getting started</a></li>' in nav
    assert '<li><a href="index.html">Docs &amp; Notes</a></li>' in nav
    assert nav.count("<li") == 3


@pytest.mark.unit
def test_section_offsets_count_earlier_numbered_sections(doc):
    pages = split_into_pages(doc)

    assert section_offsets(pages) == [0, 0, 1]


@pytest.mark.unit
def test_unnumbered_sections_do_not_advance_offsets():
    pages = split_into_pages(
        {
            "blocks": [
                h1("one", "One"),
                Header(1, ["preface", ["unnumbered"], []], [Str("Preface")]),
                h1("two", "Two"),
                h1("three", "Three"),
            ]
        }
    )

    assert section_offsets(pages) == [0, 0, 1, 1, 2]
