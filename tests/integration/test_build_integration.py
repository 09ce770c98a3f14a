"""
Integration tests for full builds - runs real pandoc (and xelatex for PDF)
on the starter project created by `techdocs init` and on small hand-written
projects.
"""

import shutil
import sys

import pytest

from techdocs.contexts.configuring.dependencies import BUILTIN_FILTERS, find_console_script
from techdocs.exceptions import ToolInvocationError
from techdocs.pipeline import build
from techdocs.scaffold import init_project

PANDOC_AVAILABLE = shutil.which("pandoc") is not None
FILTERS_INSTALLED = all(find_console_script(name) for name in BUILTIN_FILTERS)
XELATEX_AVAILABLE = shutil.which("xelatex") is not None

skip_if_no_pandoc = pytest.mark.skipif(
    not (PANDOC_AVAILABLE and FILTERS_INSTALLED),
    reason="pandoc not installed or techdocs not installed (pip install -e .)",
)
skip_if_no_xelatex = pytest.mark.skipif(
    not XELATEX_AVAILABLE, reason="xelatex not installed - install TeX Live, MiKTeX, or MacTeX"
)


# Stands in for Graphviz: writes a placeholder SVG to the -o argument
FAKE_DOT = """#!/bin/sh
while [ "$#" -gt 0 ]; do
    if [ "$1" = "-o" ]; then out="$2"; fi
    shift
done
cat > /dev/null
echo '<svg xmlns="http://www.w3.org/2000/svg"/>' > "$out"
"""


def write_project(project, conf, files):
    """Write techdocs.conf and the given files into a new project directory."""
    for name, text in files.items():
        path = project / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    lines = [f'{key}="{value}"' for key, value in conf.items()]
    (project / "techdocs.conf").write_text("\n".join(lines) + "\n", encoding="utf-8")
    return project


@pytest.fixture
def starter_project(tmp_path, monkeypatch):
    monkeypatch.delenv("TECHDOCS_LOGS_PATH", raising=False)
    project = tmp_path / "docs"
    init_project(project)
    return project


@pytest.fixture
def fake_dot(tmp_path, monkeypatch):
    """Point the Graphviz filter at FAKE_DOT; pandoc passes the variable on to it."""
    script = tmp_path / "bin" / "dot"
    script.parent.mkdir()
    script.write_text(FAKE_DOT, encoding="utf-8")
    script.chmod(0o755)
    monkeypatch.setenv("TECHDOCS_DOT", str(script))
    return script


@pytest.fixture
def empty_project(tmp_path, monkeypatch):
    monkeypatch.delenv("TECHDOCS_LOGS_PATH", raising=False)
    return tmp_path / "project"


@pytest.mark.integration
@skip_if_no_pandoc
def test_multipage_html(starter_project):
    result = build(starter_project, overrides={"FORMAT": "html"})

    output_dir = starter_project / "output"
    assert {p.name for p in result.artifacts} == {"index.html", "introduction.html", "about.html"}
    assert (output_dir / "style.css").exists()

    introduction = (output_dir / "introduction.html").read_text(encoding="utf-8")
    assert 'href="about.html#about"' in introduction
    assert 'class="techdocs-nav"' in introduction

    about = (output_dir / "about.html").read_text(encoding="utf-8")
    assert "My Project documentation, built as" in about

    # Rendered template and work directory are gone, the template itself stays
    assert not (starter_project / "chapters" / "about.md").exists()
    assert (starter_project / "chapters" / "about.md.jinja").exists()
    assert not (starter_project / ".techdocs" / "build").exists()


@pytest.mark.integration
@skip_if_no_pandoc
def test_single_page_html(starter_project):
    result = build(starter_project, overrides={"FORMAT": "htmlsinglepage"})

    [page] = result.artifacts
    assert page.name == "documentation.html"
    html = page.read_text(encoding="utf-8")
    assert "<style" in html
    assert "About this document" in html


@pytest.mark.integration
@skip_if_no_pandoc
def test_markdown_merges_includes(starter_project):
    result = build(starter_project, overrides={"FORMAT": "md"})

    merged = result.artifacts[0].read_text(encoding="utf-8")
    assert "Introduction" in merged
    assert "About this document" in merged
    assert "chapters/introduction.md" not in merged


@pytest.mark.integration
@skip_if_no_pandoc
@pytest.mark.parametrize("output_format, extension", [("docx", ".docx"), ("epub", ".epub")])
def test_binary_formats(starter_project, output_format, extension):
    result = build(starter_project, overrides={"FORMAT": output_format})

    [document] = result.artifacts
    assert document.suffix == extension
    assert document.stat().st_size > 0


@pytest.mark.integration
@skip_if_no_pandoc
def test_missing_include_fails_build(starter_project):
    (starter_project / "master.md").write_text(
        "```{.include}\nchapters/missing.md\n```\n", encoding="utf-8"
    )

    with pytest.raises(ToolInvocationError, match="missing.md"):
        build(starter_project, overrides={"FORMAT": "md"})


@pytest.mark.integration
@skip_if_no_pandoc
@pytest.mark.skipif(sys.platform == "win32", reason="fake dot is a shell script")
def test_multipage_html_diagrams_are_svg(empty_project, fake_dot):
    write_project(
        empty_project,
        {"FORMAT": "html"},
        {"master.md": "# Architecture\n\n```{.dot}\ndigraph { api -> db }\n```\n"},
    )

    build(empty_project)

    images = sorted(p.name for p in (empty_project / "output" / "techdocs-images").iterdir())
    assert len(images) == 1 and images[0].endswith(".svg")
    page = (empty_project / "output" / "architecture.html").read_text(encoding="utf-8")
    assert f"techdocs-images/{images[0]}" in page


@pytest.mark.integration
@skip_if_no_pandoc
def test_multipage_html_section_numbers_continue(empty_project):
    write_project(
        empty_project,
        {"FORMAT": "html", "NUMBER_SECTIONS": "true"},
        {"master.md": "# One\n\nFirst.\n\n# Two\n\nSecond.\n\n## Details\n\nMore.\n"},
    )

    build(empty_project)

    one = (empty_project / "output" / "one.html").read_text(encoding="utf-8")
    two = (empty_project / "output" / "two.html").read_text(encoding="utf-8")
    assert 'class="header-section-number">1</span> One' in one
    assert 'class="header-section-number">2</span> Two' in two
    assert 'class="header-section-number">2.1</span> Details' in two


@pytest.mark.integration
@skip_if_no_pandoc
def test_includes_resolve_next_to_master_in_subdirectory(empty_project):
    write_project(
        empty_project,
        {"FORMAT": "md", "MASTER_FILE": "docs/master.md"},
        {
            "docs/master.md": "```{.include}\nchapter.md\n```\n",
            "docs/chapter.md": "# Chapter\n\nWritten next to the master document.\n",
        },
    )

    result = build(empty_project)

    merged = result.artifacts[0].read_text(encoding="utf-8")
    assert "Written next to the master document." in merged


@pytest.mark.integration
@pytest.mark.latex

@skip_if_no_pandoc
@skip_if_no_xelatex
def test_pdf(starter_project):
    result = build(starter_project, overrides={"FORMAT": "pdf"})

    [pdf] = result.artifacts
    assert pdf.name == "documentation.pdf"
    assert pdf.stat().st_size > 0
