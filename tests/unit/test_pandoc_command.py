"""Unit tests for pandoc command construction."""

from pathlib import Path

import json

import pytest
from pandocfilters import Header, Para, Str

from techdocs.contexts.converting import pandoc
from techdocs.contexts.converting.pandoc import (
    STYLESHEET_NAME,
    build_pandoc_command,
    convert_document,
    convert_multipage_html,
)
from techdocs.exceptions import ToolInvocationError
from techdocs.utils.process import CommandResult


def option_value(args, flag):
    return args[args.index(flag) + 1]


def command_for(config, target=None, **kwargs):
    return build_pandoc_command(
        config,
        config.master_file,
        Path("/tmp/out"),
        target or config.format,
        **kwargs,
    )


@pytest.mark.unit
def test_common_arguments(make_config, tmp_path):
    command = command_for(make_config(format="md"), filters=["/bin/f1", "/bin/f2"])

    assert command.tool == "pandoc"
    assert command.cwd == tmp_path
    assert command.args[:4] == ["--from", "markdown", "--to", "markdown"]
    assert [a for i, a in enumerate(command.args) if command.args[i - 1] == "--filter"] == [
        "/bin/f1",
        "/bin/f2",
    ]
    assert option_value(command.args, "--resource-path") == str(tmp_path)
    assert command.args[-3:] == ["--output", "/tmp/out", str(tmp_path / "master.md")]


@pytest.mark.unit
@pytest.mark.parametrize(
    "target, writer",
    [
        ("pdf", "latex"),
        ("html", "html5"),
        ("htmlsinglepage", "html5"),
        ("md", "markdown"),
        ("docx", "docx"),
        ("epub", "epub3"),
        ("json", "json"),
    ],
)
def test_writer_per_target(make_config, target, writer):
    command = command_for(make_config(), target=target)

    assert option_value(command.args, "--to") == writer


@pytest.mark.unit
def test_unknown_target(make_config):
    with pytest.raises(ValueError, match="rtf"):
        command_for(make_config(), target="rtf")


@pytest.mark.unit
def test_pdf_arguments(make_config, tmp_path):
    template = tmp_path / "book.latex"
    config = make_config(format="pdf", stylesheet=None, latex_template=template, paper_size="a4")

    args = command_for(config).args

    assert "--standalone" in args
    assert option_value(args, "--template") == str(template)
    assert "papersize=a4" in args
    assert "fontsize=11pt" in args


@pytest.mark.unit
def test_pdf_without_template_uses_builtin(make_config):
    args = command_for(make_config(format="pdf", stylesheet=None)).args

    assert "--template" not in args


@pytest.mark.unit
def test_single_page_html_embeds_stylesheet(make_config):
    config = make_config(format="htmlsinglepage")

    args = command_for(config).args

    assert "--embed-resources" in args
    assert option_value(args, "--css") == str(config.stylesheet)
    assert option_value(args, "--metadata") == "title=Test Docs"


@pytest.mark.unit
def test_multipage_html_links_shared_stylesheet(make_config):
    args = command_for(make_config(format="html"), from_format="json").args

    assert option_value(args, "--from") == "json"
    assert option_value(args, "--css") == STYLESHEET_NAME
    assert "--embed-resources" not in args
    assert option_value(args, "--metadata") == "pagetitle=Test Docs"


@pytest.mark.unit
def test_docx_and_epub_optional_files(make_config, tmp_path):
    reference = tmp_path / "ref.docx"
    cover = tmp_path / "cover.png"

    docx_args = command_for(make_config(format="docx", docx_reference_doc=reference)).args
    epub_args = command_for(make_config(format="epub", epub_cover_image=cover)).args
    plain_docx = command_for(make_config(format="docx")).args

    assert option_value(docx_args, "--reference-doc") == str(reference)
    assert option_value(epub_args, "--epub-cover-image") == str(cover)
    assert "--reference-doc" not in plain_docx


@pytest.mark.unit
def test_toc_and_numbering(make_config):
    config = make_config(format="docx", toc=True, toc_depth=2, number_sections=True)

    args = command_for(config).args

    assert option_value(args, "--toc-depth") == "2"
    assert "--toc" in args
    assert "--number-sections" in args


@pytest.mark.unit
@pytest.mark.parametrize("target", ["md", "json"])
def test_intermediate_targets_skip_toc(make_config, target):
    config = make_config(toc=True, number_sections=True)

    args = command_for(config, target=target).args

    assert "--toc" not in args
    assert "--number-sections" not in args


@pytest.mark.unit
def test_toc_disabled(make_config):
    args = command_for(make_config(format="epub", toc=False)).args

    assert "--toc" not in args


@pytest.mark.unit
def test_author_metadata(make_config):
    args = command_for(make_config(format="docx", author="Ada Lovelace")).args

    assert "author=Ada Lovelace" in args
    assert "title=Test Docs" in args


@pytest.mark.unit
def test_json_target_has_no_metadata(make_config):
    args = command_for(make_config(author="Ada"), target="json").args

    assert "--metadata" not in args


@pytest.mark.unit
def test_extra_args_precede_output(make_config):
    args = command_for(make_config(), target="html", extra_args=["--include-before-body", "nav.html"]).args

    assert args[-5:] == ["--include-before-body", "nav.html", "--output", "/tmp/out", args[-1]]


@pytest.mark.unit
def test_convert_document_runs_pandoc(make_config, tmp_path, monkeypatch):
    calls = []

    def fake_run(command, check=True, input_text=None):
        calls.append(command)
        return CommandResult(command=command, returncode=0)

    monkeypatch.setattr(pandoc, "run_command", fake_run)
    output = tmp_path / "build" / "doc.docx"

    result = convert_document(make_config(format="docx"), ["/bin/f"], output)

    assert result == output
    assert output.parent.is_dir()
    assert option_value(calls[0].args, "--output") == str(output)


@pytest.mark.unit
def test_convert_document_propagates_failure(make_config, tmp_path, monkeypatch):
    def fake_run(command, check=True, input_text=None):
        raise ToolInvocationError("pandoc", command.argv, 83, "Error running filter")

    monkeypatch.setattr(pandoc, "run_command", fake_run)

    with pytest.raises(ToolInvocationError, match="Error running filter"):
        convert_document(make_config(format="md"), [], tmp_path / "doc.md")


@pytest.mark.unit
@pytest.mark.parametrize("target", ["json", "html", "pdf"])
def test_filters_see_build_format_and_master_dir(make_config, tmp_path, target):
    config = make_config(format="html", master_file=tmp_path / "docs" / "master.md")

    command = command_for(config, target=target)

    assert command.env == {
        "TECHDOCS_FORMAT": "html",
        "TECHDOCS_MASTER_DIR": str(tmp_path / "docs"),
    }


@pytest.fixture
def fake_pandoc(monkeypatch):
    """Records pandoc commands; the JSON pass writes a two-chapter document."""
    calls = []
    doc = {
        "pandoc-api-version": [1, 23, 1],
        "meta": {},
        "blocks": [
            Header(1, ["one", [], []], [Str("One")]),
            Para([Str("A")]),
            Header(1, ["two", [], []], [Str("Two")]),
            Para([Str("B")]),
        ],
    }

    def fake_run(command, check=True, input_text=None):
        calls.append(command)
        if option_value(command.args, "--to") == "json":
            Path(option_value(command.args, "--output")).write_text(json.dumps(doc), encoding="utf-8")
        return CommandResult(command=command, returncode=0)

    monkeypatch.setattr(pandoc, "run_command", fake_run)
    return calls


@pytest.mark.unit
def test_multipage_numbering_continues_across_pages(make_config, tmp_path, fake_pandoc):
    config = make_config(format="html", number_sections=True)

    pages = convert_multipage_html(config, [], tmp_path / "work")

    assert [p.name for p in pages] == ["index.html", "one.html", "two.html"]
    page_commands = fake_pandoc[1:]
    assert [option_value(c.args, "--output") for c in page_commands] == [str(p) for p in pages]
    assert [a for c in page_commands for a in c.args if a.startswith("--number-offset")] == [
        "--number-offset=0",
        "--number-offset=0",
        "--number-offset=1",
    ]


@pytest.mark.unit
def test_multipage_without_numbering_has_no_offset(make_config, tmp_path, fake_pandoc):
    convert_multipage_html(make_config(format="html", number_sections=False), [], tmp_path / "work")

    assert not any(a.startswith("--number-offset") for c in fake_pandoc for a in c.args)
