"""
Pandoc Invocation

Builds the pandoc command line for each output format and runs it.

Command building is kept pure (build_pandoc_command) so the flag set for every
format can be inspected without pandoc installed.
"""

import json
from pathlib import Path
from typing import List, Optional, Sequence

from techdocs.contexts.configuring.config import BuildConfig
from techdocs.contexts.configuring.dependencies import FORMAT_ENV, MASTER_DIR_ENV, PANDOC
from techdocs.contexts.converting.logger import (
    _log_debug,
    _log_info,
    log_conversion_failure,
    log_conversion_result,
)
from techdocs.contexts.converting.pages import (
    build_navigation,
    page_document,
    rewrite_cross_page_links,
    section_offsets,
    split_into_pages,
)
from techdocs.exceptions import ToolInvocationError
from techdocs.utils.process import CommandResult, ToolCommand, run_command

# pandoc writer for each target
PANDOC_WRITERS = {
    "pdf": "latex",
    "html": "html5",
    "htmlsinglepage": "html5",
    "md": "markdown",
    "docx": "docx",
    "epub": "epub3",
    "json": "json",
}

# Stylesheet name used by multi-page HTML output
STYLESHEET_NAME = "style.css"


def build_pandoc_command(
    config: BuildConfig,
    source: Path,
    output: Path,
    target: str,
    filters: Sequence[str] = (),
    from_format: str = "markdown",
    extra_args: Sequence[str] = (),
) -> ToolCommand:
    """
    Assemble the pandoc command for a target.

    Args:
        config: BuildConfig for this build
        source: Input file
        output: Output file
        target: One of PANDOC_WRITERS (a FORMAT value, or "json" for the
                intermediate AST of multi-page HTML)
        filters: Filter executables, in order
        from_format: pandoc reader ("markdown", or "json" for page documents)
        extra_args: Appended before the output arguments

    Returns:
        ToolCommand running in the project directory
    """
    if target not in PANDOC_WRITERS:
        raise ValueError(f"Unknown pandoc target: {target}")

    args = ["--from", from_format, "--to", PANDOC_WRITERS[target]]

    for filter_path in filters:
        args += ["--filter", str(filter_path)]

    args += ["--resource-path", str(config.project_dir)]

    if target == "pdf":
        args.append("--standalone")
        if config.latex_template is not None:
            args += ["--template", str(config.latex_template)]
        args += ["-V", f"papersize={config.paper_size}", "-V", f"fontsize={config.font_size}"]
    elif target == "htmlsinglepage":
        args += ["--standalone", "--embed-resources", "--css", str(config.stylesheet)]
        if config.html_template is not None:
            args += ["--template", str(config.html_template)]
    elif target == "html":
        args += ["--standalone", "--css", STYLESHEET_NAME]
        if config.html_template is not None:
            args += ["--template", str(config.html_template)]
    elif target == "md":
        args.append("--standalone")
    elif target == "docx":
        if config.docx_reference_doc is not None:
            args += ["--reference-doc", str(config.docx_reference_doc)]
    elif target == "epub":
        if config.epub_cover_image is not None:
            args += ["--epub-cover-image", str(config.epub_cover_image)]

    # The intermediate AST and merged Markdown keep headings untouched
    if target not in ("json", "md"):
        if config.toc:
            args += ["--toc", "--toc-depth", str(config.toc_depth)]
        if config.number_sections:
            args.append("--number-sections")

    if target == "html":
        # Each page already opens with its own heading
        args += ["--metadata", f"pagetitle={config.project_name}"]
    elif target != "json":
        args += ["--metadata", f"title={config.project_name}"]
        if config.author:
            args += ["--metadata", f"author={config.author}"]

    args += list(extra_args)
    args += ["--output", str(output), str(source)]

    # The filters read the build FORMAT and the master document's directory from here
    env = {FORMAT_ENV: config.format, MASTER_DIR_ENV: str(config.master_file.parent)}
    return ToolCommand(PANDOC, args, cwd=config.project_dir, env=env)


def run_pandoc(command: ToolCommand, verbose: bool = False) -> CommandResult:
    """
    Run a pandoc command, logging the outcome.

    Raises:
        ToolInvocationError: If pandoc (or one of its filters) fails
    """
    output = Path(command.args[command.args.index("--output") + 1])
    _log_debug(f"Command: {command}")

    try:
        result = run_command(command)
    except ToolInvocationError as e:
        log_conversion_failure(e)
        raise

    log_conversion_result(result, output, verbose=verbose)
    return result


def convert_document(
    config: BuildConfig,
    filters: Sequence[str],
    output: Path,
    target: Optional[str] = None,
    verbose: bool = False,
) -> Path:
    """
    Convert the master document to a single output file.

    Args:
        config: BuildConfig for this build
        filters: Resolved filter chain
        output: File to write
        target: pandoc target (default: the configured FORMAT)
        verbose: Log pandoc's full stderr

    Returns:
        Path to the written file
    """
    target = target or config.format
    output.parent.mkdir(parents=True, exist_ok=True)

    _log_info(f"Converting {config.master_file.name} to {target}")
    command = build_pandoc_command(config, config.master_file, output, target, filters=filters)
    run_pandoc(command, verbose=verbose)
    return output


def convert_multipage_html(
    config: BuildConfig, filters: Sequence[str], work_dir: Path, verbose: bool = False
) -> List[Path]:
    """
    Convert the master document to one HTML page per top-level section.

    The filter chain runs once, producing a JSON AST that is split into
    pages; each page is then written to HTML without filters.

    Args:
        config: BuildConfig for this build
        filters: Resolved filter chain
        work_dir: Directory for intermediate files and the generated pages
        verbose: Log pandoc's full stderr

    Returns:
        Paths to the generated HTML pages, index.html first
    """
    ast_path = convert_document(
        config, filters, work_dir / f"{config.output_file_name_base}.json", target="json", verbose=verbose
    )
    doc = json.loads(ast_path.read_text(encoding="utf-8"))

    pages = rewrite_cross_page_links(split_into_pages(doc, index_title=config.project_name))
    _log_info(f"Split document into {len(pages)} page(s)")

    page_dir = work_dir / "pages"
    page_dir.mkdir(parents=True, exist_ok=True)

    offsets = section_offsets(pages)
    written = []
    for page, offset in zip(pages, offsets):
        page_json = work_dir / f"{page.name}.json"
        page_json.write_text(json.dumps(page_document(doc, page)), encoding="utf-8")

        nav_path = work_dir / f"{page.name}.nav.html"
        nav_path.write_text(build_navigation(pages, page), encoding="utf-8")

        extra_args = ["--include-before-body", str(nav_path)]
        if config.number_sections:
            extra_args.append(f"--number-offset={offset}")

        command = build_pandoc_command(
            config,
            page_json,
            page_dir / page.filename,
            "html",
            from_format="json",
            extra_args=extra_args,
        )

        run_pandoc(command, verbose=verbose)
        written.append(page_dir / page.filename)

    return written
