"""
Build Orchestration

Runs one documentation build from configuration to published output:

    load_config -> check_dependencies -> render templates -> pandoc
        -> (xelatex, for pdf) -> publish -> cleanup

Every step blocks until done and the first failure aborts the build.
"""

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from loguru import logger

from techdocs.contexts.configuring.config import BuildConfig, load_config
from techdocs.contexts.configuring.dependencies import XELATEX, check_dependencies, filter_chain
from techdocs.contexts.configuring.logger import log_config_loaded, log_tools
from techdocs.contexts.converting.pandoc import convert_document, convert_multipage_html
from techdocs.contexts.publishing.publisher import cleanup_temp_files, publish_artifacts
from techdocs.contexts.rendering.compiler import DEFAULT_NUM_PASSES, compile_latex
from techdocs.contexts.templating.renderer import render_project_templates
from techdocs.exceptions import MissingInputError, ToolInvocationError
from techdocs.utils.logger import setup_logger
from techdocs.utils.timestamp import now

# File extension of single-file outputs
OUTPUT_EXTENSIONS = {
    "pdf": ".pdf",
    "htmlsinglepage": ".html",
    "md": ".md",
    "docx": ".docx",
    "epub": ".epub",
}


@dataclass
class BuildResult:
    """
    Result of a documentation build.

    Attributes:
        format: FORMAT that was built
        output_dir: Directory holding the published files
        artifacts: Published documents
        log_file: Detailed log of the build
        elapsed_s: Wall time in seconds
    """

    format: str
    output_dir: Path
    artifacts: List[Path] = field(default_factory=list)
    log_file: Optional[Path] = None
    elapsed_s: float = 0.0


def _build_pdf(config: BuildConfig, filters: Sequence[str], verbose: bool) -> List[Path]:
    """pandoc to LaTeX, then xelatex to PDF."""
    tex_file = convert_document(
        config, filters, config.work_dir / f"{config.output_file_name_base}.tex", verbose=verbose
    )

    result = compile_latex(
        tex_file,
        num_passes=DEFAULT_NUM_PASSES,
        keep_artifacts=config.keep_temp_files,
        search_paths=[config.project_dir],
        verbose=verbose,
    )
    if not result.success:
        raise ToolInvocationError(
            tool=XELATEX,
            argv=[XELATEX, tex_file.name],
            returncode=1,
            stderr="\n".join(result.errors),
        )
    return [result.pdf_path]


def _build_multipage_html(
    config: BuildConfig, filters: Sequence[str], verbose: bool
) -> List[Path]:
    return convert_multipage_html(config, filters, config.work_dir, verbose=verbose)


def _build_single_file(config: BuildConfig, filters: Sequence[str], verbose: bool) -> List[Path]:
    """htmlsinglepage, md, docx and epub all come straight out of pandoc."""
    output = config.work_dir / f"{config.output_file_name_base}{OUTPUT_EXTENSIONS[config.format]}"
    return [convert_document(config, filters, output, verbose=verbose)]


FORMAT_BUILDERS: Dict[str, Callable[[BuildConfig, Sequence[str], bool], List[Path]]] = {
    "pdf": _build_pdf,
    "html": _build_multipage_html,
    "htmlsinglepage": _build_single_file,
    "md": _build_single_file,
    "docx": _build_single_file,
    "epub": _build_single_file,
}


def run_build(config: BuildConfig, verbose: bool = False) -> List[Path]:
    """
    Run the build steps for an already loaded configuration.

    Rendered templates and the work directory are removed afterwards, also
    when a step fails, unless KEEP_TEMP_FILES is set.

    Args:
        config: BuildConfig for this build
        verbose: Log full tool output

    Returns:
        Published documents

    Raises:
        TechDocsError: On the first failing step
    """
    tools = check_dependencies(config)
    log_tools(tools)

    if not config.master_file.exists():
        raise MissingInputError(config.master_file, "Master document")

    filters = filter_chain(config)

    try:
        render_project_templates(config)
        config.work_dir.mkdir(parents=True, exist_ok=True)
        products = FORMAT_BUILDERS[config.format](config, filters, verbose)
        return publish_artifacts(config, products)
    finally:
        if config.keep_temp_files:
            logger.info(f"Keeping temporary files in {config.work_dir}")
        else:
            cleanup_temp_files(config)


def build(
    project_dir: Path, overrides: Optional[Dict[str, Any]] = None, verbose: bool = False
) -> BuildResult:
    """
    Build a documentation project.

    Args:
        project_dir: Directory holding techdocs.conf
        overrides: Settings overriding techdocs.conf (e.g., {"FORMAT": "pdf"})
        verbose: Show DEBUG output and full tool output on the console

    Returns:
        BuildResult describing the published output

    Raises:
        TechDocsError: On the first failing step
    """
    start_time = time.time()
    config = load_config(project_dir, overrides)

    log_file = setup_logger(
        context_name="build",
        log_dir=config.logs_dir / f"build_{now()}",
        extra_provenance={"Project": config.project_dir, "Format": config.format},
        verbose=verbose,
    )
    log_config_loaded(config)

    try:
        artifacts = run_build(config, verbose=verbose)
    except Exception as e:
        logger.error(f"Build failed: {e}")
        raise

    elapsed = time.time() - start_time
    logger.success(f"Built {config.format} output in {elapsed:.2f}s")

    return BuildResult(
        format=config.format,
        output_dir=config.output_dir,
        artifacts=artifacts,
        log_file=log_file,
        elapsed_s=elapsed,
    )
