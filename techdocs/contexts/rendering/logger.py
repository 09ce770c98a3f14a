"""
Rendering context logger.

Provides logging interface for rendering context with automatic [render] prefix.
All rendering modules should import from this module, not from loguru directly.
"""

from pathlib import Path
from typing import Callable, List

from loguru import logger

from techdocs.utils.logger import log_tool_output

CONTEXT_PREFIX = "[render]"


def _log_info(message: str) -> None:
    """Log info message with [render] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [render] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [render] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


def _log_limited(label: str, items: List[str], limit: int, log: Callable[[str], None]) -> None:
    for number, item in enumerate(items[:limit], 1):
        log(f"  {label} {number}: {item}")
    if len(items) > limit:
        log(f"  ... and {len(items) - limit} more")


def log_compilation_start(tex_file: Path, num_passes: int) -> None:
    _log_info(f"Typesetting {tex_file.name} with xelatex ({num_passes} passes)")
    _log_debug(f"  Compiling in {tex_file.parent}")


def log_compilation_result(
    document_name: str,
    result,  # CompilationResult
    elapsed_time: float,
    verbose: bool = False,
) -> None:
    """
    Log a finished xelatex compilation.

    Errors are always listed; warnings go to the debug log. The full xelatex
    output is dumped raw to the log on failure, or always when verbose.

    Args:
        document_name: Document stem (e.g., "documentation")
        result: CompilationResult from compile_latex()
        elapsed_time: Seconds spent in all passes
        verbose: Raise the listing limits and dump output on success too
    """
    if result.success:
        pages = f", {result.page_count} pages" if result.page_count else ""
        _log_success(f"Typeset {document_name}.pdf{pages} ({elapsed_time:.2f}s)")
    else:
        _log_error(f"xelatex failed on {document_name}.tex with {len(result.errors)} error(s)")
        _log_limited("Error", result.errors, 10 if verbose else 5, _log_error)

    if result.warnings:
        _log_warning(f"{len(result.warnings)} LaTeX warning(s), see the build log")
        _log_limited("Warning", result.warnings, 10 if verbose else 3, _log_debug)

    if verbose or not result.success:
        log_tool_output("xelatex", stdout=result.stdout, stderr=result.stderr)
