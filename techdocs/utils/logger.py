"""
Logging setup for techdocs.

Every build writes a detailed DEBUG log under .techdocs/logs/build_<timestamp>/
while the console only shows progress. Contexts log through their own
contexts/{context}/logger.py wrappers, which add a [context] prefix.
"""

import sys
from pathlib import Path
from typing import Dict, Optional, TextIO

from loguru import logger

from techdocs import __version__

LEVEL_COLORS = {
    "WARNING": "<yellow>",
    "ERROR": "<red>",
    "CRITICAL": "<bold><red>",
}

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {message}"
CONSOLE_FORMAT = "{time:HH:mm:ss} | <level>{level: <7}</level> | <level>{message}</level>"


def _add_console_sink(stream: TextIO, fmt: str, verbose: bool) -> None:
    logger.add(stream, format=fmt, level="DEBUG" if verbose else "INFO", colorize=True)


def setup_logger(
    context_name: str,
    log_dir: Path,
    extra_provenance: Optional[Dict[str, object]] = None,
    verbose: bool = False,
    level_colors: Optional[Dict[str, str]] = None,
) -> Path:
    """
    Route loguru output to a session log file and the console.

    The file always receives DEBUG; the console gets INFO, or DEBUG when
    verbose. A provenance header opens the file.

    Args:
        context_name: Log file name without extension (e.g., "build")
        log_dir: Directory for this session, created if missing
        extra_provenance: Extra lines for the provenance header
        verbose: Show DEBUG messages on the console
        level_colors: Per-level console colors overriding LEVEL_COLORS

    Returns:
        Path to the log file

    Example:
        log_file = setup_logger(
            context_name="build",
            log_dir=Path(".techdocs/logs/build_20251114_123456"),
            extra_provenance={"Format": "pdf"},
        )
    """
    log_dir.mkdir(exist_ok=True, parents=True)
    log_file = log_dir / f"{context_name}.log"

    logger.remove()
    for level_name, color in {**LEVEL_COLORS, **(level_colors or {})}.items():
        logger.level(level_name, color=color)

    logger.add(log_file, format=FILE_FORMAT, level="DEBUG")
    _add_console_sink(sys.stdout, CONSOLE_FORMAT, verbose)

    log_provenance(extra_provenance)
    return log_file


def configure_console_logging(verbose: bool = False) -> None:
    """Console-only logging for commands that keep no log file (init, clean)."""
    logger.remove()
    _add_console_sink(sys.stderr, "<level>{message}</level>", verbose)


def log_provenance(extra_context: Optional[Dict[str, object]] = None) -> None:
    """
    Write the provenance header: command line, working directory, Python
    and techdocs versions, plus extra_context.
    """
    lines = {
        "Command": " ".join(sys.argv),
        "Working directory": Path.cwd(),
        "Python": sys.version.split()[0],
        "techdocs": __version__,
        **(extra_context or {}),
    }

    logger.debug("=" * 80)
    for key, value in lines.items():
        logger.debug(f"{key}: {value}")
    logger.debug("=" * 80)


def log_tool_output(tool: str, **streams: str) -> None:
    """
    Dump captured tool output to the log verbatim.

    opt(raw=True) skips the line format so multi-line output stays readable.

    Example:
        log_tool_output("xelatex", stdout=result.stdout, stderr=result.stderr)
    """
    banner = "=" * 80
    for name, text in streams.items():
        if text:
            logger.opt(raw=True).debug(f"\n{banner}\n{tool.upper()} {name.upper()}:\n{banner}\n{text}\n")
