"""
Converting context logger.

Provides logging interface for converting context with automatic [pandoc] prefix.
All converting modules should import from this module, not from loguru directly.
"""

from loguru import logger

from techdocs.utils.logger import log_tool_output

CONTEXT_PREFIX = "[pandoc]"


def _log_info(message: str) -> None:
    """Log info message with [pandoc] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [pandoc] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [pandoc] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [pandoc] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


def log_conversion_result(result, output_path, verbose: bool = False) -> None:
    """
    Log a finished pandoc run.

    Args:
        result: CommandResult from run_command()
        output_path: File pandoc wrote
        verbose: Also log pandoc's stderr when it succeeded
    """
    _log_info(f"Wrote {output_path.name} ({result.elapsed_s:.2f}s)")

    # pandoc reports warnings (missing images, unresolved citations) on stderr
    if result.stderr.strip():
        for line in result.stderr.strip().splitlines()[:5]:
            _log_warning(f"  {line}")
        if verbose:
            log_tool_output("pandoc", stderr=result.stderr)


def log_conversion_failure(error) -> None:
    """Log a failed pandoc run with its full stderr."""
    _log_error(f"pandoc failed with status {error.returncode}")
    log_tool_output("pandoc", stderr=error.stderr)
