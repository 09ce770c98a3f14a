"""
Templating context logger.

Provides logging interface for templating context with automatic [template] prefix.
All templating modules should import from this module, not from loguru directly.
"""

from loguru import logger

CONTEXT_PREFIX = "[template]"


def _log_info(message: str) -> None:
    """Log info message with [template] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [template] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [template] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


def log_rendering_summary(rendered: list, elapsed_time: float) -> None:
    """Log how many templates were rendered."""
    if not rendered:
        _log_debug("No *.jinja templates found")
        return
    _log_info(f"Rendered {len(rendered)} template(s) ({elapsed_time:.2f}s)")
    for path in rendered:
        _log_debug(f"  {path}")
