"""
Configuring context logger.

Provides logging interface for configuring context with automatic [config] prefix.
All configuring modules should import from this module, not from loguru directly.
"""

from loguru import logger

CONTEXT_PREFIX = "[config]"


def _log_info(message: str) -> None:
    """Log info message with [config] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [config] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [config] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


def log_config_loaded(config) -> None:
    """Log the settings that shape a build."""
    _log_info(f"Project: {config.project_name} ({config.project_dir})")
    _log_info(f"Format: {config.format}")
    _log_debug(f"  Master file: {config.master_file}")
    _log_debug(f"  Output: {config.output_dir / config.output_file_name_base}")
    _log_debug(f"  TOC: {config.toc} (depth {config.toc_depth})")
    if config.filters:
        _log_debug(f"  Extra filters: {', '.join(config.filters)}")


def log_tools(tools: dict) -> None:
    """Log resolved paths of the external tools."""
    for name, path in tools.items():
        _log_debug(f"  {name}: {path}")
