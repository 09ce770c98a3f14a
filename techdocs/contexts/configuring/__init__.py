"""
Configuring Context

Responsibilities:
- Loads techdocs.conf and layers defaults, file values and overrides
- Validates settings into a frozen BuildConfig
- Locates pandoc, xelatex and the filter chain

Owns: Project configuration, external tool discovery
Never: Runs external tools
"""

from techdocs.contexts.configuring.config import (
    CONFIG_FILE_NAME,
    FORMAT_DESCRIPTIONS,
    HTML_FORMATS,
    SUPPORTED_FORMATS,
    BuildConfig,
    load_config,
)
from techdocs.contexts.configuring.dependencies import check_dependencies, filter_chain

__all__ = [
    "CONFIG_FILE_NAME",
    "FORMAT_DESCRIPTIONS",
    "HTML_FORMATS",
    "SUPPORTED_FORMATS",
    "BuildConfig",
    "load_config",
    "check_dependencies",
    "filter_chain",
]
