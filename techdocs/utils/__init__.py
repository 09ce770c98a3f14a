"""
Shared utilities for techdocs.

Common functionality used across contexts:
- External command execution
- Logger setup
- Timestamps
"""

from techdocs.utils.process import CommandResult, ToolCommand, run_command
from techdocs.utils.timestamp import now, today

__all__ = ["CommandResult", "ToolCommand", "run_command", "now", "today"]
