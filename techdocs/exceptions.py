"""Exceptions raised by the build pipeline. The CLI turns any of them into exit code 1."""

from pathlib import Path
from typing import List, Optional


class TechDocsError(Exception):
    """Base class for every error that aborts a build."""


class ConfigurationError(TechDocsError, ValueError):
    """Raised when techdocs.conf holds an unknown or invalid value."""


class MissingInputError(TechDocsError):
    """
    Raised when a file a pipeline step consumes does not exist.

    Attributes:
        path: The missing file
        purpose: What the file was needed for (e.g., "master document")
    """

    def __init__(self, path: Path, purpose: str, hint: Optional[str] = None):
        self.path = path
        self.purpose = purpose

        message = f"{purpose} not found: {path}"
        if hint:
            message += f"\n{hint}"
        super().__init__(message)


class MissingDependencyError(TechDocsError):
    """
    Raised when an external tool is not installed.

    Attributes:
        tool: Name or path of the missing binary
    """

    def __init__(self, tool: str, reason: Optional[str] = None):
        self.tool = tool

        message = f"Required tool not found on PATH: {tool}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class TemplateRenderError(TechDocsError):
    """
    Raised when a *.jinja template cannot be rendered.

    Attributes:
        message: Error description
        template_path: Path to the template file
        original_error: The original Jinja2 error
    """

    def __init__(
        self,
        message: str,
        template_path: Optional[Path] = None,
        original_error: Optional[Exception] = None,
    ):
        self.message = message
        self.template_path = template_path
        self.original_error = original_error

        parts = [message]

        if template_path:
            parts.append(f"Template: {template_path}")

        if original_error:
            parts.append(f"Original error: {str(original_error)}")

        super().__init__("\n".join(parts))


class IncludeError(TechDocsError):
    """Raised by the include filter for a missing file or an include cycle."""


class ToolInvocationError(TechDocsError):
    """
    Raised when an external command exits non-zero.

    Attributes:
        tool: Binary that failed (e.g., "pandoc")
        argv: Full command line
        returncode: Exit status
        stderr: Captured standard error
    """

    def __init__(self, tool: str, argv: List[str], returncode: int, stderr: str = ""):
        self.tool = tool
        self.argv = argv
        self.returncode = returncode
        self.stderr = stderr

        parts = [f"{tool} exited with status {returncode}"]

        # Last lines of stderr are usually the ones that explain the failure
        tail = [line for line in stderr.strip().splitlines() if line.strip()][-10:]
        if tail:
            parts.append("\n".join(tail))

        super().__init__("\n".join(parts))


class ProjectExistsError(TechDocsError):
    """
    Raised by init when starter files would overwrite existing ones.

    Attributes:
        conflicts: Existing files that would be overwritten
    """

    def __init__(self, conflicts: List[Path]):
        self.conflicts = conflicts
        listing = "\n".join(f"  {path}" for path in conflicts)
        super().__init__(f"Refusing to overwrite existing files (use --force):\n{listing}")
