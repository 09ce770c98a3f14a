"""
External tool discovery.

Binaries can be overridden through the environment (or a .env file):
TECHDOCS_PANDOC, TECHDOCS_XELATEX, TECHDOCS_PLANTUML, TECHDOCS_DOT.
"""

import os
import shutil
import sys
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv

from techdocs.exceptions import MissingDependencyError

load_dotenv()

PANDOC = os.getenv("TECHDOCS_PANDOC", "pandoc")
XELATEX = os.getenv("TECHDOCS_XELATEX", "xelatex")
PLANTUML = os.getenv("TECHDOCS_PLANTUML", "plantuml")
DOT = os.getenv("TECHDOCS_DOT", "dot")

# Set on pandoc runs so the filters see the build, not only the writer in use
FORMAT_ENV = "TECHDOCS_FORMAT"
MASTER_DIR_ENV = "TECHDOCS_MASTER_DIR"

# Filters every build runs, in order
BUILTIN_FILTERS = ["techdocs-include", "techdocs-plantuml", "techdocs-graphviz"]

# Written into the container image, which ships without a TeX distribution
DOCKER_FLAG = Path("/dockerflag")


def find_tool(name: str) -> Optional[str]:
    """Locate an executable on PATH, returning its full path or None."""
    return shutil.which(name)


def find_console_script(name: str) -> Optional[str]:
    """
    Locate an installed console script.

    Checks next to the running interpreter first so filters resolve inside a
    virtualenv that is not activated.
    """
    candidate = Path(sys.executable).parent / name
    if candidate.exists():
        return str(candidate)
    return shutil.which(name)


def resolve_filter(name: str, project_dir: Path) -> str:
    """
    Resolve a user-configured filter to something pandoc can execute.

    A filter is looked up as a path relative to the project first, then on PATH.

    Raises:
        MissingDependencyError: If the filter cannot be found
    """
    local = project_dir / name
    if local.exists():
        return str(local)

    found = find_tool(name)
    if found is None:
        raise MissingDependencyError(name, "configured in FILTERS")
    return found


def filter_chain(config) -> List[str]:
    """
    Resolve the full filter chain for a build.

    Built-in filters (include, plantuml, graphviz) come first, then the
    project's FILTERS in the order given.

    Raises:
        MissingDependencyError: If any filter cannot be found
    """
    chain = []
    for name in BUILTIN_FILTERS:
        found = find_console_script(name)
        if found is None:
            raise MissingDependencyError(name, "techdocs filter; reinstall techdocs")
        chain.append(found)

    for name in config.filters:
        chain.append(resolve_filter(name, config.project_dir))

    return chain


def in_container() -> bool:
    return DOCKER_FLAG.exists()


def check_dependencies(config) -> Dict[str, str]:
    """
    Verify the tools the configured FORMAT needs are installed.

    PlantUML and Graphviz are not checked here; the filters report them only
    when a diagram actually needs rendering.

    Args:
        config: BuildConfig for this build

    Returns:
        Dict mapping tool name to resolved path

    Raises:
        MissingDependencyError: If a required tool is missing
    """
    tools = {}

    pandoc_path = find_tool(PANDOC)
    if pandoc_path is None:
        raise MissingDependencyError(PANDOC, "needed for every format")
    tools["pandoc"] = pandoc_path

    if config.format == "pdf":
        xelatex_path = find_tool(XELATEX)
        if xelatex_path is None:
            if in_container():
                raise MissingDependencyError(
                    XELATEX, "PDF output is not supported inside the techdocs container image"
                )
            raise MissingDependencyError(XELATEX, "needed for FORMAT=pdf")
        tools["xelatex"] = xelatex_path

    tools["plantuml"] = find_tool(PLANTUML) or "(not installed)"
    tools["dot"] = find_tool(DOT) or "(not installed)"

    return tools
