"""
Include filter.

Replaces a code block with class `include` by the parsed contents of the
files it lists, one path per line:

    ```{.include}
    chapters/introduction.md
    chapters/installation.md
    ```

Included files may include further files. Paths resolve relative to the
including file (the master document's directory at the top level), falling
back to the working directory.
"""

import json
import os
from pathlib import Path
from typing import Callable, List, Optional

from pandocfilters import walk

from techdocs.contexts.configuring.dependencies import MASTER_DIR_ENV, PANDOC
from techdocs.exceptions import IncludeError
from techdocs.filters.common import code_block_classes, run_filter
from techdocs.utils.process import ToolCommand, run_command

INCLUDE_CLASS = "include"


def include_targets(code: str) -> List[str]:
    """File names listed in an include block, skipping blanks and # comments."""
    targets = []
    for line in code.splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            targets.append(line)
    return targets


def parse_markdown_file(path: Path) -> dict:
    """Parse a Markdown file into a pandoc JSON document."""
    result = run_command(
        ToolCommand(PANDOC, ["--from", "markdown", "--to", "json", str(path)])
    )
    return json.loads(result.stdout)


class IncludeExpander:
    """
    Expands include blocks recursively.

    Attributes:
        parse: Callable turning a file path into a pandoc JSON document
    """

    def __init__(self, parse: Callable[[Path], dict] = parse_markdown_file, root_dir: Optional[Path] = None):
        self.parse = parse
        self.root_dir = root_dir
        self._stack: List[Path] = []

    def action(self, key, value, fmt, meta):
        """pandocfilters action for the top-level document."""
        base_dir = self.root_dir or Path.cwd()
        return self._expand(key, value, fmt, meta, base_dir)

    def resolve(self, name: str, base_dir: Path) -> Path:
        """
        Locate an included file.

        Raises:
            IncludeError: If the file exists in neither location
        """
        candidates = [base_dir / name, Path.cwd() / name]
        for candidate in candidates:
            if candidate.is_file():
                return candidate.resolve()
        raise IncludeError(f"Included file not found: {name} (searched {base_dir} and {Path.cwd()})")

    def include_file(self, path: Path, fmt, meta) -> list:
        """
        Parse one file and expand its own include blocks.

        Raises:
            IncludeError: If the file is already being included further up
        """
        if path in self._stack:
            chain = " -> ".join(str(p) for p in [*self._stack, path])
            raise IncludeError(f"Include cycle detected: {chain}")

        self._stack.append(path)
        try:
            doc = self.parse(path)
            return walk(
                doc["blocks"],
                lambda k, v, f, m: self._expand(k, v, f, m, path.parent),
                fmt,
                meta,
            )
        finally:
            self._stack.pop()

    def _expand(self, key, value, fmt, meta, base_dir: Path):
        if key != "CodeBlock" or INCLUDE_CLASS not in code_block_classes(value):
            return None

        blocks = []
        for name in include_targets(value[1]):
            blocks.extend(self.include_file(self.resolve(name, base_dir), fmt, meta))
        return blocks


def expander_from_environment() -> IncludeExpander:
    """
    IncludeExpander rooted at the master document's directory.

    pandoc runs in the project directory, which is not where the master
    document lives when MASTER_FILE points into a subdirectory.
    """
    master_dir = os.getenv(MASTER_DIR_ENV)
    return IncludeExpander(root_dir=Path(master_dir) if master_dir else None)


def main():
    run_filter("techdocs-include", expander_from_environment().action)


if __name__ == "__main__":
    main()
