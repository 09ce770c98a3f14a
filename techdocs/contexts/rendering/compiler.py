"""
XeLaTeX Compilation

Typesets the .tex file pandoc writes for FORMAT=pdf. xelatex runs several
passes in the .tex file's directory; the .log it leaves behind decides
whether the build succeeded.
"""

import os
import re
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from techdocs.contexts.configuring.dependencies import XELATEX
from techdocs.contexts.rendering.logger import (
    _log_debug,
    log_compilation_result,
    log_compilation_start,
)
from techdocs.utils.pdf_processing import page_count
from techdocs.utils.process import CommandResult, ToolCommand, run_command

# Three passes: TOC entries, then page numbers, then references to them
DEFAULT_NUM_PASSES = 3

XELATEX_OPTIONS = ["-interaction=nonstopmode", "-halt-on-error", "-file-line-error"]

# Files xelatex leaves next to the PDF
LATEX_ARTIFACTS = [".aux", ".log", ".out", ".toc"]

ERROR_PATTERNS = [
    re.compile(r"^! (.+)$", re.MULTILINE),
    # -file-line-error form: "./documentation.tex:12: message"
    re.compile(r"^\S+\.tex:\d+: (.+)$", re.MULTILINE),
]

# Fatal messages that can appear without either prefix
FATAL_MESSAGES = ["Undefined control sequence", "File ended while scanning use of", "Emergency stop"]

WARNING_PATTERNS = [
    re.compile(r"LaTeX Warning: (.+)"),
    re.compile(r"Package \w+ Warning: (.+)"),
    re.compile(r"Overfull \\hbox \((.+)\)"),
    re.compile(r"Underfull \\hbox \((.+)\)"),
]


@dataclass
class CompilationResult:
    """
    Outcome of compile_latex().

    Attributes:
        success: PDF written and no errors found in the log
        pdf_path: Generated PDF, None if there is none
        stdout: xelatex stdout of every pass that ran
        stderr: xelatex stderr of every pass that ran
        errors: Error messages parsed from the .log
        warnings: Warning messages parsed from the .log
        page_count: Pages in the PDF, None if unknown
    """

    success: bool
    pdf_path: Optional[Path] = None
    stdout: str = ""
    stderr: str = ""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    page_count: Optional[int] = None


def _parse_latex_log(log_content: str) -> Tuple[List[str], List[str]]:
    """
    Pull error and warning messages out of a xelatex .log file.

    Returns:
        (errors, warnings), each in order of appearance without duplicates
    """
    errors: List[str] = []
    for pattern in ERROR_PATTERNS:
        for match in pattern.finditer(log_content):
            message = match.group(1).strip()
            if message not in errors:
                errors.append(message)

    for fatal in FATAL_MESSAGES:
        if any(fatal in err for err in errors):
            continue
        match = re.search(rf"({re.escape(fatal)}.*?)$", log_content, re.MULTILINE)
        if match:
            errors.append(match.group(1))

    warnings = [
        match.group(1).strip()
        for pattern in WARNING_PATTERNS
        for match in pattern.finditer(log_content)
    ]
    return errors, warnings


def _output_path(tex_file: Path, ext: str) -> Path:
    return tex_file.with_name(f"{tex_file.stem}{ext}")


def _remove_outputs(tex_file: Path, extensions: Sequence[str]) -> None:
    for ext in extensions:
        path = _output_path(tex_file, ext)
        if path.exists():
            path.unlink()


def _texinputs(search_paths: Sequence[Path]) -> str:
    # Trailing separator keeps the TeX distribution's default search path
    return os.pathsep.join(str(p) for p in search_paths) + os.pathsep


def _run_passes(
    tex_file: Path, num_passes: int, search_paths: Sequence[Path]
) -> List[CommandResult]:
    """Run xelatex up to num_passes times, stopping after a failing pass."""
    command = ToolCommand(
        XELATEX,
        [*XELATEX_OPTIONS, tex_file.name],
        cwd=tex_file.parent,
        env={"TEXINPUTS": _texinputs(search_paths)} if search_paths else None,
    )

    results = []
    for pass_number in range(1, num_passes + 1):
        result = run_command(command, check=False)
        results.append(result)
        _log_debug(f"Pass {pass_number}/{num_passes}: status {result.returncode} ({result.elapsed_s:.2f}s)")
        if not result.success:
            break
    return results


def compile_latex(
    tex_file: Path,
    num_passes: int = DEFAULT_NUM_PASSES,
    keep_artifacts: bool = False,
    search_paths: Sequence[Path] = (),
    verbose: bool = False,
) -> CompilationResult:
    """
    Typeset a .tex file with xelatex.

    Earlier outputs are deleted first, so a PDF on disk afterwards always
    comes from this run. Intermediate files are removed after a successful
    run unless keep_artifacts is set, and always kept after a failure.

    Args:
        tex_file: .tex file to compile; compilation happens in its directory
        num_passes: xelatex passes (default: 3 for the TOC and cross-references)
        keep_artifacts: Keep .aux, .log, .out and .toc files
        search_paths: Directories added to TEXINPUTS (e.g., the project
                      directory, so images referenced relative to it resolve)
        verbose: Dump full xelatex output to the log on success too

    Returns:
        CompilationResult; failures are reported in it, not raised
    """
    tex_file = Path(tex_file)
    if not tex_file.exists():
        return CompilationResult(success=False, errors=[f"TeX file not found: {tex_file}"])

    _remove_outputs(tex_file, [".pdf", *LATEX_ARTIFACTS])

    log_compilation_start(tex_file, num_passes)
    start_time = time.time()

    passes = _run_passes(tex_file, num_passes, search_paths)

    errors: List[str] = []
    warnings: List[str] = []
    log_file = _output_path(tex_file, ".log")
    if log_file.exists():
        # Font metadata in the log is not always valid UTF-8
        errors, warnings = _parse_latex_log(log_file.read_text(encoding="latin-1"))

    pdf_path = _output_path(tex_file, ".pdf")
    if not pdf_path.exists() and not errors:
        errors.append("PDF file was not generated")

    success = passes[-1].success and pdf_path.exists() and not errors
    if success and not keep_artifacts:
        _remove_outputs(tex_file, LATEX_ARTIFACTS)

    result = CompilationResult(
        success=success,
        pdf_path=pdf_path if pdf_path.exists() else None,
        stdout="\n".join(r.stdout for r in passes),
        stderr="\n".join(r.stderr for r in passes),
        errors=errors,
        warnings=warnings,
        page_count=page_count(pdf_path) if pdf_path.exists() else None,
    )

    log_compilation_result(tex_file.stem, result, time.time() - start_time, verbose=verbose)
    return result
