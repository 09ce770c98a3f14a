"""
Rendering Context

Responsibilities:
- Compiles pandoc's LaTeX output to PDF with xelatex
- Runs enough passes for the TOC and cross-references to resolve
- Parses the LaTeX log for errors and warnings

Owns: xelatex compilation
Never: Modifies the generated LaTeX
"""

from techdocs.contexts.rendering.compiler import (
    DEFAULT_NUM_PASSES,
    CompilationResult,
    compile_latex,
)

__all__ = ["DEFAULT_NUM_PASSES", "CompilationResult", "compile_latex"]
