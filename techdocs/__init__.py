"""
techdocs - Markdown documentation builds driven by Pandoc and XeLaTeX

Turns a tree of Markdown sources into PDF, HTML (single or multi-page),
Markdown, DOCX or EPUB output.

Architecture:
- Configuring Context: Project configuration and external tool discovery
- Templating Context: Jinja2 rendering of *.jinja source files
- Converting Context: Pandoc invocation and per-format flag selection
- Rendering Context: XeLaTeX compilation of Pandoc's LaTeX output
- Publishing Context: Output directory and cleanup management
"""

__version__ = "0.1.0"
