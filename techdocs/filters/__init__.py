"""
Pandoc JSON filters.

Each module is installed as a console script (techdocs-include,
techdocs-plantuml, techdocs-graphviz) and run by pandoc through --filter.
"""
