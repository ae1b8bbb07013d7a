"""
bibpath-mcp: MCP server for resolving bibliographic file links.

Finds short display names for linked files, converts file links between
relative and absolute form, and auto-links loose files to entries by
citation key.
"""

__version__ = "0.1.0"
