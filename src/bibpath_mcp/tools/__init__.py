"""
Tool implementations for bibpath-mcp.

Each module in this package implements a group of related tools:
- uniquify.py: Short display names for linked files
- resolver.py: Relative/absolute conversion of file links
- autolink.py: Linking loose files to entries by citation key
- file_ops.py: Copying and renaming linked files
- formats.py: Extension parsing, directory scans and file field parsing
"""
