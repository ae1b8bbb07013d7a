"""
MCP server entry point for bibpath-mcp.

This module initializes the MCP server and registers all tools.
"""

import asyncio
import json
import logging
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from bibpath_mcp.config import config_manager
from bibpath_mcp.tools.autolink import autolink_files
from bibpath_mcp.tools.file_ops import copy_linked_file, rename_linked_file
from bibpath_mcp.tools.resolver import (
    candidate_directories,
    expand_file,
    list_linked_files,
    shorten_file,
)
from bibpath_mcp.tools.uniquify import display_names

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create the MCP server instance
server = Server("bibpath-mcp")

ENTRIES_SCHEMA = {
    "type": "array",
    "description": "Entries as objects with 'citation_key' and optional 'fields' (e.g. {'file': ':paper.pdf:PDF'})",
    "items": {
        "type": "object",
        "properties": {
            "citation_key": {"type": "string"},
            "fields": {"type": "object"},
        },
    },
}

DIRECTORIES_SCHEMA = {
    "type": "array",
    "items": {"type": "string"},
    "description": "Directories in priority order. Defaults to the configured file directories.",
}


@server.list_tools()
async def list_tools() -> list[Tool]:
    """List all available tools."""
    return [
        Tool(
            name="bibpath_hello",
            description="Test tool to verify bibpath-mcp is working. Returns configuration status.",
            inputSchema={
                "type": "object",
                "properties": {},
                "required": [],
            },
        ),
        Tool(
            name="display_names",
            description="Shortest distinguishable names for a list of file paths (minimal unique path suffixes).",
            inputSchema={
                "type": "object",
                "properties": {
                    "paths": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Full file paths",
                    },
                },
                "required": ["paths"],
            },
        ),
        Tool(
            name="expand_file",
            description="Resolve a (possibly relative) file link to an existing absolute path using the file directories.",
            inputSchema={
                "type": "object",
                "properties": {
                    "name": {
                        "type": "string",
                        "description": "File link, absolute or relative",
                    },
                    "directories": DIRECTORIES_SCHEMA,
                },
                "required": ["name"],
            },
        ),
        Tool(
            name="shorten_file",
            description="Make an absolute file path relative to the first file directory containing it.",
            inputSchema={
                "type": "object",
                "properties": {
                    "path": {
                        "type": "string",
                        "description": "Absolute file path",
                    },
                    "directories": {
                        **DIRECTORIES_SCHEMA,
                        "description": "Base directories, longest first. Defaults to the configured file directories.",
                    },
                },
                "required": ["path"],
            },
        ),
        Tool(
            name="autolink_files",
            description="Scan the file directories and link files to entries whose citation key matches the file name.",
            inputSchema={
                "type": "object",
                "properties": {
                    "entries": ENTRIES_SCHEMA,
                    "extensions": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "File extensions to consider (e.g. ['pdf']). Defaults to the configured list.",
                    },
                    "directories": DIRECTORIES_SCHEMA,
                    "exact_only": {
                        "type": "boolean",
                        "description": "Only link files named exactly <citation key>.<ext>. Defaults to configuration.",
                    },
                },
                "required": ["entries"],
            },
        ),
        Tool(
            name="list_linked_files",
            description="List the existing files referenced by the 'file' field of entries, as absolute paths.",
            inputSchema={
                "type": "object",
                "properties": {
                    "entries": ENTRIES_SCHEMA,
                    "directories": DIRECTORIES_SCHEMA,
                },
                "required": ["entries"],
            },
        ),
        Tool(
            name="copy_linked_file",
            description="Copy a linked file. Does not replace an existing destination unless overwrite is true.",
            inputSchema={
                "type": "object",
                "properties": {
                    "source": {"type": "string"},
                    "dest": {"type": "string"},
                    "overwrite": {"type": "boolean", "default": False},
                },
                "required": ["source", "dest"],
            },
        ),
        Tool(
            name="rename_linked_file",
            description="Rename (move) a linked file.",
            inputSchema={
                "type": "object",
                "properties": {
                    "source": {"type": "string"},
                    "dest": {"type": "string"},
                },
                "required": ["source", "dest"],
            },
        ),
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Handle tool calls."""

    if name == "bibpath_hello":
        return await handle_hello()

    if name == "display_names":
        result = await display_names(paths=arguments.get("paths"))
        return [TextContent(type="text", text=json.dumps(result, indent=2))]

    if name == "expand_file":
        result = await expand_file(
            name=arguments.get("name"),
            directories=arguments.get("directories"),
        )
        return [TextContent(type="text", text=json.dumps(result, indent=2))]

    if name == "shorten_file":
        result = await shorten_file(
            path=arguments.get("path"),
            directories=arguments.get("directories"),
        )
        return [TextContent(type="text", text=json.dumps(result, indent=2))]

    if name == "autolink_files":
        result = await autolink_files(
            entries=arguments.get("entries"),
            extensions=arguments.get("extensions"),
            directories=arguments.get("directories"),
            exact_only=arguments.get("exact_only"),
        )
        return [TextContent(type="text", text=json.dumps(result, indent=2))]

    if name == "list_linked_files":
        result = await list_linked_files(
            entries=arguments.get("entries"),
            directories=arguments.get("directories"),
        )
        return [TextContent(type="text", text=json.dumps(result, indent=2))]

    if name == "copy_linked_file":
        result = await copy_linked_file(
            source=arguments.get("source"),
            dest=arguments.get("dest"),
            overwrite=arguments.get("overwrite", False),
        )
        return [TextContent(type="text", text=json.dumps(result, indent=2))]

    if name == "rename_linked_file":
        result = await rename_linked_file(
            source=arguments.get("source"),
            dest=arguments.get("dest"),
        )
        return [TextContent(type="text", text=json.dumps(result, indent=2))]

    return [TextContent(type="text", text=f"Unknown tool: {name}")]


async def handle_hello() -> list[TextContent]:
    """Handle the hello test tool."""
    status_lines = ["bibpath-mcp is running!", ""]

    config_path = config_manager.config_path
    if config_path.exists():
        status_lines.append(f"✓ Config file: {config_path}")
    else:
        status_lines.append(f"✗ Config file: {config_path} (does not exist, using defaults)")

    config = config_manager.load()
    status_lines.append(f"  Path convention: {config.paths.convention}")
    status_lines.append(f"  Exact citation key match only: {config.autolink.exact_citation_key_match_only}")
    status_lines.append(f"  Extensions: {', '.join(config.autolink.extensions)}")

    status_lines.append("")
    directories = candidate_directories(config.directories)
    if directories:
        for directory in directories:
            status_lines.append(f"✓ File directory: {directory}")
    else:
        status_lines.append("✗ File directories: none configured")

    return [TextContent(type="text", text="\n".join(status_lines))]


async def run_server():
    """Run the MCP server."""
    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )


def main():
    """Main entry point."""
    asyncio.run(run_server())


if __name__ == "__main__":
    main()
