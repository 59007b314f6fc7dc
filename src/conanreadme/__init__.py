"""MCP server for Conan Center package READMEs, metadata, and usage examples."""

__version__ = "0.1.0"
