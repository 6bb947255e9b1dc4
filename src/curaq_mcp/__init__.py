"""CuraQ MCP Server - MCP access to the CuraQ reading list."""

__version__ = "0.1.0"
