"""Medusa MCP Server 模块 / Medusa MCP Server Module"""

from .app import build_tools, create_server, main
from .server import MedusaMCPServer

__all__ = ["MedusaMCPServer", "build_tools", "create_server", "main"]
