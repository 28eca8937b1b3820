"""Medusa MCP / Medusa MCP

将 Medusa 电商后端的 REST 接口 (Store 与 Admin 两个分区) 编译为 MCP 工具。
Exposes the Medusa e-commerce backend's REST surface (store and admin) as
schema-validated tools for the Model Context Protocol.

主要功能 / Main Features:
- ToolSet: OpenAPI 文档编译、参数路由与请求分发 / OpenAPI compilation, argument routing, dispatch
- Credential: Store 密钥与 Admin 登录 / Store key and admin login
- Server: MCP Streamable HTTP 服务器 / MCP Streamable HTTP server
"""

__version__ = "1.0.0"

from medusa_mcp.credential import admin_login, Credential, store_credential
from medusa_mcp.toolset import (
    ADMIN_SURFACE,
    AllowList,
    DuplicateToolPolicy,
    InterfaceDocument,
    STORE_SURFACE,
    Surface,
    Tool,
    ToolSetAssembler,
    ValidatorNode,
)
from medusa_mcp.toolset.api import load_document, ToolCompiler
from medusa_mcp.utils.config import Config
from medusa_mcp.utils.exception import (
    AuthenticationError,
    DocumentLoadError,
    DuplicateToolError,
    MedusaMCPError,
    MissingOperationIdError,
    SchemaCycleError,
    ToolCompileError,
    ToolNotFoundError,
)

__all__ = [
    "ADMIN_SURFACE",
    "AllowList",
    "AuthenticationError",
    "Config",
    "Credential",
    "DocumentLoadError",
    "DuplicateToolError",
    "DuplicateToolPolicy",
    "InterfaceDocument",
    "MedusaMCPError",
    "MissingOperationIdError",
    "STORE_SURFACE",
    "SchemaCycleError",
    "Surface",
    "Tool",
    "ToolCompileError",
    "ToolCompiler",
    "ToolNotFoundError",
    "ToolSetAssembler",
    "ValidatorNode",
    "admin_login",
    "load_document",
    "store_credential",
]
