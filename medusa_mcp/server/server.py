"""Medusa MCP HTTP Server / Medusa MCP HTTP 服务器

将组装好的工具注册到 MCP 低层 Server, 通过 Streamable HTTP 传输
(无状态, JSON 响应) 挂载在 FastAPI 应用的 ``/mcp`` 路径上。
Registers the assembled tools on an MCP low-level server and serves it over
the Streamable HTTP transport (stateless, JSON responses) at ``/mcp`` of a
FastAPI application.
"""

import contextlib
import json
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

from fastapi import FastAPI
from mcp.server.lowlevel import Server
from mcp.server.streamable_http_manager import StreamableHTTPSessionManager
import mcp.types as types
from starlette.types import Receive, Scope, Send
import uvicorn

from medusa_mcp.toolset.model import Tool
from medusa_mcp.utils.exception import ToolNotFoundError
from medusa_mcp.utils.log import logger

SERVER_NAME = "Medusa Store MCP Server"
SERVER_VERSION = "1.0.0"
MCP_PATH = "/mcp"


class StreamableHTTPApp:
    """将 Streamable HTTP 会话管理器包装为 ASGI 应用"""

    def __init__(self, session_manager: StreamableHTTPSessionManager):
        self.session_manager = session_manager

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        logger.debug("MCP request received")
        await self.session_manager.handle_request(scope, receive, send)


class MedusaMCPServer:
    """Medusa MCP Server

    Example:
        >>> tools = await build_tools(Config())
        >>> server = MedusaMCPServer(tools)
        >>> server.start(port=3000)
        # 可访问: POST http://localhost:3000/mcp
    """

    def __init__(
        self,
        tools: Sequence[Tool],
        name: str = SERVER_NAME,
        version: str = SERVER_VERSION,
    ):
        self.tools: List[Tool] = list(tools)
        self._registry: Dict[str, Tool] = {}
        for tool in self.tools:
            # 重名工具: 首个注册者生效
            if tool.name in self._registry:
                logger.warning(
                    "Tool %s is already registered; later definition ignored",
                    tool.name,
                )
                continue
            self._registry[tool.name] = tool

        self.mcp = Server(name, version=version)
        self.mcp.list_tools()(self.list_tools)
        self.mcp.call_tool()(self.call_tool)

        self.session_manager = StreamableHTTPSessionManager(
            app=self.mcp,
            json_response=True,
            stateless=True,
        )
        self.app = self._create_app()

    def get_tool(self, name: str) -> Optional[Tool]:
        return self._registry.get(name)

    async def list_tools(self) -> List[types.Tool]:
        return [
            types.Tool(
                name=tool.name,
                description=tool.description,
                inputSchema=tool.input_json_schema(),
            )
            for tool in self._registry.values()
        ]

    async def call_tool(
        self, name: str, arguments: Optional[Dict[str, Any]]
    ) -> List[types.TextContent]:
        """校验参数并调用工具, 以 JSON 文本返回后端响应

        Raises:
            ToolNotFoundError: 工具不存在
            pydantic.ValidationError: 参数校验失败
            httpx.HTTPError: 后端请求失败
        """
        tool = self._registry.get(name)
        if tool is None:
            raise ToolNotFoundError(name)

        result = await tool.invoke(arguments)
        return [
            types.TextContent(
                type="text",
                text=json.dumps(result, ensure_ascii=False, default=str),
            )
        ]

    def _create_app(self) -> FastAPI:
        session_manager = self.session_manager

        @contextlib.asynccontextmanager
        async def lifespan(app: FastAPI) -> AsyncIterator[None]:
            async with session_manager.run():
                logger.debug("MCP session manager started")
                yield

        app = FastAPI(title=SERVER_NAME, lifespan=lifespan)
        app.add_route(
            MCP_PATH,
            StreamableHTTPApp(session_manager),
            methods=["GET", "POST", "DELETE"],
        )
        return app

    def start(
        self,
        host: str = "0.0.0.0",
        port: int = 3000,
        log_level: str = "info",
        **kwargs: Any,
    ):
        """启动 HTTP 服务器

        Args:
            host: 监听地址，默认 0.0.0.0
            port: 监听端口，默认 3000
            log_level: 日志级别，默认 info
            **kwargs: 传递给 uvicorn.run 的其他参数
        """
        logger.info(
            "Medusajs MCP Server running on http://%s:%s%s",
            host,
            port,
            MCP_PATH,
        )
        uvicorn.run(
            self.app, host=host, port=port, log_level=log_level, **kwargs
        )

    def as_fastapi_app(self) -> FastAPI:
        """导出 FastAPI 应用"""
        return self.app
