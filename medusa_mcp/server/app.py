"""启动引导 / Bootstrap

加载接口文档与凭证, 组装工具集并启动 MCP 服务器。
Admin 登录失败时降级为仅提供 Store 分区工具。
Loads interface documents and credentials, assembles the tool set and starts
the MCP server. A failed admin login degrades to the store tools only.
"""

import asyncio
from typing import List, Optional

import httpx

from medusa_mcp.credential.auth import admin_login, store_credential
from medusa_mcp.toolset.api.dispatcher import Dispatcher
from medusa_mcp.toolset.api.openapi import load_document
from medusa_mcp.toolset.model import (
    ADMIN_SURFACE,
    AllowList,
    STORE_SURFACE,
    Tool,
)
from medusa_mcp.toolset.toolset import ToolSetAssembler
from medusa_mcp.utils.config import Config
from medusa_mcp.utils.exception import AuthenticationError
from medusa_mcp.utils.log import logger

from .server import MedusaMCPServer


async def build_tools(
    config: Optional[Config] = None,
    assembler: Optional[ToolSetAssembler] = None,
) -> List[Tool]:
    """编译 Store 与 Admin 分区的工具并应用白名单"""
    config = config or Config()
    assembler = assembler or ToolSetAssembler(
        config.get_duplicate_tools(), dispatcher=Dispatcher(config)
    )

    surfaces = [(
        load_document(config.get_store_oas_path()),
        STORE_SURFACE,
        store_credential(config),
    )]

    try:
        admin_credential = await admin_login(config)
    except (AuthenticationError, httpx.HTTPError) as e:
        logger.error("Error initializing Medusa Admin Services: %s", e)
    else:
        surfaces.append((
            load_document(config.get_admin_oas_path()),
            ADMIN_SURFACE,
            admin_credential,
        ))

    allow_list = AllowList.from_file(config.get_allowed_tools_path())
    return assembler.assemble(surfaces, allow_list)


def create_server(config: Optional[Config] = None) -> MedusaMCPServer:
    config = config or Config()
    tools = asyncio.run(build_tools(config))
    return MedusaMCPServer(tools)


def main() -> None:
    logger.info("Starting Medusa Store MCP Server...")
    config = Config()
    server = create_server(config)
    server.start(host=config.get_host(), port=config.get_port())


if __name__ == "__main__":
    main()
