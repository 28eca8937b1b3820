"""启动引导单元测试

测试 Store/Admin 工具集的组装, 以及 Admin 登录失败时的降级。
"""

import json
import logging
from typing import Any

import httpx
import pytest

from medusa_mcp.credential.auth import ADMIN_LOGIN_PATH
from medusa_mcp.server import app as app_module
from medusa_mcp.server.app import build_tools, create_server
from medusa_mcp.server.server import MedusaMCPServer
from medusa_mcp.toolset.model import HTTPMethod
from medusa_mcp.utils.config import Config
from medusa_mcp.utils.exception import AuthenticationError

BACKEND_URL = "http://medusa.test"

STORE_DOCUMENT = {
    "openapi": "3.0.0",
    "paths": {
        "/store/products": {
            "get": {
                "operationId": "GetProducts",
                "description": "Retrieve a list of products.",
                "parameters": [{"name": "limit", "in": "query"}],
            }
        },
        "/store/carts": {
            "post": {
                "operationId": "PostCarts",
                "description": "Create a cart.",
            }
        },
    },
}

ADMIN_DOCUMENT = {
    "openapi": "3.0.0",
    "paths": {
        "/admin/orders": {
            "get": {
                "operationId": "GetOrders",
                "description": "Retrieve a list of orders.",
            }
        },
    },
}


@pytest.fixture
def config(tmp_path) -> Config:
    store_path = tmp_path / "store.json"
    admin_path = tmp_path / "admin.json"
    store_path.write_text(json.dumps(STORE_DOCUMENT), encoding="utf-8")
    admin_path.write_text(json.dumps(ADMIN_DOCUMENT), encoding="utf-8")
    return Config(
        backend_url=BACKEND_URL,
        username="admin@medusa-test.com",
        password="supersecret",
        publishable_key="pk_123",
        store_oas_path=str(store_path),
        admin_oas_path=str(admin_path),
        allowed_tools_path=str(tmp_path / "allowed-tools.json"),
        duplicate_tools="keep",
    )


class TestBuildTools:

    @pytest.mark.asyncio
    async def test_store_and_admin(self, config: Config, respx_mock: Any):
        respx_mock.post(f"{BACKEND_URL}{ADMIN_LOGIN_PATH}").mock(
            return_value=httpx.Response(200, json={"token": "jwt_admin"})
        )
        orders = respx_mock.get(f"{BACKEND_URL}/admin/orders").mock(
            return_value=httpx.Response(200, json={"orders": []})
        )
        products = respx_mock.get(f"{BACKEND_URL}/store/products").mock(
            return_value=httpx.Response(200, json={"products": []})
        )

        tools = await build_tools(config)

        assert [t.name for t in tools] == [
            "GetProducts",
            "PostCarts",
            "AdminGetOrders",
        ]
        assert tools[2].description == (
            "This tool helps store administrators. Retrieve a list of orders."
        )
        assert tools[0].method == HTTPMethod.GET

        assert await tools[2].invoke({}) == {"orders": []}
        assert (
            orders.calls.last.request.headers["authorization"]
            == "Bearer jwt_admin"
        )

        assert await tools[0].invoke({"limit": 2}) == {"products": []}
        request = products.calls.last.request
        assert request.headers["authorization"] == "Bearer pk_123"
        assert request.headers["x-publishable-api-key"] == "pk_123"
        assert request.url.params["limit"] == "2"

    @pytest.mark.asyncio
    async def test_admin_login_failure_degrades(
        self, config: Config, respx_mock: Any, caplog
    ):
        caplog.set_level(logging.ERROR, logger="medusa_mcp")
        respx_mock.post(f"{BACKEND_URL}{ADMIN_LOGIN_PATH}").mock(
            return_value=httpx.Response(401, json={"message": "Unauthorized"})
        )

        tools = await build_tools(config)

        assert [t.name for t in tools] == ["GetProducts", "PostCarts"]
        assert "Error initializing Medusa Admin Services" in caplog.text

    @pytest.mark.asyncio
    async def test_admin_unreachable_degrades(self, config: Config, monkeypatch):
        async def unreachable(_config):
            raise httpx.ConnectError("connection refused")

        monkeypatch.setattr(app_module, "admin_login", unreachable)

        tools = await build_tools(config)

        assert [t.name for t in tools] == ["GetProducts", "PostCarts"]

    @pytest.mark.asyncio
    async def test_allow_list_applied(
        self, config: Config, tmp_path, monkeypatch
    ):
        (tmp_path / "allowed-tools.json").write_text(
            json.dumps({
                "allowAllTools": False,
                "allowedTools": ["PostCarts", "AdminGetOrders"],
            }),
            encoding="utf-8",
        )

        async def login(_config):
            from medusa_mcp.credential.auth import Credential

            return Credential(token="jwt_admin")

        monkeypatch.setattr(app_module, "admin_login", login)

        tools = await build_tools(config)

        assert [t.name for t in tools] == ["PostCarts", "AdminGetOrders"]

    @pytest.mark.asyncio
    async def test_unexpected_errors_are_not_swallowed(
        self, config: Config, monkeypatch
    ):
        async def broken(_config):
            raise RuntimeError("boom")

        monkeypatch.setattr(app_module, "admin_login", broken)

        with pytest.raises(RuntimeError):
            await build_tools(config)


def test_create_server(config: Config, monkeypatch):
    async def rejected(_config):
        raise AuthenticationError("Admin login failed.", status_code=401)

    monkeypatch.setattr(app_module, "admin_login", rejected)

    server = create_server(config)

    assert isinstance(server, MedusaMCPServer)
    assert server.get_tool("GetProducts") is not None
    assert server.get_tool("AdminGetOrders") is None
