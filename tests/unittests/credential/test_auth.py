"""凭证获取单元测试"""

import json
from typing import Any

import httpx
from pydantic import ValidationError
import pytest

from medusa_mcp.credential.auth import (
    ADMIN_LOGIN_PATH,
    admin_login,
    Credential,
    store_credential,
)
from medusa_mcp.utils.config import Config
from medusa_mcp.utils.exception import AuthenticationError

BACKEND_URL = "http://medusa.test"


@pytest.fixture
def config() -> Config:
    return Config(
        backend_url=BACKEND_URL,
        username="admin@medusa-test.com",
        password="supersecret",
        publishable_key="pk_123",
    )


class TestStoreCredential:

    def test_uses_publishable_key(self, config: Config):
        credential = store_credential(config)
        assert credential == Credential(token="pk_123", publishable_key="pk_123")

    def test_without_publishable_key(self):
        credential = store_credential(
            Config(backend_url=BACKEND_URL, publishable_key="")
        )
        assert credential.token == ""
        assert credential.publishable_key is None

    def test_credential_is_immutable(self, config: Config):
        credential = store_credential(config)
        with pytest.raises(ValidationError):
            credential.token = "other"  # type: ignore


class TestAdminLogin:

    @pytest.mark.asyncio
    async def test_login_success(self, config: Config, respx_mock: Any):
        route = respx_mock.post(f"{BACKEND_URL}{ADMIN_LOGIN_PATH}").mock(
            return_value=httpx.Response(200, json={"token": "jwt_admin"})
        )

        credential = await admin_login(config)

        assert credential == Credential(token="jwt_admin")
        assert json.loads(route.calls.last.request.content) == {
            "email": "admin@medusa-test.com",
            "password": "supersecret",
        }

    @pytest.mark.asyncio
    async def test_login_rejected(self, config: Config, respx_mock: Any):
        respx_mock.post(f"{BACKEND_URL}{ADMIN_LOGIN_PATH}").mock(
            return_value=httpx.Response(
                401, json={"type": "unauthorized", "message": "Invalid"}
            )
        )

        with pytest.raises(AuthenticationError) as exc_info:
            await admin_login(config)
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, json={}),
            httpx.Response(200, json={"token": 42}),
            httpx.Response(200, json=["token"]),
            httpx.Response(200, text="ok"),
        ],
    )
    async def test_login_without_token(
        self, config: Config, respx_mock: Any, response: httpx.Response
    ):
        respx_mock.post(f"{BACKEND_URL}{ADMIN_LOGIN_PATH}").mock(
            return_value=response
        )

        with pytest.raises(AuthenticationError):
            await admin_login(config)

    @pytest.mark.asyncio
    async def test_network_error_propagates(
        self, config: Config, respx_mock: Any
    ):
        respx_mock.post(f"{BACKEND_URL}{ADMIN_LOGIN_PATH}").mock(
            side_effect=httpx.ConnectError("connection refused")
        )

        with pytest.raises(httpx.ConnectError):
            await admin_login(config)
