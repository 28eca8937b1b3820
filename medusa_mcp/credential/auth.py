"""凭证获取 / Credential Acquisition

Store 分区使用可发布密钥作为 bearer 凭证; Admin 分区在启动时通过
emailpass 登录一次获取 JWT。凭证为不可变值, 在工具编译时捕获。
The store surface uses the publishable key as its bearer credential; the
admin surface logs in once at startup via ``emailpass`` to obtain a JWT.
Credentials are immutable values captured when tools are compiled.
"""

from typing import Optional

from pydantic import ConfigDict
import httpx

from medusa_mcp.utils.config import Config
from medusa_mcp.utils.exception import AuthenticationError
from medusa_mcp.utils.helper import mask_password
from medusa_mcp.utils.log import logger
from medusa_mcp.utils.model import BaseModel

ADMIN_LOGIN_PATH = "/auth/user/emailpass"


class Credential(BaseModel):
    """某个 API 分区的请求凭证"""

    model_config = ConfigDict(frozen=True)

    token: str = ""
    publishable_key: Optional[str] = None


def store_credential(config: Optional[Config] = None) -> Credential:
    """Store 分区凭证: 可发布密钥同时作为 bearer 凭证与 publishable key 头"""
    config = config or Config()
    key = config.get_publishable_key()
    return Credential(token=key, publishable_key=key or None)


async def admin_login(config: Optional[Config] = None) -> Credential:
    """使用管理员账号登录并返回 Admin 分区凭证

    Raises:
        AuthenticationError: 登录被拒绝或响应中没有 token
        httpx.HTTPError: 网络错误
    """
    config = config or Config()
    url = f"{config.get_backend_url()}{ADMIN_LOGIN_PATH}"
    logger.debug(
        "Logging in to %s as %s (password %s)",
        url,
        config.get_username(),
        mask_password(config.get_password()),
    )

    async with httpx.AsyncClient(timeout=config.get_timeout()) as client:
        response = await client.post(
            url,
            json={
                "email": config.get_username(),
                "password": config.get_password(),
            },
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
        )

    if response.is_error:
        raise AuthenticationError(
            "Admin login failed.",
            status_code=response.status_code,
            body=response.text,
        )

    try:
        token = response.json().get("token")
    except (ValueError, AttributeError):
        token = None

    if not token or not isinstance(token, str):
        raise AuthenticationError(
            "Admin login response did not contain a token.",
            status_code=response.status_code,
        )

    return Credential(token=token)
