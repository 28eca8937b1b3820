"""请求分发 / Request Dispatcher

对后端发起单次 HTTP 调用并原样返回解码后的响应。
Performs a single HTTP call against the backend and returns the decoded
response unmodified.
"""

from typing import Any, Dict, Optional

import httpx

from medusa_mcp.credential.auth import Credential
from medusa_mcp.utils.config import Config
from medusa_mcp.utils.log import logger

from ..model import HTTPMethod

PUBLISHABLE_KEY_HEADER = "x-publishable-api-key"


class Dispatcher:
    """后端请求分发器

    不做重试、不做状态码处理; 非 2xx 响应与成功响应一样原样返回,
    网络异常直接向上抛出。
    """

    def __init__(self, config: Optional[Config] = None):
        self._config = config or Config()

    def build_headers(self, credential: Credential) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        headers.update(self._config.get_headers())
        headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
        })
        # 未配置密钥时不发送 Authorization, 由后端返回拒绝响应
        if credential.token:
            headers["Authorization"] = f"Bearer {credential.token}"
        if credential.publishable_key:
            headers[PUBLISHABLE_KEY_HEADER] = credential.publishable_key
        return headers

    def build_url(self, path: str) -> str:
        base_url = self._config.get_backend_url()
        if not path:
            return base_url
        return f"{base_url}/{path.lstrip('/')}"

    async def dispatch(
        self,
        method: HTTPMethod,
        path: str,
        credential: Credential,
        query: Optional[Dict[str, Any]] = None,
        body: Optional[Dict[str, Any]] = None,
    ) -> Any:
        request_kwargs: Dict[str, Any] = {
            "method": method.value.upper(),
            "url": self.build_url(path),
            "headers": self.build_headers(credential),
        }
        if query:
            request_kwargs["params"] = query
        if body is not None and method != HTTPMethod.GET:
            request_kwargs["json"] = body

        logger.debug(
            "Fetching %s with %s %s",
            path,
            request_kwargs["method"],
            httpx.QueryParams(query or {}),
        )

        async with httpx.AsyncClient(
            timeout=self._config.get_timeout()
        ) as client:
            response = await client.request(**request_kwargs)
            return self._decode(response)

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text
