"""配置管理模块 / Configuration Management Module

此模块提供 Medusa MCP 服务的全局配置管理功能。
This module provides global configuration management for the Medusa MCP server.
"""

import os
from typing import Dict, Optional

from dotenv import load_dotenv

load_dotenv()


def get_env_with_default(default: str, *key: str) -> str:
    """从环境变量获取值,支持多个候选键 / Get value from environment variables with multiple fallback keys

    Args:
        default: 默认值 / Default value
        *key: 候选环境变量名 / Candidate environment variable names

    Returns:
        str: 环境变量值或默认值 / Environment variable value or default value
    """
    for k in key:
        v = os.getenv(k)
        if v is not None:
            return v
    return default


class Config:
    """Medusa MCP 全局配置类 / Medusa MCP Global Configuration Class

    用于管理后端地址、凭证、接口文档路径和服务端口。
    Holds the backend address, credentials, interface document paths and
    server settings.

    支持从参数或环境变量读取配置。
    Supports reading configuration from parameters or environment variables.

    Examples:
        >>> # 从参数创建配置 / Create config from parameters
        >>> config = Config(
        ...     backend_url="http://localhost:9000",
        ...     username="admin@medusa-test.com",
        ...     password="supersecret",
        ... )
        >>> # 或从环境变量读取 / Or read from environment variables
        >>> config = Config()
    """

    __slots__ = (
        "_backend_url",
        "_username",
        "_password",
        "_publishable_key",
        "_store_oas_path",
        "_admin_oas_path",
        "_allowed_tools_path",
        "_duplicate_tools",
        "_host",
        "_port",
        "_timeout",
        "_headers",
        "__weakref__",
    )

    def __init__(
        self,
        backend_url: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        publishable_key: Optional[str] = None,
        store_oas_path: Optional[str] = None,
        admin_oas_path: Optional[str] = None,
        allowed_tools_path: Optional[str] = None,
        duplicate_tools: Optional[str] = None,
        host: Optional[str] = None,
        port: Optional[int] = None,
        timeout: Optional[float] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        """初始化配置 / Initialize configuration

        Args:
            backend_url: Medusa 后端地址 / Medusa backend base URL
                未提供时从环境变量读取: MEDUSA_BACKEND_URL
                Read from env var if not provided: MEDUSA_BACKEND_URL
            username: 管理员邮箱 / Admin user email
                未提供时从环境变量读取: MEDUSA_USERNAME
            password: 管理员密码 / Admin user password
                未提供时从环境变量读取: MEDUSA_PASSWORD
            publishable_key: Store API 可发布密钥 / Store publishable API key
                未提供时从环境变量读取: PUBLISHABLE_KEY 或 NEXT_PUBLIC_MEDUSA_PUBLISHABLE_KEY
            store_oas_path: Store 接口文档路径 / Store OpenAPI document path
            admin_oas_path: Admin 接口文档路径 / Admin OpenAPI document path
            allowed_tools_path: 工具白名单文件路径 / Allow-list file path
            duplicate_tools: 重名工具策略 keep/first/error / Duplicate tool policy
            host: 监听地址 / Listen host
            port: 监听端口 / Listen port
            timeout: 请求超时时间(秒),默认不限制 / Request timeout in seconds, unlimited by default
            headers: 额外请求头,可选 / Extra request headers, optional
        """

        if backend_url is None:
            backend_url = get_env_with_default(
                "http://localhost:9000", "MEDUSA_BACKEND_URL"
            )
        if username is None:
            username = get_env_with_default("medusa_user", "MEDUSA_USERNAME")
        if password is None:
            password = get_env_with_default("medusa_pass", "MEDUSA_PASSWORD")
        if publishable_key is None:
            publishable_key = get_env_with_default(
                "", "PUBLISHABLE_KEY", "NEXT_PUBLIC_MEDUSA_PUBLISHABLE_KEY"
            )
        if store_oas_path is None:
            store_oas_path = get_env_with_default(
                "oas/store.json", "MEDUSA_STORE_OAS_PATH"
            )
        if admin_oas_path is None:
            admin_oas_path = get_env_with_default(
                "oas/admin.json", "MEDUSA_ADMIN_OAS_PATH"
            )
        if allowed_tools_path is None:
            allowed_tools_path = get_env_with_default(
                "allowed-tools.json", "MEDUSA_ALLOWED_TOOLS_PATH"
            )
        if duplicate_tools is None:
            duplicate_tools = get_env_with_default(
                "keep", "MEDUSA_DUPLICATE_TOOLS"
            )
        if host is None:
            host = get_env_with_default("0.0.0.0", "HOST")
        if port is None:
            port = int(get_env_with_default("3000", "PORT"))
        if timeout is None:
            _timeout = get_env_with_default("", "MEDUSA_TIMEOUT")
            timeout = float(_timeout) if _timeout else None

        self._backend_url = backend_url
        self._username = username
        self._password = password
        self._publishable_key = publishable_key
        self._store_oas_path = store_oas_path
        self._admin_oas_path = admin_oas_path
        self._allowed_tools_path = allowed_tools_path
        self._duplicate_tools = duplicate_tools
        self._host = host
        self._port = port
        self._timeout = timeout
        self._headers = headers or {}

    @classmethod
    def with_configs(cls, *configs: Optional["Config"]) -> "Config":
        return cls().update(*configs)

    def update(self, *configs: Optional["Config"]) -> "Config":
        """
        使用给定的配置对象更新当前实例,优先使用靠后的值

        Args:
            configs: 要合并的配置对象

        Returns:
            合并后的配置对象
        """

        for config in configs:
            if config is None:
                continue

            for attr in filter(
                lambda x: x != "__weakref__",
                self.__slots__,
            ):
                value = getattr(config, attr)
                if value is not None:
                    if type(value) is dict:
                        getattr(self, attr).update(getattr(config, attr) or {})
                    else:
                        setattr(self, attr, value)

        return self

    def __repr__(self) -> str:
        from medusa_mcp.utils.helper import mask_password

        items = []
        for key in self.__slots__:
            if key == "__weakref__":
                continue
            value = getattr(self, key)
            if key == "_password":
                value = mask_password(value)
            items.append(f'"{key}": "{value}"')

        return "Config{%s}" % ", ".join(items)

    def get_backend_url(self) -> str:
        """获取 Medusa 后端地址"""
        if not self._backend_url:
            raise ValueError(
                "backend url is not set, please add MEDUSA_BACKEND_URL env"
                " variable or set it in code."
            )
        return self._backend_url.rstrip("/")

    def get_username(self) -> str:
        """获取管理员邮箱"""
        return self._username

    def get_password(self) -> str:
        """获取管理员密码"""
        return self._password

    def get_publishable_key(self) -> str:
        """获取可发布密钥"""
        return self._publishable_key or ""

    def get_store_oas_path(self) -> str:
        return self._store_oas_path

    def get_admin_oas_path(self) -> str:
        return self._admin_oas_path

    def get_allowed_tools_path(self) -> str:
        return self._allowed_tools_path

    def get_duplicate_tools(self) -> str:
        """获取重名工具策略"""
        return (self._duplicate_tools or "keep").lower()

    def get_host(self) -> str:
        return self._host or "0.0.0.0"

    def get_port(self) -> int:
        return self._port or 3000

    def get_timeout(self) -> Optional[float]:
        """获取请求超时时间, None 表示不限制"""
        return self._timeout

    def get_headers(self) -> Dict[str, str]:
        """获取额外请求头"""
        return self._headers or {}
