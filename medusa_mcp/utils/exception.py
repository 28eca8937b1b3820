"""异常定义"""

import json
from typing import List, Optional


class MedusaMCPError(Exception):
    """Medusa MCP 基础异常类"""

    def __init__(
        self,
        message: str,
        **kwargs,
    ):
        """初始化异常

        Args:
            message: 错误消息
            kwargs: 详细信息
        """
        msg = message or ""
        if kwargs:
            msg += " " + self.kwargs_str(**kwargs)

        super().__init__(msg)
        self.message = message
        self.details = kwargs

    @classmethod
    def kwargs_str(cls, **kwargs) -> str:
        """获取详细信息字符串

        Returns:
            str: 详细信息字符串
        """
        if not kwargs:
            return ""

        return json.dumps(
            kwargs,
            ensure_ascii=False,
            default=lambda x: x.__dict__,
        )

    def details_str(self) -> str:
        return self.kwargs_str(**self.details)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} {self.details_str()}"
        return self.message


class DocumentLoadError(MedusaMCPError):
    """接口文档加载失败"""


class ToolCompileError(MedusaMCPError):
    """工具编译失败, 启动阶段的致命错误"""


class MissingOperationIdError(ToolCompileError):
    """操作缺少 operationId, 无法注册工具"""

    def __init__(self, path: str, method: Optional[str] = None):
        self.path = path
        self.method = method
        super().__init__(
            f"No name found for path: {path}", path=path, method=method
        )


class SchemaCycleError(ToolCompileError):
    """schema 中存在循环引用"""

    def __init__(self, chain: List[str]):
        self.chain = list(chain)
        super().__init__(
            "Cyclic schema reference: " + " -> ".join(self.chain)
        )


class DuplicateToolError(MedusaMCPError):
    """合并后的工具集中存在重名工具"""

    def __init__(self, names: List[str]):
        self.names = list(names)
        super().__init__(
            f"Duplicate tool names: {', '.join(self.names)}",
        )


class ToolNotFoundError(MedusaMCPError):
    """工具不存在"""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Tool '{name}' not found.")


class AuthenticationError(MedusaMCPError):
    """凭证获取失败"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        **kwargs,
    ):
        self.status_code = status_code
        if status_code is not None:
            kwargs["status_code"] = status_code
        super().__init__(message, **kwargs)
