"""工具集组装 / ToolSet Assembly

编译各个 API 分区的接口文档, 按顺序合并, 并应用白名单过滤。
Compiles each surface's interface document, concatenates the results in
order and applies the allow-list filter.
"""

from collections import Counter
from typing import List, Optional, Sequence, Union

from medusa_mcp.credential.auth import Credential
from medusa_mcp.utils.exception import DuplicateToolError
from medusa_mcp.utils.log import logger

from .api.dispatcher import Dispatcher
from .api.openapi import ToolCompiler
from .model import AllowList, DuplicateToolPolicy, InterfaceDocument, Surface, Tool

DISABLED_PREVIEW_COUNT = 5


def duplicate_names(tools: Sequence[Tool]) -> List[str]:
    """返回出现不止一次的工具名, 按首次出现顺序"""
    counts = Counter(tool.name for tool in tools)
    seen = set()
    result = []
    for tool in tools:
        if counts[tool.name] > 1 and tool.name not in seen:
            seen.add(tool.name)
            result.append(tool.name)
    return result


class ToolSetAssembler:
    """工具集组装器

    Args:
        duplicate_policy: 合并时的重名策略, 默认保留全部并告警
        dispatcher: 所有工具共享的请求分发器
    """

    def __init__(
        self,
        duplicate_policy: Union[
            DuplicateToolPolicy, str
        ] = DuplicateToolPolicy.KEEP,
        dispatcher: Optional[Dispatcher] = None,
    ):
        self.duplicate_policy = DuplicateToolPolicy(duplicate_policy)
        self.dispatcher = dispatcher or Dispatcher()

    def compile_document(
        self,
        document: InterfaceDocument,
        surface: Surface,
        credential: Credential,
    ) -> List[Tool]:
        tools = ToolCompiler(
            document, surface, credential, dispatcher=self.dispatcher
        ).compile_document()
        logger.debug("Compiled %d %s tools", len(tools), surface.name)
        return tools

    def merge(self, *toolsets: Sequence[Tool]) -> List[Tool]:
        """按顺序拼接多个工具集, 重名按 duplicate_policy 处理"""
        merged: List[Tool] = [tool for tools in toolsets for tool in tools]
        duplicates = duplicate_names(merged)
        if not duplicates:
            return merged

        if self.duplicate_policy == DuplicateToolPolicy.ERROR:
            raise DuplicateToolError(duplicates)

        if self.duplicate_policy == DuplicateToolPolicy.FIRST:
            logger.warning(
                "Duplicate tool names, keeping first occurrence: %s",
                ", ".join(duplicates),
            )
            seen = set()
            result = []
            for tool in merged:
                if tool.name in seen:
                    continue
                seen.add(tool.name)
                result.append(tool)
            return result

        logger.warning(
            "Duplicate tool names across surfaces: %s", ", ".join(duplicates)
        )
        return merged

    def filter_allowed(
        self, tools: Sequence[Tool], allow_list: Optional[AllowList]
    ) -> List[Tool]:
        """按白名单过滤, 保持原有相对顺序"""
        total = len(tools)
        if allow_list is None or not allow_list.enabled:
            logger.info("All tools enabled: %d tools available", total)
            return list(tools)

        allowed = set(allow_list.allowed_tools)
        kept = [tool for tool in tools if tool.name in allowed]
        logger.info(
            "Tool filtering enabled: %d/%d tools allowed", len(kept), total
        )

        disabled = [tool.name for tool in tools if tool.name not in allowed]
        if disabled:
            more = len(disabled) - DISABLED_PREVIEW_COUNT
            logger.info(
                "Disabled tools (%d): %s%s",
                len(disabled),
                ", ".join(disabled[:DISABLED_PREVIEW_COUNT]),
                f" ... and {more} more" if more > 0 else "",
            )
        return kept

    def assemble(
        self,
        surfaces: Sequence[tuple],
        allow_list: Optional[AllowList] = None,
    ) -> List[Tool]:
        """编译、合并并过滤

        Args:
            surfaces: (InterfaceDocument, Surface, Credential) 三元组序列
            allow_list: 白名单
        """
        compiled = [
            self.compile_document(document, surface, credential)
            for document, surface, credential in surfaces
        ]
        return self.filter_allowed(self.merge(*compiled), allow_list)
