"""ToolSet 模块 / ToolSet Module"""

from .model import (
    ADMIN_SURFACE,
    AllowList,
    DuplicateToolPolicy,
    HTTPMethod,
    InterfaceDocument,
    Operation,
    Parameter,
    ParameterLocation,
    PathItem,
    STORE_SURFACE,
    Surface,
    Tool,
    ValidatorKind,
    ValidatorNode,
)
from .toolset import duplicate_names, ToolSetAssembler

__all__ = [
    "ADMIN_SURFACE",
    "AllowList",
    "DuplicateToolPolicy",
    "HTTPMethod",
    "InterfaceDocument",
    "Operation",
    "Parameter",
    "ParameterLocation",
    "PathItem",
    "STORE_SURFACE",
    "Surface",
    "Tool",
    "ToolSetAssembler",
    "ValidatorKind",
    "ValidatorNode",
    "duplicate_names",
]
