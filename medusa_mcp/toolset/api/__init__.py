from .dispatcher import Dispatcher
from .openapi import (
    ArgumentRouter,
    load_document,
    METHOD_PRECEDENCE,
    ParameterClassifier,
    RoutedRequest,
    SchemaCompiler,
    SchemaResolver,
    ToolCompiler,
)

__all__ = [
    "ArgumentRouter",
    "Dispatcher",
    "load_document",
    "METHOD_PRECEDENCE",
    "ParameterClassifier",
    "RoutedRequest",
    "SchemaCompiler",
    "SchemaResolver",
    "ToolCompiler",
]
