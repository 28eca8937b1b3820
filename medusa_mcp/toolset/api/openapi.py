"""OpenAPI 工具编译器 / OpenAPI Tool Compiler

将 OpenAPI 接口文档编译为可调用、带参数校验的工具。
Compiles an OpenAPI interface document into callable, schema-validated tools.
"""

from copy import deepcopy
import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple, Union

from pydantic import ValidationError
from pydash import get as pg

from medusa_mcp.credential.auth import Credential
from medusa_mcp.utils.exception import (
    DocumentLoadError,
    MissingOperationIdError,
    SchemaCycleError,
)
from medusa_mcp.utils.log import logger
from medusa_mcp.utils.model import BaseModel, Field

from ..model import (
    HTTPMethod,
    InterfaceDocument,
    Operation,
    Parameter,
    ParameterLocation,
    PathItem,
    SchemaNode,
    Surface,
    Tool,
    ValidatorKind,
    ValidatorNode,
)
from .dispatcher import Dispatcher

METHOD_PRECEDENCE: Tuple[HTTPMethod, ...] = (
    HTTPMethod.GET,
    HTTPMethod.POST,
    HTTPMethod.DELETE,
)
"""同一路径上多个方法时的选择顺序, 仅暴露第一个匹配的方法"""

SCHEMA_REF_PREFIX = "#/components/schemas/"


def load_document(
    source: Union[str, bytes, bytearray, Path, Dict[str, Any]],
) -> InterfaceDocument:
    """加载接口文档

    Args:
        source: 文档字典、JSON/YAML 字符串, 或 .json/.yaml/.yml 文件路径

    Raises:
        DocumentLoadError: 文档不存在、为空或无法解析
    """
    try:
        return InterfaceDocument.from_dict(_load_raw(source))
    except ValidationError as exc:
        raise DocumentLoadError(
            "Invalid OpenAPI document.", errors=exc.errors(include_url=False)
        ) from exc


def _load_raw(source: Any) -> Dict[str, Any]:
    if isinstance(source, dict):
        return source

    if isinstance(source, Path) or (
        isinstance(source, str)
        and source.rstrip().endswith((".json", ".yaml", ".yml"))
        and "\n" not in source
    ):
        file_path = Path(source)
        if not file_path.exists():
            raise DocumentLoadError(
                "OpenAPI document not found.", path=str(file_path)
            )
        source = file_path.read_text(encoding="utf-8")

    if isinstance(source, (bytes, bytearray)):
        source = source.decode("utf-8")

    if not source:
        raise DocumentLoadError("OpenAPI document content is required.")

    try:
        loaded = json.loads(source)
    except json.JSONDecodeError:
        import yaml

        try:
            loaded = yaml.safe_load(source)
        except yaml.YAMLError as exc:
            raise DocumentLoadError("Invalid OpenAPI document content.") from exc

    if not isinstance(loaded, dict):
        raise DocumentLoadError("OpenAPI document must be a mapping.")
    return loaded


class SchemaResolver:
    """在接口文档的 schema 表中解析 ``$ref``

    未能解析的引用返回 None, 从不抛出异常; 调用方将 None 视为未知结构。
    """

    def __init__(self, document: InterfaceDocument):
        self._document = document

    @staticmethod
    def ref_of(node: Optional[SchemaNode]) -> Optional[str]:
        if isinstance(node, dict) and isinstance(node.get("$ref"), str):
            return node["$ref"]
        return None

    def resolve(self, node: Optional[SchemaNode]) -> Optional[SchemaNode]:
        if node is None:
            return None

        ref = self.ref_of(node)
        if ref is None:
            return node

        name = ref[len(SCHEMA_REF_PREFIX) :] if ref.startswith(
            SCHEMA_REF_PREFIX
        ) else ref
        resolved = self._document.schemas.get(name)
        if not isinstance(resolved, dict):
            logger.debug("Unresolved schema reference %s", ref)
            return None
        return resolved


class SchemaCompiler:
    """将 SchemaNode 递归编译为 ValidatorNode

    规则:
    - 缺失或无法解析的节点 -> any
    - string -> string; number/integer -> number; boolean -> boolean
    - array -> 元素始终非可选; 缺少 items 时为 any 数组
    - object -> 不在 required 中的属性为可选; 无属性时为空对象 (不是 any)
    - 其他类型 -> any
    - 可选标记在结构编译完成后最后施加
    """

    def __init__(self, resolver: SchemaResolver):
        self._resolver = resolver
        self._expanding: List[str] = []

    def compile(
        self, node: Optional[SchemaNode], is_optional: bool = True
    ) -> ValidatorNode:
        if not isinstance(node, dict):
            return ValidatorNode(kind=ValidatorKind.ANY, optional=is_optional)

        ref = SchemaResolver.ref_of(node)
        if ref is not None:
            if ref in self._expanding:
                raise SchemaCycleError([*self._expanding, ref])
            resolved = self._resolver.resolve(node)
            if resolved is None:
                return ValidatorNode(
                    kind=ValidatorKind.ANY, optional=is_optional
                )
            self._expanding.append(ref)
            try:
                return self.compile(resolved, is_optional)
            finally:
                self._expanding.pop()

        validator = self._compile_shape(node)
        validator.description = node.get("description") or None
        validator.optional = is_optional
        return validator

    def _compile_shape(self, node: SchemaNode) -> ValidatorNode:
        schema_type = node.get("type")

        if schema_type == "string":
            return ValidatorNode(kind=ValidatorKind.STRING)
        if schema_type in ("number", "integer"):
            return ValidatorNode(kind=ValidatorKind.NUMBER)
        if schema_type == "boolean":
            return ValidatorNode(kind=ValidatorKind.BOOLEAN)

        if schema_type == "array":
            items = node.get("items")
            item_validator = self.compile(items, is_optional=False)
            return ValidatorNode(kind=ValidatorKind.ARRAY, items=item_validator)

        if schema_type == "object":
            required = node.get("required") or []
            properties = node.get("properties") or {}
            return ValidatorNode(
                kind=ValidatorKind.OBJECT,
                properties={
                    key: self.compile(value, is_optional=key not in required)
                    for key, value in properties.items()
                },
            )

        return ValidatorNode(kind=ValidatorKind.ANY)

    def compile_fields(
        self, properties: Optional[Dict[str, SchemaNode]]
    ) -> Dict[str, ValidatorNode]:
        """将顶层字段 (参数或请求体属性) 编译为可选的 ValidatorNode"""
        return {
            key: self.compile(value, is_optional=True)
            for key, value in (properties or {}).items()
        }


class ParameterClassifier:
    """按传输位置划分操作参数; header 等其他位置的参数不进入工具输入"""

    INPUT_LOCATIONS = (ParameterLocation.PATH.value, ParameterLocation.QUERY.value)

    @classmethod
    def input_parameters(cls, parameters: Iterable[Parameter]) -> List[Parameter]:
        return [p for p in parameters if p.location in cls.INPUT_LOCATIONS]

    @staticmethod
    def find(parameters: Iterable[Parameter], name: str) -> Optional[Parameter]:
        for param in parameters:
            if param.name == name:
                return param
        return None


class RoutedRequest(BaseModel):
    """路由后的请求各部分 / The routed parts of a request"""

    path: str
    query: Dict[str, Any] = Field(default_factory=dict)
    body: Dict[str, Any] = Field(default_factory=dict)


class ArgumentRouter:
    """在调用时将扁平参数拆分到路径、查询串与请求体

    1. 与 path/query 参数同名 -> 对应位置
    2. 否则为已声明的请求体字段 -> 请求体
    3. 其余参数丢弃 (不报错)
    """

    def __init__(
        self,
        path: str,
        parameters: List[Parameter],
        body_field_names: Iterable[str] = (),
    ):
        self.path = path
        self.parameters = list(parameters)
        self.body_field_names: Set[str] = set(body_field_names)

    def route(self, arguments: Optional[Dict[str, Any]]) -> RoutedRequest:
        path_params: Dict[str, Any] = {}
        query_params: Dict[str, Any] = {}
        body_params: Dict[str, Any] = {}
        dropped: List[str] = []

        for key, value in (arguments or {}).items():
            param = ParameterClassifier.find(self.parameters, key)
            location = param.location if param is not None else None
            if location == ParameterLocation.PATH.value:
                path_params[key] = value
            elif location == ParameterLocation.QUERY.value:
                query_params[key] = value
            elif key in self.body_field_names:
                body_params[key] = value
            else:
                dropped.append(key)

        if dropped:
            logger.debug(
                "Unused arguments for %s: %s", self.path, ", ".join(dropped)
            )

        return RoutedRequest(
            path=self.render_path(path_params),
            query=query_params,
            body=body_params,
        )

    def render_path(self, path_params: Dict[str, Any]) -> str:
        rendered = self.path
        for key, value in path_params.items():
            rendered = rendered.replace(f"{{{key}}}", _stringify(value), 1)
        return rendered


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class ToolCompiler:
    """将单个路径及其操作编译为 Tool

    同一套逻辑服务于 store 与 admin 两个分区, 差异由 Surface 描述;
    凭证在编译时捕获并传入每个工具的处理函数。
    """

    def __init__(
        self,
        document: InterfaceDocument,
        surface: Surface,
        credential: Credential,
        dispatcher: Optional[Dispatcher] = None,
    ):
        self.document = document
        self.surface = surface
        self.credential = credential
        self.dispatcher = dispatcher or Dispatcher()
        self.resolver = SchemaResolver(document)
        self.schema_compiler = SchemaCompiler(self.resolver)

    @staticmethod
    def select_operation(
        path_item: PathItem,
    ) -> Optional[Tuple[HTTPMethod, Operation]]:
        """按 METHOD_PRECEDENCE 选择要暴露的操作, 忽略其余方法"""
        for method in METHOD_PRECEDENCE:
            operation = path_item.operation(method)
            if operation is not None:
                return method, operation
        return None

    def compile_tool(self, path: str, path_item: PathItem) -> Optional[Tool]:
        selected = self.select_operation(path_item)
        if selected is None:
            logger.debug("No supported operation on %s; skipped", path)
            return None

        method, operation = selected
        ignored = [
            m.value
            for m in METHOD_PRECEDENCE
            if m != method and path_item.operation(m) is not None
        ]
        if ignored:
            logger.debug(
                "%s exposes %s only; ignored: %s",
                path,
                method.value,
                ", ".join(ignored),
            )

        if not operation.operation_id:
            raise MissingOperationIdError(path, method.value)

        parameters = ParameterClassifier.input_parameters(operation.parameters)

        body_schema: Optional[SchemaNode] = None
        if method == HTTPMethod.POST:
            body_schema = self.resolver.resolve(operation.json_body_schema())
        body_properties: Dict[str, SchemaNode] = (
            pg(body_schema, "properties") or {}
        )

        input_schema: Dict[str, ValidatorNode] = {}
        for param in parameters:
            validator = self.schema_compiler.compile(
                param.param_schema, is_optional=True
            )
            if validator.description is None and param.description:
                validator.description = param.description
            input_schema[param.name] = validator
        input_schema.update(self.schema_compiler.compile_fields(body_properties))

        return Tool(
            name=self.surface.tool_name(operation.operation_id),
            description=self.surface.describe(operation.description),
            input_schema=input_schema,
            handler=self._make_handler(
                path, method, parameters, list(body_properties)
            ),
            method=method,
            path=path,
            surface=self.surface.name,
        )

    def _make_handler(
        self,
        path: str,
        method: HTTPMethod,
        parameters: List[Parameter],
        body_field_names: List[str],
    ):
        router = ArgumentRouter(path, deepcopy(parameters), body_field_names)
        dispatcher = self.dispatcher
        credential = self.credential

        async def handler(arguments: Dict[str, Any]) -> Any:
            routed = router.route(arguments)
            return await dispatcher.dispatch(
                method,
                routed.path,
                credential,
                query=routed.query,
                body=None if method == HTTPMethod.GET else routed.body,
            )

        return handler

    def compile_document(self) -> List[Tool]:
        """按文档顺序编译全部路径"""
        tools: List[Tool] = []
        for path, path_item in self.document.paths.items():
            tool = self.compile_tool(path, path_item)
            if tool is not None:
                tools.append(tool)
        return tools
