"""ToolSet 模型定义 / ToolSet Model Definitions

定义接口文档、校验节点、工具及白名单相关的数据模型和枚举。
Defines data models and enumerations for interface documents, validator
nodes, tools and the tool allow-list.
"""

from enum import Enum
import json
from pathlib import Path
import re
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    List,
    Optional,
    Tuple,
    Type,
    Union,
)

from pydantic import ConfigDict, create_model, PrivateAttr
from pydantic import BaseModel as PydanticBaseModel
from pydantic import StrictBool, StrictFloat, StrictInt, StrictStr
from pydash import get as pg

from medusa_mcp.utils.log import logger
from medusa_mcp.utils.model import BaseModel, Field

SchemaNode = Dict[str, Any]
"""接口文档中的原始 schema 片段 / A raw schema fragment of the document"""

ToolHandler = Callable[[Dict[str, Any]], Awaitable[Any]]


class HTTPMethod(str, Enum):
    """支持的 HTTP 方法 / Supported HTTP methods"""

    GET = "get"
    POST = "post"
    DELETE = "delete"


class ParameterLocation(str, Enum):
    """参数位置 / Parameter location"""

    PATH = "path"
    QUERY = "query"
    HEADER = "header"


class DuplicateToolPolicy(str, Enum):
    """合并工具集时的重名策略 / Policy for duplicate tool names on merge"""

    KEEP = "keep"
    """保留全部并告警 / Keep every entry, warn"""
    FIRST = "first"
    """仅保留首个并告警 / Keep the first entry, warn"""
    ERROR = "error"
    """抛出异常 / Raise DuplicateToolError"""


class ValidatorKind(str, Enum):
    """校验节点类型 / Validator node kind"""

    ANY = "any"
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"


class ValidatorNode(BaseModel):
    """编译后的参数校验节点

    对应接口文档中的一个 SchemaNode。``optional`` 表示该值可以缺省;
    ``items`` 仅用于数组, ``properties`` 仅用于对象 (保持文档顺序)。
    """

    kind: ValidatorKind = ValidatorKind.ANY
    optional: bool = False
    description: Optional[str] = None
    items: Optional["ValidatorNode"] = None
    properties: Optional[Dict[str, "ValidatorNode"]] = None

    def to_json_schema(self) -> Dict[str, Any]:
        """转换为标准 JSON Schema 格式"""
        result: Dict[str, Any] = {}

        if self.kind == ValidatorKind.ARRAY:
            result["type"] = "array"
            result["items"] = (
                self.items.to_json_schema() if self.items is not None else {}
            )
        elif self.kind == ValidatorKind.OBJECT:
            result.update(object_json_schema(self.properties or {}))
        elif self.kind != ValidatorKind.ANY:
            result["type"] = self.kind.value

        if self.description:
            result["description"] = self.description

        return result

    def to_pydantic_type(self, name: str = "Value") -> Any:
        """转换为用于运行时校验的 Python/pydantic 类型"""
        if self.kind == ValidatorKind.STRING:
            value_type: Any = StrictStr
        elif self.kind == ValidatorKind.NUMBER:
            value_type = Union[StrictInt, StrictFloat]
        elif self.kind == ValidatorKind.BOOLEAN:
            value_type = StrictBool
        elif self.kind == ValidatorKind.ARRAY:
            item_type = (
                self.items.to_pydantic_type(f"{name}Item")
                if self.items is not None
                else Any
            )
            value_type = List[item_type]  # type: ignore
        elif self.kind == ValidatorKind.OBJECT:
            value_type = build_args_model(name, self.properties or {})
        else:
            return Any

        # 可选表示可以缺省, 不表示可以为 null; 缺省值由 build_args_model 提供
        return value_type


def object_json_schema(properties: Dict[str, ValidatorNode]) -> Dict[str, Any]:
    """由字段映射生成 object 类型的 JSON Schema"""
    schema: Dict[str, Any] = {
        "type": "object",
        "properties": {
            key: value.to_json_schema() for key, value in properties.items()
        },
    }
    required = [
        key
        for key, value in properties.items()
        if not value.optional and value.kind != ValidatorKind.ANY
    ]
    if required:
        schema["required"] = required
    return schema


def build_args_model(
    name: str, properties: Dict[str, ValidatorNode]
) -> Type[PydanticBaseModel]:
    """根据字段映射构建 pydantic 模型

    字段名可能不是合法的 Python 标识符 (例如 ``$and``), 因此模型内部使用
    占位字段名, 原始名称作为 alias; 校验与导出都使用 alias。
    """
    fields: Dict[str, Tuple[Any, Any]] = {}
    for index, (key, node) in enumerate(properties.items()):
        field_type = node.to_pydantic_type(f"{name}{_model_name(key)}")
        if node.optional or node.kind == ValidatorKind.ANY:
            default = Field(default=None, alias=key)
        else:
            default = Field(alias=key)
        fields[f"field_{index}"] = (field_type, default)

    model_name = _model_name(name) or "Args"
    return create_model(  # type: ignore
        model_name,
        __config__=ConfigDict(extra="ignore", populate_by_name=False),
        **fields,
    )


def _model_name(name: str) -> str:
    return re.sub(r"[^0-9a-zA-Z]", "", name.title())


class Parameter(BaseModel):
    """操作参数 / Operation parameter"""

    name: str
    location: str = Field(alias="in", default=ParameterLocation.QUERY.value)
    param_schema: Optional[SchemaNode] = Field(alias="schema", default=None)
    description: Optional[str] = None
    required: bool = False


class Operation(BaseModel):
    """接口操作 / Interface operation"""

    operation_id: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    parameters: List[Parameter] = Field(default_factory=list)
    request_body: Optional[Dict[str, Any]] = None

    def json_body_schema(self) -> Optional[SchemaNode]:
        """获取 application/json 请求体 schema, 其他内容类型不识别"""
        return pg(self.request_body, ["content", "application/json", "schema"])


class PathItem(BaseModel):
    """路径项, 每个 HTTP 方法至多一个操作"""

    get: Optional[Operation] = None
    post: Optional[Operation] = None
    delete: Optional[Operation] = None

    def operation(self, method: HTTPMethod) -> Optional[Operation]:
        return getattr(self, method.value)


class Components(BaseModel):
    schemas: Dict[str, SchemaNode] = Field(default_factory=dict)


class InterfaceDocument(BaseModel):
    """解析后的接口文档 (OpenAPI 子集)

    ``paths`` 保持文档中的插入顺序; ``components.schemas`` 为引用表。
    """

    paths: Dict[str, PathItem] = Field(default_factory=dict)
    components: Components = Field(default_factory=Components)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InterfaceDocument":
        paths = {
            path: item
            for path, item in (data.get("paths") or {}).items()
            if isinstance(item, dict)
        }
        return cls.model_validate({
            "paths": paths,
            "components": {
                "schemas": pg(data, "components.schemas") or {},
            },
        })

    @property
    def schemas(self) -> Dict[str, SchemaNode]:
        return self.components.schemas


class Surface(BaseModel):
    """API 分区描述 (store / admin)

    同一套编译器通过该描述区分工具命名与描述模板。
    """

    name: str
    tool_name_prefix: str = ""
    description_template: str = "{description}"

    def tool_name(self, operation_id: str) -> str:
        return f"{self.tool_name_prefix}{operation_id}"

    def describe(self, description: Optional[str]) -> str:
        return self.description_template.format(description=description or "")


STORE_SURFACE = Surface(name="store")
ADMIN_SURFACE = Surface(
    name="admin",
    tool_name_prefix="Admin",
    description_template="This tool helps store administrators. {description}",
)


class Tool(BaseModel):
    """可调用工具 / A callable, schema-validated tool"""

    name: str
    description: str = ""
    input_schema: Dict[str, ValidatorNode] = Field(default_factory=dict)
    handler: ToolHandler = Field(exclude=True)
    method: Optional[HTTPMethod] = None
    path: Optional[str] = None
    surface: Optional[str] = None

    _args_model: Optional[Type[PydanticBaseModel]] = PrivateAttr(default=None)

    def input_json_schema(self) -> Dict[str, Any]:
        """工具输入的 JSON Schema, 用于 MCP 注册"""
        return object_json_schema(self.input_schema)

    def args_model(self) -> Type[PydanticBaseModel]:
        if self._args_model is None:
            self._args_model = build_args_model(
                f"{self.name}Args", self.input_schema
            )
        return self._args_model

    def validate_arguments(
        self, arguments: Optional[Dict[str, Any]]
    ) -> Dict[str, Any]:
        """校验调用参数, 仅返回调用方提供且已声明的字段

        Raises:
            pydantic.ValidationError: 参数类型不符
        """
        parsed = self.args_model().model_validate(arguments or {})
        return parsed.model_dump(by_alias=True, exclude_unset=True)

    async def invoke(self, arguments: Optional[Dict[str, Any]] = None) -> Any:
        return await self.handler(self.validate_arguments(arguments))


class AllowList(BaseModel):
    """工具白名单 / Tool allow-list"""

    allow_all_tools: bool = True
    allowed_tools: List[str] = Field(default_factory=list)

    @property
    def enabled(self) -> bool:
        return not self.allow_all_tools and len(self.allowed_tools) > 0

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "AllowList":
        """从 JSON 文件加载白名单, 文件不存在时允许全部工具"""
        file_path = Path(path)
        if not file_path.exists():
            logger.debug(
                "Allow-list file %s not found; all tools allowed", file_path
            )
            return cls()
        return cls.model_validate(
            json.loads(file_path.read_text(encoding="utf-8"))
        )
