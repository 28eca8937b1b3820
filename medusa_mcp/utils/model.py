"""基础模型 / Base Model

所有数据模型的 pydantic 基类, 字段名使用 snake_case, 序列化与解析同时支持
camelCase 别名 (例如 OpenAPI 文档中的 operationId)。
Pydantic base class for all data models. Fields are snake_case and accept
their camelCase alias (e.g. ``operationId`` in OpenAPI documents).
"""

from pydantic import BaseModel as PydanticBaseModel
from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

__all__ = ["BaseModel", "Field"]


class BaseModel(PydanticBaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )
