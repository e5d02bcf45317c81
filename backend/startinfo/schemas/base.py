from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """接口模型基类：Python 侧使用 snake_case，JSON 侧使用 camelCase"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True
    )


class StrictCamelModel(CamelModel):
    """请求载荷基类，拒绝未声明的字段"""
    model_config = ConfigDict(extra='forbid')
