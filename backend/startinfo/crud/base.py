import logging
from contextlib import contextmanager
from typing import Any, Dict, Generic, Iterator, List, Optional, Type, TypeVar, Union, Tuple
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy import asc, desc

# 导入SQLAlchemy模型基类
from startinfo.db.base_class import Base
from startinfo.core.exceptions import StorageError

# 定义泛型类型变量
ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)

# 定义排序方向枚举
from enum import Enum

logger = logging.getLogger(__name__)


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@contextmanager
def storage_guard(db: Session, action: str) -> Iterator[None]:
    """
    把数据库故障（连接失败、锁等待超时等）统一转换为可重试的 StorageError。

    IntegrityError 原样抛出，由调用方根据唯一约束处理并发冲突。
    """
    try:
        yield
    except IntegrityError:
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Storage failure during {action}: {e}")
        raise StorageError(f"Storage unavailable during {action}, please retry") from e


class CRUDBase(Generic[ModelType, CreateSchemaType]):
    def __init__(self, model: Type[ModelType]):
        """
        具有默认创建、读取操作的CRUD对象。

        学习进度与证书记录在正常运行中不会被删除，因此这里不提供删除操作。

        **参数**

        * `model`: SQLAlchemy模型类
        """
        self.model = model

    def get(self, db: Session, obj_id: Any) -> Optional[ModelType]:
        """
        通过ID获取单个记录。

        Args:
            db: 数据库会话
            obj_id: 记录ID

        Returns:
            Optional[ModelType]: 找到的记录，如果不存在则返回None
        """
        # 检查obj_id是否为None，避免在filter中产生无效的布尔值
        if obj_id is None:
            return None
        with storage_guard(db, f"get {self.model.__tablename__}"):
            return db.query(self.model).filter(self.model.id == obj_id).first()  # type: ignore

    def get_multi(
        self,
        db: Session,
        *,
        skip: int = 0,
        limit: int = 100,
        filter_conditions: Optional[Dict[str, Any]] = None,
        sort_by: Optional[Union[str, List[Tuple[str, SortDirection]]]] = None
    ) -> List[ModelType]:
        """
        获取多个记录（支持分页、筛选和排序）。

        Args:
            db: 数据库会话
            skip: 跳过的记录数，默认为0
            limit: 返回的记录数限制，默认为100
            filter_conditions: 筛选条件字典，例如 {"user_id": 1}
            sort_by: 排序字段，可以是单个字段名字符串或字段-方向元组列表

        Returns:
            List[ModelType]: 记录列表
        """
        query = db.query(self.model)

        # 应用筛选条件
        if filter_conditions:
            for field, value in filter_conditions.items():
                if hasattr(self.model, field):
                    # 简单相等筛选
                    query = query.filter(getattr(self.model, field) == value)

        # 应用排序
        if sort_by:
            if isinstance(sort_by, str):
                # 单字段排序，默认升序
                query = query.order_by(asc(getattr(self.model, sort_by)))
            elif isinstance(sort_by, list):
                # 多字段排序
                for field, direction in sort_by:
                    if hasattr(self.model, field):
                        column = getattr(self.model, field)
                        if direction == SortDirection.DESC:
                            query = query.order_by(desc(column))
                        else:
                            query = query.order_by(asc(column))

        # 应用分页
        with storage_guard(db, f"list {self.model.__tablename__}"):
            return query.offset(skip).limit(limit).all()

    def create(self, db: Session, *, obj_in: Union[CreateSchemaType, Dict[str, Any]]) -> ModelType:
        """
        创建一个新的记录。

        违反唯一约束时回滚会话并抛出 IntegrityError，由调用方决定如何处理。

        Args:
            db: 数据库会话
            obj_in: 创建记录的数据对象，可以是CreateSchemaType或字典

        Returns:
            ModelType: 创建的记录
        """
        if isinstance(obj_in, dict):
            obj_in_data = obj_in
        else:
            obj_in_data = obj_in.model_dump()
        db_obj = self.model(**obj_in_data)  # SQLAlchemy model
        with storage_guard(db, f"create {self.model.__tablename__}"):
            try:
                db.add(db_obj)
                db.commit()
            except IntegrityError:
                db.rollback()
                raise
            db.refresh(db_obj)
        return db_obj
