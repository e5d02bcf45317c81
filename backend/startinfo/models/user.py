from sqlalchemy import Column, Integer, String, DateTime
from datetime import datetime, UTC
from startinfo.db.base_class import Base


class User(Base):
    """用户模型

    用户由外部认证系统维护，进度子系统只读取 id 与 name。

    Attributes:
        id: 用户ID
        name: 显示名称，签发证书时冗余写入证书
        email: 邮箱
        created_at: 记录创建时间
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC))
