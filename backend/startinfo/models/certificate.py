from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from datetime import datetime, UTC
from startinfo.db.base_class import Base


class Certificate(Base):
    """课程结业证书模型

    每个 (user_id, course_id) 至多一张证书，由唯一约束保证；签发后不再修改或删除。

    Attributes:
        id: 自增ID
        user_id: 关联到 users.id
        course_id: 关联到 courses.id
        certificate_number: 全局唯一的证书编号，用于公开验证
        user_name: 签发时的用户名（冗余，渲染时无需关联查询）
        course_name: 签发时的课程名称（冗余）
        issued_at: 签发时间
    """
    __tablename__ = "certificates"
    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_certificates_user_course"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    course_id = Column(Integer, ForeignKey("courses.id"), index=True, nullable=False)
    certificate_number = Column(String, unique=True, index=True, nullable=False)
    user_name = Column(String, nullable=False)
    course_name = Column(String, nullable=False)
    issued_at = Column(DateTime, nullable=False, default=lambda: datetime.now(UTC))
