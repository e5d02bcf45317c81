from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, UniqueConstraint
from datetime import datetime, UTC
from startinfo.db.base_class import Base


class LessonProgress(Base):
    """课时学习进度模型

    每个 (user_id, lesson_id) 至多一条记录，首次交互时惰性创建，正常运行中不删除。
    completed 只会从 False 变为 True；completed 为 True 时 completed_at 必有值且 attempts >= 1。

    Attributes:
        id: 自增ID
        user_id: 关联到 users.id
        lesson_id: 关联到 lessons.id
        completed: 是否已完成
        time_spent: 累计学习时长（秒），单调不减
        attempts: 尝试次数
        completed_at: 首次完成时间
        created_at: 记录创建时间
        updated_at: 最后更新时间
    """
    __tablename__ = "lesson_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "lesson_id", name="uq_lesson_progress_user_lesson"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    lesson_id = Column(Integer, ForeignKey("lessons.id"), index=True, nullable=False)
    completed = Column(Boolean, nullable=False, default=False)
    time_spent = Column(Integer, nullable=False, default=0)
    attempts = Column(Integer, nullable=False, default=0)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC))
    updated_at = Column(DateTime, default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC))
