from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime, UTC
from startinfo.db.base_class import Base


class Course(Base):
    """课程模型

    课程内容由外部的课程管理系统维护，这里只保存进度计算需要的字段。

    Attributes:
        id: 课程ID
        title: 课程名称，签发证书时冗余写入证书
        description: 课程简介
        published: 是否已发布，未发布课程不接受进度写入
        created_at: 记录创建时间
    """
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    published = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC))

    lessons = relationship("Lesson", back_populates="course", order_by="Lesson.order")


class Lesson(Base):
    """课时模型

    同一课程内的课时按 order 严格排序，(course_id, order) 唯一。

    Attributes:
        id: 课时ID
        course_id: 关联到 courses.id
        title: 课时标题
        order: 课时在课程中的顺序
        duration: 预计学习时长（分钟）
    """
    __tablename__ = "lessons"
    __table_args__ = (
        UniqueConstraint("course_id", "order", name="uq_lessons_course_order"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    course_id = Column(Integer, ForeignKey("courses.id"), index=True, nullable=False)
    title = Column(String, nullable=False)
    order = Column(Integer, nullable=False)
    duration = Column(Integer, nullable=False, default=0)

    course = relationship("Course", back_populates="lessons")
