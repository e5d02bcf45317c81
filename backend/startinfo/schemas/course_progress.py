from typing import List, Optional

from startinfo.schemas.base import CamelModel


class LessonStatus(CamelModel):
    """课程大纲中单个课时的状态"""
    lesson_id: int
    title: str
    order: int
    completed: bool = False
    # 只有访问控制计算过之后才有值
    accessible: Optional[bool] = None


class CourseProgress(CamelModel):
    """课程整体进度（由课时进度实时汇总，不单独持久化）

    Attributes:
        course_id: 课程ID
        user_id: 用户ID
        completed_lessons: 已完成课时数
        total_lessons: 课时总数
        progress: 完成百分比（四舍五入到整数）
        completed: 是否全部完成；没有课时的课程视为未完成
        lessons: 按顺序排列的课时状态
    """
    course_id: int
    user_id: int
    completed_lessons: int = 0
    total_lessons: int = 0
    progress: int = 0
    completed: bool = False
    lessons: List[LessonStatus] = []
