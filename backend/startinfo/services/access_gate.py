"""
课时访问控制

规则：
- 课程中 order 最小的课时总是可以访问；
- 第 i 个课时（i > 0）只有在第 i-1 个课时已完成时才能访问；
- 课程全部完成后所有课时都可以访问，但只读（复习模式），不再接受任何进度修改。
"""
import logging
from typing import List
from sqlalchemy.orm import Session

from startinfo.core.exceptions import (
    AccessDeniedError,
    ConflictError,
    NotFoundError,
    require_positive_id,
)
from startinfo.schemas.course_progress import CourseProgress
from startinfo.services import course_aggregator

logger = logging.getLogger(__name__)


def _accessible_flags(course_progress: CourseProgress) -> List[bool]:
    if course_progress.completed:
        return [True] * course_progress.total_lessons
    lessons = course_progress.lessons
    return [index == 0 or lessons[index - 1].completed for index in range(len(lessons))]


def lesson_statuses(db: Session, user_id: int, course_id: int) -> CourseProgress:
    """返回课程进度，并为每个课时填充 accessible 标记"""
    require_positive_id(user_id, "user_id")
    course_progress = course_aggregator.aggregate(db, course_id, user_id)
    for status, accessible in zip(course_progress.lessons, _accessible_flags(course_progress)):
        status.accessible = accessible
    return course_progress


def _lesson_index(course_progress: CourseProgress, lesson_id: int) -> int:
    for index, status in enumerate(course_progress.lessons):
        if status.lesson_id == lesson_id:
            return index
    raise NotFoundError(f"Lesson {lesson_id} not found in course {course_progress.course_id}")


def can_access(db: Session, user_id: int, course_id: int, lesson_id: int) -> bool:
    """判断用户能否查看指定课时"""
    require_positive_id(lesson_id, "lesson_id")
    course_progress = lesson_statuses(db, user_id, course_id)
    index = _lesson_index(course_progress, lesson_id)
    return bool(course_progress.lessons[index].accessible)


def assert_can_mutate(db: Session, user_id: int, course_id: int, lesson_id: int) -> CourseProgress:
    """
    写入课时进度前的检查。

    Raises:
        AccessDeniedError: 课程未发布，或课时尚未解锁
        ConflictError: 课程已全部完成，课时进度已冻结
    """
    require_positive_id(user_id, "user_id")
    require_positive_id(lesson_id, "lesson_id")
    course = course_aggregator.load_course(db, course_id)
    if not course.published:
        raise AccessDeniedError(f"Course {course_id} is not published")

    course_progress = course_aggregator.aggregate_course(db, course, user_id)
    if course_progress.completed:
        logger.info(f"Rejected progress change on completed course {course_id} for user {user_id}")
        raise ConflictError("Course already completed; lessons are available for review only")

    index = _lesson_index(course_progress, lesson_id)
    if not _accessible_flags(course_progress)[index]:
        raise AccessDeniedError("Lesson is locked until the previous lesson is completed")
    return course_progress
