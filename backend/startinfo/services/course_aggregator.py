import logging
from sqlalchemy.orm import Session

from startinfo.core.exceptions import NotFoundError, require_positive_id
from startinfo.crud.crud_course import course as crud_course
from startinfo.crud.crud_progress import progress as crud_progress
from startinfo.models.course import Course
from startinfo.schemas.course_progress import CourseProgress, LessonStatus

logger = logging.getLogger(__name__)


def percent_complete(completed_lessons: int, total_lessons: int) -> int:
    """
    完成百分比，四舍五入（0.5 向上）到整数。没有课时时为 0。
    """
    if total_lessons <= 0:
        return 0
    # 整数运算的 round-half-up
    return (200 * completed_lessons + total_lessons) // (2 * total_lessons)


def load_course(db: Session, course_id: int) -> Course:
    require_positive_id(course_id, "course_id")
    course = crud_course.get(db, course_id)
    if course is None:
        raise NotFoundError(f"Course {course_id} not found")
    return course


def aggregate_course(db: Session, course: Course, user_id: int) -> CourseProgress:
    """
    对已加载的课程汇总用户进度。只读，结果完全由调用时的存储状态决定。
    """
    lessons = crud_course.get_lessons(db, course_id=course.id)
    records = crud_progress.get_for_lessons(
        db, user_id=user_id, lesson_ids=[lesson.id for lesson in lessons]
    )
    # 没有进度记录的课时视为未完成
    completed_ids = {record.lesson_id for record in records if record.completed}

    statuses = [
        LessonStatus(
            lesson_id=lesson.id,
            title=lesson.title,
            order=lesson.order,
            completed=lesson.id in completed_ids
        )
        for lesson in lessons
    ]
    completed_lessons = sum(1 for status in statuses if status.completed)
    total_lessons = len(statuses)

    return CourseProgress(
        course_id=course.id,
        user_id=user_id,
        completed_lessons=completed_lessons,
        total_lessons=total_lessons,
        progress=percent_complete(completed_lessons, total_lessons),
        completed=total_lessons > 0 and completed_lessons == total_lessons,
        lessons=statuses
    )


def aggregate(db: Session, course_id: int, user_id: int) -> CourseProgress:
    """
    计算用户在课程上的整体进度。

    Args:
        db: 数据库会话
        course_id: 课程ID
        user_id: 用户ID

    Returns:
        CourseProgress: 已完成课时数、课时总数、完成百分比和是否全部完成

    Raises:
        ValidationError: ID 不是正整数
        NotFoundError: 课程不存在
    """
    require_positive_id(user_id, "user_id")
    course = load_course(db, course_id)
    return aggregate_course(db, course, user_id)
