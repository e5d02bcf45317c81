from typing import List
from sqlalchemy.orm import Session

from startinfo.crud.base import CRUDBase, storage_guard
from startinfo.models.course import Course, Lesson
from startinfo.schemas.course import CourseCreate, LessonCreate


class CRUDCourse(CRUDBase[Course, CourseCreate]):
    def get_lessons(self, db: Session, *, course_id: int) -> List[Lesson]:
        """
        查询课程的全部课时，按 order 升序排列
        """
        with storage_guard(db, "list lessons"):
            return (
                db.query(Lesson)
                .filter(Lesson.course_id == course_id)
                .order_by(Lesson.order.asc())
                .all()
            )


class CRUDLesson(CRUDBase[Lesson, LessonCreate]):
    pass


# 实例化并暴露给服务层使用
course = CRUDCourse(Course)
lesson = CRUDLesson(Lesson)
