"""
课程进度汇总测试
"""

import pytest
from sqlalchemy.orm import Session

from startinfo.core.exceptions import NotFoundError, ValidationError
from startinfo.crud.crud_progress import progress as progress_crud
from startinfo.models.lesson_progress import LessonProgress
from startinfo.services import course_aggregator


@pytest.mark.parametrize("completed, total, expected", [
    (0, 0, 0),
    (0, 3, 0),
    (1, 3, 33),
    (2, 3, 67),
    (3, 3, 100),
    (1, 8, 13),
    (1, 2, 50),
])
def test_percent_complete_rounds_half_up(completed, total, expected):
    assert course_aggregator.percent_complete(completed, total) == expected


def test_two_of_three_lessons(db: Session, user, make_course):
    course, lessons = make_course(3)
    progress_crud.upsert(db, user_id=user.id, lesson_id=lessons[0].id, patch={"completed": True})
    progress_crud.upsert(db, user_id=user.id, lesson_id=lessons[1].id, patch={"completed": True})
    progress_crud.upsert(db, user_id=user.id, lesson_id=lessons[2].id, patch={"time_spent": 30})

    result = course_aggregator.aggregate(db, course.id, user.id)

    assert result.completed_lessons == 2
    assert result.total_lessons == 3
    assert result.progress == 67
    assert result.completed is False
    assert [s.completed for s in result.lessons] == [True, True, False]


def test_lessons_without_progress_rows_count_as_incomplete(db: Session, user, make_course):
    course, lessons = make_course(4)
    progress_crud.upsert(db, user_id=user.id, lesson_id=lessons[0].id, patch={"completed": True})

    result = course_aggregator.aggregate(db, course.id, user.id)

    assert result.completed_lessons == 1
    assert result.total_lessons == 4
    assert result.progress == 25


def test_zero_lesson_course_is_not_complete(db: Session, user, make_course):
    course, _ = make_course(0)

    result = course_aggregator.aggregate(db, course.id, user.id)

    assert result.total_lessons == 0
    assert result.progress == 0
    assert result.completed is False


def test_all_lessons_completed(db: Session, user, make_course):
    course, lessons = make_course(2)
    for lesson in lessons:
        progress_crud.upsert(db, user_id=user.id, lesson_id=lesson.id, patch={"completed": True})

    result = course_aggregator.aggregate(db, course.id, user.id)

    assert result.progress == 100
    assert result.completed is True


def test_lessons_are_ordered_by_order_field(db: Session, user, make_course):
    course, lessons = make_course(3)

    result = course_aggregator.aggregate(db, course.id, user.id)

    assert [s.order for s in result.lessons] == [1, 2, 3]
    assert [s.lesson_id for s in result.lessons] == [l.id for l in lessons]


def test_progress_of_other_users_is_ignored(db: Session, user, make_course):
    from startinfo.crud.crud_user import user as user_crud
    from startinfo.schemas.course import UserCreate

    other = user_crud.create(db, obj_in=UserCreate(name="Grace Hopper"))
    course, lessons = make_course(2)
    for lesson in lessons:
        progress_crud.upsert(db, user_id=other.id, lesson_id=lesson.id, patch={"completed": True})

    assert course_aggregator.aggregate(db, course.id, user.id).completed_lessons == 0
    assert course_aggregator.aggregate(db, course.id, other.id).completed is True


def test_aggregate_is_read_only(db: Session, user, make_course):
    course, _ = make_course(3)

    course_aggregator.aggregate(db, course.id, user.id)

    assert db.query(LessonProgress).count() == 0


def test_unknown_course_raises_not_found(db: Session, user):
    with pytest.raises(NotFoundError):
        course_aggregator.aggregate(db, 9999, user.id)


def test_invalid_ids_raise_validation_error(db: Session, user):
    with pytest.raises(ValidationError):
        course_aggregator.aggregate(db, 0, user.id)
    with pytest.raises(ValidationError):
        course_aggregator.aggregate(db, 1, -1)
