"""
课时进度的读写流程

完成课时：访问检查 -> 写入课时进度 -> 重新汇总课程进度 -> 课程完成则签发证书（幂等）。
"""
import logging
from typing import Any, Dict, Optional, Tuple, Union
from sqlalchemy.orm import Session

from startinfo.core.exceptions import ConflictError, NotFoundError, StorageError, require_positive_id
from startinfo.crud.crud_course import course as crud_course, lesson as crud_lesson
from startinfo.crud.crud_progress import progress as crud_progress
from startinfo.crud.crud_user import user as crud_user
from startinfo.models.course import Lesson
from startinfo.models.lesson_progress import LessonProgress
from startinfo.schemas.certificate import CertificateRead, IssueStatus, LessonCompletionResult
from startinfo.schemas.lesson_progress import LessonProgressRead, LessonProgressUpdate
from startinfo.services import access_gate, certificate_issuer, course_aggregator

logger = logging.getLogger(__name__)


def _load_lesson(db: Session, lesson_id: int) -> Lesson:
    require_positive_id(lesson_id, "lesson_id")
    lesson = crud_lesson.get(db, lesson_id)
    if lesson is None:
        raise NotFoundError(f"Lesson {lesson_id} not found")
    return lesson


def _require_user(db: Session, user_id: int) -> None:
    require_positive_id(user_id, "user_id")
    if crud_user.get(db, user_id) is None:
        raise NotFoundError(f"User {user_id} not found")


def get_lesson_progress(db: Session, user_id: int, lesson_id: int) -> LessonProgress:
    """查询课时进度，没有记录时返回零值默认进度"""
    lesson = _load_lesson(db, lesson_id)
    return crud_progress.get_or_default(db, user_id=user_id, lesson_id=lesson.id)


def get_lesson_access(db: Session, user_id: int, lesson_id: int) -> Tuple[Lesson, bool]:
    """返回课时及用户能否查看它"""
    lesson = _load_lesson(db, lesson_id)
    return lesson, access_gate.can_access(db, user_id, lesson.course_id, lesson.id)


def update_lesson_progress(
    db: Session,
    user_id: int,
    lesson_id: int,
    patch: Union[LessonProgressUpdate, Dict[str, Any]]
) -> LessonProgress:
    """
    更新课时进度（不触发证书签发）。课程已完成或课时未解锁时拒绝。
    """
    lesson = _load_lesson(db, lesson_id)
    _require_user(db, user_id)
    access_gate.assert_can_mutate(db, user_id, lesson.course_id, lesson.id)
    return crud_progress.upsert(db, user_id=user_id, lesson_id=lesson.id, patch=patch)


def _completion_replay(
    db: Session,
    user_id: int,
    lesson: Lesson,
    time_spent: Optional[int]
) -> Optional[LessonProgress]:
    """
    课程已完成后，判断本次请求是否只是重复提交了最后一个课时的完成（客户端重试，
    或与完成该课时的请求并发到达）。是则返回已存储的进度记录，否则返回 None。

    只有不会改变记录的请求算作重复提交：学习时长超过已存储值的请求仍然是一次修改。
    """
    lessons = crud_course.get_lessons(db, course_id=lesson.course_id)
    # 顺序解锁保证最后一个课时就是使课程完成的那个课时
    if not lessons or lessons[-1].id != lesson.id:
        return None
    record = crud_progress.get_by_user_and_lesson(db, user_id=user_id, lesson_id=lesson.id)
    if record is None or not record.completed:
        return None
    if time_spent is not None and time_spent > record.time_spent:
        return None
    return record


def _completion_result(db: Session, user_id: int, course_id: int, record: LessonProgress) -> LessonCompletionResult:
    progress_read = LessonProgressRead.model_validate(record)

    try:
        issue_result = certificate_issuer.issue_if_complete(db, user_id, course_id)
    except StorageError as e:
        logger.error(f"Certificate issuance deferred for user {user_id} course {course_id}: {e}")
        return LessonCompletionResult(
            progress=progress_read,
            course_progress=course_aggregator.aggregate(db, course_id, user_id),
            certificate=None,
            certificate_status=IssueStatus.PENDING
        )

    certificate = None
    if issue_result.certificate is not None:
        certificate = CertificateRead.model_validate(issue_result.certificate)
    return LessonCompletionResult(
        progress=progress_read,
        course_progress=issue_result.course_progress,
        certificate=certificate,
        certificate_status=issue_result.status
    )


def complete_lesson(
    db: Session,
    user_id: int,
    lesson_id: int,
    time_spent: Optional[int] = None
) -> LessonCompletionResult:
    """
    标记课时完成，并在课程全部完成时签发证书。

    课程已完成后重复提交最后一个课时的完成请求不会修改任何记录，直接返回已存储的进度
    和证书（ALREADY_ISSUED，或在上次签发未完成时补发）；其余针对已完成课程的请求仍抛出
    ConflictError。

    证书签发因存储故障失败时，已记录的课时完成状态保持不变，返回 certificate_status=PENDING，
    客户端重试本接口或证书接口即可（签发是幂等的）。
    """
    lesson = _load_lesson(db, lesson_id)
    _require_user(db, user_id)
    try:
        access_gate.assert_can_mutate(db, user_id, lesson.course_id, lesson.id)
    except ConflictError:
        record = _completion_replay(db, user_id, lesson, time_spent)
        if record is None:
            raise
        logger.info(f"Repeated completion of lesson {lesson.id} by user {user_id}, returning stored result")
        return _completion_result(db, user_id, lesson.course_id, record)

    record = crud_progress.upsert(
        db,
        user_id=user_id,
        lesson_id=lesson.id,
        patch=LessonProgressUpdate(completed=True, time_spent=time_spent)
    )
    return _completion_result(db, user_id, lesson.course_id, record)
