import logging
from datetime import datetime, UTC
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from startinfo.core.exceptions import StorageError, ValidationError, require_positive_id
from startinfo.crud.base import CRUDBase, storage_guard
from startinfo.models.lesson_progress import LessonProgress
from startinfo.schemas.lesson_progress import LessonProgressUpdate

logger = logging.getLogger(__name__)

# 首次写入与并发插入冲突后，以更新方式重试的次数
UPSERT_ATTEMPTS = 2


class CRUDProgress(CRUDBase[LessonProgress, LessonProgressUpdate]):
    """课时进度存储：(user_id, lesson_id) -> LessonProgress"""

    def get_by_user_and_lesson(self, db: Session, *, user_id: int, lesson_id: int) -> Optional[LessonProgress]:
        with storage_guard(db, "get lesson_progress"):
            return (
                db.query(LessonProgress)
                .filter(LessonProgress.user_id == user_id, LessonProgress.lesson_id == lesson_id)
                .first()
            )

    def get_or_default(self, db: Session, *, user_id: int, lesson_id: int) -> LessonProgress:
        """
        查询课时进度，不存在时返回未持久化的零值记录，而不是报错。
        """
        require_positive_id(user_id, "user_id")
        require_positive_id(lesson_id, "lesson_id")
        record = self.get_by_user_and_lesson(db, user_id=user_id, lesson_id=lesson_id)
        if record is None:
            record = LessonProgress(
                user_id=user_id,
                lesson_id=lesson_id,
                completed=False,
                time_spent=0,
                attempts=0,
                completed_at=None
            )
        return record

    def get_for_lessons(self, db: Session, *, user_id: int, lesson_ids: Iterable[int]) -> List[LessonProgress]:
        """批量查询用户在一组课时上的进度记录（没有记录的课时不会出现在结果中）"""
        lesson_ids = list(lesson_ids)
        if not lesson_ids:
            return []
        with storage_guard(db, "list lesson_progress"):
            return (
                db.query(LessonProgress)
                .filter(LessonProgress.user_id == user_id, LessonProgress.lesson_id.in_(lesson_ids))
                .all()
            )

    def upsert(
        self,
        db: Session,
        *,
        user_id: int,
        lesson_id: int,
        patch: Union[LessonProgressUpdate, Dict[str, Any]]
    ) -> LessonProgress:
        """
        合并进度补丁并持久化。

        合并规则：
        - completed 只能从 False 变为 True，之后任何补丁都不会把它改回 False；
        - time_spent 用调用方给出的累计值替换，但存储值不会减小；
        - 首次完成的那次调用 attempts 恰好加 1，其余调用中显式给出的 attempts 直接覆盖；
        - completed_at 在首次完成时写入，之后不再改变。
        """
        require_positive_id(user_id, "user_id")
        require_positive_id(lesson_id, "lesson_id")
        if isinstance(patch, dict):
            try:
                patch = LessonProgressUpdate.model_validate(patch)
            except PydanticValidationError as e:
                raise ValidationError(f"Invalid progress update: {e.errors()[0]['msg']}") from e

        for _ in range(UPSERT_ATTEMPTS):
            with storage_guard(db, "upsert lesson_progress"):
                record = (
                    db.query(LessonProgress)
                    .filter(LessonProgress.user_id == user_id, LessonProgress.lesson_id == lesson_id)
                    .with_for_update()
                    .first()
                )
                if record is None:
                    record = LessonProgress(
                        user_id=user_id,
                        lesson_id=lesson_id,
                        completed=False,
                        time_spent=0,
                        attempts=0
                    )
                    db.add(record)

                if self._merge(record, patch):
                    logger.info(f"Lesson {lesson_id} completed by user {user_id}")

                try:
                    db.commit()
                except IntegrityError:
                    # 另一个请求抢先插入了同一 (user_id, lesson_id)，回滚后按更新重试
                    db.rollback()
                    logger.info(f"Concurrent first write on lesson {lesson_id} for user {user_id}, retrying")
                    continue
                db.refresh(record)
                return record

        raise StorageError("Could not persist lesson progress, please retry")

    @staticmethod
    def _merge(record: LessonProgress, patch: LessonProgressUpdate) -> bool:
        """把补丁合并进记录，返回本次调用是否首次完成了该课时"""
        newly_completed = patch.completed is True and not record.completed

        if patch.time_spent is not None and patch.time_spent > (record.time_spent or 0):
            record.time_spent = patch.time_spent

        if newly_completed:
            record.completed = True
            record.completed_at = datetime.now(UTC)
            record.attempts = (record.attempts or 0) + 1
        elif patch.attempts is not None:
            # 已完成的记录 attempts 至少为 1
            record.attempts = max(patch.attempts, 1) if record.completed else patch.attempts

        return newly_completed


# 实例化并暴露给服务层使用
progress = CRUDProgress(LessonProgress)
