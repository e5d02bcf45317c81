from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from startinfo.config.dependency_injection import get_db
from startinfo.schemas.certificate import LessonCompletionResult
from startinfo.schemas.lesson_progress import (
    LessonAccessResponse,
    LessonCompleteRequest,
    LessonProgressRead,
    LessonProgressUpdate,
    LessonProgressUpdateRequest,
)
from startinfo.schemas.response import StandardResponse
from startinfo.services import progress_service

router = APIRouter()


@router.get("/{lesson_id}/progress", response_model=StandardResponse[LessonProgressRead])
def get_lesson_progress(
        lesson_id: int,
        user_id: int = Query(..., alias="userId", gt=0),
        db: Session = Depends(get_db)
):
    """
    获取课时进度，没有记录时返回默认进度（未完成、时长0、尝试0次）
    """
    record = progress_service.get_lesson_progress(db, user_id, lesson_id)
    return StandardResponse(data=LessonProgressRead.model_validate(record))


@router.post("/{lesson_id}/progress", response_model=StandardResponse[LessonProgressRead])
def update_lesson_progress(
        lesson_id: int,
        progress_in: LessonProgressUpdateRequest,
        db: Session = Depends(get_db)
):
    """
    更新课时进度。已完成的课时不会被改回未完成；课程全部完成后拒绝修改。
    """
    patch = LessonProgressUpdate.model_validate(progress_in.model_dump(exclude={"user_id"}))
    record = progress_service.update_lesson_progress(db, progress_in.user_id, lesson_id, patch)
    return StandardResponse(data=LessonProgressRead.model_validate(record))


@router.post("/{lesson_id}/complete", response_model=StandardResponse[LessonCompletionResult])
def complete_lesson(
        lesson_id: int,
        complete_in: LessonCompleteRequest,
        db: Session = Depends(get_db)
):
    """
    完成课时，并在课程全部完成时签发证书
    """
    result = progress_service.complete_lesson(db, complete_in.user_id, lesson_id, complete_in.time_spent)
    return StandardResponse(data=result)


@router.get("/{lesson_id}/access", response_model=StandardResponse[LessonAccessResponse])
def get_lesson_access(
        lesson_id: int,
        user_id: int = Query(..., alias="userId", gt=0),
        db: Session = Depends(get_db)
):
    lesson, accessible = progress_service.get_lesson_access(db, user_id, lesson_id)
    return StandardResponse(data=LessonAccessResponse(
        lesson_id=lesson.id,
        course_id=lesson.course_id,
        accessible=accessible
    ))
