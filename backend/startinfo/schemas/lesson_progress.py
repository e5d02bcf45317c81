from pydantic import Field
from typing import Optional
from datetime import datetime

from startinfo.core.config import settings
from startinfo.schemas.base import CamelModel, StrictCamelModel


class LessonProgressRead(CamelModel):
    """课时学习进度响应模型

    Attributes:
        user_id: 用户ID
        lesson_id: 课时ID
        completed: 是否已完成
        time_spent: 累计学习时长（秒）
        attempts: 尝试次数
        completed_at: 首次完成时间，未完成时为 None
    """
    user_id: int
    lesson_id: int
    completed: bool = False
    time_spent: int = 0
    attempts: int = 0
    completed_at: Optional[datetime] = None


class LessonProgressUpdate(StrictCamelModel):
    """课时进度补丁

    所有字段可选，只合并显式给出的字段。time_spent 是调用方计算好的累计值，
    不是增量。
    """
    completed: Optional[bool] = None
    time_spent: Optional[int] = Field(None, ge=0, le=settings.MAX_TIME_SPENT_SECONDS)
    attempts: Optional[int] = Field(None, ge=0, le=settings.MAX_ATTEMPTS)


class LessonProgressUpdateRequest(LessonProgressUpdate):
    """POST /lessons/{lesson_id}/progress 请求体"""
    user_id: int = Field(..., gt=0)


class LessonCompleteRequest(StrictCamelModel):
    """POST /lessons/{lesson_id}/complete 请求体"""
    user_id: int = Field(..., gt=0)
    time_spent: Optional[int] = Field(None, ge=0, le=settings.MAX_TIME_SPENT_SECONDS)


class LessonAccessResponse(CamelModel):
    """课时访问判定结果"""
    lesson_id: int
    course_id: int
    accessible: bool
