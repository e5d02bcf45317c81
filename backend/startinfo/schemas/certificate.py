from enum import Enum
from pydantic import Field
from typing import Optional
from datetime import datetime

from startinfo.schemas.base import CamelModel, StrictCamelModel
from startinfo.schemas.course_progress import CourseProgress
from startinfo.schemas.lesson_progress import LessonProgressRead


class IssueStatus(str, Enum):
    ISSUED = "issued"
    ALREADY_ISSUED = "already_issued"
    NOT_COMPLETE = "not_complete"
    # 课时完成已记录，但证书签发因存储故障未完成，需要重试
    PENDING = "pending"


class CertificateRead(CamelModel):
    """证书响应模型"""
    id: int
    user_id: int
    course_id: int
    certificate_number: str
    user_name: str
    course_name: str
    issued_at: datetime


class CertificateRequest(StrictCamelModel):
    """POST /courses/{course_id}/certificate 请求体

    strict 为 True 时要求必须新建证书，已存在则返回 409。
    """
    user_id: int = Field(..., gt=0)
    strict: bool = False


class VerifiedCertificate(CamelModel):
    """公开验证接口返回的证书信息（不含用户ID等内部字段）"""
    user_name: str
    course_name: str
    issued_at: datetime
    certificate_number: str


class VerificationResult(CamelModel):
    valid: bool
    certificate: Optional[VerifiedCertificate] = None
    error: Optional[str] = None


class LessonCompletionResult(CamelModel):
    """完成课时接口的响应

    Attributes:
        progress: 更新后的课时进度
        course_progress: 重新汇总后的课程进度
        certificate: 课程完成时的证书（新签发或已存在）
        certificate_status: 证书签发结果
    """
    progress: LessonProgressRead
    course_progress: CourseProgress
    certificate: Optional[CertificateRead] = None
    certificate_status: IssueStatus


class CertificateCreate(CamelModel):
    """写入证书表的数据"""
    user_id: int
    course_id: int
    certificate_number: str
    user_name: str
    course_name: str
    issued_at: datetime
