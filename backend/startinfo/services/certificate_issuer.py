"""
证书签发

每个 (user_id, course_id) 至多签发一张证书。检查与创建的原子性由证书表上
(user_id, course_id) 的唯一约束保证：两个并发请求同时完成最后一个课时时，
只有一个插入成功，另一个捕获 IntegrityError 后返回已存在的证书。

签发是幂等的：证书写入失败、超时或客户端盲目重试时，再次调用 issue_if_complete
总是正确的。
"""
import logging
import re
import secrets
import string
import time
from dataclasses import dataclass
from datetime import datetime, UTC
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from startinfo.core.config import CERTIFICATE_PREFIX_PATTERN, settings
from startinfo.core.exceptions import (
    ConflictError,
    IncompleteError,
    NotFoundError,
    StorageError,
    require_positive_id,
)
from startinfo.crud.crud_certificate import certificate as crud_certificate
from startinfo.crud.crud_course import course as crud_course
from startinfo.crud.crud_user import user as crud_user
from startinfo.models.certificate import Certificate
from startinfo.schemas.certificate import CertificateCreate, IssueStatus
from startinfo.schemas.course_progress import CourseProgress
from startinfo.services import course_aggregator

logger = logging.getLogger(__name__)

NUMBER_SUFFIX_ALPHABET = string.digits + string.ascii_lowercase
NUMBER_SUFFIX_LENGTH = 9
# 证书编号碰撞（概率可忽略）时的最大重试次数
MAX_NUMBER_ATTEMPTS = 3

# 形如 CERT-1718000000000-k3j9x0a2b
CERTIFICATE_NUMBER_PATTERN = re.compile(
    r"^%s-\d{1,16}-[0-9a-z]{%d}$" % (CERTIFICATE_PREFIX_PATTERN, NUMBER_SUFFIX_LENGTH)
)


@dataclass
class IssueResult:
    status: IssueStatus
    course_progress: CourseProgress
    certificate: Optional[Certificate] = None


def generate_certificate_number() -> str:
    """毫秒时间戳加 9 位随机 base36 后缀"""
    millis = time.time_ns() // 1_000_000
    suffix = "".join(secrets.choice(NUMBER_SUFFIX_ALPHABET) for _ in range(NUMBER_SUFFIX_LENGTH))
    return f"{settings.CERTIFICATE_NUMBER_PREFIX}-{millis}-{suffix}"


def _already_issued(existing: Certificate, course_progress: CourseProgress, idempotent: bool) -> IssueResult:
    if not idempotent:
        raise ConflictError(f"Certificate {existing.certificate_number} already issued for this course")
    return IssueResult(IssueStatus.ALREADY_ISSUED, course_progress, existing)


def issue_if_complete(db: Session, user_id: int, course_id: int, idempotent: bool = True) -> IssueResult:
    """
    课程全部完成时签发证书。

    Args:
        db: 数据库会话
        user_id: 用户ID
        course_id: 课程ID
        idempotent: 为 False 时表示调用方要求必须新建证书，已存在则抛出 ConflictError

    Returns:
        IssueResult: NOT_COMPLETE（无副作用）、ALREADY_ISSUED（返回已有证书）或 ISSUED

    Raises:
        NotFoundError: 课程或用户不存在
        StorageError: 存储故障，可以直接重试
    """
    require_positive_id(user_id, "user_id")
    course_progress = course_aggregator.aggregate(db, course_id, user_id)
    if not course_progress.completed:
        return IssueResult(IssueStatus.NOT_COMPLETE, course_progress)

    existing = crud_certificate.get_by_user_and_course(db, user_id=user_id, course_id=course_id)
    if existing is not None:
        return _already_issued(existing, course_progress, idempotent)

    user = crud_user.get(db, user_id)
    if user is None:
        raise NotFoundError(f"User {user_id} not found")
    course = crud_course.get(db, course_id)

    for _ in range(MAX_NUMBER_ATTEMPTS):
        certificate_in = CertificateCreate(
            user_id=user_id,
            course_id=course_id,
            certificate_number=generate_certificate_number(),
            user_name=user.name,
            course_name=course.title,
            issued_at=datetime.now(UTC)
        )
        try:
            issued = crud_certificate.create(db, obj_in=certificate_in)
        except IntegrityError:
            existing = crud_certificate.get_by_user_and_course(db, user_id=user_id, course_id=course_id)
            if existing is not None:
                logger.info(f"Concurrent issuance for user {user_id} course {course_id} resolved to {existing.certificate_number}")
                return _already_issued(existing, course_progress, idempotent)
            logger.warning(f"Certificate number collision on {certificate_in.certificate_number}, regenerating")
            continue

        logger.info(f"Issued certificate {issued.certificate_number} to user {user_id} for course {course_id}")
        return IssueResult(IssueStatus.ISSUED, course_progress, issued)

    raise StorageError("Could not allocate a unique certificate number, please retry")


def request_certificate(db: Session, user_id: int, course_id: int, strict: bool = False) -> IssueResult:
    """
    证书接口使用：与 issue_if_complete 相同，但课程未完成时抛出 IncompleteError。
    """
    result = issue_if_complete(db, user_id, course_id, idempotent=not strict)
    if result.status == IssueStatus.NOT_COMPLETE:
        progress = result.course_progress
        raise IncompleteError(
            f"Course not completed: {progress.completed_lessons} of {progress.total_lessons} lessons done"
        )
    return result


def get_certificate(db: Session, certificate_id: int) -> Certificate:
    require_positive_id(certificate_id, "certificate_id")
    certificate = crud_certificate.get(db, certificate_id)
    if certificate is None:
        raise NotFoundError(f"Certificate {certificate_id} not found")
    return certificate


def list_for_user(db: Session, user_id: int) -> List[Certificate]:
    """用户的全部证书，最新签发的在前"""
    require_positive_id(user_id, "user_id")
    return crud_certificate.get_multi_by_user(db, user_id=user_id)
