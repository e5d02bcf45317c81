from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from startinfo.config.dependency_injection import get_db
from startinfo.schemas.certificate import CertificateRead, CertificateRequest
from startinfo.schemas.course_progress import CourseProgress
from startinfo.schemas.response import StandardResponse
from startinfo.services import access_gate, certificate_issuer, course_aggregator

router = APIRouter()


@router.get("/{course_id}/progress", response_model=StandardResponse[CourseProgress])
def get_course_progress(
        course_id: int,
        user_id: int = Query(..., alias="userId", gt=0),
        db: Session = Depends(get_db)
):
    """
    获取课程整体进度（由课时进度实时汇总）
    """
    return StandardResponse(data=course_aggregator.aggregate(db, course_id, user_id))


@router.get("/{course_id}/lessons", response_model=StandardResponse[CourseProgress])
def get_course_outline(
        course_id: int,
        user_id: int = Query(..., alias="userId", gt=0),
        db: Session = Depends(get_db)
):
    """
    获取课程大纲，每个课时带有完成与解锁状态
    """
    return StandardResponse(data=access_gate.lesson_statuses(db, user_id, course_id))


@router.post("/{course_id}/certificate", response_model=StandardResponse[CertificateRead])
def generate_certificate(
        course_id: int,
        certificate_in: CertificateRequest,
        db: Session = Depends(get_db)
):
    """
    为已完成的课程签发证书。重复请求返回同一张证书（幂等）。
    """
    result = certificate_issuer.request_certificate(
        db, certificate_in.user_id, course_id, strict=certificate_in.strict
    )
    return StandardResponse(
        message=result.status.value,
        data=CertificateRead.model_validate(result.certificate)
    )
