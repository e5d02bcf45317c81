from typing import List
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session
from startinfo.config.dependency_injection import get_certificate_renderer, get_db
from startinfo.schemas.certificate import CertificateRead, VerificationResult
from startinfo.schemas.response import StandardResponse
from startinfo.services import certificate_issuer, verification_service
from startinfo.services.certificate_renderer import CertificateRenderer

router = APIRouter()


@router.get("", response_model=StandardResponse[List[CertificateRead]])
def list_my_certificates(
        user_id: int = Query(..., alias="userId", gt=0),
        db: Session = Depends(get_db)
):
    certificates = certificate_issuer.list_for_user(db, user_id)
    return StandardResponse(data=[CertificateRead.model_validate(c) for c in certificates])


@router.get("/verify/{certificate_number}", response_model=StandardResponse[VerificationResult])
def verify_certificate(certificate_number: str, db: Session = Depends(get_db)):
    """
    公开的证书验证接口，无需登录
    """
    return StandardResponse(data=verification_service.verify(db, certificate_number))


@router.get("/{certificate_id}/download")
def download_certificate(
        certificate_id: int,
        db: Session = Depends(get_db),
        renderer: CertificateRenderer = Depends(get_certificate_renderer)
):
    """
    下载证书 PDF
    """
    certificate = certificate_issuer.get_certificate(db, certificate_id)
    pdf_bytes = renderer.render(certificate)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f"attachment; filename=certificate-{certificate.certificate_number}.pdf"
        }
    )
