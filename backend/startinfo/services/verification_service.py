import logging
from sqlalchemy.orm import Session

from startinfo.crud.crud_certificate import certificate as crud_certificate
from startinfo.schemas.certificate import VerificationResult, VerifiedCertificate
from startinfo.services.certificate_issuer import CERTIFICATE_NUMBER_PATTERN

logger = logging.getLogger(__name__)

# 格式错误和不存在返回同一条信息，避免被用来枚举证书编号
GENERIC_VERIFICATION_ERROR = "Certificate could not be verified"


def verify(db: Session, certificate_number: str) -> VerificationResult:
    """
    公开的证书验证，只读。

    有效时返回用户名、课程名、签发时间和证书编号；否则返回 valid=False 和通用错误信息。
    """
    if not certificate_number or not CERTIFICATE_NUMBER_PATTERN.match(certificate_number):
        return VerificationResult(valid=False, error=GENERIC_VERIFICATION_ERROR)

    certificate = crud_certificate.get_by_number(db, certificate_number=certificate_number)
    if certificate is None:
        logger.info(f"Verification miss for {certificate_number}")
        return VerificationResult(valid=False, error=GENERIC_VERIFICATION_ERROR)

    return VerificationResult(
        valid=True,
        certificate=VerifiedCertificate(
            user_name=certificate.user_name,
            course_name=certificate.course_name,
            issued_at=certificate.issued_at,
            certificate_number=certificate.certificate_number
        )
    )
