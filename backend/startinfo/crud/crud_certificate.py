from typing import List, Optional
from sqlalchemy.orm import Session

from startinfo.crud.base import CRUDBase, SortDirection, storage_guard
from startinfo.models.certificate import Certificate
from startinfo.schemas.certificate import CertificateCreate


class CRUDCertificate(CRUDBase[Certificate, CertificateCreate]):
    def get_by_user_and_course(self, db: Session, *, user_id: int, course_id: int) -> Optional[Certificate]:
        with storage_guard(db, "get certificate"):
            return (
                db.query(Certificate)
                .filter(Certificate.user_id == user_id, Certificate.course_id == course_id)
                .first()
            )

    def get_by_number(self, db: Session, *, certificate_number: str) -> Optional[Certificate]:
        with storage_guard(db, "get certificate"):
            return (
                db.query(Certificate)
                .filter(Certificate.certificate_number == certificate_number)
                .first()
            )

    def get_multi_by_user(self, db: Session, *, user_id: int) -> List[Certificate]:
        """
        查询用户的全部证书，按签发时间倒序
        """
        return self.get_multi(
            db,
            filter_conditions={"user_id": user_id},
            sort_by=[("issued_at", SortDirection.DESC)]
        )


# 实例化并暴露给服务层使用
certificate = CRUDCertificate(Certificate)
