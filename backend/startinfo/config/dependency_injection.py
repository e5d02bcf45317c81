from startinfo.core.config import settings
from startinfo.db.database import get_db
from startinfo.services.certificate_renderer import CertificateRenderer


_certificate_renderer_instance = None

def get_certificate_renderer() -> CertificateRenderer:
    """
    获取证书渲染器单例实例
    """
    global _certificate_renderer_instance
    if _certificate_renderer_instance is None:
        _certificate_renderer_instance = CertificateRenderer(
            base_url=settings.VERIFICATION_BASE_URL,
            timezone=settings.CERTIFICATE_TIMEZONE
        )
    return _certificate_renderer_instance
