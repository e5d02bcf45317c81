"""
证书 PDF 渲染

生成单页横版证书：用户名、课程名、证书编号、签发日期，以及指向公开验证页的二维码。
"""
import io
import logging
from datetime import datetime
from urllib.parse import quote

import pytz
import qrcode
from PIL import Image, ImageDraw, ImageFont

from startinfo.core.config import settings

logger = logging.getLogger(__name__)

# A4 横版，150 DPI
PAGE_WIDTH, PAGE_HEIGHT = 1754, 1240
PAGE_DPI = 150.0

PRIMARY_COLOR = (24, 82, 171)
MUTED_COLOR = (115, 115, 115)
BORDER_COLOR = (241, 196, 15)

FONT_DIR = "/usr/share/fonts/truetype/dejavu"


def _load_font(name: str, size: int):
    try:
        return ImageFont.truetype(f"{FONT_DIR}/{name}", size)
    except OSError:
        # 系统没有 DejaVu 字体时退回 Pillow 内置字体
        return ImageFont.load_default()


class CertificateRenderer:
    """
    证书渲染器

    Args:
        base_url: 验证页所在站点地址，验证链接为 {base_url}/verify/{certificate_number}
        timezone: 证书上签发日期使用的时区
    """

    def __init__(self, base_url: str = settings.VERIFICATION_BASE_URL,
                 timezone: str = settings.CERTIFICATE_TIMEZONE):
        self.base_url = base_url.rstrip("/")
        self.timezone = pytz.timezone(timezone)

    def verification_url(self, certificate_number: str) -> str:
        return f"{self.base_url}/verify/{quote(certificate_number, safe='')}"

    def format_issue_date(self, issued_at: datetime) -> str:
        # 数据库中的时间不带时区，按 UTC 处理
        if issued_at.tzinfo is None:
            issued_at = pytz.utc.localize(issued_at)
        local = issued_at.astimezone(self.timezone)
        return f"{local:%B} {local.day}, {local.year}"

    @staticmethod
    def build_qr_image(payload: str, box_size: int = 8) -> Image.Image:
        qr = qrcode.QRCode(
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=box_size,
            border=2
        )
        qr.add_data(payload)
        qr.make(fit=True)
        return qr.make_image(fill_color="black", back_color="white").get_image().convert("RGB")

    def render(self, certificate) -> bytes:
        """
        渲染证书为 PDF 字节串。

        certificate 只需要 user_name、course_name、certificate_number、issued_at 四个属性。
        """
        img = Image.new("RGB", (PAGE_WIDTH, PAGE_HEIGHT), color="white")
        draw = ImageDraw.Draw(img)
        draw.rectangle([40, 40, PAGE_WIDTH - 40, PAGE_HEIGHT - 40], outline=PRIMARY_COLOR, width=8)
        draw.rectangle([60, 60, PAGE_WIDTH - 60, PAGE_HEIGHT - 60], outline=BORDER_COLOR, width=3)

        title_font = _load_font("DejaVuSerif-Bold.ttf", 72)
        name_font = _load_font("DejaVuSerif-Bold.ttf", 64)
        course_font = _load_font("DejaVuSerif-Bold.ttf", 48)
        text_font = _load_font("DejaVuSans.ttf", 34)
        small_font = _load_font("DejaVuSans.ttf", 24)

        def centered(text, font, y, fill):
            bbox = draw.textbbox((0, 0), text, font=font)
            draw.text(((PAGE_WIDTH - (bbox[2] - bbox[0])) / 2, y), text, fill=fill, font=font)

        centered("CERTIFICATE OF COMPLETION", title_font, 150, PRIMARY_COLOR)
        centered("This is to certify that", text_font, 300, MUTED_COLOR)
        centered(certificate.user_name, name_font, 380, PRIMARY_COLOR)
        centered("has successfully completed the course", text_font, 500, MUTED_COLOR)
        centered(certificate.course_name, course_font, 580, PRIMARY_COLOR)

        url = self.verification_url(certificate.certificate_number)
        qr_img = self.build_qr_image(url)
        img.paste(qr_img, (PAGE_WIDTH - 100 - qr_img.width, PAGE_HEIGHT - 100 - qr_img.height))

        draw.text((100, PAGE_HEIGHT - 200), f"Certificate Number: {certificate.certificate_number}",
                  fill=MUTED_COLOR, font=small_font)
        draw.text((100, PAGE_HEIGHT - 160), f"Issue Date: {self.format_issue_date(certificate.issued_at)}",
                  fill=MUTED_COLOR, font=small_font)
        draw.text((100, PAGE_HEIGHT - 120), f"Verify at: {url}", fill=MUTED_COLOR, font=small_font)

        buf = io.BytesIO()
        img.save(buf, format="PDF", resolution=PAGE_DPI)
        logger.debug(f"Rendered certificate {certificate.certificate_number} ({buf.tell()} bytes)")
        return buf.getvalue()
