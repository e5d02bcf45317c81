import re
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

# 证书编号前缀：字母数字，1-16 位，不能包含连字符（连字符是编号的分段符）
CERTIFICATE_PREFIX_PATTERN = r"[A-Za-z0-9]{1,16}"


class Settings(BaseSettings):
    """
    应用程序配置设置类，从环境变量或.env文件加载所有配置项。
    使用Pydantic进行数据验证和类型检查。

    包含服务器配置、数据库连接、证书验证链接、进度上报的取值范围等配置项。
    """
    # Server
    BACKEND_PORT: int = 5000

    # Model configuration tells Pydantic where to find the .env file.
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding='utf-8',
        extra='ignore',
        case_sensitive=True
    )

    PROJECT_NAME: str = "StartInfo Learning Platform"
    API_V1_STR: str = "/api/v1"

    BACKEND_CORS_ORIGINS: List[str] = ["*"]

    # Database
    DATABASE_URL: str = "sqlite:///./startinfo.db"
    # 存储操作的超时上限（SQLite 的 busy timeout / 连接池等待时间）
    DATABASE_TIMEOUT_SECONDS: float = 15.0
    # 启动时自动建表
    AUTO_CREATE_TABLES: bool = True

    # Certificates
    # 证书二维码中的验证链接前缀，即前端站点地址
    VERIFICATION_BASE_URL: str = "http://localhost:5173"
    CERTIFICATE_NUMBER_PREFIX: str = "CERT"
    CERTIFICATE_TIMEZONE: str = "UTC"

    # Progress payload bounds
    MAX_TIME_SPENT_SECONDS: int = 7 * 24 * 3600
    MAX_ATTEMPTS: int = 1000

    LOG_LEVEL: str = "INFO"

    @field_validator("CERTIFICATE_NUMBER_PREFIX")
    @classmethod
    def validate_certificate_number_prefix(cls, v: str) -> str:
        """证书编号前缀必须能被验证接口识别"""
        if not re.fullmatch(CERTIFICATE_PREFIX_PATTERN, v):
            raise ValueError("CERTIFICATE_NUMBER_PREFIX must be 1-16 letters or digits")
        return v


# Create a single, globally accessible instance of the settings.
settings = Settings()
