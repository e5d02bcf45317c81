"""
学习进度/证书子系统的异常体系

每种异常对应一个 HTTP 状态码，由 main.py 中注册的异常处理器统一转换为
StandardResponse 格式的错误响应。
"""


class LearningPlatformError(Exception):
    """所有领域异常的基类"""
    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__name__


class ValidationError(LearningPlatformError):
    """非法的ID或请求载荷，客户端不应自动重试"""
    status_code = 422


class NotFoundError(LearningPlatformError):
    """课程、课时、用户或证书不存在"""
    status_code = 404


class AccessDeniedError(LearningPlatformError):
    """课时尚未解锁（前一课时未完成）"""
    status_code = 403


class ConflictError(LearningPlatformError):
    """与已有状态冲突：课程已完成后的修改，或显式要求非幂等创建时证书已存在"""
    status_code = 409


class IncompleteError(LearningPlatformError):
    """课程尚未全部完成就请求证书"""
    status_code = 400


class StorageError(LearningPlatformError):
    """存储暂时不可用，可以退避后重试"""
    status_code = 503


def require_positive_id(value, name: str) -> int:
    """校验ID为正整数"""
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(f"{name} must be a positive integer")
    return value
