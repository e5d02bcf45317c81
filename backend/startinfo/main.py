import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from startinfo.api.api import api_router
from startinfo.core.config import settings
from startinfo.core.exceptions import LearningPlatformError
from startinfo.db.init_db import init_db
from startinfo.schemas.response import StandardResponse

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    应用启动时按配置创建数据表
    """
    if settings.AUTO_CREATE_TABLES:
        logger.info("创建数据库表")
        init_db()
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan
)

# Set all CORS enabled origins
if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(LearningPlatformError)
async def learning_platform_error_handler(request: Request, exc: LearningPlatformError):
    """领域异常统一转换为 StandardResponse 格式"""
    if exc.status_code >= 500:
        logger.warning(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=StandardResponse(code=exc.status_code, message=exc.message, data=None).model_dump()
    )


app.include_router(api_router, prefix=settings.API_V1_STR)


if __name__ == '__main__':
    uvicorn.run(
        'startinfo.main:app',
        host='0.0.0.0',
        port=settings.BACKEND_PORT,
        reload=True
    )
