from fastapi import APIRouter
from startinfo.api.endpoints import certificates, courses, health, lessons

api_router = APIRouter()
api_router.include_router(health.router, tags=["health"])
api_router.include_router(lessons.router, prefix="/lessons", tags=["lessons"])
api_router.include_router(courses.router, prefix="/courses", tags=["courses"])
api_router.include_router(certificates.router, prefix="/certificates", tags=["certificates"])
