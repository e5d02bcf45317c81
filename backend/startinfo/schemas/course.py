from pydantic import BaseModel, Field
from typing import Optional


class UserCreate(BaseModel):
    """创建用户（用户数据由外部认证系统同步）"""
    name: str = Field(..., min_length=1)
    email: Optional[str] = None


class CourseCreate(BaseModel):
    """创建课程（课程数据由外部课程管理系统同步）"""
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    published: bool = True


class LessonCreate(BaseModel):
    """创建课时，order 在课程内唯一"""
    course_id: int = Field(..., gt=0)
    title: str = Field(..., min_length=1)
    order: int
    duration: int = Field(0, ge=0)
