"""
测试公共夹具

每个测试使用 tmp_path 下独立的 SQLite 文件数据库（而不是内存库），
这样并发测试中的多个线程可以各自持有独立连接。
"""

import os
from typing import Callable, Generator, List, Tuple

import pytest

# 在导入项目模块前设置测试环境
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["VERIFICATION_BASE_URL"] = "https://learn.example.com"

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from startinfo.crud.crud_course import course as crud_course, lesson as crud_lesson
from startinfo.crud.crud_user import user as crud_user
from startinfo.db.database import build_engine, get_db
from startinfo.db.init_db import init_db
from startinfo.main import app
from startinfo.models import Course, Lesson, User
from startinfo.schemas.course import CourseCreate, LessonCreate, UserCreate


@pytest.fixture(scope="function")
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}", timeout=30)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db(session_factory) -> Generator[Session, None, None]:
    """创建测试数据库会话"""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(session_factory) -> Generator[TestClient, None, None]:
    """创建测试客户端，请求使用测试数据库"""
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def user(db: Session) -> User:
    return crud_user.create(db, obj_in=UserCreate(name="Ada Lovelace", email="ada@example.com"))


@pytest.fixture
def make_course(db: Session) -> Callable[..., Tuple[Course, List[Lesson]]]:
    """创建带有 N 个课时的课程，课时 order 从 1 开始"""
    def _make(lesson_count: int = 2, title: str = "Introduction to Arduino", published: bool = True):
        course = crud_course.create(db, obj_in=CourseCreate(title=title, published=published))
        lessons = [
            crud_lesson.create(
                db,
                obj_in=LessonCreate(course_id=course.id, title=f"Lesson {order}", order=order, duration=30)
            )
            for order in range(1, lesson_count + 1)
        ]
        return course, lessons
    return _make
