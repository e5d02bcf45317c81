from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from startinfo.core.config import settings


def build_engine(database_url: str, timeout: float = settings.DATABASE_TIMEOUT_SECONDS) -> Engine:
    """
    创建数据库引擎，并为存储操作设置超时上限。

    SQLite 下 timeout 即 busy timeout：并发写入时等待锁的最长秒数，
    check_same_thread=False 允许多线程（FastAPI 线程池）访问。
    """
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False, "timeout": timeout}
        )
    return create_engine(database_url, pool_timeout=timeout, pool_pre_ping=True)


# 创建数据库引擎
engine = build_engine(settings.DATABASE_URL)

# 创建一个Session工厂
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# FastAPI 依赖项，用于在每个请求中获取数据库会话
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
