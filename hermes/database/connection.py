"""数据库连接模块

统一管理数据库引擎、会话工厂和模型基类的创建。
引擎与会话工厂由调用方显式创建并传递，应用把它们保存在 app.state 上。
"""

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

# 创建模型基类
Base = declarative_base()


def make_engine(database_url: str, echo: bool = False) -> Engine:
    """根据连接串创建数据库引擎

    内存 SQLite 需要共享同一连接，否则每个会话看到的是空库
    """
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url == "sqlite://":
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, echo=echo, **kwargs)
    return create_engine(database_url, pool_pre_ping=True, echo=echo)


def make_session_factory(engine: Engine) -> sessionmaker:
    """创建会话工厂"""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine) -> None:
    """创建所有表（若不存在）"""
    # 导入模型以注册到 Base.metadata
    from .. import models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db(request: Request):
    """获取数据库会话的依赖函数"""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
