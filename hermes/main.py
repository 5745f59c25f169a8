"""FastAPI主应用入口

实现订单跟踪 RESTful API：订单增删改查、CSV 导入导出、JSON 备份恢复
- 数据库引擎与会话工厂由 create_app 显式创建并保存在 app.state 上
- 服务层异常统一在这里转换为 HTTP 响应
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .api.v1 import orders_router
from .config.settings import settings
from .database.connection import get_db, init_db, make_engine, make_session_factory
from .logging import setup_logging
from .services.exceptions import (
    DuplicateOrderError,
    FormatError,
    NotFoundError,
    ServiceError,
    StoreError,
    ValidationError,
)

logger = structlog.get_logger(__name__)

# 服务异常 -> HTTP 状态码（按顺序匹配，子类在前）
_ERROR_STATUS = (
    (NotFoundError, 404),
    (DuplicateOrderError, 409),
    (ValidationError, 400),
    (FormatError, 400),
    (StoreError, 500),
)


def _status_for(exc: ServiceError) -> int:
    for error_type, status_code in _ERROR_STATUS:
        if isinstance(exc, error_type):
            return status_code
    return 500


async def service_error_handler(request: Request, exc: ServiceError):
    status_code = _status_for(exc)
    if status_code >= 500:
        logger.error("Request failed", path=request.url.path, error=str(exc))
    else:
        logger.info("Request rejected", path=request.url.path, status=status_code, error=str(exc))
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def create_app(database_url: Optional[str] = None) -> FastAPI:
    """创建应用实例；database_url 为空时使用配置中的 DATABASE_URL"""
    setup_logging()
    engine = make_engine(database_url or settings.DATABASE_URL, echo=settings.ECHO_SQL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_db(engine)
        logger.info("Starting Hermes API", database=engine.url.render_as_string(hide_password=True))
        yield
        engine.dispose()
        logger.info("Database connections disposed")

    app = FastAPI(
        title=settings.APP_TITLE,
        description=settings.APP_DESCRIPTION,
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)

    app.add_exception_handler(ServiceError, service_error_handler)

    # 挂载API路由
    app.include_router(orders_router, prefix="/api/v1")

    # 健康检查端点
    @app.get("/health/db")
    def health_check(db: Session = Depends(get_db)):
        """检查数据库连接状态"""
        try:
            db.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            logger.error("Database health check failed", error=str(exc))
            raise HTTPException(status_code=503, detail="Database connection failed") from exc
        return {"status": "healthy", "database": "reachable"}

    # 根路径 - 返回服务状态
    @app.get("/")
    def read_root():
        """返回服务运行状态"""
        return {"service": settings.APP_TITLE, "version": settings.APP_VERSION, "docs": "/docs"}

    return app


app = create_app()
