"""应用配置模块

使用 Pydantic Settings 管理应用配置，支持从 .env 文件加载环境变量
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """应用配置类"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # 应用配置
    APP_TITLE: str = "Hermes"
    APP_DESCRIPTION: str = "Order tracking API: orders, CSV import/export, backup/restore"
    APP_VERSION: str = "1.0.0"

    # 数据库配置 - 默认使用本地 SQLite，生产环境通过 DATABASE_URL 指定
    DATABASE_URL: str = "sqlite:///./hermes.db"
    ECHO_SQL: bool = False  # 是否打印SQL日志

    # 日志级别
    LOG_LEVEL: str = "INFO"

    # 上传文件大小上限（字节），5MB
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024

    # 搜索关键字最小长度
    SEARCH_MIN_LENGTH: int = 2


# 创建全局配置实例
settings = Settings()
