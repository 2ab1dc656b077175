import os
from decimal import Decimal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # 数据库配置
    database_url: str = "duckdb://./data/storefront.duckdb"

    # JWT配置（令牌由托管认证服务签发，这里只做校验）
    jwt_secret_key: str = "your-secret-key"
    jwt_algorithm: str = "HS256"

    # API配置
    api_title: str = "Storefront API"
    api_version: str = "1.0.0"
    api_prefix: str = "/api/v1"

    # 计价配置
    delivery_fee: Decimal = Decimal("2.99")
    tax_rate: Decimal = Decimal("0.08")
    points_per_unit: int = 100  # 100积分抵扣1元

    # 开发模式
    debug: bool = False
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = False


def load_settings() -> Settings:
    """APP_ENV=development 时使用开发环境默认值，其余情况使用基础配置"""
    if os.getenv("APP_ENV", "").lower() == "development":
        from .environments.development import DevelopmentSettings
        return DevelopmentSettings()
    return Settings()


# 全局设置实例
settings = load_settings()
