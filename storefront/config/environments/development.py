from ..settings import Settings


class DevelopmentSettings(Settings):
    """本地开发：调试日志，独立的数据库文件"""
    debug: bool = True
    log_level: str = "DEBUG"
    database_url: str = "duckdb://./data/storefront_dev.duckdb"
