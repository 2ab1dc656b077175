"""
数据库连接和管理模块
DuckDB 作为外部文档存储的落地实现，提供连接、表结构和事务管理
"""

import duckdb
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional
from contextlib import contextmanager
import threading

from .exceptions import BaseApplicationError, ConcurrencyError, DatabaseError
from ..config.settings import settings

# 完整的表结构定义
SCHEMA_SQL = r"""
CREATE TABLE IF NOT EXISTS users (
  user_id INTEGER PRIMARY KEY,
  role TEXT CHECK(role IN ('customer','restaurant','driver')) NOT NULL,
  name TEXT,
  phone TEXT,
  loyalty_points INTEGER DEFAULT 0,
  created_at TIMESTAMP DEFAULT now(),
  updated_at TIMESTAMP DEFAULT now()
);

CREATE SEQUENCE IF NOT EXISTS restaurants_id_seq;
CREATE TABLE IF NOT EXISTS restaurants (
  restaurant_id INTEGER DEFAULT nextval('restaurants_id_seq') PRIMARY KEY,
  owner_id INTEGER NOT NULL,
  name TEXT NOT NULL,
  description TEXT,
  cuisine_json JSON,
  rating DOUBLE DEFAULT 0,
  review_count INTEGER DEFAULT 0,
  delivery_time TEXT,
  is_open BOOLEAN DEFAULT TRUE,
  created_at TIMESTAMP DEFAULT now(),
  updated_at TIMESTAMP DEFAULT now()
);

CREATE INDEX IF NOT EXISTS idx_restaurants_owner ON restaurants(owner_id);

CREATE SEQUENCE IF NOT EXISTS menu_items_id_seq;
CREATE TABLE IF NOT EXISTS menu_items (
  menu_item_id INTEGER DEFAULT nextval('menu_items_id_seq') PRIMARY KEY,
  restaurant_id INTEGER NOT NULL,
  name TEXT NOT NULL,
  description TEXT,
  category TEXT,
  price DECIMAL(12,2) NOT NULL CHECK(price >= 0),
  is_available BOOLEAN DEFAULT TRUE,
  is_popular BOOLEAN DEFAULT FALSE,
  preparation_time INTEGER DEFAULT 0,
  addons_json JSON,
  created_at TIMESTAMP DEFAULT now(),
  updated_at TIMESTAMP DEFAULT now()
);

CREATE INDEX IF NOT EXISTS idx_menu_items_restaurant ON menu_items(restaurant_id);

CREATE SEQUENCE IF NOT EXISTS orders_id_seq;
CREATE TABLE IF NOT EXISTS orders (
  order_id INTEGER DEFAULT nextval('orders_id_seq') PRIMARY KEY,
  customer_id INTEGER NOT NULL,
  restaurant_id INTEGER NOT NULL,
  restaurant_name TEXT,
  delivery_address_json JSON,
  items_json JSON NOT NULL,
  subtotal DECIMAL(12,2) NOT NULL,
  delivery_fee DECIMAL(12,2) NOT NULL,
  tax DECIMAL(12,2) NOT NULL,
  points_redeemed INTEGER DEFAULT 0,
  points_discount DECIMAL(12,2) DEFAULT 0,
  total DECIMAL(12,2) NOT NULL,
  status TEXT CHECK(status IN ('pending','confirmed','preparing','ready','out_for_delivery','delivered','cancelled')) NOT NULL,
  payment_method TEXT,
  special_instructions TEXT,
  driver_id INTEGER,
  driver_lat DOUBLE,
  driver_lng DOUBLE,
  created_at TIMESTAMP DEFAULT now(),
  updated_at TIMESTAMP DEFAULT now()
);

CREATE INDEX IF NOT EXISTS idx_orders_customer ON orders(customer_id);
CREATE INDEX IF NOT EXISTS idx_orders_restaurant ON orders(restaurant_id);

CREATE SEQUENCE IF NOT EXISTS loyalty_transactions_id_seq;
CREATE TABLE IF NOT EXISTS loyalty_transactions (
  transaction_id INTEGER DEFAULT nextval('loyalty_transactions_id_seq') PRIMARY KEY,
  user_id INTEGER NOT NULL,
  type TEXT CHECK(type IN ('earned','redeemed')) NOT NULL,
  points INTEGER NOT NULL CHECK(points >= 0),
  description TEXT,
  order_id INTEGER,
  created_at TIMESTAMP DEFAULT now()
);

CREATE INDEX IF NOT EXISTS idx_loyalty_user ON loyalty_transactions(user_id);

CREATE SEQUENCE IF NOT EXISTS favorites_id_seq;
CREATE TABLE IF NOT EXISTS favorites (
  favorite_id INTEGER DEFAULT nextval('favorites_id_seq') PRIMARY KEY,
  user_id INTEGER NOT NULL,
  restaurant_id INTEGER,
  menu_item_id INTEGER,
  created_at TIMESTAMP DEFAULT now(),
  CHECK((restaurant_id IS NULL) <> (menu_item_id IS NULL))
);

CREATE UNIQUE INDEX IF NOT EXISTS uniq_favorite_restaurant ON favorites(user_id, restaurant_id);
CREATE UNIQUE INDEX IF NOT EXISTS uniq_favorite_menu_item ON favorites(user_id, menu_item_id);

CREATE SEQUENCE IF NOT EXISTS reviews_id_seq;
CREATE TABLE IF NOT EXISTS reviews (
  review_id INTEGER DEFAULT nextval('reviews_id_seq') PRIMARY KEY,
  order_id INTEGER UNIQUE NOT NULL,
  customer_id INTEGER NOT NULL,
  restaurant_id INTEGER NOT NULL,
  rating INTEGER NOT NULL CHECK(rating BETWEEN 1 AND 5),
  comment TEXT,
  created_at TIMESTAMP DEFAULT now()
);

CREATE INDEX IF NOT EXISTS idx_reviews_restaurant ON reviews(restaurant_id);

CREATE SEQUENCE IF NOT EXISTS logs_id_seq;
CREATE TABLE IF NOT EXISTS logs (
  log_id INTEGER DEFAULT nextval('logs_id_seq') PRIMARY KEY,
  user_id INTEGER,
  actor_id INTEGER,
  action TEXT,
  detail_json JSON,
  created_at TIMESTAMP DEFAULT now()
);

CREATE INDEX IF NOT EXISTS idx_logs_action ON logs(action);
"""


class DatabaseManager:
    """数据库管理器，封装所有数据库操作"""

    def __init__(self, db_path: Optional[str] = None):
        self._connection: Optional[duckdb.DuckDBPyConnection] = None
        self._lock = threading.RLock()
        self.db_path = db_path or self._get_db_path_from_settings()

    def _get_db_path_from_settings(self) -> str:
        """从设置中获取数据库路径"""
        db_url = settings.database_url
        if db_url.startswith("duckdb://"):
            return db_url.replace("duckdb://", "", 1)
        return db_url

    @property
    def connection(self) -> duckdb.DuckDBPyConnection:
        """获取数据库连接（首次访问时建表）"""
        with self._lock:
            if self._connection is None:
                if self.db_path != ":memory:":
                    Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
                self._connection = duckdb.connect(self.db_path)
                self._init_schema()
            return self._connection

    def get_connection(self) -> duckdb.DuckDBPyConnection:
        return self.connection

    def _init_schema(self):
        """初始化数据库表结构"""
        try:
            self._connection.execute(SCHEMA_SQL)
        except Exception as e:
            raise DatabaseError(f"Failed to initialize schema: {e}")

    def init_database(self):
        """初始化数据库"""
        self.get_connection()

    def close(self):
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None

    @contextmanager
    def transaction(self) -> Generator[duckdb.DuckDBPyConnection, None, None]:
        """
        数据库事务上下文管理器

        事务期间持有锁，其他线程的查询需等待提交或回滚。
        业务异常原样抛出，其余异常统一转换为 DatabaseError/ConcurrencyError。
        """
        with self._lock:
            conn = self.connection
            conn.execute("BEGIN")
            try:
                yield conn
                conn.execute("COMMIT")
            except BaseApplicationError:
                conn.execute("ROLLBACK")
                raise
            except Exception as e:
                conn.execute("ROLLBACK")
                if "conflict" in str(e).lower():
                    raise ConcurrencyError("系统繁忙，请稍后重试")
                raise DatabaseError(f"数据库操作失败: {str(e)}")

    def execute_query(self, query: str, params: list = None) -> list:
        """执行查询并返回结果"""
        with self._lock:
            try:
                return self.connection.execute(query, params or []).fetchall()
            except Exception as e:
                raise DatabaseError(f"Query execution failed: {e}")

    def execute_one(self, query: str, params: list = None) -> Optional[tuple]:
        """执行查询并返回单条结果"""
        with self._lock:
            try:
                return self.connection.execute(query, params or []).fetchone()
            except Exception as e:
                raise DatabaseError(f"Query execution failed: {e}")

    def fetch_dicts(self, query: str, params: list = None) -> List[Dict[str, Any]]:
        """执行查询，按列名返回字典列表"""
        with self._lock:
            try:
                cur = self.connection.execute(query, params or [])
                columns = [d[0] for d in cur.description]
                return [dict(zip(columns, row)) for row in cur.fetchall()]
            except Exception as e:
                raise DatabaseError(f"Query execution failed: {e}")

    def fetch_dict(self, query: str, params: list = None) -> Optional[Dict[str, Any]]:
        """执行查询，返回第一行字典或None"""
        rows = self.fetch_dicts(query, params)
        return rows[0] if rows else None


# 全局数据库管理器实例
db_manager = DatabaseManager()


def get_db() -> DatabaseManager:
    """FastAPI依赖：返回当前数据库管理器"""
    return db_manager
