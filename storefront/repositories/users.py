"""
用户仓储
"""

from typing import Optional

from ..core.database import DatabaseManager
from ..models.user import Actor, User


class UserRepository:
    """用户表访问"""

    def __init__(self, db: DatabaseManager):
        self.db = db

    def get(self, user_id: int) -> Optional[User]:
        row = self.db.fetch_dict("SELECT * FROM users WHERE user_id=?", [user_id])
        return User(**row) if row else None

    def ensure(self, actor: Actor) -> User:
        """获取或创建用户（用户资料由外部认证服务维护，这里只落地ID和角色）"""
        user = self.get(actor.user_id)
        if user is None:
            self.db.execute_query(
                "INSERT INTO users(user_id, role) VALUES (?, ?)",
                [actor.user_id, actor.role.value],
            )
            user = self.get(actor.user_id)
        return user

    def add_loyalty_points(self, user_id: int, delta: int):
        """更新冗余积分计数，须与积分流水写入处于同一事务"""
        self.db.execute_query(
            "UPDATE users SET loyalty_points = loyalty_points + ?, updated_at = now() WHERE user_id=?",
            [delta, user_id],
        )
