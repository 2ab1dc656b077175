"""
操作日志仓储
"""

import json
from typing import Any, Dict, List, Optional

from ..core.database import DatabaseManager


class LogRepository:
    """操作日志（logs表）"""

    def __init__(self, db: DatabaseManager):
        self.db = db

    def append(self, action: str, detail: Dict[str, Any],
               user_id: Optional[int] = None, actor_id: Optional[int] = None):
        self.db.execute_query(
            "INSERT INTO logs(user_id, actor_id, action, detail_json) VALUES (?,?,?,?)",
            [user_id, actor_id, action, json.dumps(detail, default=str, ensure_ascii=False)],
        )

    def list_by_action(self, action: str) -> List[Dict[str, Any]]:
        rows = self.db.fetch_dicts(
            "SELECT log_id, user_id, actor_id, action, detail_json, created_at "
            "FROM logs WHERE action=? ORDER BY log_id",
            [action],
        )
        for row in rows:
            row["detail"] = json.loads(row.pop("detail_json") or "{}")
        return rows
