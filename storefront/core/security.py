"""
安全相关功能
校验托管认证服务签发的JWT，解析出当前操作者（用户ID + 角色）
"""

import jwt
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .exceptions import AuthenticationError
from ..config.settings import settings
from ..models.user import Actor, UserRole


class SecurityManager:
    """安全管理器"""

    def __init__(self, secret: Optional[str] = None, algorithm: Optional[str] = None):
        self.secret = secret or settings.jwt_secret_key
        self.algorithm = algorithm or settings.jwt_algorithm

    def create_jwt_token(self, user_id: int, role: UserRole, expire_hours: int = 24,
                         additional_claims: Dict[str, Any] = None) -> str:
        """签发JWT（正式环境由认证服务签发，这里用于测试和本地调试）"""
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "role": UserRole(role).value,
            "iat": now,
            "exp": now + timedelta(hours=expire_hours),
        }
        if additional_claims:
            payload.update(additional_claims)
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode_jwt_token(self, token: str) -> Dict[str, Any]:
        """解码JWT token"""
        try:
            return jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Token has expired")
        except jwt.InvalidTokenError as e:
            raise AuthenticationError(f"Invalid token: {e}")

    def get_actor_from_token(self, token: str) -> Actor:
        """从token中提取操作者"""
        payload = self.decode_jwt_token(token)
        try:
            return Actor(user_id=int(payload["sub"]), role=UserRole(payload["role"]))
        except (KeyError, TypeError, ValueError):
            raise AuthenticationError("Token missing user id or role")


# 全局安全管理器实例
security_manager = SecurityManager()

_bearer = HTTPBearer(auto_error=False)


async def get_current_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer)
) -> Actor:
    """从Authorization header中提取并验证当前操作者"""
    if credentials is None:
        raise AuthenticationError("missing bearer token")
    return security_manager.get_actor_from_token(credentials.credentials)


async def get_optional_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer)
) -> Optional[Actor]:
    """匿名可访问的接口使用：有token则解析，没有则为None"""
    if credentials is None:
        return None
    return security_manager.get_actor_from_token(credentials.credentials)
