from typing import Optional
from fastapi import Request
import jwt

from settings import ALGORITHM, JWT_PREFIX, SECRET_KEY


class RateLimitKeyBuilder:
    @staticmethod
    def get_client_ip(request: Request) -> str:
        """
        Client address of the TCP connection, proxy headers are only
        consulted when the connection address is unknown
        """
        if request.client and request.client.host:
            return request.client.host

        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip.strip()

        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()

        return "unknown"

    @staticmethod
    def get_admin_id(request: Request) -> Optional[str]:
        authorization = request.headers.get("authorization")
        if not authorization or not authorization.startswith(f"{JWT_PREFIX} "):
            return None
        token = authorization.split(" ", 1)[1].strip()
        try:
            payload = jwt.decode(jwt=token, key=SECRET_KEY, algorithms=[ALGORITHM])
        except jwt.PyJWTError:
            return None
        return payload.get("id")

    @staticmethod
    def build_key(request: Request) -> str:
        """
        Admins with a valid token are limited per account, everybody else
        per client address

        Examples:
            "admin:0b7c...", "ip:192.168.1.1"
        """
        admin_id = RateLimitKeyBuilder.get_admin_id(request)
        if admin_id:
            return f"admin:{admin_id}"
        return f"ip:{RateLimitKeyBuilder.get_client_ip(request)}"
